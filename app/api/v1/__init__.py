"""
API routes aggregation
"""
from fastapi import APIRouter
from app.api.v1 import (
    auth, users, friends, messages, locations, restaurants, images, geocoding
)

api_router = APIRouter()

# Authentication
api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])

# Users
api_router.include_router(users.router, prefix="/users", tags=["users"])

# Friends
api_router.include_router(friends.router, prefix="/friends", tags=["friends"])

# Messages
api_router.include_router(messages.router, prefix="/messages", tags=["messages"])

# Locations
api_router.include_router(locations.router, prefix="/locations", tags=["locations"])

# Restaurants
api_router.include_router(restaurants.router, prefix="/restaurants", tags=["restaurants"])

# Images
api_router.include_router(images.router, prefix="/images", tags=["images"])

# Geocoding
api_router.include_router(geocoding.router, prefix="/location", tags=["geocoding"])
