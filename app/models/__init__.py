"""
Database models for GoGo Backend

All models should be imported here so they register with Base.metadata.
"""
from app.models.user import User, FCMToken
from app.models.social import Friendship, FriendshipStatus
from app.models.message import Message
from app.models.location import Location, Restaurant, PlaceType

__all__ = [
    # User
    "User",
    "FCMToken",
    # Social
    "Friendship",
    "FriendshipStatus",
    # Messaging
    "Message",
    # Places
    "Location",
    "Restaurant",
    "PlaceType",
]
