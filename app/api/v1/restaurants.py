"""
Restaurant endpoints (public)
"""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.location import RestaurantCreate, RestaurantUpdate
from app.services.restaurant_service import restaurant_service
from app.utils.responses import created_response, success_response

router = APIRouter()


@router.get("")
async def get_restaurants(
    area: Optional[str] = Query(None),
    place_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db)
):
    restaurants = restaurant_service.get_restaurants(db, area, place_type)
    return success_response(count=len(restaurants), restaurants=[r.to_json() for r in restaurants])


@router.get("/areas")
async def get_areas(db: Session = Depends(get_db)):
    return success_response(areas=restaurant_service.get_areas(db))


@router.get("/{restaurant_id}")
async def get_restaurant(restaurant_id: UUID, db: Session = Depends(get_db)):
    restaurant = restaurant_service.get_restaurant(db, restaurant_id)
    return success_response(restaurant=restaurant.to_json())


@router.post("")
async def create_restaurant(payload: RestaurantCreate, db: Session = Depends(get_db)):
    restaurant = restaurant_service.create_restaurant(db, payload)
    return created_response(restaurant=restaurant.to_json())


@router.put("/{restaurant_id}")
async def update_restaurant(
    restaurant_id: UUID,
    payload: RestaurantUpdate,
    db: Session = Depends(get_db)
):
    restaurant = restaurant_service.update_restaurant(db, restaurant_id, payload)
    return success_response(restaurant=restaurant.to_json())


@router.delete("/{restaurant_id}")
async def delete_restaurant(restaurant_id: UUID, db: Session = Depends(get_db)):
    restaurant_service.delete_restaurant(db, restaurant_id)
    return success_response("Restaurant deleted")
