"""
Location endpoints - places shared between friends
"""
from typing import Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.core.dependencies import get_current_user
from app.schemas.location import LocationCreate, LocationUpdate
from app.services.location_service import location_service
from app.utils.responses import created_response, success_response

router = APIRouter()


@router.get("")
async def get_locations(
    area: Optional[str] = Query(None),
    place_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Own and friends' locations, optionally filtered by area and type"""
    locations = location_service.get_locations(db, current_user, area, place_type)
    return success_response(count=len(locations), locations=[loc.to_json() for loc in locations])


@router.get("/user/me")
async def get_my_locations(
    area: Optional[str] = Query(None),
    place_type: Optional[str] = Query(None, alias="type"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    locations = location_service.get_own_locations(db, current_user, area, place_type)
    return success_response(count=len(locations), locations=[loc.to_json() for loc in locations])


@router.get("/areas")
async def get_areas(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Distinct areas of visible locations"""
    return success_response(areas=location_service.get_areas(db, current_user))


@router.get("/{location_id}")
async def get_location(
    location_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    location = location_service.get_location(db, current_user, location_id)
    return success_response(location=location.to_json())


@router.post("")
async def create_location(
    payload: LocationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    location = location_service.create_location(db, current_user, payload)
    return created_response(location=location.to_json())


@router.put("/{location_id}")
async def update_location(
    location_id: UUID,
    payload: LocationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Owner-only update; images dropped from imageUrls are deleted from storage"""
    location = location_service.update_location(db, current_user, location_id, payload)
    return success_response(location=location.to_json())


@router.delete("/{location_id}")
async def delete_location(
    location_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    location_service.delete_location(db, current_user, location_id)
    return success_response("Location deleted")
