"""Location and restaurant schemas"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary


class LatLng(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class LocationCreate(CamelModel):
    """All fields optional so the service can report what is missing"""
    name: Optional[str] = None
    types: Optional[List[str]] = None
    image_urls: Optional[List[str]] = None
    lat_lng: Optional[LatLng] = None
    address: Optional[str] = None
    area: Optional[str] = None


class LocationUpdate(LocationCreate):
    pass


class LocationResponse(CamelModel):
    id: UUID
    name: str
    types: List[str]
    image_urls: List[str]
    lat_lng: LatLng
    address: str
    area: str
    user_id: UUID
    created_by: Optional[UserSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PlaceIn(CamelModel):
    latitude: float
    longitude: float
    address: str
    area: str


class RestaurantCreate(CamelModel):
    name: Optional[str] = None
    types: Optional[List[str]] = None
    image_urls: Optional[List[str]] = None
    location: Optional[PlaceIn] = None


class RestaurantUpdate(RestaurantCreate):
    pass


class RestaurantResponse(CamelModel):
    id: UUID
    name: str
    types: List[str]
    image_urls: List[str]
    location: Optional[PlaceIn] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
