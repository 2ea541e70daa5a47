"""
Reverse geocoding endpoints
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request

from app.core.dependencies import get_geocoding_gateway
from app.core.rate_limit import GEOCODING_LIMIT, limiter
from app.services.geocoding_service import GeocodingGateway
from app.utils.responses import success_response

router = APIRouter()


@router.get("/address")
@limiter.limit(GEOCODING_LIMIT)
async def get_address(
    request: Request,
    lat: Optional[str] = Query(None),
    lng: Optional[str] = Query(None),
    gateway: GeocodingGateway = Depends(get_geocoding_gateway)
):
    """Short area name (ward/commune/town) for a coordinate, or null"""
    address = await gateway.get_address(lat, lng)
    return success_response(address=address)


@router.get("/full-address")
@limiter.limit(GEOCODING_LIMIT)
async def get_full_address(
    request: Request,
    lat: Optional[str] = Query(None),
    lng: Optional[str] = Query(None),
    gateway: GeocodingGateway = Depends(get_geocoding_gateway)
):
    """Area, full address and place name for a coordinate"""
    result = await gateway.get_full_address(lat, lng)
    return success_response(**result.model_dump())
