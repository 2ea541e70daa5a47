"""
Shared locations - visible to the owner and the owner's friends
"""
import logging
from typing import Iterable, List, Optional, Set
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.exceptions import Forbidden, InvalidArgument, NotFound
from app.models.location import Location, PlaceType
from app.models.user import User
from app.schemas.location import LatLng, LocationCreate, LocationResponse, LocationUpdate
from app.schemas.user import UserSummary
from app.services.notification_service import NotificationService, notification_service
from app.services.social_service import SocialService, social_service
from app.services.storage_service import StorageService, storage_service
from app.utils import socket_events
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

VALID_TYPES = {t.value for t in PlaceType}


def is_filter_set(value: Optional[str]) -> bool:
    """Query filters treat an empty value and "All"/"all" as no filter"""
    return bool(value) and value not in ("All", "all")


def validate_types(types: Optional[List[str]]) -> List[str]:
    invalid = [t for t in types or [] if t not in VALID_TYPES]
    if invalid:
        raise InvalidArgument(f"Invalid type(s): {', '.join(invalid)}. Allowed: {', '.join(sorted(VALID_TYPES))}")
    return list(types or [])


def removed_images(old: Iterable[str], new: Iterable[str]) -> List[str]:
    keep = set(new)
    return [url for url in old if url not in keep]


def location_response(location: Location) -> LocationResponse:
    return LocationResponse(
        id=location.id,
        name=location.name,
        types=location.types or [],
        image_urls=location.image_urls or [],
        lat_lng=LatLng(latitude=location.latitude, longitude=location.longitude),
        address=location.address,
        area=location.area,
        user_id=location.owner_id,
        created_by=UserSummary.model_validate(location.owner) if location.owner else None,
        created_at=location.created_at,
        updated_at=location.updated_at,
    )


class LocationService:
    """Service for location operations"""

    def __init__(
        self,
        notifier: Optional[NotificationService] = None,
        social: Optional[SocialService] = None,
        storage: Optional[StorageService] = None,
    ):
        self.notifier = notifier or notification_service
        self.social = social or social_service
        self.storage = storage or storage_service

    def _visible_owner_ids(self, db: Session, user_id: UUID) -> Set[UUID]:
        return set(self.social.get_friend_ids(db, user_id)) | {user_id}

    def _query(self, db: Session, owner_ids: Set[UUID], area: Optional[str]):
        query = db.query(Location).options(joinedload(Location.owner)).filter(
            Location.owner_id.in_(owner_ids)
        )
        if is_filter_set(area):
            query = query.filter(Location.area == area)
        return query.order_by(Location.created_at.desc())

    @staticmethod
    def _filter_type(locations: List[Location], place_type: Optional[str]) -> List[Location]:
        # types is a JSON list, matched in Python to stay portable across databases
        if not is_filter_set(place_type):
            return locations
        return [loc for loc in locations if place_type in (loc.types or [])]

    def get_locations(self, db: Session, user: User, area: Optional[str] = None,
                      place_type: Optional[str] = None) -> List[LocationResponse]:
        """Own and friends' locations, newest first"""
        locations = self._query(db, self._visible_owner_ids(db, user.id), area).all()
        locations = self._filter_type(locations, place_type)
        logger.info(f"Retrieved {len(locations)} location(s) for user {user.id}")
        return [location_response(loc) for loc in locations]

    def get_own_locations(self, db: Session, user: User, area: Optional[str] = None,
                          place_type: Optional[str] = None) -> List[LocationResponse]:
        locations = self._filter_type(self._query(db, {user.id}, area).all(), place_type)
        return [location_response(loc) for loc in locations]

    def _get(self, db: Session, location_id: UUID) -> Location:
        location = db.query(Location).options(joinedload(Location.owner)).filter(
            Location.id == location_id
        ).first()
        if not location:
            raise NotFound("Location not found")
        return location

    def get_location(self, db: Session, user: User, location_id: UUID) -> LocationResponse:
        location = self._get(db, location_id)
        if location.owner_id != user.id and not self.social.are_friends(db, user.id, location.owner_id):
            raise Forbidden("You can only view locations from your friends")
        return location_response(location)

    def create_location(self, db: Session, user: User, data: LocationCreate) -> LocationResponse:
        if not data.name or not data.types:
            raise InvalidArgument("Please provide name and at least one type")
        types = validate_types(data.types)
        if not data.lat_lng or data.lat_lng.latitude is None or data.lat_lng.longitude is None:
            raise InvalidArgument("Please provide latLng with latitude and longitude")
        if not data.address or not data.area:
            raise InvalidArgument("Please provide address and area")

        location = Location(
            name=data.name,
            types=types,
            image_urls=list(data.image_urls or []),
            latitude=data.lat_lng.latitude,
            longitude=data.lat_lng.longitude,
            address=data.address,
            area=data.area,
            owner_id=user.id,
        )
        db.add(location)
        db.commit()
        db.refresh(location)

        logger.info(f"Location created: {location.id} ({location.name}) by {user.id}")
        response = location_response(location)
        self.notifier.emit(socket_events.LOCATION_CREATED, {"location": response.to_json()},
                           socket_events.LOCATIONS_ROOM)
        return response

    def update_location(self, db: Session, user: User, location_id: UUID,
                        data: LocationUpdate) -> LocationResponse:
        """Owner-only partial update; images dropped from the list are deleted from storage"""
        location = self._get(db, location_id)
        if location.owner_id != user.id:
            raise Forbidden("You can only update your own locations")

        old_images = list(location.image_urls or [])

        if data.name:
            location.name = data.name
        if data.types is not None:
            location.types = validate_types(data.types) or location.types
        if data.image_urls is not None:
            location.image_urls = list(data.image_urls)
        if data.lat_lng:
            if data.lat_lng.latitude is not None:
                location.latitude = data.lat_lng.latitude
            if data.lat_lng.longitude is not None:
                location.longitude = data.lat_lng.longitude
        if data.address:
            location.address = data.address
        if data.area:
            location.area = data.area

        if data.image_urls is not None:
            stale = removed_images(old_images, data.image_urls)
            if stale:
                deleted = self.storage.delete_images(stale)
                logger.info(f"Deleted {deleted}/{len(stale)} old image(s) of location {location.id}")

        location.updated_at = utc_now()
        db.commit()
        db.refresh(location)

        logger.info(f"Location updated: {location.id}")
        response = location_response(location)
        self.notifier.emit(socket_events.LOCATION_UPDATED, {"location": response.to_json()},
                           socket_events.LOCATIONS_ROOM)
        return response

    def delete_location(self, db: Session, user: User, location_id: UUID) -> None:
        location = self._get(db, location_id)
        if location.owner_id != user.id:
            raise Forbidden("You can only delete your own locations")

        removed_id = str(location.id)
        self.storage.delete_folder(f"{settings.IMAGE_ROOT_FOLDER}/locations/{removed_id}")
        if location.image_urls:
            self.storage.delete_images(location.image_urls)

        db.delete(location)
        db.commit()

        logger.info(f"Location deleted: {removed_id}")
        self.notifier.emit(socket_events.LOCATION_DELETED, {"locationId": removed_id},
                           socket_events.LOCATIONS_ROOM)

    def get_areas(self, db: Session, user: User) -> List[str]:
        """Distinct non-empty areas of visible locations, sorted"""
        rows = db.query(Location.area).filter(
            Location.owner_id.in_(self._visible_owner_ids(db, user.id)),
            Location.area.isnot(None),
            Location.area != "",
        ).distinct().all()
        return sorted(row[0] for row in rows)


location_service = LocationService()
