"""
Public restaurant catalogue
"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import InvalidArgument, NotFound
from app.models.location import Restaurant
from app.schemas.location import PlaceIn, RestaurantCreate, RestaurantResponse, RestaurantUpdate
from app.services.location_service import is_filter_set, removed_images, validate_types
from app.services.storage_service import StorageService, storage_service
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


def restaurant_response(restaurant: Restaurant) -> RestaurantResponse:
    place = None
    if restaurant.has_place:
        place = PlaceIn(
            latitude=restaurant.latitude,
            longitude=restaurant.longitude,
            address=restaurant.address or "",
            area=restaurant.area or "",
        )
    return RestaurantResponse(
        id=restaurant.id,
        name=restaurant.name,
        types=restaurant.types or [],
        image_urls=restaurant.image_urls or [],
        location=place,
        created_at=restaurant.created_at,
        updated_at=restaurant.updated_at,
    )


class RestaurantService:
    """Service for restaurant operations"""

    def __init__(self, storage: Optional[StorageService] = None):
        self.storage = storage or storage_service

    def _get(self, db: Session, restaurant_id: UUID) -> Restaurant:
        restaurant = db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
        if not restaurant:
            raise NotFound("Restaurant not found")
        return restaurant

    @staticmethod
    def _apply_place(restaurant: Restaurant, place: Optional[PlaceIn]) -> None:
        if place is None:
            return
        restaurant.latitude = place.latitude
        restaurant.longitude = place.longitude
        restaurant.address = place.address
        restaurant.area = place.area

    def get_restaurants(self, db: Session, area: Optional[str] = None,
                        place_type: Optional[str] = None) -> List[RestaurantResponse]:
        query = db.query(Restaurant)
        if is_filter_set(area):
            query = query.filter(Restaurant.area == area)
        restaurants = query.order_by(Restaurant.created_at.desc()).all()
        if is_filter_set(place_type):
            restaurants = [r for r in restaurants if place_type in (r.types or [])]
        return [restaurant_response(r) for r in restaurants]

    def get_restaurant(self, db: Session, restaurant_id: UUID) -> RestaurantResponse:
        return restaurant_response(self._get(db, restaurant_id))

    def create_restaurant(self, db: Session, data: RestaurantCreate) -> RestaurantResponse:
        if not data.name or not data.types:
            raise InvalidArgument("Please provide name and at least one type")

        restaurant = Restaurant(
            name=data.name,
            types=validate_types(data.types),
            image_urls=list(data.image_urls or []),
        )
        self._apply_place(restaurant, data.location)
        db.add(restaurant)
        db.commit()
        db.refresh(restaurant)

        logger.info(f"Restaurant created: {restaurant.id} ({restaurant.name})")
        return restaurant_response(restaurant)

    def update_restaurant(self, db: Session, restaurant_id: UUID,
                          data: RestaurantUpdate) -> RestaurantResponse:
        restaurant = self._get(db, restaurant_id)
        old_images = list(restaurant.image_urls or [])

        if data.name:
            restaurant.name = data.name
        if data.types is not None:
            restaurant.types = validate_types(data.types) or restaurant.types
        if data.image_urls is not None:
            restaurant.image_urls = list(data.image_urls)
            stale = removed_images(old_images, data.image_urls)
            if stale:
                self.storage.delete_images(stale)
        self._apply_place(restaurant, data.location)

        restaurant.updated_at = utc_now()
        db.commit()
        db.refresh(restaurant)

        logger.info(f"Restaurant updated: {restaurant.id}")
        return restaurant_response(restaurant)

    def delete_restaurant(self, db: Session, restaurant_id: UUID) -> None:
        restaurant = self._get(db, restaurant_id)
        removed_id = str(restaurant.id)

        self.storage.delete_folder(f"{settings.IMAGE_ROOT_FOLDER}/restaurants/{removed_id}")
        if restaurant.image_urls:
            self.storage.delete_images(restaurant.image_urls)

        db.delete(restaurant)
        db.commit()
        logger.info(f"Restaurant deleted: {removed_id}")

    def get_areas(self, db: Session) -> List[str]:
        rows = db.query(Restaurant.area).filter(
            Restaurant.area.isnot(None),
            Restaurant.area != "",
        ).distinct().all()
        return sorted(row[0] for row in rows)


restaurant_service = RestaurantService()
