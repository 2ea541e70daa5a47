"""
Location (point of interest) and restaurant models
"""
from enum import Enum
from uuid import uuid4
from sqlalchemy import Column, String, Float, DateTime, Text, ForeignKey, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utc_now


class PlaceType(str, Enum):
    FOOD = "food"
    COFFEE = "coffee"


class Location(Base):
    """Point of interest shared by its owner with friends"""
    __tablename__ = "locations"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    types = Column(JSON, default=list, nullable=False)
    image_urls = Column(JSON, default=list, nullable=False)

    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(Text, nullable=False)
    area = Column(String(255), nullable=False, index=True)

    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Relationships
    owner = relationship("User", back_populates="locations")


class Restaurant(Base):
    """Public restaurant listing; the place is optional"""
    __tablename__ = "restaurants"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(String(255), nullable=False)
    types = Column(JSON, default=list, nullable=False)
    image_urls = Column(JSON, default=list, nullable=False)

    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    address = Column(Text, nullable=True)
    area = Column(String(255), nullable=True, index=True)

    # Timestamps
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    @property
    def has_place(self) -> bool:
        return self.latitude is not None and self.longitude is not None
