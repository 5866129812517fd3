"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.enums import PropertyType, RentalType, SyncState
from app.models.property import Property
from app.models.room import Room
from app.models.room_image import RoomImage

__all__ = [
    "Base", "Property", "Room", "RoomImage",
    "PropertyType", "RentalType", "SyncState",
]
