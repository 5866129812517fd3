"""Pydantic request/response schemas."""

from app.schemas.property import PropertyCreate, PropertyUpdate, PropertyRead, PropertySearch
from app.schemas.room import RoomCreate, RoomUpdate, RoomRead
from app.schemas.room_image import RoomImageRead, RoomImageOrderUpdate
from app.schemas.ledger import ChainPropertyRead, ReconcileReportRead

__all__ = [
    "PropertyCreate", "PropertyUpdate", "PropertyRead", "PropertySearch",
    "RoomCreate", "RoomUpdate", "RoomRead",
    "RoomImageRead", "RoomImageOrderUpdate",
    "ChainPropertyRead", "ReconcileReportRead",
]
