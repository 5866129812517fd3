from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field


class RoomCreate(BaseModel):
    name: str = Field(min_length=1)
    order_index: int = 0


class RoomUpdate(BaseModel):
    name: str | None = None
    order_index: int | None = None


class RoomRead(BaseModel):
    id: str
    property_id: str
    name: str
    order_index: int
    image_count: int = 0
    created_at: datetime

    model_config = {"from_attributes": True}
