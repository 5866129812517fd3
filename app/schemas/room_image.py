from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class RoomImageRead(BaseModel):
    id: str
    room_id: str
    url: str
    storage_key: str
    order_index: int
    uploaded_at: datetime

    model_config = {"from_attributes": True}


class RoomImageOrderUpdate(BaseModel):
    order_index: int
