"""Room and room image creation and updates. Deletion lives in cascade.py."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.exceptions import PreconditionFailed
from app.models import Room, RoomImage
from app.schemas.room import RoomCreate, RoomUpdate
from app.services.access import require_owned_property, require_room, require_room_image
from app.services.blob_store import BlobStore, new_storage_key, object_path, room_folder, storage_key_from_url

logger = logging.getLogger(__name__)


async def create_room(db: AsyncSession, property_id: str, body: RoomCreate, caller_address: str) -> Room:
    prop = await require_owned_property(db, property_id, caller_address)
    return await crud.create_room(db, prop.id, body.name, body.order_index)


async def update_room(db: AsyncSession, room_id: str, body: RoomUpdate, caller_address: str) -> Room:
    room = await require_room(db, room_id)
    await require_owned_property(db, room.property_id, caller_address)
    if body.name is not None and room_folder(body.name) != room_folder(room.name):
        # Blob paths embed the room folder; a new folder would orphan them.
        if await crud.list_room_images(db, room.id):
            raise PreconditionFailed(
                f"Room {room.id} has images stored under its current name; delete them before renaming"
            )
    return await crud.update_room(db, room, name=body.name, order_index=body.order_index)


async def list_images(db: AsyncSession, room_id: str) -> list[RoomImage]:
    room = await require_room(db, room_id)
    return await crud.list_room_images(db, room.id)


async def upload_image(
    db: AsyncSession,
    blob_store: BlobStore,
    room_id: str,
    data: bytes,
    filename: str | None,
    content_type: str | None,
    order_index: int,
    caller_address: str,
) -> RoomImage:
    """Upload the bytes, then record the image. A failed upload writes no row."""
    room = await require_room(db, room_id)
    await require_owned_property(db, room.property_id, caller_address)

    path = object_path(room.property_id, room.name, new_storage_key(filename))
    url = await blob_store.upload(data, path, content_type or "application/octet-stream")
    img = await crud.create_room_image(db, room.id, url, storage_key_from_url(url), order_index)
    logger.info("Stored image %s for room %s at %s", img.id, room.id, path)
    return img


async def update_image_order(db: AsyncSession, image_id: str, order_index: int, caller_address: str) -> RoomImage:
    img = await require_room_image(db, image_id)
    room = await require_room(db, img.room_id)
    await require_owned_property(db, room.property_id, caller_address)
    return await crud.update_room_image_order(db, img, order_index)
