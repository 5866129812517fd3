"""Room and room image deletion with best-effort blob cleanup.

Rows are always deleted, even when the blob store refuses to delete the object.
An orphaned blob only costs storage and can be swept later; a row pointing at a
room that no longer exists would break the relational model.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Property, Room, RoomImage
from app.services.access import require_owned_property, require_room, require_room_image
from app.services.blob_store import BlobStore, object_path

logger = logging.getLogger(__name__)


class CascadeManager:
    def __init__(self, blob_store: BlobStore):
        self._blobs = blob_store

    async def delete_room(self, db: AsyncSession, room_id: str, caller_address: str | None = None) -> None:
        """Delete a room, its image rows and (best effort) their blobs."""
        room = await require_room(db, room_id)
        if caller_address is not None:
            await require_owned_property(db, room.property_id, caller_address)

        await self._purge_room(db, room)
        await db.commit()
        logger.info("Deleted room %s of property %s", room.id, room.property_id)

    async def delete_image(self, db: AsyncSession, image_id: str, caller_address: str | None = None) -> None:
        """Delete one image row and (best effort) its blob."""
        img = await require_room_image(db, image_id)
        room = await require_room(db, img.room_id)
        if caller_address is not None:
            await require_owned_property(db, room.property_id, caller_address)

        await self._delete_blob(room, img)
        await db.delete(img)
        await db.commit()

    async def purge_property_rooms(self, db: AsyncSession, prop: Property) -> None:
        """Stage deletion of every room of ``prop``. The caller commits."""
        for room in list(prop.rooms):
            await self._purge_room(db, room)

    async def _purge_room(self, db: AsyncSession, room: Room) -> None:
        # Collect first: the collection must not change under the loop.
        images = list(room.images)
        for img in images:
            await self._delete_blob(room, img)
            await db.delete(img)
        await db.delete(room)

    async def _delete_blob(self, room: Room, img: RoomImage) -> None:
        path = object_path(room.property_id, room.name, img.storage_key)
        try:
            await self._blobs.delete(path)
        except Exception:
            logger.warning("Failed to delete blob %s for image %s, deleting row anyway", path, img.id, exc_info=True)
