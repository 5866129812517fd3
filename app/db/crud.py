"""CRUD operations for Property, Room and RoomImage."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Property, Room, RoomImage, SyncState
from app.models.base import utcnow


# ── Property ──────────────────────────────────────────────

async def save_property(db: AsyncSession, prop: Property) -> Property:
    db.add(prop)
    await db.commit()
    await db.refresh(prop)
    return prop


async def get_property(db: AsyncSession, property_id: str) -> Property | None:
    return await db.get(Property, property_id)


async def get_property_by_ledger_id(db: AsyncSession, ledger_id: int) -> Property | None:
    result = await db.execute(select(Property).where(Property.ledger_id == ledger_id))
    return result.scalars().first()


async def list_properties(db: AsyncSession) -> list[Property]:
    result = await db.execute(select(Property).order_by(Property.created_at.desc()))
    return list(result.scalars().all())


async def delete_property(db: AsyncSession, prop: Property) -> None:
    await db.delete(prop)
    await db.commit()


async def list_pending_properties(db: AsyncSession, created_before: datetime) -> list[Property]:
    """Rows still waiting for a ledger confirmation that never arrived."""
    result = await db.execute(
        select(Property).where(
            Property.sync_state == SyncState.PENDING,
            Property.ledger_id.is_(None),
            Property.created_at < created_before,
        )
    )
    return list(result.scalars().all())


# ── Room ──────────────────────────────────────────────────

async def create_room(db: AsyncSession, property_id: str, name: str, order_index: int = 0) -> Room:
    room = Room(property_id=property_id, name=name, order_index=order_index)
    db.add(room)
    await db.commit()
    await db.refresh(room)
    return room


async def get_room(db: AsyncSession, room_id: str) -> Room | None:
    return await db.get(Room, room_id)


async def list_rooms(db: AsyncSession) -> list[Room]:
    result = await db.execute(select(Room))
    return list(result.scalars().all())


async def list_rooms_for_property(db: AsyncSession, property_id: str) -> list[Room]:
    result = await db.execute(
        select(Room)
        .where(Room.property_id == property_id)
        .order_by(Room.order_index)
    )
    return list(result.scalars().all())


async def update_room(db: AsyncSession, room: Room, **kwargs) -> Room:
    for k, v in kwargs.items():
        if v is not None:
            setattr(room, k, v)
    await db.commit()
    await db.refresh(room)
    return room


# ── RoomImage ─────────────────────────────────────────────

async def create_room_image(
    db: AsyncSession, room_id: str, url: str, storage_key: str, order_index: int = 0,
) -> RoomImage:
    img = RoomImage(
        room_id=room_id, url=url, storage_key=storage_key,
        order_index=order_index, uploaded_at=utcnow(),
    )
    db.add(img)
    await db.commit()
    await db.refresh(img)
    return img


async def get_room_image(db: AsyncSession, image_id: str) -> RoomImage | None:
    return await db.get(RoomImage, image_id)


async def list_room_images(db: AsyncSession, room_id: str) -> list[RoomImage]:
    result = await db.execute(
        select(RoomImage)
        .where(RoomImage.room_id == room_id)
        .order_by(RoomImage.order_index)
    )
    return list(result.scalars().all())


async def update_room_image_order(db: AsyncSession, img: RoomImage, order_index: int) -> RoomImage:
    img.order_index = order_index
    await db.commit()
    await db.refresh(img)
    return img
