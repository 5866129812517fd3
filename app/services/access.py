"""Lookup-or-404 and owner checks shared by the mutating services."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.exceptions import NotFound, Unauthorized
from app.models import Property, Room, RoomImage


def same_address(a: str | None, b: str | None) -> bool:
    """Ledger addresses compare case-insensitively (checksum casing is cosmetic)."""
    return bool(a) and bool(b) and a.lower() == b.lower()


async def require_property(db: AsyncSession, property_id: str) -> Property:
    prop = await crud.get_property(db, property_id)
    if prop is None:
        raise NotFound(f"Property {property_id} not found")
    return prop


async def require_property_by_ledger_id(db: AsyncSession, ledger_id: int) -> Property:
    prop = await crud.get_property_by_ledger_id(db, ledger_id)
    if prop is None:
        raise NotFound(f"No property is mirrored from ledger listing {ledger_id}")
    return prop


async def require_room(db: AsyncSession, room_id: str) -> Room:
    room = await crud.get_room(db, room_id)
    if room is None:
        raise NotFound(f"Room {room_id} not found")
    return room


async def require_room_image(db: AsyncSession, image_id: str) -> RoomImage:
    img = await crud.get_room_image(db, image_id)
    if img is None:
        raise NotFound(f"Room image {image_id} not found")
    return img


def check_owner(prop: Property, caller_address: str | None) -> None:
    if not same_address(prop.owner_address, caller_address):
        raise Unauthorized("Caller is not the property owner")


async def require_owned_property(db: AsyncSession, property_id: str, caller_address: str | None) -> Property:
    prop = await require_property(db, property_id)
    check_owner(prop, caller_address)
    return prop
