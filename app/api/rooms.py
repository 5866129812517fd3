"""Room API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import get_cascade_manager, require_auth
from app.schemas import RoomCreate, RoomRead, RoomUpdate
from app.services import rooms as room_service
from app.services.access import require_property, require_room
from app.services.auth import Principal
from app.services.cascade import CascadeManager

router = APIRouter(prefix="/api/rooms", tags=["rooms"])


@router.post("/property/{property_id}", response_model=RoomRead, status_code=201)
async def create_room(
    property_id: str,
    body: RoomCreate,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await room_service.create_room(db, property_id, body, auth.wallet_address)


@router.get("", response_model=list[RoomRead])
async def list_rooms(db: AsyncSession = Depends(get_db)):
    return await crud.list_rooms(db)


@router.get("/property/{property_id}", response_model=list[RoomRead])
async def list_rooms_for_property(property_id: str, db: AsyncSession = Depends(get_db)):
    prop = await require_property(db, property_id)
    return await crud.list_rooms_for_property(db, prop.id)


@router.get("/{room_id}", response_model=RoomRead)
async def get_room(room_id: str, db: AsyncSession = Depends(get_db)):
    return await require_room(db, room_id)


@router.put("/{room_id}", response_model=RoomRead)
async def update_room(
    room_id: str,
    body: RoomUpdate,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await room_service.update_room(db, room_id, body, auth.wallet_address)


@router.delete("/{room_id}", status_code=204)
async def delete_room(
    room_id: str,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    cascade: CascadeManager = Depends(get_cascade_manager),
):
    await cascade.delete_room(db, room_id, auth.wallet_address)
    return Response(status_code=204)
