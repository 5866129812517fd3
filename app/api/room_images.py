"""Room image API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.engine import get_db
from app.dependencies import get_blob_store, get_cascade_manager, require_auth
from app.schemas import RoomImageOrderUpdate, RoomImageRead
from app.services import rooms as room_service
from app.services.access import require_room_image
from app.services.auth import Principal
from app.services.blob_store import BlobStore
from app.services.cascade import CascadeManager

router = APIRouter(prefix="/api/room-images", tags=["room-images"])


@router.post("/room/{room_id}", response_model=RoomImageRead, status_code=201)
async def upload_image(
    room_id: str,
    image_file: UploadFile = File(...),
    order_index: int = Form(0),
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
):
    data = await image_file.read()
    return await room_service.upload_image(
        db, blob_store, room_id, data,
        image_file.filename, image_file.content_type, order_index, auth.wallet_address,
    )


@router.get("/room/{room_id}", response_model=list[RoomImageRead])
async def list_images(room_id: str, db: AsyncSession = Depends(get_db)):
    return await room_service.list_images(db, room_id)


@router.get("/{image_id}", response_model=RoomImageRead)
async def get_image(image_id: str, db: AsyncSession = Depends(get_db)):
    return await require_room_image(db, image_id)


@router.put("/{image_id}/order", response_model=RoomImageRead)
async def update_image_order(
    image_id: str,
    body: RoomImageOrderUpdate,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
):
    return await room_service.update_image_order(db, image_id, body.order_index, auth.wallet_address)


@router.delete("/{image_id}", status_code=204)
async def delete_image(
    image_id: str,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    cascade: CascadeManager = Depends(get_cascade_manager),
):
    await cascade.delete_image(db, image_id, auth.wallet_address)
    return Response(status_code=204)
