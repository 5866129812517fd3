"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from app.api.properties import router as properties_router
from app.api.rooms import router as rooms_router
from app.api.room_images import router as room_images_router

api_router = APIRouter()
api_router.include_router(properties_router)
api_router.include_router(rooms_router)
api_router.include_router(room_images_router)
