from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel, Field

from app.models.enums import PropertyType, RentalType, SyncState


class PropertyCreate(BaseModel):
    title: str = Field(min_length=1)
    country: str = Field(min_length=1)
    city: str = Field(min_length=1)
    address: str = Field(min_length=1)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    description: str = ""
    area_sqm: int | None = Field(default=None, ge=0)
    property_type: PropertyType | None = None
    rental_type: RentalType
    rent_amount: int = Field(ge=0)
    security_deposit: int = Field(ge=0)

    @property
    def full_address(self) -> str:
        return f"{self.country}, {self.city}, {self.address}"


class PropertyUpdate(PropertyCreate):
    is_available: bool = True
    # Version the caller last read; a mismatch is rejected as a concurrent update.
    expected_version: int | None = None


class PropertyRead(BaseModel):
    id: str
    ledger_id: int | None = None
    title: str
    country: str
    city: str
    address: str
    latitude: float | None = None
    longitude: float | None = None
    description: str
    area_sqm: int | None = None
    property_type: PropertyType | None = None
    total_rooms: int = 0
    rental_type: RentalType
    rent_amount: int
    security_deposit: int
    is_active: bool
    is_available: bool
    sync_state: SyncState
    owner_id: int | None = None
    owner_address: str
    rating: float = 0.0
    star_count: int = 0
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PropertySearch(BaseModel):
    city: str | None = None
    min_rent: int | None = None
    max_rent: int | None = None
    rental_type: RentalType | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    radius_km: float | None = Field(default=None, gt=0)
