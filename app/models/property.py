from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Enum, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, ULIDMixin, utcnow
from app.models.enums import PropertyType, RentalType, SyncState


class Property(Base, ULIDMixin):
    __tablename__ = "properties"

    # Assigned by the ledger's PropertyListed event; null until confirmed.
    ledger_id: Mapped[Optional[int]] = mapped_column(BigInteger, unique=True, nullable=True)

    title: Mapped[str] = mapped_column(String(255))
    country: Mapped[str] = mapped_column(String(100))
    city: Mapped[str] = mapped_column(String(100), index=True)
    address: Mapped[str] = mapped_column(String(500), default="")
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    description: Mapped[str] = mapped_column(Text, default="")
    area_sqm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    property_type: Mapped[Optional[PropertyType]] = mapped_column(
        Enum(PropertyType, native_enum=False, length=20), nullable=True
    )

    rental_type: Mapped[RentalType] = mapped_column(Enum(RentalType, native_enum=False, length=20))
    rent_amount: Mapped[int] = mapped_column(BigInteger)
    security_deposit: Mapped[int] = mapped_column(BigInteger)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)
    sync_state: Mapped[SyncState] = mapped_column(
        Enum(SyncState, native_enum=False, length=20), default=SyncState.PENDING
    )

    owner_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    owner_address: Mapped[str] = mapped_column(String(64), index=True)

    rating: Mapped[float] = mapped_column(Float, default=0.0)
    star_count: Mapped[int] = mapped_column(Integer, default=0)

    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    rooms = relationship(
        "Room", back_populates="property", lazy="selectin",
        cascade="all, delete-orphan", order_by="Room.order_index",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def full_address(self) -> str:
        return f"{self.country}, {self.city}, {self.address}"

    @property
    def total_rooms(self) -> int:
        return len(self.rooms or [])
