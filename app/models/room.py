from __future__ import annotations

from sqlalchemy import String, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, ULIDMixin


class Room(Base, ULIDMixin):
    __tablename__ = "rooms"

    property_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("properties.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    # Declared before the `property` relationship, which shadows the builtin below.
    @property
    def image_count(self) -> int:
        return len(self.images or [])

    property = relationship("Property", back_populates="rooms")
    images = relationship(
        "RoomImage", back_populates="room", lazy="selectin",
        cascade="all, delete-orphan", order_by="RoomImage.order_index",
    )
