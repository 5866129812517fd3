"""Enumerations shared by the ORM models and the API schemas."""

from __future__ import annotations

import enum


class RentalType(str, enum.Enum):
    DAILY = "DAILY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class PropertyType(str, enum.Enum):
    APARTMENT = "APARTMENT"
    HOUSE = "HOUSE"
    STUDIO = "STUDIO"
    VILLA = "VILLA"
    ROOM = "ROOM"
    OTHER = "OTHER"


class SyncState(str, enum.Enum):
    """Where a property stands relative to its ledger mirror.

    PENDING: row persisted, listing not yet confirmed on-chain.
    SYNCED: mirrored fields match the last successful ledger call.
    SYNC_FAILED: reconciliation found the store and the ledger disagree.
    """

    PENDING = "PENDING"
    SYNCED = "SYNCED"
    SYNC_FAILED = "SYNC_FAILED"
