"""Schemas for ledger read-back and reconciliation responses."""

from __future__ import annotations
from typing import Any

from pydantic import BaseModel

from app.models.enums import SyncState


class ChainPropertyRead(BaseModel):
    ledger_id: int
    owner: str
    address: str
    description: str
    rent: int
    deposit: int
    is_available: bool
    is_active: bool

    model_config = {"from_attributes": True}


class ReconcileReportRead(BaseModel):
    property_id: str
    ledger_id: int | None
    sync_state: SyncState
    mismatches: dict[str, tuple[Any, Any]]
    applied: bool

    model_config = {"from_attributes": True}
