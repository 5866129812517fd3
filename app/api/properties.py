"""Property listing API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.db.engine import get_db
from app.dependencies import get_ledger_client, get_search_engine, get_sync_coordinator, require_auth
from app.models.enums import RentalType
from app.schemas import (
    ChainPropertyRead, PropertyCreate, PropertyRead, PropertySearch, PropertyUpdate, ReconcileReportRead,
)
from app.services.access import require_owned_property, require_property, require_property_by_ledger_id
from app.services.auth import Principal
from app.services.ledger import LedgerClient
from app.services.reconcile import fetch_chain_listings, reconcile_property
from app.services.search import CriteriaSearchEngine
from app.services.sync_coordinator import SyncCoordinator

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.post("", response_model=PropertyRead, status_code=201)
async def create_property(
    body: PropertyCreate,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
):
    return await coordinator.create(db, body, auth.owner_id, auth.wallet_address)


@router.get("", response_model=list[PropertyRead])
async def list_properties(db: AsyncSession = Depends(get_db)):
    return await crud.list_properties(db)


@router.get("/search", response_model=list[PropertyRead])
async def search_properties(
    city: str | None = None,
    min_rent: int | None = Query(default=None, ge=0),
    max_rent: int | None = Query(default=None, ge=0),
    rental_type: RentalType | None = None,
    latitude: float | None = Query(default=None, ge=-90, le=90),
    longitude: float | None = Query(default=None, ge=-180, le=180),
    radius_km: float | None = Query(default=None, gt=0),
    db: AsyncSession = Depends(get_db),
    engine: CriteriaSearchEngine = Depends(get_search_engine),
):
    criteria = PropertySearch(
        city=city, min_rent=min_rent, max_rent=max_rent, rental_type=rental_type,
        latitude=latitude, longitude=longitude, radius_km=radius_km,
    )
    return await engine.search(db, criteria)


@router.get("/chain", response_model=list[ChainPropertyRead])
async def list_chain_properties(ledger: LedgerClient = Depends(get_ledger_client)):
    """Every listing as the ledger sees it. One ledger call per listing."""
    return await fetch_chain_listings(ledger)


@router.get("/ledger/{ledger_id}", response_model=PropertyRead)
async def get_property_by_ledger_id(ledger_id: int, db: AsyncSession = Depends(get_db)):
    return await require_property_by_ledger_id(db, ledger_id)


@router.get("/{property_id}", response_model=PropertyRead)
async def get_property(property_id: str, db: AsyncSession = Depends(get_db)):
    return await require_property(db, property_id)


@router.put("/{property_id}", response_model=PropertyRead)
async def update_property(
    property_id: str,
    body: PropertyUpdate,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
):
    return await coordinator.update(db, property_id, body, auth.wallet_address)


@router.delete("/{property_id}", status_code=204)
async def delete_property(
    property_id: str,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    coordinator: SyncCoordinator = Depends(get_sync_coordinator),
):
    await coordinator.delist(db, property_id, auth.wallet_address)
    return Response(status_code=204)


@router.post("/{property_id}/reconcile", response_model=ReconcileReportRead)
async def reconcile(
    property_id: str,
    apply: bool = False,
    auth: Principal = Depends(require_auth),
    db: AsyncSession = Depends(get_db),
    ledger: LedgerClient = Depends(get_ledger_client),
):
    prop = await require_owned_property(db, property_id, auth.wallet_address)
    return await reconcile_property(db, ledger, prop, apply=apply)
