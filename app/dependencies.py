"""FastAPI dependency providers for identity, DB sessions and remote collaborators."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from app.config import Settings, get_settings
from app.services.auth import Principal, get_current_principal
from app.services.blob_store import BlobStore, SupabaseBlobStore
from app.services.cascade import CascadeManager
from app.services.ledger import LedgerClient, Web3LedgerClient
from app.services.search import CriteriaSearchEngine
from app.services.sync_coordinator import SyncCoordinator


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


@lru_cache
def _ledger_client() -> Web3LedgerClient:
    return Web3LedgerClient.from_config(get_settings_dep().ledger)


def get_ledger_client() -> LedgerClient:
    return _ledger_client()


def get_blob_store(settings: Settings = Depends(get_settings_dep)) -> BlobStore:
    return SupabaseBlobStore.from_config(settings.storage)


def get_search_engine(settings: Settings = Depends(get_settings_dep)) -> CriteriaSearchEngine:
    return CriteriaSearchEngine.from_config(settings.search)


def get_cascade_manager(blob_store: BlobStore = Depends(get_blob_store)) -> CascadeManager:
    return CascadeManager(blob_store)


def get_sync_coordinator(
    ledger: LedgerClient = Depends(get_ledger_client),
    cascade: CascadeManager = Depends(get_cascade_manager),
) -> SyncCoordinator:
    return SyncCoordinator(ledger, cascade)


def require_auth(principal: Principal = Depends(get_current_principal)) -> Principal:
    """Require an authenticated caller. Returns its Principal."""
    return principal
