"""Compare local rows with their ledger copies."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.exceptions import LedgerSyncFailure, LedgerTimeout
from app.models import Property, SyncState
from app.models.base import utcnow
from app.services.ledger import LedgerClient, LedgerProperty

logger = logging.getLogger(__name__)

# local attribute -> ledger attribute
_MIRRORED = {
    "rent_amount": "rent",
    "security_deposit": "deposit",
    "is_available": "is_available",
    "is_active": "is_active",
}


@dataclass
class ReconcileReport:
    property_id: str
    ledger_id: int | None
    sync_state: SyncState
    mismatches: dict[str, tuple[object, object]] = field(default_factory=dict)
    applied: bool = False


async def fetch_chain_listings(ledger: LedgerClient) -> list[LedgerProperty]:
    """Read every listing on the ledger, ids 1..propertyCount.

    Slow: one call per listing. Entries that fail to load are skipped.
    """
    total = await ledger.property_count()
    listings = []
    for ledger_id in range(1, total + 1):
        try:
            listings.append(await ledger.get_property(ledger_id))
        except (LedgerSyncFailure, LedgerTimeout) as exc:
            logger.warning("Failed to read ledger property %s: %s", ledger_id, exc)
    return listings


def diff_mirrored(prop: Property, chain: LedgerProperty) -> dict[str, tuple[object, object]]:
    """Mirrored fields that differ, as {local_field: (local, ledger)}."""
    out = {}
    for local_name, chain_name in _MIRRORED.items():
        local, remote = getattr(prop, local_name), getattr(chain, chain_name)
        if local != remote:
            out[local_name] = (local, remote)
    return out


async def reconcile_property(
    db: AsyncSession, ledger: LedgerClient, prop: Property, apply: bool = False,
) -> ReconcileReport:
    """Check ``prop`` against the ledger and record the outcome in sync_state.

    With ``apply`` the ledger's values overwrite the local mirrored fields,
    since the ledger is authoritative for them.
    """
    if prop.ledger_id is None:
        return ReconcileReport(prop.id, None, prop.sync_state)

    chain = await ledger.get_property(prop.ledger_id)
    mismatches = diff_mirrored(prop, chain)

    if mismatches and apply:
        for local_name, (_, remote) in mismatches.items():
            setattr(prop, local_name, remote)
        prop.sync_state = SyncState.SYNCED
        prop.updated_at = utcnow()
    elif mismatches:
        logger.warning("Property %s diverges from ledger id %s: %s", prop.id, prop.ledger_id, mismatches)
        prop.sync_state = SyncState.SYNC_FAILED
    else:
        prop.sync_state = SyncState.SYNCED

    await db.commit()
    await db.refresh(prop)
    return ReconcileReport(prop.id, prop.ledger_id, prop.sync_state, mismatches, applied=bool(mismatches and apply))


async def find_stale_pending(db: AsyncSession, older_than: timedelta = timedelta(minutes=15)) -> list[Property]:
    """PENDING rows older than ``older_than``: creates whose rollback never completed."""
    return await crud.list_pending_properties(db, utcnow() - older_than)
