"""Create, update and delist properties across the database and the ledger.

The two systems cannot share a transaction, so each operation orders its writes
and undoes the earlier one when the later one fails:

- create: insert the row, list on the ledger, then record the ledger id. If the
  listing fails the row is deleted again.
- update: call the ledger first and only then touch the row. A failed ledger
  call leaves the row as it was.
- delist: call the ledger first and then soft-delete the row. A property that
  never reached the ledger is deleted outright.

Ledger failures are never retried here. Between the insert and the ledger
confirmation of a create, the row exists without a ledger id (sync_state
PENDING); crud.list_pending_properties finds rows stranded in that state.
"""

from __future__ import annotations

import logging
from typing import Awaitable, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.db import crud
from app.exceptions import ConcurrentUpdate, LedgerSyncFailure, LedgerTimeout, PreconditionFailed
from app.models import Property, SyncState
from app.models.base import utcnow
from app.schemas.property import PropertyCreate, PropertyUpdate
from app.services.access import require_owned_property
from app.services.cascade import CascadeManager
from app.services.ledger import LedgerClient

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fields a PUT replaces wholesale; is_available is handled with the status flags.
_REPLACED_FIELDS = (
    "title", "country", "city", "address", "latitude", "longitude",
    "description", "area_sqm", "property_type",
    "rental_type", "rent_amount", "security_deposit",
)


class SyncCoordinator:
    def __init__(self, ledger: LedgerClient, cascade: CascadeManager | None = None):
        self._ledger = ledger
        self._cascade = cascade

    async def create(
        self, db: AsyncSession, command: PropertyCreate, owner_id: int | None, owner_address: str,
    ) -> Property:
        """Persist a new property and list it on the ledger.

        Returns the property with its ledger id set, or raises with no row left behind.
        """
        prop = Property(
            **command.model_dump(include=set(_REPLACED_FIELDS)),
            owner_id=owner_id,
            owner_address=owner_address,
            is_active=True,
            is_available=True,
            ledger_id=None,
            sync_state=SyncState.PENDING,
        )
        prop = await crud.save_property(db, prop)

        try:
            receipt = await self._call_ledger(
                "listProperty",
                self._ledger.list_property(
                    command.full_address, command.description,
                    command.rent_amount, command.security_deposit,
                ),
            )
        except (LedgerSyncFailure, LedgerTimeout):
            await self._compensate_create(db, prop)
            raise

        ledger_id = receipt.listed_property_id
        if ledger_id is None:
            await self._compensate_create(db, prop)
            raise LedgerSyncFailure(f"Transaction {receipt.tx_hash} emitted no PropertyListed event")

        prop.ledger_id = ledger_id
        prop.sync_state = SyncState.SYNCED
        prop.updated_at = utcnow()
        try:
            prop = await crud.save_property(db, prop)
        except SQLAlchemyError:
            logger.exception(
                "Property %s was listed on-chain as %s but recording the ledger id failed",
                prop.id, ledger_id,
            )
            raise

        logger.info("Listed property %s on-chain as %s", prop.id, ledger_id)
        return prop

    async def update(
        self, db: AsyncSession, property_id: str, command: PropertyUpdate, caller_address: str,
    ) -> Property:
        """Push new terms to the ledger, then overwrite the local row."""
        prop = await require_owned_property(db, property_id, caller_address)
        if prop.ledger_id is None:
            raise PreconditionFailed(f"Property {property_id} is not yet listed on-chain")
        if command.expected_version is not None and command.expected_version != prop.version:
            raise ConcurrentUpdate(
                f"Property {property_id} is at version {prop.version}, not {command.expected_version}"
            )

        await self._call_ledger(
            "updateProperty",
            self._ledger.update_property(
                prop.ledger_id, command.full_address, command.description,
                command.rent_amount, command.security_deposit, command.is_available,
            ),
        )

        for name, value in command.model_dump(include=set(_REPLACED_FIELDS)).items():
            setattr(prop, name, value)
        prop.is_available = command.is_available
        prop.sync_state = SyncState.SYNCED
        prop.updated_at = utcnow()
        await self._commit_after_ledger(db, prop, "update")

        logger.info("Updated property %s (ledger id %s)", prop.id, prop.ledger_id)
        return prop

    async def delist(self, db: AsyncSession, property_id: str, caller_address: str) -> None:
        """Delist on the ledger and soft-delete, or hard-delete a never-listed row."""
        prop = await require_owned_property(db, property_id, caller_address)

        if prop.ledger_id is None:
            if self._cascade is not None:
                await self._cascade.purge_property_rooms(db, prop)
            await crud.delete_property(db, prop)
            logger.info("Deleted unlisted property %s", property_id)
            return

        await self._call_ledger("delistProperty", self._ledger.delist_property(prop.ledger_id))

        prop.is_active = False
        prop.is_available = False
        prop.updated_at = utcnow()
        await self._commit_after_ledger(db, prop, "delist")
        logger.info("Delisted property %s (ledger id %s)", prop.id, prop.ledger_id)

    # ── internals ─────────────────────────────────────────

    async def _call_ledger(self, label: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except (LedgerSyncFailure, LedgerTimeout):
            raise
        except Exception as exc:
            raise LedgerSyncFailure(f"Ledger call {label} failed: {exc}", exc) from exc

    async def _compensate_create(self, db: AsyncSession, prop: Property) -> None:
        """Delete the row inserted by create. Failure here must not hide the ledger error."""
        try:
            await crud.delete_property(db, prop)
        except Exception:
            logger.exception("Rollback of property %s failed; row left in PENDING state", prop.id)
            await db.rollback()

    async def _commit_after_ledger(self, db: AsyncSession, prop: Property, action: str) -> None:
        # The rollback expires prop; its attributes cannot be loaded afterwards.
        prop_id = prop.id
        try:
            await db.commit()
        except StaleDataError as exc:
            await db.rollback()
            logger.warning(
                "Ledger accepted %s of property %s but the row changed concurrently; needs reconciliation",
                action, prop_id,
            )
            raise ConcurrentUpdate(f"Property {prop_id} was modified by another request") from exc
        await db.refresh(prop)
