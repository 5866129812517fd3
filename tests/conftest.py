"""Shared fixtures: in-memory database, fake ledger, fake blob store."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.db.engine import init_db, make_engine
from app.exceptions import LedgerSyncFailure, StorageFailure
from app.models.enums import RentalType
from app.schemas import PropertyCreate, PropertyUpdate
from app.services.ledger import PROPERTY_LISTED, LedgerEvent, LedgerProperty, Receipt

OWNER = "0xAbC0000000000000000000000000000000000001"
STRANGER = "0xdef0000000000000000000000000000000000002"
SERVICE_WALLET = "0x5e70000000000000000000000000000000000003"


class FakeLedger:
    """In-memory stand-in for the RealEstateRental contract."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.listings: dict[int, LedgerProperty] = {}
        self.fail_with: Exception | None = None
        self.emit_event = True
        self._next_id = 1

    def _maybe_fail(self):
        if self.fail_with is not None:
            raise self.fail_with

    def _receipt(self, events=()) -> Receipt:
        n = len(self.calls)
        return Receipt(tx_hash=f"0x{n:064x}", block_number=n, events=tuple(events))

    async def list_property(self, address, description, rent, deposit):
        self.calls.append(("list", address, description, rent, deposit))
        self._maybe_fail()
        pid = self._next_id
        self._next_id += 1
        self.listings[pid] = LedgerProperty(pid, SERVICE_WALLET, address, description, rent, deposit, True, True)
        events = [LedgerEvent(PROPERTY_LISTED, {"propertyId": pid})] if self.emit_event else []
        return self._receipt(events)

    async def update_property(self, property_id, address, description, rent, deposit, is_available):
        self.calls.append(("update", property_id, address, description, rent, deposit, is_available))
        self._maybe_fail()
        old = self.listings[property_id]
        self.listings[property_id] = LedgerProperty(
            property_id, old.owner, address, description, rent, deposit, is_available, old.is_active,
        )
        return self._receipt()

    async def delist_property(self, property_id):
        self.calls.append(("delist", property_id))
        self._maybe_fail()
        old = self.listings[property_id]
        self.listings[property_id] = LedgerProperty(
            property_id, old.owner, old.address, old.description, old.rent, old.deposit, False, False,
        )
        return self._receipt()

    async def get_property(self, property_id):
        self.calls.append(("get", property_id))
        if property_id not in self.listings:
            raise LedgerSyncFailure(f"no property {property_id}")
        return self.listings[property_id]

    async def property_count(self):
        return self._next_id - 1


class FakeBlobStore:
    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_upload = False
        self.fail_delete = False
        self.delete_error: Exception | None = None

    async def upload(self, data, path, content_type="application/octet-stream"):
        if self.fail_upload:
            raise StorageFailure("upload refused")
        self.objects[path] = data
        return f"https://blobs.test/storage/v1/object/public/property-images/{path}"

    async def delete(self, path):
        self.deleted.append(path)
        if self.fail_delete:
            raise StorageFailure("delete refused")
        if self.delete_error is not None:
            raise self.delete_error
        self.objects.pop(path, None)


@pytest_asyncio.fixture
async def db():
    engine = make_engine("sqlite+aiosqlite:///:memory:")
    await init_db(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def blobs():
    return FakeBlobStore()


def make_create(**overrides) -> PropertyCreate:
    data = dict(
        title="Sunny flat",
        country="France",
        city="Paris",
        address="10 Rue de Rivoli",
        latitude=48.8566,
        longitude=2.3522,
        description="Two rooms near the river",
        area_sqm=45,
        rental_type=RentalType.MONTHLY,
        rent_amount=1200,
        security_deposit=2400,
    )
    data.update(overrides)
    return PropertyCreate(**data)


def make_update(**overrides) -> PropertyUpdate:
    base = make_create().model_dump()
    base.update(is_available=True)
    base.update(overrides)
    return PropertyUpdate(**base)


@pytest.fixture
def create_body():
    return make_create


@pytest.fixture
def update_body():
    return make_update
