import logging

import httpx
import pytest

from app.db import crud
from app.exceptions import NotFound, Unauthorized
from app.models import Property, RentalType, SyncState
from app.services.cascade import CascadeManager

OWNER = "0xAbC0000000000000000000000000000000000001"


async def _property(db):
    return await crud.save_property(db, Property(
        title="Flat", country="France", city="Paris", address="1 Rue Test",
        rental_type=RentalType.MONTHLY, rent_amount=1000, security_deposit=0,
        owner_address=OWNER, sync_state=SyncState.SYNCED, ledger_id=1,
    ))


async def _room_with_images(db, prop, name="Living Room", keys=("a.jpg", "b.jpg", "c.jpg")):
    room = await crud.create_room(db, prop.id, name)
    for i, key in enumerate(keys):
        await crud.create_room_image(db, room.id, f"https://blobs.test/{key}", key, i)
    # Drop cached collections so the next load sees the new images.
    db.expunge_all()
    return room.id


async def test_delete_room_removes_rows_and_blobs(db, blobs):
    prop = await _property(db)
    room_id = await _room_with_images(db, prop)

    await CascadeManager(blobs).delete_room(db, room_id)

    assert await crud.get_room(db, room_id) is None
    assert await crud.list_room_images(db, room_id) == []
    assert blobs.deleted == [
        f"{prop.id}/living-room/a.jpg",
        f"{prop.id}/living-room/b.jpg",
        f"{prop.id}/living-room/c.jpg",
    ]


async def test_delete_room_completes_when_blob_deletes_fail(db, blobs):
    prop = await _property(db)
    room_id = await _room_with_images(db, prop)
    blobs.fail_delete = True

    await CascadeManager(blobs).delete_room(db, room_id)

    assert await crud.get_room(db, room_id) is None
    assert await crud.list_room_images(db, room_id) == []
    assert len(blobs.deleted) == 3


async def test_delete_room_completes_when_blob_store_raises_unexpectedly(db, blobs, caplog):
    prop = await _property(db)
    room_id = await _room_with_images(db, prop)
    blobs.delete_error = httpx.InvalidURL("bad object path")

    with caplog.at_level(logging.WARNING, logger="app.services.cascade"):
        await CascadeManager(blobs).delete_room(db, room_id)

    assert await crud.get_room(db, room_id) is None
    assert await crud.list_room_images(db, room_id) == []
    assert len(blobs.deleted) == 3
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 3
    assert all(r.exc_info and isinstance(r.exc_info[1], httpx.InvalidURL) for r in warnings)


async def test_delete_room_without_images(db, blobs):
    prop = await _property(db)
    room_id = await _room_with_images(db, prop, keys=())

    await CascadeManager(blobs).delete_room(db, room_id)

    assert await crud.get_room(db, room_id) is None
    assert blobs.deleted == []


async def test_delete_room_keeps_sibling_rooms(db, blobs):
    prop = await _property(db)
    doomed = await _room_with_images(db, prop, name="Kitchen", keys=("k.jpg",))
    kept = await _room_with_images(db, prop, name="Bath Room #2", keys=("b.jpg",))

    await CascadeManager(blobs).delete_room(db, doomed)

    assert await crud.get_room(db, kept) is not None
    assert len(await crud.list_room_images(db, kept)) == 1
    assert blobs.deleted == [f"{prop.id}/kitchen/k.jpg"]


async def test_delete_missing_room(db, blobs):
    with pytest.raises(NotFound):
        await CascadeManager(blobs).delete_room(db, "01NOPE0000000000000000000")


async def test_delete_room_checks_owner_when_caller_given(db, blobs):
    prop = await _property(db)
    room_id = await _room_with_images(db, prop)

    with pytest.raises(Unauthorized):
        await CascadeManager(blobs).delete_room(db, room_id, "0xsomeoneelse")

    assert await crud.get_room(db, room_id) is not None
    assert blobs.deleted == []


async def test_delete_image(db, blobs):
    prop = await _property(db)
    room_id = await _room_with_images(db, prop, name="Bedroom", keys=("x.png", "y.png"))
    first, second = await crud.list_room_images(db, room_id)

    await CascadeManager(blobs).delete_image(db, first.id, OWNER.lower())

    remaining = await crud.list_room_images(db, room_id)
    assert [img.id for img in remaining] == [second.id]
    assert blobs.deleted == [f"{prop.id}/bedroom/x.png"]


async def test_delete_image_row_removed_even_if_blob_delete_fails(db, blobs):
    prop = await _property(db)
    room_id = await _room_with_images(db, prop, keys=("x.png",))
    (img,) = await crud.list_room_images(db, room_id)
    blobs.fail_delete = True

    await CascadeManager(blobs).delete_image(db, img.id)

    assert await crud.get_room_image(db, img.id) is None
