import json
import time
from unittest.mock import MagicMock

import pytest

from app.exceptions import LedgerSyncFailure, LedgerTimeout
from app.services.ledger import PROPERTY_LISTED, LedgerEvent, Receipt, Web3LedgerClient
from app.services.ledger_abi import REAL_ESTATE_RENTAL_ABI, load_abi

CONTRACT = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
# Well-known local development key; never funded anywhere real.
DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DEV_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@pytest.fixture
def w3():
    return MagicMock()


def _client(w3, key="", timeout=5.0):
    return Web3LedgerClient(w3, CONTRACT, key, timeout=timeout, poll_latency=0.01)


def _contract(w3):
    return w3.eth.contract.return_value


def _signing_client(w3):
    client = _client(w3, DEV_KEY)
    signer = MagicMock(address=DEV_ADDRESS)
    signer.sign_transaction.return_value = MagicMock(raw_transaction=b"\x01\x02")
    client._account = signer
    w3.eth.get_transaction_count.return_value = 3
    w3.eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "blockNumber": 12}
    return client


def test_contract_bound_with_checksum_address(w3):
    _client(w3)
    kwargs = w3.eth.contract.call_args.kwargs
    assert kwargs["address"] == "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    assert kwargs["abi"] is REAL_ESTATE_RENTAL_ABI


def test_signing_key_derives_service_address(w3):
    client = _client(w3, DEV_KEY)
    assert client._account.address == DEV_ADDRESS


def test_receipt_listed_property_id():
    receipt = Receipt("0x1", 1, (LedgerEvent("Other", {}), LedgerEvent(PROPERTY_LISTED, {"propertyId": 9})))
    assert receipt.listed_property_id == 9
    assert Receipt("0x1").listed_property_id is None


async def test_get_property_maps_struct(w3):
    _contract(w3).functions.getProperty.return_value.call.return_value = (
        4, DEV_ADDRESS, "France, Paris, 1 Rue", "desc", 1200, 2400, True, False,
    )
    prop = await _client(w3).get_property(4)

    _contract(w3).functions.getProperty.assert_called_once_with(4)
    assert prop.ledger_id == 4
    assert prop.owner == DEV_ADDRESS
    assert prop.rent == 1200
    assert prop.deposit == 2400
    assert prop.is_available is True
    assert prop.is_active is False


async def test_property_count(w3):
    _contract(w3).functions.propertyCounter.return_value.call.return_value = 17
    assert await _client(w3).property_count() == 17


async def test_slow_call_raises_timeout(w3):
    _contract(w3).functions.getProperty.return_value.call.side_effect = lambda: time.sleep(0.5)
    with pytest.raises(LedgerTimeout):
        await _client(w3, timeout=0.05).get_property(1)


async def test_transport_error_wrapped(w3):
    _contract(w3).functions.getProperty.return_value.call.side_effect = ConnectionError("refused")
    with pytest.raises(LedgerSyncFailure) as info:
        await _client(w3).get_property(1)
    assert isinstance(info.value.cause, ConnectionError)


async def test_write_without_key_fails(w3):
    with pytest.raises(LedgerSyncFailure):
        await _client(w3).delist_property(1)
    w3.eth.send_raw_transaction.assert_not_called()


async def test_list_property_reads_event(w3):
    client = _signing_client(w3)
    contract = _contract(w3)
    contract.events.PropertyListed.return_value.process_receipt.return_value = [
        {"args": {"propertyId": 5, "owner": DEV_ADDRESS, "propertyAddress": "a", "rentPerMonth": 10}},
    ]

    receipt = await client.list_property("a", "d", 10, 20)

    contract.functions.listProperty.assert_called_once_with("a", "d", 10, 20)
    tx = contract.functions.listProperty.return_value.build_transaction.call_args.args[0]
    assert tx["from"] == DEV_ADDRESS
    assert tx["nonce"] == 3
    assert tx["gas"] == 6_721_975
    assert tx["gasPrice"] == 20_000_000_000
    w3.eth.send_raw_transaction.assert_called_once_with(b"\x01\x02")
    assert receipt.listed_property_id == 5
    assert receipt.block_number == 12
    assert receipt.tx_hash == "0x" + "ab" * 32


async def test_update_property_arguments(w3):
    client = _signing_client(w3)
    _contract(w3).events.PropertyListed.return_value.process_receipt.return_value = []

    receipt = await client.update_property(2, "a", "d", 10, 20, False)

    _contract(w3).functions.updateProperty.assert_called_once_with(2, "a", "d", 10, 20, False)
    assert receipt.listed_property_id is None


async def test_reverted_transaction_fails(w3):
    client = _signing_client(w3)
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "blockNumber": 12}
    with pytest.raises(LedgerSyncFailure, match="reverted"):
        await client.delist_property(1)


def test_load_abi_default_and_artifact(tmp_path):
    assert load_abi() is REAL_ESTATE_RENTAL_ABI

    artifact = tmp_path / "RealEstateRental.json"
    artifact.write_text(json.dumps({"contractName": "RealEstateRental", "abi": [{"type": "function", "name": "x"}]}))
    assert load_abi(str(artifact)) == [{"type": "function", "name": "x"}]

    bare = tmp_path / "abi.json"
    bare.write_text(json.dumps([{"type": "event", "name": "y"}]))
    assert load_abi(str(bare)) == [{"type": "event", "name": "y"}]


def test_bundled_abi_declares_used_entries():
    names = {entry.get("name") for entry in REAL_ESTATE_RENTAL_ABI}
    assert {"listProperty", "updateProperty", "delistProperty", "getProperty",
            "propertyCounter", "PropertyListed"} <= names
