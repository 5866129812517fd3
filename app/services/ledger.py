"""Client for the RealEstateRental contract.

Writes are signed with the service wallet and block until the transaction is
mined. Every call runs in a worker thread under a deadline; a call that misses
its deadline raises LedgerTimeout, but the transaction may still land because a
sent transaction cannot be recalled.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted
from web3.logs import DISCARD

from app.config import LedgerConfig
from app.exceptions import LedgerSyncFailure, LedgerTimeout
from app.services.ledger_abi import load_abi

logger = logging.getLogger(__name__)

PROPERTY_LISTED = "PropertyListed"


@dataclass(frozen=True)
class LedgerEvent:
    name: str
    args: dict[str, Any]


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    block_number: int | None = None
    events: tuple[LedgerEvent, ...] = field(default_factory=tuple)

    def first_event(self, name: str) -> LedgerEvent | None:
        for ev in self.events:
            if ev.name == name:
                return ev
        return None

    @property
    def listed_property_id(self) -> int | None:
        """Ledger id from the PropertyListed event, or None if it was not emitted."""
        ev = self.first_event(PROPERTY_LISTED)
        if ev is None or ev.args.get("propertyId") is None:
            return None
        return int(ev.args["propertyId"])


@dataclass(frozen=True)
class LedgerProperty:
    ledger_id: int
    owner: str
    address: str
    description: str
    rent: int
    deposit: int
    is_available: bool
    is_active: bool


class LedgerClient(Protocol):
    async def list_property(self, address: str, description: str, rent: int, deposit: int) -> Receipt: ...

    async def update_property(
        self, property_id: int, address: str, description: str,
        rent: int, deposit: int, is_available: bool,
    ) -> Receipt: ...

    async def delist_property(self, property_id: int) -> Receipt: ...

    async def get_property(self, property_id: int) -> LedgerProperty: ...

    async def property_count(self) -> int: ...


class Web3LedgerClient:
    """LedgerClient backed by web3.py over JSON-RPC."""

    def __init__(
        self,
        w3: Web3,
        contract_address: str,
        private_key: str = "",
        *,
        abi: list[dict] | None = None,
        gas_price_wei: int = 20_000_000_000,
        gas_limit: int = 6_721_975,
        timeout: float = 120.0,
        poll_latency: float = 0.5,
    ):
        self._w3 = w3
        self._contract = w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=abi or load_abi(),
        )
        self._account = Account.from_key(private_key) if private_key else None
        self._gas_price_wei = gas_price_wei
        self._gas_limit = gas_limit
        self._timeout = timeout
        self._poll_latency = poll_latency

    @classmethod
    def from_config(cls, cfg: LedgerConfig) -> "Web3LedgerClient":
        w3 = Web3(Web3.HTTPProvider(cfg.rpc_url, request_kwargs={"timeout": cfg.call_timeout_seconds}))
        return cls(
            w3,
            cfg.contract_address,
            cfg.private_key,
            abi=load_abi(cfg.abi_path),
            gas_price_wei=cfg.gas_price_wei,
            gas_limit=cfg.gas_limit,
            timeout=cfg.call_timeout_seconds,
            poll_latency=cfg.receipt_poll_seconds,
        )

    # ── public API ────────────────────────────────────────

    async def list_property(self, address: str, description: str, rent: int, deposit: int) -> Receipt:
        fn = self._contract.functions.listProperty(address, description, rent, deposit)
        return await self._run("listProperty", self._transact, fn)

    async def update_property(
        self, property_id: int, address: str, description: str,
        rent: int, deposit: int, is_available: bool,
    ) -> Receipt:
        fn = self._contract.functions.updateProperty(
            property_id, address, description, rent, deposit, is_available,
        )
        return await self._run("updateProperty", self._transact, fn)

    async def delist_property(self, property_id: int) -> Receipt:
        fn = self._contract.functions.delistProperty(property_id)
        return await self._run("delistProperty", self._transact, fn)

    async def get_property(self, property_id: int) -> LedgerProperty:
        raw = await self._run("getProperty", self._contract.functions.getProperty(property_id).call)
        return LedgerProperty(
            ledger_id=int(raw[0]),
            owner=raw[1],
            address=raw[2],
            description=raw[3],
            rent=int(raw[4]),
            deposit=int(raw[5]),
            is_available=bool(raw[6]),
            is_active=bool(raw[7]),
        )

    async def property_count(self) -> int:
        return int(await self._run("propertyCounter", self._contract.functions.propertyCounter().call))

    # ── internals ─────────────────────────────────────────

    async def _run(self, label: str, fn: Callable, *args):
        try:
            return await asyncio.wait_for(asyncio.to_thread(fn, *args), timeout=self._timeout)
        except (asyncio.TimeoutError, TimeExhausted) as exc:
            raise LedgerTimeout(f"Ledger call {label} exceeded {self._timeout}s", exc) from exc
        except LedgerSyncFailure:
            raise
        except Exception as exc:
            # web3 surfaces transport, RPC and contract-revert failures as unrelated types.
            raise LedgerSyncFailure(f"Ledger call {label} failed: {exc}", exc) from exc

    def _transact(self, fn) -> Receipt:
        if self._account is None:
            raise LedgerSyncFailure("No signing key configured for ledger writes")

        sender = self._account.address
        tx = fn.build_transaction({
            "from": sender,
            "nonce": self._w3.eth.get_transaction_count(sender, "pending"),
            "gas": self._gas_limit,
            "gasPrice": self._gas_price_wei,
        })
        signed = self._account.sign_transaction(tx)
        tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
        raw = self._w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self._timeout, poll_latency=self._poll_latency,
        )
        tx_hex = Web3.to_hex(tx_hash)
        if raw["status"] != 1:
            raise LedgerSyncFailure(f"Transaction {tx_hex} reverted")

        listed = self._contract.events.PropertyListed().process_receipt(raw, errors=DISCARD)
        events = tuple(LedgerEvent(PROPERTY_LISTED, dict(ev["args"])) for ev in listed)
        logger.debug("Transaction %s mined in block %s", tx_hex, raw.get("blockNumber"))
        return Receipt(tx_hash=tx_hex, block_number=raw.get("blockNumber"), events=events)
