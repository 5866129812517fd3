"""CLI for the property service: schema setup, ledger read-back, reconciliation."""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import timedelta


async def cmd_init_db(args):
    """Create all tables."""
    from app.db.engine import init_db

    await init_db()
    print("Database tables created")


async def cmd_chain_list(args):
    """Print every listing stored on the ledger."""
    from app.dependencies import get_ledger_client
    from app.services.reconcile import fetch_chain_listings

    listings = await fetch_chain_listings(get_ledger_client())
    for p in listings:
        status = "active" if p.is_active else "delisted"
        avail = "available" if p.is_available else "rented"
        print(f"#{p.ledger_id}  owner={p.owner}  rent={p.rent}  deposit={p.deposit}  {status}/{avail}  {p.address}")
    print(f"{len(listings)} listing(s)")


async def cmd_reconcile(args):
    """Compare one property with its ledger copy."""
    from app.db.engine import async_session_factory
    from app.dependencies import get_ledger_client
    from app.services.access import require_property
    from app.services.reconcile import reconcile_property

    async with async_session_factory() as db:
        prop = await require_property(db, args.property_id)
        report = await reconcile_property(db, get_ledger_client(), prop, apply=args.apply)

    print(f"Property {report.property_id} (ledger id {report.ledger_id}): {report.sync_state.value}")
    for name, (local, remote) in report.mismatches.items():
        print(f"  {name}: local={local!r} ledger={remote!r}")
    if report.applied:
        print("Ledger values applied to the local row")


async def cmd_pending(args):
    """List rows stuck waiting for a ledger confirmation."""
    from app.db.engine import async_session_factory
    from app.services.reconcile import find_stale_pending

    async with async_session_factory() as db:
        rows = await find_stale_pending(db, timedelta(minutes=args.older_than_minutes))

    for p in rows:
        print(f"{p.id}  owner={p.owner_address}  created={p.created_at.isoformat()}  {p.title}")
    print(f"{len(rows)} pending row(s)")


def main():
    from app.config import get_settings
    from app.exceptions import PropertyServiceError
    from app.logging_setup import setup_logging

    parser = argparse.ArgumentParser(description="Property ledger service CLI")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("init-db", help="Create database tables")
    sub.add_parser("chain-list", help="List every property stored on the ledger")

    p_rec = sub.add_parser("reconcile", help="Compare a property with the ledger")
    p_rec.add_argument("property_id", help="Local property id")
    p_rec.add_argument("--apply", action="store_true", help="Overwrite local mirrored fields with ledger values")

    p_pend = sub.add_parser("pending", help="List rows never confirmed on the ledger")
    p_pend.add_argument("--older-than-minutes", type=int, default=15)

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    settings = get_settings()
    setup_logging(settings.logging.level, settings.logging.format)

    commands = {
        "init-db": cmd_init_db,
        "chain-list": cmd_chain_list,
        "reconcile": cmd_reconcile,
        "pending": cmd_pending,
    }
    try:
        asyncio.run(commands[args.command](args))
    except PropertyServiceError as exc:
        print(f"Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
