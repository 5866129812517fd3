"""Async SQLAlchemy engine and session factory."""

from __future__ import annotations

import math
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import get_settings

_settings = get_settings()


def _acos(x):
    if x is None:
        return None
    # Rounding can push the haversine argument a hair past +/-1.
    return math.acos(max(-1.0, min(1.0, x)))


def _unary(fn):
    return lambda x: None if x is None else fn(x)


_SQLITE_FUNCTIONS = {
    "radians": _unary(math.radians),
    "sin": _unary(math.sin),
    "cos": _unary(math.cos),
    "acos": _acos,
    # Built-in lower() only folds ASCII.
    "lower": _unary(lambda v: str(v).lower()),
}


def install_sqlite_functions(engine: AsyncEngine) -> None:
    """Register the trig functions the distance filter pushes down, and a Unicode lower().

    Stock SQLite builds often ship without them; Postgres and MySQL have them natively.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _register(dbapi_connection, _record):
        for name, fn in _SQLITE_FUNCTIONS.items():
            dbapi_connection.create_function(name, 1, fn, deterministic=True)


def make_engine(url: str, **kwargs) -> AsyncEngine:
    eng = create_async_engine(url, echo=False, **kwargs)
    install_sqlite_functions(eng)
    return eng


if _settings.database_url.startswith("sqlite+aiosqlite:///") and ":memory:" not in _settings.database_url:
    Path(_settings.database_url.replace("sqlite+aiosqlite:///", "")).parent.mkdir(parents=True, exist_ok=True)

engine = make_engine(_settings.database_url)
async_session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db():
    """FastAPI dependency that yields an async DB session."""
    async with async_session_factory() as session:
        yield session


async def init_db(eng: AsyncEngine | None = None) -> None:
    """Create all tables."""
    from app.models import Base

    async with (eng or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
