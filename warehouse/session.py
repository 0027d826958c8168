"""
warehouse/session.py

Shared SQLAlchemy engine for the sales warehouse.
"""

from __future__ import annotations

import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from warehouse.config import resolve_warehouse_url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def create_warehouse_engine() -> Engine:
    warehouse_url = resolve_warehouse_url()
    options: dict[str, object] = {
        "echo": _get_bool_env("SQL_ECHO", default=False),
        "pool_pre_ping": True,
    }
    # SQLite (used for local smoke runs) does not accept queue-pool sizing.
    if not str(warehouse_url).startswith("sqlite"):
        options.update(
            pool_recycle=_get_int_env("WAREHOUSE_POOL_RECYCLE", 1800),
            pool_size=_get_int_env("WAREHOUSE_POOL_SIZE", 5),
            max_overflow=_get_int_env("WAREHOUSE_MAX_OVERFLOW", 10),
        )
    return create_engine(warehouse_url, **options)


_engine: Engine | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_warehouse_engine()
    return _engine


def reset_engine() -> None:
    """Dispose the shared engine so the next call rebuilds it from env."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
