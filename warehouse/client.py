"""
warehouse/client.py

Single entry point for running read-only queries against the warehouse.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from warehouse.session import get_engine

logger = logging.getLogger(__name__)


class WarehouseQueryError(RuntimeError):
    """Raised when a warehouse query cannot be executed."""


def run_query(sql_text: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
    """
    Execute *sql_text* with bind *params* and return rows as plain dicts.

    Column names are returned as the driver reports them; callers normalize
    casing.
    """
    try:
        engine = get_engine()
        with engine.connect() as connection:
            result = connection.execute(text(sql_text), dict(params or {}))
            rows = [dict(row._mapping) for row in result]
    except SQLAlchemyError as exc:
        logger.error("Warehouse query failed: %s", exc)
        raise WarehouseQueryError(str(exc)) from exc
    except RuntimeError as exc:
        # Missing connection configuration surfaces from resolve_warehouse_url().
        logger.error("Warehouse unavailable: %s", exc)
        raise WarehouseQueryError(str(exc)) from exc

    logger.debug("Warehouse query returned %d row(s)", len(rows))
    return rows


def check_connection() -> bool:
    try:
        run_query("SELECT 1")
    except WarehouseQueryError:
        return False
    return True
