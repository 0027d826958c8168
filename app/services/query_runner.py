"""
app/services/query_runner.py

Query-runner seam shared by the report services.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from warehouse.client import run_query
from warehouse.queries import WarehouseQuery

QueryRunner = Callable[[str, Optional[Mapping[str, Any]]], list[dict[str, Any]]]


def default_runner() -> QueryRunner:
    return run_query


def execute(runner: QueryRunner, query: WarehouseQuery) -> list[dict[str, Any]]:
    return runner(query.sql, query.params)
