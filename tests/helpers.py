"""
Builders and doubles shared across test modules.
"""

from __future__ import annotations

from typing import Any, Mapping

from reporting.types import FlatSaleRecord


def make_record(
    entity_id: str,
    period: str,
    amount: float | None,
    *,
    channel: str = "FR",
    name: str | None = None,
    open_date: str | None = None,
    **extra: Any,
) -> FlatSaleRecord:
    return FlatSaleRecord(
        period=period,
        entity_id=entity_id,
        entity_name=name or f"Shop {entity_id}",
        channel=channel,
        amount=amount,
        open_date=open_date,
        **extra,
    )


class FakeRunner:
    """
    Query runner double: routes SQL to canned rows by a marker substring.
    """

    def __init__(
        self,
        routes: Mapping[str, list[dict[str, Any]]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.routes = dict(routes or {})
        self.error = error
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, sql: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        self.calls.append((sql, dict(params or {})))
        if self.error is not None:
            raise self.error
        for marker, rows in self.routes.items():
            if marker in sql:
                return [dict(row) for row in rows]
        return []
