"""
reporting/types.py

Typed records shared by every stage of the sales report pipeline.

Data flow
---------
raw warehouse rows
    → FlatSaleRecord        (normalizer)
    → PivotedEntityRow      (pivot builder)
    → SummaryRow            (summary aggregator)
    → DisplayRow sequence   (view assembler)

``DisplayRow`` is a tagged union; every member exposes ``row_type`` as the
discriminant (``"summary"``, ``"detail"`` or ``"manual_input"``) and a
``to_dict()`` that returns JSON-safe primitives only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Final, Union

# ---------------------------------------------------------------------------
# Channel and metric constants
# ---------------------------------------------------------------------------

CHANNEL_FRANCHISE: Final[str] = "FR"
"""Dealer / franchise operated shops."""

CHANNEL_DIRECT: Final[str] = "OR"
"""Company operated shops."""

CHANNEL_ORDER: Final[tuple[str, ...]] = (CHANNEL_FRANCHISE, CHANNEL_DIRECT)

CHANNEL_LABELS: Final[dict[str, str]] = {
    CHANNEL_FRANCHISE: "Franchise",
    CHANNEL_DIRECT: "Direct",
}

METRIC_AVERAGE: Final[str] = "avg"
"""Average amount per active entity."""

METRIC_COUNT: Final[str] = "count"
"""Count of active entities."""

MonthValues = dict[str, Union[float, None]]


# ---------------------------------------------------------------------------
# Flat records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FlatSaleRecord:
    """
    One (entity, period) fact as returned by the warehouse, post-normalization.

    ``amount`` is ``None`` only when the source row carried no value at all;
    a recorded zero stays ``0.0``.
    """

    period: str
    """Year-month identifier, ``YYYY-MM``."""

    entity_id: str
    entity_name: str
    channel: str
    amount: float | None
    origin_id: str | None = None
    """Secondary id tried first by the name localization lookup."""

    open_date: str | None = None
    """ISO ``YYYY-MM-DD`` or ``None`` when unknown."""

    city: str | None = None
    city_tier: str | None = None
    store_type: str | None = None
    sales_region: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "entity_id": self.entity_id,
            "entity_name": self.entity_name,
            "channel": self.channel,
            "amount": self.amount,
            "origin_id": self.origin_id,
            "open_date": self.open_date,
            "city": self.city,
            "city_tier": self.city_tier,
            "store_type": self.store_type,
            "sales_region": self.sales_region,
        }


# ---------------------------------------------------------------------------
# Display rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PivotedEntityRow:
    """
    One row per distinct entity with a value slot for every window label.

    ``months`` always holds every label of the reporting window; labels with
    no record map to ``None``.
    """

    row_type: ClassVar[str] = "detail"

    entity_id: str
    entity_name: str
    source_name: str
    channel: str
    months: MonthValues
    open_date: str | None = None
    open_month: str | None = None
    city: str | None = None
    city_tier: str | None = None
    store_type: str | None = None
    sales_region: str | None = None

    @property
    def key(self) -> str:
        return f"shop-{self.entity_id}"

    def amount(self, label: str) -> float:
        """Amount for *label* with ``None`` read as zero."""
        return self.months.get(label) or 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.row_type,
            "key": self.key,
            "entity_id": self.entity_id,
            "entity_name": self.entity_name,
            "source_name": self.source_name,
            "channel": self.channel,
            "open_date": self.open_date,
            "open_month": self.open_month,
            "city": self.city,
            "city_tier": self.city_tier,
            "store_type": self.store_type,
            "sales_region": self.sales_region,
            "months": dict(self.months),
        }


@dataclass(frozen=True)
class SummaryRow:
    """
    Derived per-channel row: average per active entity, or active count.
    """

    row_type: ClassVar[str] = "summary"

    metric: str
    label: str
    channel: str
    months: dict[str, float] = field(default_factory=dict)

    @property
    def summary_id(self) -> str:
        """Stable identifier such as ``fr_avg`` or ``or_count``."""
        return f"{self.channel.lower()}_{self.metric}"

    @property
    def key(self) -> str:
        return f"summary-{self.summary_id}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.row_type,
            "key": self.key,
            "summary_id": self.summary_id,
            "metric": self.metric,
            "label": self.label,
            "channel": self.channel,
            "months": dict(self.months),
        }


@dataclass(frozen=True)
class ManualInputRow:
    """
    Placeholder row for an entity with no warehouse history yet.

    The operator types a value for ``target_label`` only.
    """

    row_type: ClassVar[str] = "manual_input"

    key: str
    display_name: str
    channel: str
    target_label: str
    value: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.row_type,
            "key": self.key,
            "display_name": self.display_name,
            "channel": self.channel,
            "target_label": self.target_label,
            "value": self.value,
        }


DisplayRow = Union[SummaryRow, PivotedEntityRow, ManualInputRow]
