"""
reporting/discount.py

Monthly discount-rate series per channel.

The warehouse returns ``1 - sale_amt / tag_amt`` per (month, channel);
here the rates are laid out on the window as percentages.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from reporting.normalizer import DiscountRateRecord
from reporting.types import CHANNEL_ORDER
from reporting.window import ReportWindow


@dataclass(frozen=True)
class DiscountSeries:
    channel: str
    values: dict[str, float | None]
    """Discount percentage per window label; ``None`` when not reported."""

    @property
    def average(self) -> float:
        present = [value for value in self.values.values() if value is not None]
        return sum(present) / len(present) if present else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"channel": self.channel, "values": dict(self.values), "average": self.average}


def build_discount_series(
    records: Iterable[DiscountRateRecord],
    window: ReportWindow,
) -> list[DiscountSeries]:
    rates: dict[tuple[str, str], float] = {}
    for record in records:
        label = window.label_for(record.period)
        if label is None:
            continue
        rates[(record.channel, label)] = record.discount_rate * 100

    return [
        DiscountSeries(
            channel=channel,
            values={label: rates.get((channel, label)) for label in window.labels},
        )
        for channel in CHANNEL_ORDER
    ]
