"""
reporting/insights.py

Short descriptive summaries derived from pivoted shops and summary rows.

Three cards are produced:

trend
    Blended average per shop across both channels,
    Σ(avg × count) / Σ count, compared between the first window label and
    the latest reported label. The sign of the percentage change selects the
    phrasing; changes within the stable band (±5 % by default) read as
    "stable".
region
    Top shops of the latest reported label, city-tier ranking by average
    and sales-region ranking by total with the share held by the top three.
new_shop
    Store-type ranking plus shops opened within the trailing lookback
    window, split into strong and weak starters by fixed thresholds.

"Latest reported label" is the last label where some shop has a positive
warehouse amount; manual overrides never count. A window with no activity
falls back to its last label.

This is presentation text. Nothing else in the pipeline consumes it.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

from reporting.localization import NameLocalization
from reporting.summary import find_summary
from reporting.types import (
    CHANNEL_DIRECT,
    CHANNEL_FRANCHISE,
    METRIC_AVERAGE,
    METRIC_COUNT,
    PivotedEntityRow,
    SummaryRow,
)
from reporting.view import sort_by_amount
from reporting.window import shift_label

logger = logging.getLogger(__name__)

TREND_UP = "up"
TREND_DOWN = "down"
TREND_STABLE = "stable"

UNKNOWN_TIER = "Other"
UNKNOWN_STORE_TYPE = "Standard"


@dataclass(frozen=True)
class InsightSettings:
    """
    Thresholds used by :class:`InsightGenerator`.
    """

    stable_band_pct: float = 5.0
    new_shop_lookback_months: int = 3
    strong_new_threshold: float = 200_000.0
    weak_new_threshold: float = 50_000.0
    top_n: int = 3


@dataclass(frozen=True)
class InsightCard:
    id: str
    label: str
    description: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "label": self.label, "description": self.description}


@dataclass(frozen=True)
class GroupStat:
    name: str
    total: float
    count: int

    @property
    def average(self) -> float:
        return self.total / self.count if self.count > 0 else 0.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def to_k(amount: float) -> str:
    """``123456`` → ``"123K"`` (half rounds up)."""
    return f"{math.floor(amount / 1000 + 0.5)}K"


def percent_change(first: float, last: float) -> float | None:
    if first <= 0 or last <= 0:
        return None
    return (last - first) / first * 100


def classify_change(change: float, stable_band_pct: float = 5.0) -> str:
    if change > stable_band_pct:
        return TREND_UP
    if change < -stable_band_pct:
        return TREND_DOWN
    return TREND_STABLE


def blended_series(
    summaries: Sequence[SummaryRow],
    labels: Sequence[str],
) -> list[tuple[float, int]]:
    """
    ``(blended average, combined active count)`` per label across FR and OR.
    """
    channel_rows = [
        (find_summary(summaries, channel, METRIC_AVERAGE), find_summary(summaries, channel, METRIC_COUNT))
        for channel in (CHANNEL_FRANCHISE, CHANNEL_DIRECT)
    ]
    series: list[tuple[float, int]] = []
    for label in labels:
        weighted = 0.0
        count = 0
        for avg_row, count_row in channel_rows:
            avg = (avg_row.months.get(label) if avg_row else None) or 0.0
            cnt = int((count_row.months.get(label) if count_row else None) or 0)
            weighted += avg * cnt
            count += cnt
        series.append((weighted / (count or 1), count))
    return series


def latest_reported_label(rows: Sequence[PivotedEntityRow], labels: Sequence[str]) -> str | None:
    """
    Last label with a positive warehouse amount for some shop.

    Summary rows are not consulted: they carry manual overrides, which must
    not move the reporting period forward.
    """
    if not labels:
        return None
    for label in reversed(labels):
        if any(row.amount(label) > 0 for row in rows):
            return label
    return labels[-1]


def group_stats(
    rows: Iterable[PivotedEntityRow],
    label: str,
    key: Callable[[PivotedEntityRow], str],
) -> list[GroupStat]:
    """
    Total and count of shops with a positive amount for *label*, per group.
    Groups keep first-seen order.
    """
    totals: dict[str, list[float]] = {}
    for row in rows:
        amount = row.amount(label)
        if amount <= 0:
            continue
        bucket = totals.setdefault(key(row), [0.0, 0])
        bucket[0] += amount
        bucket[1] += 1
    return [GroupStat(name=name, total=total, count=int(count)) for name, (total, count) in totals.items()]


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class InsightGenerator:
    """
    Build the three insight cards for one report.
    """

    def __init__(
        self,
        settings: InsightSettings | None = None,
        localization: NameLocalization | None = None,
    ) -> None:
        self._settings = settings or InsightSettings()
        self._localization = localization or NameLocalization()

    def generate(
        self,
        rows: Sequence[PivotedEntityRow],
        summaries: Sequence[SummaryRow],
        labels: Sequence[str],
    ) -> list[InsightCard]:
        if not rows or not summaries or not labels:
            return [
                InsightCard("trend", "Monthly trend", "No data loaded yet."),
                InsightCard("region", "Regional performance", "No data loaded yet."),
                InsightCard("new_shop", "New shops", "No data loaded yet."),
            ]

        latest = latest_reported_label(rows, labels) or labels[-1]
        reported = list(labels[: list(labels).index(latest) + 1])
        logger.debug("Generating insights through %s", latest)
        return [
            InsightCard("trend", "Monthly trend", self.trend_description(summaries, reported)),
            InsightCard("region", "Regional performance", self.region_description(rows, latest)),
            InsightCard("new_shop", "New shops", self.new_shop_description(rows, latest)),
        ]

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def trend_description(self, summaries: Sequence[SummaryRow], labels: Sequence[str]) -> str:
        series = blended_series(summaries, labels)
        first_avg, first_count = series[0]
        last_avg, last_count = series[-1]
        change = percent_change(first_avg, last_avg)
        if change is None:
            return "Not enough data for a monthly trend."

        span = f"{labels[0]} → {labels[-1]}"
        amounts = f"({to_k(first_avg)}→{to_k(last_avg)})"
        shops = f"Shop count {first_count}→{last_count}."
        direction = classify_change(change, self._settings.stable_band_pct)
        if direction == TREND_UP:
            return f"{span}: average sales per shop up {abs(change):.1f}% {amounts}. {shops}"
        if direction == TREND_DOWN:
            return (
                f"{span}: average sales per shop down {abs(change):.1f}% {amounts}. "
                f"{shops} Sales are spread over more shops."
            )
        return f"{span}: average sales per shop stable {amounts}. {shops}"

    def region_description(self, rows: Sequence[PivotedEntityRow], label: str) -> str:
        parts: list[str] = []

        performers = [row for row in sort_by_amount(rows, label) if row.amount(label) > 0]
        if performers:
            leaders = performers[: self._settings.top_n]
            names = ", ".join(f"{row.entity_name} ({to_k(row.amount(label))})" for row in leaders)
            parts.append(f"{names} lead {label}.")

        tiers = sorted(
            group_stats(rows, label, lambda row: row.city_tier or UNKNOWN_TIER),
            key=lambda stat: stat.average,
            reverse=True,
        )
        if len(tiers) >= 2:
            top, second = tiers[0], tiers[1]
            diff = round((top.average - second.average) / second.average * 100) if second.average > 0 else 0
            parts.append(
                f"{top.name} ({to_k(top.average)}, {top.count} shops) is the strongest tier, "
                f"{diff}% above {second.name}."
            )
        elif len(tiers) == 1:
            parts.append(f"{tiers[0].name}: {tiers[0].count} shops averaging {to_k(tiers[0].average)}.")

        regions = sorted(
            group_stats(rows, label, lambda row: self._localization.region(row.sales_region)),
            key=lambda stat: stat.total,
            reverse=True,
        )
        if len(regions) >= 2:
            grand_total = sum(stat.total for stat in regions)
            leaders = regions[: self._settings.top_n]
            share = round(sum(stat.total for stat in leaders) / grand_total * 100) if grand_total > 0 else 0
            listed = ", ".join(f"{stat.name} ({stat.count})" for stat in leaders)
            parts.append(f"Top regions {listed} hold {share}% of sales.")

        return " ".join(parts) or "Regional data not available."

    def new_shop_description(self, rows: Sequence[PivotedEntityRow], label: str) -> str:
        settings = self._settings
        cutoff = shift_label(label, -settings.new_shop_lookback_months)
        new_rows = sort_by_amount(
            (row for row in rows if row.open_month and row.open_month >= cutoff),
            label,
        )

        if new_rows:
            opened = sorted({row.open_month for row in new_rows if row.open_month})
            span = f"{opened[0]}~{opened[-1]}" if len(opened) > 1 else opened[0]
            text = f"{span}: {len(new_rows)} new shop(s) opened. "
            strong = [row for row in new_rows if row.amount(label) > settings.strong_new_threshold]
            weak = [row for row in new_rows if 0 < row.amount(label) < settings.weak_new_threshold]
            if strong:
                names = ", ".join(f"{row.entity_name} ({to_k(row.amount(label))})" for row in strong[:2])
                text += f"{names} started strong. "
            if weak:
                row = weak[0]
                text += f"{row.entity_name} ({to_k(row.amount(label))}) needs ramp-up support. "
            text += "Launch follow-up matters."
        else:
            text = f"No new shops in the last {settings.new_shop_lookback_months} months."

        types = sorted(
            group_stats(rows, label, lambda row: row.store_type or UNKNOWN_STORE_TYPE),
            key=lambda stat: stat.average,
            reverse=True,
        )
        if len(types) >= 2:
            listed = ", ".join(f"{stat.name} ({to_k(stat.average)}, {stat.count})" for stat in types[:2])
            text = f"[Type] {listed}. {text}"
        return text
