"""
reporting/summary.py

Per-channel summary rows computed over pivoted shop rows.

Formulas (per window label)
---------------------------
active set  = shop amounts that are present and > 0
average     = Σ active / |active|       (0 when the active set is empty)
count       = |active|

For the override target label, every override value > 0 is added to the
active sum and counts as one more active shop, including shops whose own
warehouse value is missing or zero. The override represents data the
warehouse has not received yet, so it is additive rather than a
replacement.

Average and count are always derived from the same active set, so a zero
count always pairs with a zero average.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from reporting.overrides import ManualOverrideSet
from reporting.types import (
    CHANNEL_DIRECT,
    CHANNEL_FRANCHISE,
    CHANNEL_LABELS,
    METRIC_AVERAGE,
    METRIC_COUNT,
    PivotedEntityRow,
    SummaryRow,
)

logger = logging.getLogger(__name__)


def average_label(channel: str) -> str:
    return f"{CHANNEL_LABELS.get(channel, channel)} sales per shop"


def count_label(channel: str) -> str:
    return f"{CHANNEL_LABELS.get(channel, channel)} shop count"


class SummaryAggregator:
    """
    Compute average-per-active-shop and active-shop-count rows.

    Parameters
    ----------
    virtual_channel:
        Channel that receives virtual new-shop override values.
    virtual_count:
        Number of virtual new-shop slots read from the override set.
    """

    def __init__(
        self,
        *,
        virtual_channel: str = CHANNEL_FRANCHISE,
        virtual_count: int = 4,
    ) -> None:
        self._virtual_channel = virtual_channel
        self._virtual_count = max(0, virtual_count)

    def summarize(
        self,
        rows: Iterable[PivotedEntityRow],
        channel: str,
        labels: Sequence[str],
        overrides: ManualOverrideSet | None = None,
        target_label: str | None = None,
    ) -> tuple[SummaryRow, SummaryRow]:
        """
        Return ``(average_row, count_row)`` for *channel*.
        """
        channel_rows = [row for row in rows if row.channel == channel]
        averages: dict[str, float] = {}
        counts: dict[str, float] = {}

        for label in labels:
            active = [
                value
                for value in (row.months.get(label) for row in channel_rows)
                if value is not None and value > 0
            ]
            total = sum(active)
            count = len(active)

            if overrides is not None and target_label is not None and label == target_label:
                extra_total, extra_count = self._override_contribution(
                    channel_rows, channel, overrides
                )
                total += extra_total
                count += extra_count

            averages[label] = total / count if count > 0 else 0.0
            counts[label] = count

        logger.debug(
            "Summarized channel=%s over %d shop(s) and %d label(s)",
            channel,
            len(channel_rows),
            len(labels),
        )
        return (
            SummaryRow(metric=METRIC_AVERAGE, label=average_label(channel), channel=channel, months=averages),
            SummaryRow(metric=METRIC_COUNT, label=count_label(channel), channel=channel, months=counts),
        )

    def summarize_all(
        self,
        rows: Sequence[PivotedEntityRow],
        labels: Sequence[str],
        overrides: ManualOverrideSet | None = None,
        target_label: str | None = None,
    ) -> list[SummaryRow]:
        """
        Four rows in display order: FR average, FR count, OR average, OR count.
        """
        summaries: list[SummaryRow] = []
        for channel in (CHANNEL_FRANCHISE, CHANNEL_DIRECT):
            summaries.extend(self.summarize(rows, channel, labels, overrides, target_label))
        return summaries

    def _override_contribution(
        self,
        channel_rows: Sequence[PivotedEntityRow],
        channel: str,
        overrides: ManualOverrideSet,
    ) -> tuple[float, int]:
        total = 0.0
        count = 0
        for row in channel_rows:
            value = overrides.existing_value(row.entity_id)
            if value is not None and value > 0:
                total += value
                count += 1
        if channel == self._virtual_channel:
            for value in overrides.new_entity_values(self._virtual_count):
                if value is not None and value > 0:
                    total += value
                    count += 1
        return total, count


def find_summary(summaries: Iterable[SummaryRow], channel: str, metric: str) -> SummaryRow | None:
    for row in summaries:
        if row.channel == channel and row.metric == metric:
            return row
    return None
