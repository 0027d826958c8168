"""
reporting/view.py

Assemble the ordered, visibility-filtered row sequence for the table.

Order per channel (FR first, then OR)::

    [average row, count row, *detail rows by open date, *virtual rows]

Summary rows are always present. Detail and virtual rows appear only when
their channel is expanded. Virtual rows belong to the channel they carry
(FR by default) and follow that channel's detail rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from reporting.types import (
    CHANNEL_ORDER,
    METRIC_AVERAGE,
    METRIC_COUNT,
    DisplayRow,
    ManualInputRow,
    PivotedEntityRow,
    SummaryRow,
)
from reporting.summary import find_summary

MISSING_DATE_SORT_KEY = "9999-99-99"
"""Sorts after every real ``YYYY-MM-DD`` date."""


def open_date_sort_key(row: PivotedEntityRow) -> str:
    return row.open_date or MISSING_DATE_SORT_KEY


def sort_by_open_date(rows: Iterable[PivotedEntityRow]) -> list[PivotedEntityRow]:
    """Ascending by open date; undated rows last; ties keep input order."""
    return sorted(rows, key=open_date_sort_key)


def sort_by_amount(rows: Iterable[PivotedEntityRow], label: str) -> list[PivotedEntityRow]:
    """Descending by the amount recorded for *label*."""
    return sorted(rows, key=lambda row: row.amount(label), reverse=True)


@dataclass(frozen=True)
class VisibilityState:
    """
    Expanded/collapsed flag per channel. Channels default to collapsed.
    """

    expanded: Mapping[str, bool] = field(default_factory=dict)

    def is_expanded(self, channel: str) -> bool:
        return bool(self.expanded.get(channel, False))

    def toggled(self, channel: str) -> "VisibilityState":
        return VisibilityState(expanded={**self.expanded, channel: not self.is_expanded(channel)})

    @classmethod
    def all_expanded(cls, channels: Sequence[str] = CHANNEL_ORDER) -> "VisibilityState":
        return cls(expanded={channel: True for channel in channels})


class ViewAssembler:
    """
    Pure function object; holds no state between calls.
    """

    def __init__(self, channels: Sequence[str] = CHANNEL_ORDER) -> None:
        self._channels = tuple(channels)

    def assemble(
        self,
        rows: Sequence[PivotedEntityRow],
        summaries: Sequence[SummaryRow],
        visibility: VisibilityState | None = None,
        virtual_rows: Sequence[ManualInputRow] = (),
    ) -> list[DisplayRow]:
        visibility = visibility or VisibilityState()
        assembled: list[DisplayRow] = []

        for channel in self._channels:
            for metric in (METRIC_AVERAGE, METRIC_COUNT):
                summary = find_summary(summaries, channel, metric)
                if summary is not None:
                    assembled.append(summary)

            if not visibility.is_expanded(channel):
                continue
            assembled.extend(sort_by_open_date(row for row in rows if row.channel == channel))
            assembled.extend(row for row in virtual_rows if row.channel == channel)

        return assembled


def top_entities(
    rows: Iterable[PivotedEntityRow],
    channel: str,
    label: str,
    limit: int = 3,
) -> list[PivotedEntityRow]:
    """
    Highest-amount shops of *channel* for *label*, ignoring zero/missing.
    """
    candidates = [row for row in rows if row.channel == channel and row.amount(label) > 0]
    return sort_by_amount(candidates, label)[:limit]
