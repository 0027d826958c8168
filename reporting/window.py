"""
reporting/window.py

Reporting window: the contiguous, ordered month labels covered by one report.

Labels use the ``yy.MM`` form (``25.01`` … ``25.12``). A window normally
spans twelve months; specific (brand, year) combinations are truncated to
reflect a known data cutoff.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

MONTHS_PER_YEAR = 12

DEFAULT_TRUNCATED_WINDOWS: dict[tuple[str, int], int] = {
    ("M", 2025): 11,
    ("I", 2025): 11,
}


def period_to_label(period: str) -> str | None:
    """
    Convert ``YYYY-MM`` into ``yy.MM``.

    Returns ``None`` when *period* is not shaped like a year-month.
    """
    parts = period.split("-")
    if len(parts) < 2 or len(parts[0]) != 4 or not parts[0].isdigit():
        return None
    month = parts[1][:2]
    if not month.isdigit():
        return None
    return f"{parts[0][-2:]}.{month.zfill(2)}"


def date_to_label(iso_date: str | None) -> str | None:
    """``2024-03-15`` → ``24.03``; ``None`` for missing or malformed dates."""
    if not iso_date or len(iso_date) < 7:
        return None
    return period_to_label(iso_date[:7])


def shift_label(label: str, months: int) -> str:
    """Move a ``yy.MM`` label by *months* (negative moves backwards)."""
    year_part, month_part = label.split(".")
    index = int(year_part) * MONTHS_PER_YEAR + (int(month_part) - 1) + months
    year, month = divmod(index, MONTHS_PER_YEAR)
    return f"{year % 100:02d}.{month + 1:02d}"


@dataclass(frozen=True)
class ReportWindow:
    """
    Ordered month labels for *year*, truncated to *month_count* months.
    """

    year: int
    brand: str
    month_count: int = MONTHS_PER_YEAR

    def __post_init__(self) -> None:
        if not 1 <= self.month_count <= MONTHS_PER_YEAR:
            raise ValueError(f"month_count must be within 1..12, got {self.month_count}")

    @property
    def prefix(self) -> str:
        return f"{self.year % 100:02d}"

    @property
    def month_keys(self) -> list[str]:
        """Two-digit month numbers ``01`` … ``NN``."""
        return [f"{month:02d}" for month in range(1, self.month_count + 1)]

    @property
    def labels(self) -> list[str]:
        return [f"{self.prefix}.{key}" for key in self.month_keys]

    @property
    def start_ym(self) -> str:
        return f"{self.year:04d}-01"

    @property
    def end_ym(self) -> str:
        return f"{self.year:04d}-{self.month_count:02d}"

    def label_for(self, period: str) -> str | None:
        """
        Window label for a ``YYYY-MM`` period, or ``None`` when outside.
        """
        label = period_to_label(period)
        if label is None or label not in self.labels:
            return None
        return label


@dataclass(frozen=True)
class WindowRules:
    """
    Month-count overrides keyed by ``(brand, year)``.
    """

    truncated: Mapping[tuple[str, int], int] = field(
        default_factory=lambda: dict(DEFAULT_TRUNCATED_WINDOWS)
    )

    def month_count(self, brand: str, year: int) -> int:
        return self.truncated.get((brand, year), MONTHS_PER_YEAR)

    def window_for(self, brand: str, year: int) -> ReportWindow:
        return ReportWindow(year=year, brand=brand, month_count=self.month_count(brand, year))
