"""
app/services/discount_rate_service.py

Monthly discount-rate series per channel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.config import ReportSettings, get_report_settings
from app.services.query_runner import QueryRunner, default_runner, execute
from reporting.discount import DiscountSeries, build_discount_series
from reporting.normalizer import normalize_discount_rows
from reporting.window import ReportWindow, WindowRules
from warehouse.queries import discount_rate_query

logger = logging.getLogger(__name__)


@dataclass
class DiscountRateReport:
    brand: str
    window: ReportWindow
    series: list[DiscountSeries]

    def to_payload(self) -> dict[str, Any]:
        return {
            "brand": self.brand,
            "year": self.window.year,
            "labels": self.window.labels,
            "series": [item.to_dict() for item in self.series],
        }


class DiscountRateService:
    def __init__(
        self,
        *,
        runner: QueryRunner | None = None,
        settings: ReportSettings | None = None,
    ) -> None:
        self._runner = runner or default_runner()
        self._settings = settings or get_report_settings()
        self._rules = WindowRules(truncated=self._settings.truncated_windows)

    def build_report(self, brand: str | None = None, year: int | str | None = None) -> DiscountRateReport:
        window = self._rules.window_for(
            self._settings.resolve_brand(brand),
            self._settings.resolve_year(year),
        )
        rows = execute(self._runner, discount_rate_query(window))
        series = build_discount_series(normalize_discount_rows(rows), window)
        logger.info("Discount rate brand=%s year=%s rows=%d", window.brand, window.year, len(rows))
        return DiscountRateReport(brand=window.brand, window=window, series=series)


_service: DiscountRateService | None = None


def get_discount_rate_service() -> DiscountRateService:
    global _service
    if _service is None:
        _service = DiscountRateService()
    return _service
