"""
app/services/map_data_service.py

Data feed for the city map: shop totals grouped by city, and the top
products of a single shop.

``period`` is ``monthly`` (the window's last month) or ``cumulative``
(the whole window to date).
"""

from __future__ import annotations

import logging

from app.config import ReportSettings, get_report_settings
from app.services.query_runner import QueryRunner, default_runner, execute
from reporting.geography import (
    VALID_PERIODS,
    CityAggregate,
    ProductRank,
    group_shops_by_city,
    rank_products,
)
from reporting.normalizer import normalize_city_rows, normalize_product_rows
from reporting.window import ReportWindow, WindowRules
from warehouse.queries import city_sales_query, shop_products_query

logger = logging.getLogger(__name__)

TOP_PRODUCT_LIMIT = 5


class InvalidPeriodError(ValueError):
    """Raised for a map period other than ``monthly`` / ``cumulative``."""


class MapDataService:
    def __init__(
        self,
        *,
        runner: QueryRunner | None = None,
        settings: ReportSettings | None = None,
    ) -> None:
        self._runner = runner or default_runner()
        self._settings = settings or get_report_settings()
        self._rules = WindowRules(truncated=self._settings.truncated_windows)

    def _window(self, brand: str | None, year: int | str | None) -> ReportWindow:
        return self._rules.window_for(
            self._settings.resolve_brand(brand),
            self._settings.resolve_year(year),
        )

    @staticmethod
    def _check_period(period: str) -> None:
        if period not in VALID_PERIODS:
            raise InvalidPeriodError(
                f"Invalid period {period!r}. Must be one of: {sorted(VALID_PERIODS)}."
            )

    def city_aggregates(
        self,
        brand: str | None = None,
        year: int | str | None = None,
        period: str = "cumulative",
    ) -> list[CityAggregate]:
        self._check_period(period)
        window = self._window(brand, year)
        rows = execute(self._runner, city_sales_query(window, period))
        cities = group_shops_by_city(normalize_city_rows(rows))
        logger.info(
            "Map data brand=%s year=%s period=%s shops=%d cities=%d",
            window.brand,
            window.year,
            period,
            len(rows),
            len(cities),
        )
        return cities

    def shop_products(
        self,
        shop_id: str,
        brand: str | None = None,
        year: int | str | None = None,
        period: str = "cumulative",
    ) -> list[ProductRank]:
        self._check_period(period)
        window = self._window(brand, year)
        rows = execute(
            self._runner,
            shop_products_query(window, period, shop_id, limit=TOP_PRODUCT_LIMIT),
        )
        return rank_products(normalize_product_rows(rows), limit=TOP_PRODUCT_LIMIT)


_service: MapDataService | None = None


def get_map_data_service() -> MapDataService:
    global _service
    if _service is None:
        _service = MapDataService()
    return _service
