"""
app/services/dealer_sales_service.py

Dealer shipment vs. sell-through report.

The shipment and sales feeds are independent, so both queries are issued
together on a two-worker pool and joined once both have completed. If
either query fails, the failure propagates and no partial report is built.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from app.config import ReportSettings, get_report_settings
from app.logging_utils import timed_event
from app.services.query_runner import QueryRunner, default_runner, execute
from reporting.dealers import (
    DealerRow,
    build_dealer_rows,
    dealer_csv,
    dealer_csv_filename,
    filter_active_dealers,
)
from reporting.normalizer import normalize_dealer_rows
from reporting.window import ReportWindow, WindowRules
from warehouse.queries import dealer_sales_query, dealer_shipment_query

logger = logging.getLogger(__name__)


@dataclass
class DealerSalesReport:
    brand: str
    brand_name: str
    window: ReportWindow
    dealers: list[DealerRow]

    def to_payload(self) -> dict[str, Any]:
        return {
            "brand": self.brand,
            "brand_name": self.brand_name,
            "year": self.window.year,
            "month_keys": self.window.month_keys,
            "dealers": [dealer.to_dict() for dealer in self.dealers],
        }

    def to_csv(self) -> bytes:
        return dealer_csv(self.dealers, self.window.month_keys)

    @property
    def csv_filename(self) -> str:
        return dealer_csv_filename(self.brand_name, self.window.year)


class DealerSalesService:
    def __init__(
        self,
        *,
        runner: QueryRunner | None = None,
        settings: ReportSettings | None = None,
    ) -> None:
        self._runner = runner or default_runner()
        self._settings = settings or get_report_settings()
        self._rules = WindowRules(truncated=self._settings.truncated_windows)

    def build_report(self, brand: str | None = None, year: int | str | None = None) -> DealerSalesReport:
        window = self._rules.window_for(
            self._settings.resolve_brand(brand),
            self._settings.resolve_year(year),
        )

        with timed_event(logger, "dealer_sales_built", brand=window.brand, year=window.year) as event:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="dealer-sales") as pool:
                shipment_future = pool.submit(execute, self._runner, dealer_shipment_query(window))
                sales_future = pool.submit(execute, self._runner, dealer_sales_query(window))
                shipment_rows = shipment_future.result()
                sales_rows = sales_future.result()

            dealers = build_dealer_rows(
                normalize_dealer_rows(shipment_rows, "shipment_amt"),
                normalize_dealer_rows(sales_rows, "sales_amt"),
            )
            active = filter_active_dealers(dealers, window.month_keys)
            event.update(
                shipment_rows=len(shipment_rows),
                sales_rows=len(sales_rows),
                dealers=len(dealers),
                active_dealers=len(active),
            )

        return DealerSalesReport(
            brand=window.brand,
            brand_name=self._settings.brand_name(window.brand),
            window=window,
            dealers=active,
        )


_service: DealerSalesService | None = None


def get_dealer_sales_service() -> DealerSalesService:
    global _service
    if _service is None:
        _service = DealerSalesService()
    return _service
