"""
app/services/sales_report_service.py

End-to-end sales report pipeline for one (brand, year) view:

    fetch → normalize → pivot → summarize → assemble → insights

The warehouse is reached only through the injected query runner. A fetch
failure propagates as ``WarehouseQueryError`` with no partial result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.config import ReportSettings, get_insight_settings, get_report_settings
from app.logging_utils import timed_event
from app.services.query_runner import QueryRunner, default_runner, execute
from app.services.request_tracker import RequestTracker
from reporting.insights import InsightCard, InsightGenerator, InsightSettings, latest_reported_label
from reporting.localization import NameLocalization, load_localization
from reporting.normalizer import RecordNormalizer
from reporting.overrides import ManualOverrideSet, virtual_rows
from reporting.pivot import PivotBuilder
from reporting.summary import SummaryAggregator
from reporting.types import CHANNEL_FRANCHISE, DisplayRow, FlatSaleRecord, PivotedEntityRow, SummaryRow
from reporting.view import ViewAssembler, VisibilityState, top_entities
from reporting.window import ReportWindow, WindowRules
from warehouse.queries import sales_report_query

logger = logging.getLogger(__name__)

REPORT_VIEW = "sales_report"


@dataclass
class SalesReport:
    """
    Everything one report view renders.

    ``override_label`` is the window label that receives manual overrides,
    or None when the configured override period falls outside the window.
    ``highlighted_ids`` are the top franchise shops of ``highlight_label``,
    the latest month with warehouse sales.
    """

    brand: str
    brand_name: str
    window: ReportWindow
    entity_rows: list[PivotedEntityRow]
    summaries: list[SummaryRow]
    display_rows: list[DisplayRow]
    insights: list[InsightCard]
    override_label: str | None = None
    request_id: int = 0
    dropped_records: int = 0
    visibility: VisibilityState = field(default_factory=VisibilityState)
    highlight_label: str | None = None
    highlighted_ids: list[str] = field(default_factory=list)

    @property
    def year(self) -> int:
        return self.window.year

    @property
    def labels(self) -> list[str]:
        return self.window.labels

    def to_payload(self) -> dict[str, Any]:
        return {
            "brand": self.brand,
            "brand_name": self.brand_name,
            "year": self.year,
            "labels": self.labels,
            "override_label": self.override_label,
            "request_id": self.request_id,
            "dropped_records": self.dropped_records,
            "expanded": {channel: flag for channel, flag in self.visibility.expanded.items()},
            "rows": [row.to_dict() for row in self.display_rows],
            "summaries": [row.to_dict() for row in self.summaries],
            "insights": [card.to_dict() for card in self.insights],
            "highlight_label": self.highlight_label,
            "highlighted_ids": list(self.highlighted_ids),
        }


class SalesReportService:
    def __init__(
        self,
        *,
        runner: QueryRunner | None = None,
        settings: ReportSettings | None = None,
        insight_settings: InsightSettings | None = None,
        localization: NameLocalization | None = None,
        tracker: RequestTracker | None = None,
    ) -> None:
        self._runner = runner or default_runner()
        self._settings = settings or get_report_settings()
        self._insight_settings = insight_settings or get_insight_settings()
        self._localization = (
            localization
            if localization is not None
            else load_localization(self._settings.localization_path)
        )
        self._tracker = tracker or RequestTracker()
        self._rules = WindowRules(truncated=self._settings.truncated_windows)

    @property
    def settings(self) -> ReportSettings:
        return self._settings

    @property
    def tracker(self) -> RequestTracker:
        return self._tracker

    def window_for(self, brand: str | None, year: int | str | None) -> ReportWindow:
        resolved_brand = self._settings.resolve_brand(brand)
        resolved_year = self._settings.resolve_year(year)
        return self._rules.window_for(resolved_brand, resolved_year)

    def fetch_records(self, window: ReportWindow) -> tuple[list[FlatSaleRecord], int]:
        """Return normalized records and the number of dropped raw rows."""
        raw_rows = execute(self._runner, sales_report_query(window))
        normalizer = RecordNormalizer()
        records = normalizer.normalize(raw_rows)
        return records, normalizer.dropped

    def build_report(
        self,
        brand: str | None = None,
        year: int | str | None = None,
        visibility: VisibilityState | None = None,
        overrides: ManualOverrideSet | None = None,
    ) -> SalesReport:
        request_id = self._tracker.begin(REPORT_VIEW)
        window = self.window_for(brand, year)

        with timed_event(
            logger,
            "sales_report_built",
            brand=window.brand,
            year=window.year,
            months=window.month_count,
            request_id=request_id,
        ) as event:
            records, dropped = self.fetch_records(window)
            report = self.assemble(
                window,
                records,
                visibility=visibility or VisibilityState(),
                overrides=overrides,
                request_id=request_id,
                dropped_records=dropped,
            )
            event.update(records=len(records), dropped=dropped, shops=len(report.entity_rows))
        return report

    def assemble(
        self,
        window: ReportWindow,
        records: list[FlatSaleRecord],
        *,
        visibility: VisibilityState | None = None,
        overrides: ManualOverrideSet | None = None,
        request_id: int = 0,
        dropped_records: int = 0,
    ) -> SalesReport:
        """Run the pure pipeline stages over already-fetched records."""
        visibility = visibility or VisibilityState()
        labels = window.labels
        override_label = self._settings.override_label if self._settings.override_label in labels else None

        entity_rows = PivotBuilder(self._localization).build(records, window)
        aggregator = SummaryAggregator(
            virtual_channel=CHANNEL_FRANCHISE,
            virtual_count=self._settings.new_entity_rows,
        )
        summaries = aggregator.summarize_all(entity_rows, labels, overrides, override_label)

        extra_rows = []
        if override_label is not None:
            extra_rows = virtual_rows(
                overrides or ManualOverrideSet(),
                count=self._settings.new_entity_rows,
                target_label=override_label,
                channel=CHANNEL_FRANCHISE,
            )
        display_rows = ViewAssembler().assemble(entity_rows, summaries, visibility, extra_rows)
        insights = InsightGenerator(self._insight_settings, self._localization).generate(
            entity_rows, summaries, labels
        )
        highlight_label = latest_reported_label(entity_rows, labels)
        highlighted = top_entities(entity_rows, CHANNEL_FRANCHISE, highlight_label) if highlight_label else []

        return SalesReport(
            brand=window.brand,
            brand_name=self._settings.brand_name(window.brand),
            window=window,
            entity_rows=entity_rows,
            summaries=summaries,
            display_rows=display_rows,
            insights=insights,
            override_label=override_label,
            request_id=request_id,
            dropped_records=dropped_records,
            visibility=visibility,
            highlight_label=highlight_label,
            highlighted_ids=[row.entity_id for row in highlighted],
        )


_service: SalesReportService | None = None


def get_sales_report_service() -> SalesReportService:
    global _service
    if _service is None:
        _service = SalesReportService()
    return _service
