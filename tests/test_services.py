"""
tests/test_services.py

Service-level pipeline tests with an in-memory query runner.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

import pytest

from app.config import ReportSettings
from app.services.dealer_sales_service import DealerSalesService
from app.services.discount_rate_service import DiscountRateService
from app.services.manual_input_service import ManualInputService
from app.services.map_data_service import InvalidPeriodError, MapDataService
from app.services.request_tracker import RequestTracker
from app.services.sales_report_service import SalesReportService
from app.storage import MemoryStore
from reporting.insights import InsightSettings
from reporting.overrides import ManualOverrideSet
from reporting.view import VisibilityState
from warehouse.client import WarehouseQueryError

from tests.helpers import FakeRunner

SALES_ROWS = [
    {"SALE_YM": "2025-12", "SHOP_ID": "A", "SHOP_NM_EN": "Alpha", "FR_OR_CLS": "FR", "SALE_AMT": 0, "OPEN_DT": "2024-03-01"},
    {"SALE_YM": "2025-12", "SHOP_ID": "B", "SHOP_NM_EN": "Beta", "FR_OR_CLS": "FR", "SALE_AMT": 100, "OPEN_DT": "2023-11-01"},
    {"SALE_YM": "2025-12", "SHOP_ID": "C", "SHOP_NM_EN": "Gamma", "FR_OR_CLS": "FR", "SALE_AMT": 300},
    {"SALE_YM": "2025-12", "SHOP_ID": "D", "SHOP_NM_EN": "Delta", "FR_OR_CLS": "OR", "SALE_AMT": 500},
    {"SALE_YM": "2025-12", "SHOP_ID": "", "SHOP_NM_EN": "Orphan", "FR_OR_CLS": "FR", "SALE_AMT": 1},
]


def _sales_service(runner: FakeRunner, settings: ReportSettings) -> SalesReportService:
    return SalesReportService(runner=runner, settings=settings, insight_settings=InsightSettings())


class TestSalesReportService:
    def test_builds_full_report(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": SALES_ROWS})
        report = _sales_service(runner, report_settings).build_report(
            "X", 2025, VisibilityState(expanded={"FR": True})
        )
        assert report.brand == "X"
        assert report.brand_name == "Discovery"
        assert len(report.labels) == 12
        assert report.dropped_records == 1
        assert report.override_label == "25.12"
        assert [row.key for row in report.display_rows][:5] == [
            "summary-fr_avg",
            "summary-fr_count",
            "shop-B",
            "shop-A",
            "shop-C",
        ]
        assert sum(1 for row in report.display_rows if row.row_type == "manual_input") == 4
        assert [card.id for card in report.insights] == ["trend", "region", "new_shop"]

    def test_passes_window_as_bind_parameters(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": []})
        _sales_service(runner, report_settings).build_report("M", 2025)
        [(_, params)] = runner.calls
        assert params == {"brand": "M", "start_ym": "2025-01", "end_ym": "2025-11"}

    def test_unknown_filters_fall_back_to_defaults(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": []})
        report = _sales_service(runner, report_settings).build_report("Z", "1999")
        assert (report.brand, report.year) == ("X", 2025)

    def test_overrides_feed_the_target_period(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": SALES_ROWS})
        overrides = ManualOverrideSet().with_new_entity(1, value=400)
        report = _sales_service(runner, report_settings).build_report("X", 2025, overrides=overrides)
        fr_avg, fr_count = report.summaries[0], report.summaries[1]
        assert round(fr_avg.months["25.12"], 2) == 266.67
        assert fr_count.months["25.12"] == 3

    def test_override_period_outside_window_is_inert(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": SALES_ROWS})
        overrides = ManualOverrideSet().with_new_entity(1, value=400)
        report = _sales_service(runner, report_settings).build_report(
            "M", 2025, VisibilityState.all_expanded(), overrides
        )
        assert report.override_label is None
        assert not any(row.row_type == "manual_input" for row in report.display_rows)

    def test_fetch_failure_propagates(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner(error=WarehouseQueryError("warehouse down"))
        with pytest.raises(WarehouseQueryError, match="warehouse down"):
            _sales_service(runner, report_settings).build_report("X", 2025)

    def test_build_logs_one_event(self, report_settings: ReportSettings, caplog) -> None:
        runner = FakeRunner({"shop_level_nm": SALES_ROWS})
        with caplog.at_level(logging.INFO, logger="app.services.sales_report_service"):
            report = _sales_service(runner, report_settings).build_report("X", 2025)

        events = [
            json.loads(record.getMessage())
            for record in caplog.records
            if record.name == "app.services.sales_report_service"
        ]
        built = [event for event in events if event["event"] == "sales_report_built"]
        assert len(built) == 1
        assert built[0]["shops"] == len(report.entity_rows)
        assert built[0]["request_id"] == report.request_id
        assert "elapsed_ms" in built[0]

    def test_each_build_takes_a_new_request_id(self, report_settings: ReportSettings) -> None:
        service = _sales_service(FakeRunner(), report_settings)
        first = service.build_report("X", 2025)
        second = service.build_report("X", 2025)
        assert second.request_id == first.request_id + 1
        assert not service.tracker.is_current(first.request_id)
        assert service.tracker.is_current(second.request_id)

    def test_payload_is_json_shaped(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": SALES_ROWS})
        payload = _sales_service(runner, report_settings).build_report("X", 2025).to_payload()
        assert payload["labels"][0] == "25.01"
        assert payload["rows"][0]["type"] == "summary"
        assert set(payload) >= {"rows", "summaries", "insights", "request_id"}

    def test_top_franchise_shops_are_highlighted(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": SALES_ROWS})
        report = _sales_service(runner, report_settings).build_report("X", 2025)
        assert report.highlight_label == "25.12"
        assert report.highlighted_ids == ["C", "B"]
        assert report.to_payload()["highlighted_ids"] == ["C", "B"]

    def test_new_shop_override_leaves_insights_on_warehouse_months(
        self, report_settings: ReportSettings
    ) -> None:
        shops = (
            {"shop_id": "A", "shop_nm_en": "Alpha", "fr_or_cls": "FR", "sale_amt": 300_000,
             "city_tier_nm": "T1", "sale_region_nm": "East"},
            {"shop_id": "B", "shop_nm_en": "Beta", "fr_or_cls": "OR", "sale_amt": 100_000,
             "city_tier_nm": "T2", "sale_region_nm": "West"},
        )
        rows = [{**shop, "sale_ym": f"2025-{month:02d}"} for month in range(1, 12) for shop in shops]
        service = _sales_service(FakeRunner({"shop_level_nm": rows}), report_settings)
        plain = service.build_report("X", 2025)
        with_override = service.build_report(
            "X", 2025, overrides=ManualOverrideSet().with_new_entity(1, value=400)
        )

        assert with_override.summaries[1].months["25.12"] == 1
        assert [card.description for card in with_override.insights] == [
            card.description for card in plain.insights
        ]
        assert "Alpha (300K), Beta (100K) lead 25.11." in with_override.insights[1].description
        assert with_override.insights[0].description.startswith("25.01 → 25.11")
        assert with_override.highlighted_ids == ["A"]

    def test_reassembly_reuses_fetched_records(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_level_nm": SALES_ROWS})
        service = _sales_service(runner, report_settings)
        window = service.window_for("X", 2025)
        records, dropped = service.fetch_records(window)

        collapsed = service.assemble(window, records, dropped_records=dropped)
        expanded = service.assemble(
            window, records, visibility=VisibilityState.all_expanded(), dropped_records=dropped
        )

        assert len(runner.calls) == 1
        assert len(expanded.display_rows) > len(collapsed.display_rows)
        assert expanded.entity_rows == collapsed.entity_rows


class TestRequestTracker:
    def test_ids_increase_per_view(self) -> None:
        tracker = RequestTracker()
        assert tracker.begin("a") == 1
        assert tracker.begin("a") == 2
        assert tracker.begin("b") == 1
        assert tracker.latest("a") == 2

    def test_stale_ids_are_not_current(self) -> None:
        tracker = RequestTracker()
        stale = tracker.begin()
        fresh = tracker.begin()
        assert not tracker.is_current(stale)
        assert tracker.is_current(fresh)

    def test_trackers_are_independent(self) -> None:
        first_session, second_session = RequestTracker(), RequestTracker()
        pending = first_session.begin()
        second_session.begin()
        second_session.begin()
        assert first_session.is_current(pending)


class TestDealerSalesService:
    def test_fans_out_both_queries_and_merges(self, report_settings: ReportSettings) -> None:
        threads: set[str] = set()

        class RecordingRunner(FakeRunner):
            def __call__(self, sql, params=None):
                threads.add(threading.current_thread().name)
                return super().__call__(sql, params)

        runner = RecordingRunner(
            {
                "shipment_amt": [{"ACCOUNT_ID": "D1", "ACCOUNT_NM_EN": "One", "SALE_YM": "2025-01", "SHIPMENT_AMT": 10}],
                "sales_amt": [
                    {"ACCOUNT_ID": "D1", "SALE_YM": "2025-01", "SALES_AMT": 4},
                    {"ACCOUNT_ID": "D2", "SALE_YM": "2025-12", "SALES_AMT": 0},
                ],
            }
        )
        report = DealerSalesService(runner=runner, settings=report_settings).build_report("X", 2025)
        assert len(runner.calls) == 2
        assert all(name.startswith("dealer-sales") for name in threads)
        assert [dealer.account_id for dealer in report.dealers] == ["D1"]
        assert report.dealers[0].shipment_months == {"01": 10}
        assert report.dealers[0].sales_months == {"01": 4}
        assert report.csv_filename == "dealer_shipment_sales_Discovery_2025.csv"

    def test_either_failure_fails_the_report(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner(error=WarehouseQueryError("boom"))
        with pytest.raises(WarehouseQueryError):
            DealerSalesService(runner=runner, settings=report_settings).build_report("X", 2025)


class TestDiscountRateService:
    def test_series(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"discount_rate": [{"SALE_YM": "2025-01", "CHANNEL": "FR", "DISCOUNT_RATE": 0.4}]})
        report = DiscountRateService(runner=runner, settings=report_settings).build_report("I", 2025)
        payload = report.to_payload()
        assert len(payload["labels"]) == 11
        assert payload["series"][0]["values"]["25.01"] == pytest.approx(40.0)


class TestMapDataService:
    def test_monthly_period_narrows_to_last_month(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"shop_sales": [{"SHOP_ID": "S1", "SHOP_NM_EN": "One", "CITY_NM": "Wuhan", "SALE_AMT": 9}]})
        cities = MapDataService(runner=runner, settings=report_settings).city_aggregates("X", 2025, "monthly")
        assert cities[0].city == "Wuhan"
        [(_, params)] = runner.calls
        assert params["start_ym"] == params["end_ym"] == "2025-12"

    def test_shop_products(self, report_settings: ReportSettings) -> None:
        runner = FakeRunner({"prdt_cd": [{"PRDT_CD": "P1", "PRDT_NM_KR": "Cap", "SALE_AMT": 80, "TAG_AMT": 100}]})
        [product] = MapDataService(runner=runner, settings=report_settings).shop_products("S1", "X", 2025)
        assert product.discount_rate == 20.0
        assert runner.calls[0][1]["shop_id"] == "S1"

    def test_invalid_period(self, report_settings: ReportSettings) -> None:
        with pytest.raises(InvalidPeriodError):
            MapDataService(runner=FakeRunner(), settings=report_settings).city_aggregates(period="weekly")


class TestManualInputService:
    def test_local_store_layers_over_durable_file(self, tmp_path: Path) -> None:
        durable = tmp_path / "manual_inputs.json"
        durable.write_text(
            '{"manualDecValues": {"shop-A": 1, "shop-B": 2}, "manualNewFrNames": {"manual_fr_1": "Kiosk"}}',
            encoding="utf-8",
        )
        store = MemoryStore({"manual_inputs": '{"manualDecValues": {"shop-B": 20}}'})
        overrides = ManualInputService(store=store, durable_file=durable).load()
        assert overrides.manual_dec_values == {"shop-A": 1, "shop-B": 20}
        assert overrides.new_entity_name(1) == "Kiosk"

    def test_unreadable_local_document_is_ignored(self) -> None:
        store = MemoryStore({"manual_inputs": "{broken"})
        assert ManualInputService(store=store).load() == ManualOverrideSet()

    def test_save_on_change_only(self) -> None:
        store = MemoryStore()
        service = ManualInputService(store=store)
        overrides = service.load().with_existing_value("A", 10)
        assert service.save(overrides) is True
        assert service.save(overrides) is False
        assert '"shop-A": 10.0' in store.load("manual_inputs")

    def test_export_round_trip(self) -> None:
        service = ManualInputService(store=MemoryStore())
        first = service.export(ManualOverrideSet(manual_dec_values={"shop-A": 500}))
        reloaded = ManualInputService(store=MemoryStore({"manual_inputs": first.to_json()})).load()
        second = service.export(reloaded)
        assert second.document["manualDecValues"] == first.document["manualDecValues"]
        assert first.counts.existing == 1
