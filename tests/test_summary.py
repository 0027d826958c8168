"""
tests/test_summary.py

Average-per-active-shop and active-shop-count rows, with overrides.
"""

from __future__ import annotations

import pytest

from reporting.overrides import ManualOverrideSet
from reporting.pivot import PivotBuilder
from reporting.summary import SummaryAggregator, find_summary
from reporting.window import ReportWindow

from tests.helpers import make_record


@pytest.fixture()
def window() -> ReportWindow:
    return ReportWindow(year=2025, brand="X")


@pytest.fixture()
def three_shops(window: ReportWindow):
    records = [
        make_record("A", "2025-12", 0),
        make_record("B", "2025-12", 100),
        make_record("C", "2025-12", 300),
    ]
    return PivotBuilder().build(records, window)


class TestAverages:
    def test_inactive_shops_are_excluded(self, three_shops, window: ReportWindow) -> None:
        avg_row, count_row = SummaryAggregator().summarize(three_shops, "FR", window.labels)
        assert avg_row.months["25.12"] == pytest.approx(200.0)
        assert count_row.months["25.12"] == 2

    def test_label_without_active_shops_is_zero(self, three_shops, window: ReportWindow) -> None:
        avg_row, count_row = SummaryAggregator().summarize(three_shops, "FR", window.labels)
        assert avg_row.months["25.01"] == 0.0
        assert count_row.months["25.01"] == 0

    def test_other_channel_rows_are_ignored(self, window: ReportWindow) -> None:
        rows = PivotBuilder().build(
            [make_record("A", "2025-01", 100), make_record("B", "2025-01", 900, channel="OR")],
            window,
        )
        avg_row, count_row = SummaryAggregator().summarize(rows, "FR", window.labels)
        assert avg_row.months["25.01"] == 100
        assert count_row.months["25.01"] == 1

    def test_rows_describe_channel_and_metric(self, three_shops, window: ReportWindow) -> None:
        avg_row, count_row = SummaryAggregator().summarize(three_shops, "FR", window.labels)
        assert (avg_row.metric, avg_row.channel, avg_row.summary_id) == ("avg", "FR", "fr_avg")
        assert count_row.key == "summary-fr_count"


class TestOverrides:
    def test_virtual_entity_override_joins_target_period(self, three_shops, window: ReportWindow) -> None:
        overrides = ManualOverrideSet().with_new_entity(1, value=400)
        avg_row, count_row = SummaryAggregator().summarize(
            three_shops, "FR", window.labels, overrides, target_label="25.12"
        )
        assert round(avg_row.months["25.12"], 2) == 266.67
        assert count_row.months["25.12"] == 3

    def test_overrides_only_touch_target_period(self, three_shops, window: ReportWindow) -> None:
        overrides = ManualOverrideSet().with_new_entity(1, value=400)
        avg_row, count_row = SummaryAggregator().summarize(
            three_shops, "FR", window.labels, overrides, target_label="25.12"
        )
        assert count_row.months["25.11"] == 0
        assert avg_row.months["25.11"] == 0.0

    def test_existing_entity_override_is_additive(self, three_shops, window: ReportWindow) -> None:
        overrides = ManualOverrideSet().with_existing_value("B", 50)
        avg_row, count_row = SummaryAggregator().summarize(
            three_shops, "FR", window.labels, overrides, target_label="25.12"
        )
        assert count_row.months["25.12"] == 3
        assert avg_row.months["25.12"] == pytest.approx(450 / 3)

    def test_non_positive_overrides_are_ignored(self, three_shops, window: ReportWindow) -> None:
        overrides = (
            ManualOverrideSet()
            .with_new_entity(1, value=0)
            .with_new_entity(2, value=None)
            .with_existing_value("A", -10)
        )
        _, count_row = SummaryAggregator().summarize(
            three_shops, "FR", window.labels, overrides, target_label="25.12"
        )
        assert count_row.months["25.12"] == 2

    def test_virtual_values_do_not_reach_direct_channel(self, window: ReportWindow) -> None:
        rows = PivotBuilder().build([make_record("D", "2025-12", 100, channel="OR")], window)
        overrides = ManualOverrideSet().with_new_entity(1, value=400)
        _, count_row = SummaryAggregator().summarize(
            rows, "OR", window.labels, overrides, target_label="25.12"
        )
        assert count_row.months["25.12"] == 1

    def test_virtual_slots_beyond_count_are_ignored(self, three_shops, window: ReportWindow) -> None:
        overrides = ManualOverrideSet().with_new_entity(5, value=400)
        _, count_row = SummaryAggregator(virtual_count=4).summarize(
            three_shops, "FR", window.labels, overrides, target_label="25.12"
        )
        assert count_row.months["25.12"] == 2


class TestSummarizeAll:
    def test_display_order(self, three_shops, window: ReportWindow) -> None:
        summaries = SummaryAggregator().summarize_all(three_shops, window.labels)
        assert [row.summary_id for row in summaries] == ["fr_avg", "fr_count", "or_avg", "or_count"]

    def test_find_summary(self, three_shops, window: ReportWindow) -> None:
        summaries = SummaryAggregator().summarize_all(three_shops, window.labels)
        assert find_summary(summaries, "OR", "count").summary_id == "or_count"
        assert find_summary(summaries, "XX", "count") is None
