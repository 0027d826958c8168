"""
tests/test_view.py

Display-row assembly and visibility.
"""

from __future__ import annotations

import pytest

from reporting.overrides import ManualOverrideSet, virtual_rows
from reporting.pivot import PivotBuilder
from reporting.summary import SummaryAggregator
from reporting.types import ManualInputRow, PivotedEntityRow, SummaryRow
from reporting.view import (
    ViewAssembler,
    VisibilityState,
    sort_by_open_date,
    top_entities,
)
from reporting.window import ReportWindow

from tests.helpers import make_record


@pytest.fixture()
def window() -> ReportWindow:
    return ReportWindow(year=2025, brand="X")


@pytest.fixture()
def pivoted(window: ReportWindow) -> list[PivotedEntityRow]:
    records = [
        make_record("late", "2025-01", 10, open_date="2024-03-01"),
        make_record("early", "2025-01", 20, open_date="2023-11-01"),
        make_record("undated", "2025-01", 30),
        make_record("direct", "2025-01", 40, channel="OR", open_date="2022-01-01"),
    ]
    return PivotBuilder().build(records, window)


class TestSorting:
    def test_open_date_ascending_with_missing_last(self, pivoted) -> None:
        ordered = sort_by_open_date(row for row in pivoted if row.channel == "FR")
        assert [row.entity_id for row in ordered] == ["early", "late", "undated"]

    def test_ties_keep_input_order(self, window: ReportWindow) -> None:
        rows = PivotBuilder().build(
            [make_record("b", "2025-01", 1), make_record("a", "2025-01", 1)],
            window,
        )
        assert [row.entity_id for row in sort_by_open_date(rows)] == ["b", "a"]


class TestVisibility:
    def test_default_is_collapsed(self) -> None:
        assert not VisibilityState().is_expanded("FR")

    def test_toggled_returns_new_state(self) -> None:
        state = VisibilityState()
        flipped = state.toggled("FR")
        assert flipped.is_expanded("FR")
        assert not state.is_expanded("FR")
        assert not flipped.toggled("FR").is_expanded("FR")

    def test_all_expanded(self) -> None:
        state = VisibilityState.all_expanded()
        assert state.is_expanded("FR") and state.is_expanded("OR")


class TestAssemble:
    def test_collapsed_shows_only_summaries(self, pivoted, window: ReportWindow) -> None:
        summaries = SummaryAggregator().summarize_all(pivoted, window.labels)
        rows = ViewAssembler().assemble(pivoted, summaries)
        assert all(isinstance(row, SummaryRow) for row in rows)
        assert [row.summary_id for row in rows] == ["fr_avg", "fr_count", "or_avg", "or_count"]

    def test_expanded_channel_lists_details_after_its_summaries(self, pivoted, window: ReportWindow) -> None:
        summaries = SummaryAggregator().summarize_all(pivoted, window.labels)
        rows = ViewAssembler().assemble(pivoted, summaries, VisibilityState(expanded={"FR": True}))
        keys = [row.key for row in rows]
        assert keys == [
            "summary-fr_avg",
            "summary-fr_count",
            "shop-early",
            "shop-late",
            "shop-undated",
            "summary-or_avg",
            "summary-or_count",
        ]

    def test_virtual_rows_follow_their_channel_details(self, pivoted, window: ReportWindow) -> None:
        summaries = SummaryAggregator().summarize_all(pivoted, window.labels)
        extra = virtual_rows(ManualOverrideSet(), count=2, target_label="25.12")
        rows = ViewAssembler().assemble(pivoted, summaries, VisibilityState.all_expanded(), extra)
        types = [row.row_type for row in rows]
        assert types == [
            "summary",
            "summary",
            "detail",
            "detail",
            "detail",
            "manual_input",
            "manual_input",
            "summary",
            "summary",
            "detail",
        ]
        assert isinstance(rows[5], ManualInputRow)

    def test_virtual_rows_hidden_when_collapsed(self, pivoted, window: ReportWindow) -> None:
        summaries = SummaryAggregator().summarize_all(pivoted, window.labels)
        extra = virtual_rows(ManualOverrideSet(), count=2, target_label="25.12")
        rows = ViewAssembler().assemble(pivoted, summaries, VisibilityState(), extra)
        assert not any(row.row_type == "manual_input" for row in rows)

    def test_to_dict_carries_discriminant(self, pivoted, window: ReportWindow) -> None:
        summaries = SummaryAggregator().summarize_all(pivoted, window.labels)
        rows = ViewAssembler().assemble(pivoted, summaries, VisibilityState.all_expanded())
        assert {row.to_dict()["type"] for row in rows} == {"summary", "detail"}


class TestTopEntities:
    def test_orders_by_amount_and_skips_inactive(self, window: ReportWindow) -> None:
        rows = PivotBuilder().build(
            [
                make_record("a", "2025-02", 10),
                make_record("b", "2025-02", 30),
                make_record("c", "2025-02", 0),
                make_record("d", "2025-02", 20),
                make_record("e", "2025-02", 50, channel="OR"),
            ],
            window,
        )
        top = top_entities(rows, "FR", "25.02", limit=2)
        assert [row.entity_id for row in top] == ["b", "d"]
