"""
tests/test_window.py

Reporting window labels and truncation rules.
"""

from __future__ import annotations

import pytest

from reporting.window import (
    ReportWindow,
    WindowRules,
    date_to_label,
    period_to_label,
    shift_label,
)


class TestLabels:
    def test_period_to_label(self) -> None:
        assert period_to_label("2025-03") == "25.03"
        assert period_to_label("2023-12") == "23.12"

    @pytest.mark.parametrize("bad", ["", "2025", "25-03", "abcd-ef"])
    def test_period_to_label_rejects_malformed(self, bad: str) -> None:
        assert period_to_label(bad) is None

    def test_date_to_label(self) -> None:
        assert date_to_label("2024-03-15") == "24.03"
        assert date_to_label(None) is None
        assert date_to_label("2024") is None

    def test_shift_label_crosses_year_boundary(self) -> None:
        assert shift_label("25.02", -3) == "24.11"
        assert shift_label("24.11", 2) == "25.01"
        assert shift_label("25.12", 0) == "25.12"


class TestReportWindow:
    def test_full_year(self, window_2025: ReportWindow) -> None:
        assert len(window_2025.labels) == 12
        assert window_2025.labels[0] == "25.01"
        assert window_2025.labels[-1] == "25.12"
        assert window_2025.start_ym == "2025-01"
        assert window_2025.end_ym == "2025-12"

    def test_label_for_outside_window(self) -> None:
        window = ReportWindow(year=2025, brand="M", month_count=11)
        assert window.label_for("2025-11") == "25.11"
        assert window.label_for("2025-12") is None
        assert window.label_for("2024-05") is None

    @pytest.mark.parametrize("count", [0, 13])
    def test_rejects_invalid_month_count(self, count: int) -> None:
        with pytest.raises(ValueError):
            ReportWindow(year=2025, brand="X", month_count=count)


class TestWindowRules:
    @pytest.mark.parametrize("brand", ["M", "I"])
    def test_truncated_window_has_eleven_labels_ending_at_month_eleven(self, brand: str) -> None:
        window = WindowRules().window_for(brand, 2025)
        assert len(window.labels) == 11
        assert window.labels[-1] == "25.11"
        assert "25.12" not in window.labels

    def test_other_combinations_are_full_year(self) -> None:
        rules = WindowRules()
        assert rules.month_count("X", 2025) == 12
        assert rules.month_count("M", 2024) == 12

    def test_rules_are_configurable(self) -> None:
        rules = WindowRules(truncated={("X", 2024): 6})
        assert rules.window_for("X", 2024).labels[-1] == "24.06"
        assert rules.month_count("M", 2025) == 12
