"""
Shared fixtures for the report test-suite.

Nothing here touches the network or a warehouse; query runners are plain
callables returning canned rows.
"""

from __future__ import annotations

import pytest

from app.config import ReportSettings
from reporting.window import ReportWindow


@pytest.fixture()
def window_2025() -> ReportWindow:
    return ReportWindow(year=2025, brand="X")


@pytest.fixture()
def report_settings() -> ReportSettings:
    return ReportSettings(localization_path=None)
