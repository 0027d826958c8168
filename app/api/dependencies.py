"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Query

from app.config import ReportSettings, get_report_settings


@dataclass(frozen=True)
class ReportFilters:
    brand: str
    year: int


def get_report_filters(
    brand: str | None = Query(default=None, description="Brand code: X, M or I."),
    year: str | None = Query(default=None, description="Report year, e.g. 2025."),
    settings: ReportSettings = Depends(get_report_settings),
) -> ReportFilters:
    """
    Resolve brand/year query parameters.

    Unknown brands and years fall back to the configured defaults instead of
    failing the request.
    """

    return ReportFilters(
        brand=settings.resolve_brand(brand),
        year=settings.resolve_year(year),
    )
