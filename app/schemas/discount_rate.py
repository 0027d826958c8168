"""
app/schemas/discount_rate.py

Response schemas for the discount-rate endpoint.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class DiscountSeriesResponse(BaseModel):
    channel: str
    values: dict[str, Optional[float]]
    average: float


class DiscountRateResponse(BaseModel):
    brand: str
    year: int
    labels: list[str]
    series: list[DiscountSeriesResponse]
