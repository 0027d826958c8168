"""
app/schemas/map_data.py

Response schemas for the city map data feed.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CityShopResponse(BaseModel):
    shop_id: str
    shop_name: str
    amount: float


class CityAggregateResponse(BaseModel):
    city: str
    city_tier: Optional[str] = None
    total: float
    shop_count: int = Field(..., ge=0)
    shops: list[CityShopResponse]


class ProductRankResponse(BaseModel):
    product_code: str
    product_name: str
    sale_amount: float
    tag_amount: float
    discount_rate: float
