"""
reporting/geography.py

City-level shop aggregation and per-shop product ranking for the map view.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from reporting.normalizer import CityShopRecord, ProductSaleRecord

UNKNOWN_CITY = "Other"

PERIOD_MONTHLY = "monthly"
PERIOD_CUMULATIVE = "cumulative"
VALID_PERIODS = frozenset({PERIOD_MONTHLY, PERIOD_CUMULATIVE})


@dataclass
class CityAggregate:
    city: str
    city_tier: str | None
    total: float = 0.0
    shop_count: int = 0
    shops: list[CityShopRecord] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "city": self.city,
            "city_tier": self.city_tier,
            "total": self.total,
            "shop_count": self.shop_count,
            "shops": [
                {
                    "shop_id": shop.shop_id,
                    "shop_name": shop.shop_name,
                    "amount": shop.amount,
                }
                for shop in self.shops
            ],
        }


@dataclass(frozen=True)
class ProductRank:
    product_code: str
    product_name: str
    sale_amount: float
    tag_amount: float
    discount_rate: float
    """Percentage, one decimal."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "product_code": self.product_code,
            "product_name": self.product_name,
            "sale_amount": self.sale_amount,
            "tag_amount": self.tag_amount,
            "discount_rate": self.discount_rate,
        }


def group_shops_by_city(records: Iterable[CityShopRecord]) -> list[CityAggregate]:
    """Group shop totals by city, preserving first-seen city order."""
    cities: dict[str, CityAggregate] = {}
    for record in records:
        name = record.city or UNKNOWN_CITY
        city = cities.get(name)
        if city is None:
            city = CityAggregate(city=name, city_tier=record.city_tier)
            cities[name] = city
        city.total += record.amount
        city.shop_count += 1
        city.shops.append(record)
    return list(cities.values())


def discount_percentage(sale_amount: float, tag_amount: float) -> float:
    if tag_amount <= 0:
        return 0.0
    return round((1 - sale_amount / tag_amount) * 100, 1)


def rank_products(records: Iterable[ProductSaleRecord], limit: int = 5) -> list[ProductRank]:
    ranked = sorted(records, key=lambda record: record.sale_amount, reverse=True)[:limit]
    return [
        ProductRank(
            product_code=record.product_code,
            product_name=record.product_name,
            sale_amount=record.sale_amount,
            tag_amount=record.tag_amount,
            discount_rate=discount_percentage(record.sale_amount, record.tag_amount),
        )
        for record in ranked
    ]
