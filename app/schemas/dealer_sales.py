"""
app/schemas/dealer_sales.py

Response schemas for the dealer shipment/sales endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel


class DealerRowResponse(BaseModel):
    account_id: str
    account_name: str
    hq_sap_id: str
    shipment_months: dict[str, float]
    sales_months: dict[str, float]


class DealerSalesResponse(BaseModel):
    brand: str
    brand_name: str
    year: int
    month_keys: list[str]
    dealers: list[DealerRowResponse]
