"""
app/schemas/sales_report.py

Response schemas for the sales report endpoints.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class SummaryRowResponse(BaseModel):
    type: Literal["summary"] = "summary"
    key: str
    summary_id: str
    metric: Literal["avg", "count"]
    label: str
    channel: str
    months: dict[str, float]


class EntityRowResponse(BaseModel):
    type: Literal["detail"] = "detail"
    key: str
    entity_id: str
    entity_name: str
    source_name: str
    channel: str
    open_date: Optional[str] = None
    open_month: Optional[str] = None
    city: Optional[str] = None
    city_tier: Optional[str] = None
    store_type: Optional[str] = None
    sales_region: Optional[str] = None
    months: dict[str, Optional[float]]


class ManualInputRowResponse(BaseModel):
    type: Literal["manual_input"] = "manual_input"
    key: str
    display_name: str
    channel: str
    target_label: str
    value: Optional[float] = None


DisplayRowResponse = Annotated[
    Union[SummaryRowResponse, EntityRowResponse, ManualInputRowResponse],
    Field(discriminator="type"),
]


class InsightCardResponse(BaseModel):
    id: str
    label: str
    description: str


class SalesReportResponse(BaseModel):
    """
    API response model for one rendered sales report view.
    """

    brand: str
    brand_name: str
    year: int
    labels: list[str]
    override_label: Optional[str] = None
    request_id: int = Field(..., ge=0)
    dropped_records: int = Field(0, ge=0)
    expanded: dict[str, bool] = Field(default_factory=dict)
    rows: list[DisplayRowResponse]
    summaries: list[SummaryRowResponse]
    insights: list[InsightCardResponse]
    highlight_label: Optional[str] = None
    highlighted_ids: list[str] = Field(default_factory=list)


class FlatRecordResponse(BaseModel):
    period: str
    entity_id: str
    entity_name: str
    channel: str
    amount: Optional[float] = None
    origin_id: Optional[str] = None
    open_date: Optional[str] = None
    city: Optional[str] = None
    city_tier: Optional[str] = None
    store_type: Optional[str] = None
    sales_region: Optional[str] = None
