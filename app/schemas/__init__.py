"""
app/schemas package marker.
"""

from app.schemas.dealer_sales import DealerRowResponse, DealerSalesResponse
from app.schemas.discount_rate import DiscountRateResponse, DiscountSeriesResponse
from app.schemas.health import HealthResponse
from app.schemas.manual_inputs import (
    ManualInputsPayload,
    ManualInputsSaveResponse,
    OverrideCountsResponse,
)
from app.schemas.map_data import CityAggregateResponse, CityShopResponse, ProductRankResponse
from app.schemas.sales_report import (
    EntityRowResponse,
    FlatRecordResponse,
    InsightCardResponse,
    ManualInputRowResponse,
    SalesReportResponse,
    SummaryRowResponse,
)

__all__ = [
    "DealerRowResponse",
    "DealerSalesResponse",
    "DiscountRateResponse",
    "DiscountSeriesResponse",
    "HealthResponse",
    "ManualInputsPayload",
    "ManualInputsSaveResponse",
    "OverrideCountsResponse",
    "CityAggregateResponse",
    "CityShopResponse",
    "ProductRankResponse",
    "EntityRowResponse",
    "FlatRecordResponse",
    "InsightCardResponse",
    "ManualInputRowResponse",
    "SalesReportResponse",
    "SummaryRowResponse",
]
