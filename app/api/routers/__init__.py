"""
app/api/routers package marker.
"""

from app.api.routers.dealer_sales import router as dealer_sales_router
from app.api.routers.discount_rate import router as discount_rate_router
from app.api.routers.manual_inputs import router as manual_inputs_router
from app.api.routers.map_data import router as map_data_router
from app.api.routers.sales_report import router as sales_report_router

__all__ = [
    "dealer_sales_router",
    "discount_rate_router",
    "manual_inputs_router",
    "map_data_router",
    "sales_report_router",
]
