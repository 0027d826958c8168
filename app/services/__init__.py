"""
app/services package marker.
"""

from app.services.dealer_sales_service import (
    DealerSalesReport,
    DealerSalesService,
    get_dealer_sales_service,
)
from app.services.discount_rate_service import (
    DiscountRateReport,
    DiscountRateService,
    get_discount_rate_service,
)
from app.services.manual_input_service import (
    ManualInputService,
    build_manual_input_service,
    get_manual_input_service,
)
from app.services.map_data_service import (
    InvalidPeriodError,
    MapDataService,
    get_map_data_service,
)
from app.services.request_tracker import RequestTracker
from app.services.sales_report_service import (
    SalesReport,
    SalesReportService,
    get_sales_report_service,
)

__all__ = [
    "DealerSalesReport",
    "DealerSalesService",
    "get_dealer_sales_service",
    "DiscountRateReport",
    "DiscountRateService",
    "get_discount_rate_service",
    "ManualInputService",
    "build_manual_input_service",
    "get_manual_input_service",
    "InvalidPeriodError",
    "MapDataService",
    "get_map_data_service",
    "RequestTracker",
    "SalesReport",
    "SalesReportService",
    "get_sales_report_service",
]
