"""
app/api/routers/dealer_sales.py

Dealer shipment vs. sales endpoints (JSON and CSV download).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from app.api.dependencies import ReportFilters, get_report_filters
from app.schemas.dealer_sales import DealerSalesResponse
from app.services.dealer_sales_service import (
    DealerSalesReport,
    DealerSalesService,
    get_dealer_sales_service,
)
from warehouse.client import WarehouseQueryError

router = APIRouter(tags=["dealer-sales"])


def _build(service: DealerSalesService, filters: ReportFilters) -> DealerSalesReport:
    try:
        return service.build_report(filters.brand, filters.year)
    except WarehouseQueryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


@router.get("/dealer-sales", response_model=DealerSalesResponse, summary="Dealer shipment and sales")
def get_dealer_sales(
    filters: ReportFilters = Depends(get_report_filters),
    service: DealerSalesService = Depends(get_dealer_sales_service),
) -> DealerSalesResponse:
    return DealerSalesResponse.model_validate(_build(service, filters).to_payload())


@router.get("/dealer-sales/csv", summary="Dealer shipment and sales as CSV")
def get_dealer_sales_csv(
    filters: ReportFilters = Depends(get_report_filters),
    service: DealerSalesService = Depends(get_dealer_sales_service),
) -> Response:
    report = _build(service, filters)
    return Response(
        content=report.to_csv(),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{report.csv_filename}"',
            "X-Row-Count": str(len(report.dealers)),
        },
    )
