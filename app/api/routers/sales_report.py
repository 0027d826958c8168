"""
app/api/routers/sales_report.py

Sales report endpoints.

GET /sales-report      rendered report (rows, summaries, insights)
GET /sales-report/raw  normalized flat records for the same window

Warehouse failures map to 502 with the error message as ``detail``; no
partial report is returned.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import ReportFilters, get_report_filters
from app.schemas.sales_report import FlatRecordResponse, SalesReportResponse
from app.services.manual_input_service import ManualInputService, get_manual_input_service
from app.services.sales_report_service import SalesReportService, get_sales_report_service
from app.storage import ManualInputStorageError
from reporting.types import CHANNEL_DIRECT, CHANNEL_FRANCHISE
from reporting.view import VisibilityState
from warehouse.client import WarehouseQueryError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sales-report"])


@router.get("/sales-report", response_model=SalesReportResponse, summary="Pivoted sales report")
def get_sales_report(
    expand_fr: bool = Query(default=False, description="Show franchise shop rows."),
    expand_or: bool = Query(default=False, description="Show direct shop rows."),
    filters: ReportFilters = Depends(get_report_filters),
    service: SalesReportService = Depends(get_sales_report_service),
    manual_inputs: ManualInputService = Depends(get_manual_input_service),
) -> SalesReportResponse:
    visibility = VisibilityState(expanded={CHANNEL_FRANCHISE: expand_fr, CHANNEL_DIRECT: expand_or})
    try:
        overrides = manual_inputs.load()
    except ManualInputStorageError as exc:
        logger.error("Manual inputs unavailable: %s", exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc

    try:
        report = service.build_report(filters.brand, filters.year, visibility, overrides)
    except WarehouseQueryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return SalesReportResponse.model_validate(report.to_payload())


@router.get(
    "/sales-report/raw",
    response_model=list[FlatRecordResponse],
    summary="Normalized sales records",
)
def get_sales_report_raw(
    filters: ReportFilters = Depends(get_report_filters),
    service: SalesReportService = Depends(get_sales_report_service),
) -> list[FlatRecordResponse]:
    window = service.window_for(filters.brand, filters.year)
    try:
        records, _ = service.fetch_records(window)
    except WarehouseQueryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [FlatRecordResponse.model_validate(record.to_dict()) for record in records]
