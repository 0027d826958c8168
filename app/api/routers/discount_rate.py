"""
app/api/routers/discount_rate.py

Monthly discount-rate series per channel.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import ReportFilters, get_report_filters
from app.schemas.discount_rate import DiscountRateResponse
from app.services.discount_rate_service import DiscountRateService, get_discount_rate_service
from warehouse.client import WarehouseQueryError

router = APIRouter(tags=["discount-rate"])


@router.get("/discount-rate", response_model=DiscountRateResponse, summary="Discount rate by channel")
def get_discount_rate(
    filters: ReportFilters = Depends(get_report_filters),
    service: DiscountRateService = Depends(get_discount_rate_service),
) -> DiscountRateResponse:
    try:
        report = service.build_report(filters.brand, filters.year)
    except WarehouseQueryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return DiscountRateResponse.model_validate(report.to_payload())
