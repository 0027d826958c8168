"""
app/api/routers/map_data.py

City map data feed.

GET /map-data                 shops grouped by city
GET /map-data/shop-products   top products of one shop

``period`` is ``monthly`` or ``cumulative``; anything else is a 400.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.dependencies import ReportFilters, get_report_filters
from app.schemas.map_data import CityAggregateResponse, ProductRankResponse
from app.services.map_data_service import InvalidPeriodError, MapDataService, get_map_data_service
from warehouse.client import WarehouseQueryError

router = APIRouter(tags=["map-data"])


@router.get("/map-data", response_model=list[CityAggregateResponse], summary="Shop sales by city")
def get_map_data(
    period: str = Query(default="cumulative", description='"monthly" or "cumulative".'),
    filters: ReportFilters = Depends(get_report_filters),
    service: MapDataService = Depends(get_map_data_service),
) -> list[CityAggregateResponse]:
    try:
        cities = service.city_aggregates(filters.brand, filters.year, period)
    except InvalidPeriodError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except WarehouseQueryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [CityAggregateResponse.model_validate(city.to_dict()) for city in cities]


@router.get(
    "/map-data/shop-products",
    response_model=list[ProductRankResponse],
    summary="Top products of one shop",
)
def get_shop_products(
    shop_id: str = Query(..., min_length=1),
    period: str = Query(default="cumulative", description='"monthly" or "cumulative".'),
    filters: ReportFilters = Depends(get_report_filters),
    service: MapDataService = Depends(get_map_data_service),
) -> list[ProductRankResponse]:
    try:
        products = service.shop_products(shop_id, filters.brand, filters.year, period)
    except InvalidPeriodError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except WarehouseQueryError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [ProductRankResponse.model_validate(product.to_dict()) for product in products]
