from typing import List

from fastapi import APIRouter, Body, Depends, Query

from weatherhub.core.validation import FORECAST_DAYS_MAX, FORECAST_DAYS_MIN, MAX_BULK_ITEMS
from weatherhub.models.base_model import BulkOperationResult
from weatherhub.models.forecast_model import ForecastDto
from weatherhub.models.weather_model import WeatherDto
from weatherhub.routes.deps import get_bulk_service
from weatherhub.services.Bulk_service import AsyncBulkWeatherService

router = APIRouter(prefix="/api/async", tags=["Async bulk"])


@router.get("/weather/bulk", response_model=List[WeatherDto])
async def get_bulk_weather(
    locations: List[str] = Query(..., max_length=MAX_BULK_ITEMS),
    save: bool = Query(False),
    service: AsyncBulkWeatherService = Depends(get_bulk_service)
):
    return await service.get_bulk_weather(locations, save)

@router.get("/forecast/bulk", response_model=List[List[ForecastDto]])
async def get_bulk_forecasts(
    locations: List[str] = Query(..., max_length=MAX_BULK_ITEMS),
    days: int = Query(3, ge=FORECAST_DAYS_MIN, le=FORECAST_DAYS_MAX),
    save: bool = Query(False),
    service: AsyncBulkWeatherService = Depends(get_bulk_service)
):
    return await service.get_bulk_forecasts(locations, days, save)

@router.post("/weather/update", response_model=BulkOperationResult)
async def update_weather_for_locations(
    location_ids: List[int] = Body(..., max_length=MAX_BULK_ITEMS),
    service: AsyncBulkWeatherService = Depends(get_bulk_service)
):
    return await service.update_weather_for_locations(location_ids)

@router.post("/forecast/refresh", response_model=BulkOperationResult)
async def refresh_forecasts_for_locations(
    location_ids: List[int] = Body(..., max_length=MAX_BULK_ITEMS),
    days: int = Query(3, ge=FORECAST_DAYS_MIN, le=FORECAST_DAYS_MAX),
    service: AsyncBulkWeatherService = Depends(get_bulk_service)
):
    return await service.refresh_forecasts_for_locations(location_ids, days)

@router.post("/refresh-all", response_model=BulkOperationResult)
async def refresh_all_locations(service: AsyncBulkWeatherService = Depends(get_bulk_service)):
    return await service.refresh_all_locations()
