from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Path, Query

from weatherhub.core.validation import FORECAST_DAYS_MAX, FORECAST_DAYS_MIN
from weatherhub.models.forecast_model import ForecastDto
from weatherhub.routes.deps import get_forecast_service
from weatherhub.services.Forecast_service import ForecastService

router = APIRouter(prefix="/api/forecast", tags=["Forecast"])


@router.get("", response_model=List[ForecastDto])
async def get_forecast(
    location: str = Query(..., min_length=1),
    days: int = Query(3, ge=FORECAST_DAYS_MIN, le=FORECAST_DAYS_MAX),
    save: bool = Query(True),
    service: ForecastService = Depends(get_forecast_service)
):
    return await service.get_forecast(location, days, save)

@router.get("/location/{location_id}", response_model=List[ForecastDto])
async def get_forecast_by_location_id(
    location_id: int = Path(..., ge=1),
    days: int = Query(3, ge=FORECAST_DAYS_MIN, le=FORECAST_DAYS_MAX),
    save: bool = Query(True),
    service: ForecastService = Depends(get_forecast_service)
):
    return await service.get_forecast_by_location_id(location_id, days, save)

@router.get("/stored/location/{location_id}", response_model=List[ForecastDto])
async def get_stored_forecasts(
    location_id: int = Path(..., ge=1),
    service: ForecastService = Depends(get_forecast_service)
):
    return await service.get_stored_forecasts(location_id)

@router.get("/future/location/{location_id}", response_model=List[ForecastDto])
async def get_future_forecasts(
    location_id: int = Path(..., ge=1),
    service: ForecastService = Depends(get_forecast_service)
):
    return await service.get_future_forecasts(location_id)

@router.get("/range/location/{location_id}", response_model=List[ForecastDto])
async def get_forecasts_by_date_range(
    start: date,
    end: date,
    location_id: int = Path(..., ge=1),
    service: ForecastService = Depends(get_forecast_service)
):
    return await service.get_forecasts_by_date_range(location_id, start, end)
