from typing import List

from fastapi import APIRouter, Depends, Path, Query

from weatherhub.core.validation import FORECAST_DAYS_MAX, FORECAST_DAYS_MIN, MAX_BULK_ITEMS
from weatherhub.models.base_model import CompleteLocationInfo, WeatherWithForecast
from weatherhub.models.weather_model import WeatherDto
from weatherhub.routes.deps import get_composite_service
from weatherhub.services.Composite_service import CompositeWeatherService

router = APIRouter(prefix="/api/composite", tags=["Composite"])


@router.get("/weather-and-forecast", response_model=WeatherWithForecast)
async def get_weather_and_forecast(
    location: str = Query(..., min_length=1),
    days: int = Query(3, ge=FORECAST_DAYS_MIN, le=FORECAST_DAYS_MAX),
    service: CompositeWeatherService = Depends(get_composite_service)
):
    return await service.get_weather_and_forecast(location, days)

@router.get("/weather-and-forecast/{location_id}", response_model=WeatherWithForecast)
async def get_weather_and_forecast_by_location_id(
    location_id: int = Path(..., ge=1),
    days: int = Query(3, ge=FORECAST_DAYS_MIN, le=FORECAST_DAYS_MAX),
    service: CompositeWeatherService = Depends(get_composite_service)
):
    return await service.get_weather_and_forecast_by_location_id(location_id, days)

@router.get("/complete-info/{location_id}", response_model=CompleteLocationInfo)
async def get_complete_location_info(
    location_id: int = Path(..., ge=1),
    days: int = Query(3, ge=FORECAST_DAYS_MIN, le=FORECAST_DAYS_MAX),
    service: CompositeWeatherService = Depends(get_composite_service)
):
    return await service.get_complete_location_info(location_id, days)

@router.get("/bulk-weather", response_model=List[WeatherDto])
async def get_bulk_weather(
    locations: List[str] = Query(..., max_length=MAX_BULK_ITEMS),
    save: bool = Query(True),
    service: CompositeWeatherService = Depends(get_composite_service)
):
    return await service.get_bulk_weather(locations, save)
