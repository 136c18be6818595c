from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Path, Query

from weatherhub.models.base_model import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Page
from weatherhub.models.weather_model import WeatherDto
from weatherhub.routes.deps import get_weather_service
from weatherhub.services.Weather_service import WeatherService

router = APIRouter(prefix="/api/weather", tags=["Weather"])


@router.get("/current", response_model=WeatherDto)
async def get_current_weather(
    location: str = Query(..., min_length=1),
    save: bool = Query(True),
    service: WeatherService = Depends(get_weather_service)
):
    return await service.get_current_weather(location, save)

@router.get("/current/location/{location_id}", response_model=WeatherDto)
async def get_current_weather_by_location_id(
    location_id: int = Path(..., ge=1),
    save: bool = Query(True),
    service: WeatherService = Depends(get_weather_service)
):
    return await service.get_current_weather_by_location_id(location_id, save)

@router.get("/history/location/{location_id}", response_model=Page[WeatherDto])
async def get_weather_history(
    location_id: int = Path(..., ge=1),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: WeatherService = Depends(get_weather_service)
):
    return await service.get_weather_history(location_id, page, size)

@router.get("/history/location/{location_id}/range", response_model=List[WeatherDto])
async def get_weather_history_by_date_range(
    start: datetime,
    end: datetime,
    location_id: int = Path(..., ge=1),
    service: WeatherService = Depends(get_weather_service)
):
    return await service.get_weather_history_by_date_range(location_id, start, end)
