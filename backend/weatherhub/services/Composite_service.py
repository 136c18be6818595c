import asyncio
import logging
from typing import Any, Awaitable, List

from weatherhub.core.exceptions import OperationTimeoutError
from weatherhub.core.logger import logs
from weatherhub.core.validation import validate_forecast_days
from weatherhub.models.base_model import CompleteLocationInfo, WeatherWithForecast
from weatherhub.models.weather_model import WeatherDto
from weatherhub.services.Forecast_service import ForecastService
from weatherhub.services.Location_service import LocationService
from weatherhub.services.Weather_service import WeatherService


class CompositeWeatherService:
    """
    Fans independent lookups out concurrently and joins them.
    All-or-nothing: the first failure cancels the remaining lookups and propagates.
    """

    def __init__(
        self,
        weather_service: WeatherService,
        forecast_service: ForecastService,
        location_service: LocationService,
        timeout_seconds: float = 30.0,
    ):
        self.weather_service = weather_service
        self.forecast_service = forecast_service
        self.location_service = location_service
        self.timeout_seconds = timeout_seconds

    async def get_weather_and_forecast(self, location_name: str, days: int = 3) -> WeatherWithForecast:
        validate_forecast_days(days)
        logs.log(logging.INFO, f"Fetching weather and {days}-day forecast concurrently for: {location_name}")
        weather, forecasts = await self._join(
            self.weather_service.get_current_weather(location_name, True),
            self.forecast_service.get_forecast(location_name, days, True),
        )
        return WeatherWithForecast(weather=weather, forecasts=forecasts)

    async def get_weather_and_forecast_by_location_id(self, location_id: int, days: int = 3) -> WeatherWithForecast:
        validate_forecast_days(days)
        weather, forecasts = await self._join(
            self.weather_service.get_current_weather_by_location_id(location_id, True),
            self.forecast_service.get_forecast_by_location_id(location_id, days, True),
        )
        return WeatherWithForecast(weather=weather, forecasts=forecasts)

    async def get_complete_location_info(self, location_id: int, days: int = 3) -> CompleteLocationInfo:
        validate_forecast_days(days)
        logs.log(logging.INFO, f"Fetching complete info for location ID: {location_id}")
        location, weather, forecasts = await self._join(
            self.location_service.get_location_by_id(location_id),
            self.weather_service.get_current_weather_by_location_id(location_id, True),
            self.forecast_service.get_forecast_by_location_id(location_id, days, True),
        )
        return CompleteLocationInfo(location=location, weather=weather, forecasts=forecasts)

    async def get_bulk_weather(self, location_names: List[str], save: bool = True) -> List[WeatherDto]:
        logs.log(logging.INFO, f"Fetching weather concurrently for {len(location_names)} locations")
        if not location_names:
            return []
        results = await self._join(
            *(self.weather_service.get_current_weather(name, save) for name in location_names)
        )
        return list(results)

    async def _join(self, *lookups: Awaitable[Any]) -> List[Any]:
        tasks = [asyncio.ensure_future(lookup) for lookup in lookups]
        try:
            return await asyncio.wait_for(asyncio.gather(*tasks), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logs.log(logging.ERROR, f"Composite lookup timed out after {self.timeout_seconds}s")
            raise OperationTimeoutError(
                f"Operation did not complete within {self.timeout_seconds} seconds"
            ) from e
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
