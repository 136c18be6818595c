from typing import Optional

import httpx

from weatherhub.client.weather_api_client import WeatherApiClient
from weatherhub.core.cache import TTLCache
from weatherhub.core.config import Settings
from weatherhub.core.db_connection import Database
from weatherhub.services.Bulk_service import AsyncBulkWeatherService
from weatherhub.services.Composite_service import CompositeWeatherService
from weatherhub.services.Forecast_service import ForecastService
from weatherhub.services.Location_service import LocationService
from weatherhub.services.Maintenance_service import MaintenanceService
from weatherhub.services.Metrics_service import MetricsService
from weatherhub.services.Weather_service import WeatherService


class ServiceContainer:
    """Wires one instance of every service for the lifetime of the app."""

    def __init__(self, config: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.metrics = MetricsService()
        self.database = Database(config.DATABASE_URL, echo=config.DATABASE_ECHO)
        self.client = WeatherApiClient(config, metrics=self.metrics, transport=transport)

        self.location_service = LocationService(
            self.database,
            self.metrics,
            TTLCache("Location", config.LOCATION_CACHE_TTL, self.metrics, max_size=config.CACHE_MAX_SIZE),
        )
        self.weather_service = WeatherService(
            self.database,
            self.client,
            self.location_service,
            self.metrics,
            TTLCache("Weather", config.WEATHER_CACHE_TTL, self.metrics, max_size=config.CACHE_MAX_SIZE),
        )
        self.forecast_service = ForecastService(
            self.database,
            self.client,
            self.location_service,
            self.metrics,
            TTLCache("Forecast", config.FORECAST_CACHE_TTL, self.metrics, max_size=config.CACHE_MAX_SIZE),
        )
        self.composite_service = CompositeWeatherService(
            self.weather_service,
            self.forecast_service,
            self.location_service,
            timeout_seconds=config.COMPOSITE_TIMEOUT_SECONDS,
        )
        self.bulk_service = AsyncBulkWeatherService(
            self.database,
            self.weather_service,
            self.forecast_service,
            self.metrics,
            timeout_seconds=config.ASYNC_TIMEOUT_SECONDS,
        )
        self.maintenance_service = MaintenanceService(
            self.weather_service,
            self.forecast_service,
            weather_retention_days=config.WEATHER_RETENTION_DAYS,
            forecast_retention_days=config.FORECAST_RETENTION_DAYS,
        )

    async def aclose(self) -> None:
        await self.client.aclose()
        await self.database.dispose()
