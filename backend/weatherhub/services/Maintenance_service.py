import logging
from datetime import date, timedelta

from weatherhub.core.logger import logs
from weatherhub.models.base_model import RetentionResult
from weatherhub.models.entities import utcnow
from weatherhub.services.Forecast_service import ForecastService
from weatherhub.services.Weather_service import WeatherService


class MaintenanceService:
    """Retention sweep: drops weather history and forecasts older than the configured windows."""

    def __init__(
        self,
        weather_service: WeatherService,
        forecast_service: ForecastService,
        weather_retention_days: int = 90,
        forecast_retention_days: int = 30,
    ):
        self.weather_service = weather_service
        self.forecast_service = forecast_service
        self.weather_retention_days = weather_retention_days
        self.forecast_retention_days = forecast_retention_days

    async def run_retention(self) -> RetentionResult:
        weather_cutoff = utcnow() - timedelta(days=self.weather_retention_days)
        forecast_cutoff = date.today() - timedelta(days=self.forecast_retention_days)
        logs.log(
            logging.INFO,
            f"Running retention sweep (weather before {weather_cutoff}, forecasts before {forecast_cutoff})",
        )

        weather_deleted = await self.weather_service.delete_old_weather_records(weather_cutoff)
        forecasts_deleted = await self.forecast_service.delete_old_forecasts(forecast_cutoff)

        return RetentionResult(
            weather_records_deleted=weather_deleted,
            forecast_records_deleted=forecasts_deleted,
            weather_cutoff=weather_cutoff,
            forecast_cutoff=forecast_cutoff,
        )
