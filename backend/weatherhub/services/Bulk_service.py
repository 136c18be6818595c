import asyncio
import logging
from typing import Awaitable, List, TypeVar

from weatherhub.core.db_connection import Database
from weatherhub.core.exceptions import OperationTimeoutError
from weatherhub.core.logger import logs
from weatherhub.core.validation import validate_forecast_days
from weatherhub.models.base_model import BulkOperationResult
from weatherhub.models.forecast_model import ForecastDto
from weatherhub.models.weather_model import WeatherDto
from weatherhub.repos.location_repo import LocationRepository
from weatherhub.services.Forecast_service import ForecastService
from weatherhub.services.Metrics_service import MetricsService
from weatherhub.services.Weather_service import WeatherService
from weatherhub.utils.batch_processor import AsyncBatchProcessor
from weatherhub.utils.batching import DEFAULT_BATCH_SIZE

T = TypeVar("T")


class AsyncBulkWeatherService:
    """
    Bulk operations over many locations. Arguments are validated up front;
    a failing location is logged and skipped, and callers get the survivors
    or success/failure counts.
    """

    def __init__(
        self,
        db: Database,
        weather_service: WeatherService,
        forecast_service: ForecastService,
        metrics: MetricsService,
        timeout_seconds: float = 60.0,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.db = db
        self.weather_service = weather_service
        self.forecast_service = forecast_service
        self.timeout_seconds = timeout_seconds

        self.weather_fetch = AsyncBatchProcessor(metrics, "weather_fetch", batch_size)
        self.forecast_fetch = AsyncBatchProcessor(metrics, "forecast_fetch", batch_size)
        self.weather_update = AsyncBatchProcessor(metrics, "weather_update", batch_size)
        self.forecast_refresh = AsyncBatchProcessor(metrics, "forecast_refresh", batch_size)

    async def get_bulk_weather(self, location_names: List[str], save: bool = False) -> List[WeatherDto]:
        return await self._within_timeout(
            self.weather_fetch.process(
                location_names,
                lambda name: self.weather_service.get_current_weather(name, save),
            )
        )

    async def get_bulk_forecasts(self, location_names: List[str], days: int = 3, save: bool = False) -> List[List[ForecastDto]]:
        validate_forecast_days(days)
        return await self._within_timeout(
            self.forecast_fetch.process(
                location_names,
                lambda name: self.forecast_service.get_forecast(name, days, save),
            )
        )

    async def update_weather_for_locations(self, location_ids: List[int]) -> BulkOperationResult:
        updated = await self._within_timeout(
            self.weather_update.process_for_count(
                location_ids,
                lambda location_id: self.weather_service.get_current_weather_by_location_id(location_id, True),
            )
        )
        return self._result(updated, len(location_ids), "weather update")

    async def refresh_forecasts_for_locations(self, location_ids: List[int], days: int = 3) -> BulkOperationResult:
        validate_forecast_days(days)
        refreshed = await self._within_timeout(
            self.forecast_refresh.process_for_count(
                location_ids,
                lambda location_id: self.forecast_service.get_forecast_by_location_id(location_id, days, True),
            )
        )
        return self._result(refreshed, len(location_ids), "forecast refresh")

    async def refresh_all_locations(self) -> BulkOperationResult:
        async with self.db.session() as session:
            location_ids = await LocationRepository(session).all_ids()
        logs.log(logging.INFO, f"Refreshing weather for all {len(location_ids)} locations")
        return await self.update_weather_for_locations(location_ids)

    async def _within_timeout(self, operation: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logs.log(logging.ERROR, f"Bulk operation timed out after {self.timeout_seconds}s")
            raise OperationTimeoutError(
                f"Bulk operation did not complete within {self.timeout_seconds} seconds"
            ) from e

    @staticmethod
    def _result(success_count: int, total_count: int, operation: str) -> BulkOperationResult:
        result = BulkOperationResult(
            success_count=success_count,
            failure_count=total_count - success_count,
            total_count=total_count,
        )
        logs.log(logging.INFO, f"Bulk {operation} completed: {success_count}/{total_count} successful")
        return result
