import logging
from datetime import datetime
from typing import List

from weatherhub.client.weather_api_client import WeatherApiClient
from weatherhub.core.cache import TTLCache
from weatherhub.core.db_connection import Database
from weatherhub.core.exceptions import EmptyResponseError, LocationNotFoundError
from weatherhub.core.logger import logs
from weatherhub.core.validation import validate_weather_history_range
from weatherhub.mappers import weather_mapper
from weatherhub.models.base_model import Page
from weatherhub.models.weather_model import WeatherApiResponse, WeatherDto
from weatherhub.repos.location_repo import LocationRepository
from weatherhub.repos.weather_repo import WeatherRecordRepository
from weatherhub.services.Location_service import LocationService
from weatherhub.services.Metrics_service import MetricsService


class WeatherService:
    def __init__(
        self,
        db: Database,
        client: WeatherApiClient,
        location_service: LocationService,
        metrics: MetricsService,
        cache: TTLCache,
    ):
        self.db = db
        self.client = client
        self.location_service = location_service
        self.metrics = metrics
        self.cache = cache

    async def get_current_weather(self, location_name: str, save: bool = True) -> WeatherDto:
        # 1. Check Cache
        key = f"weather:byName:{location_name.strip().lower()}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        # 2. Call WeatherAPI.com
        response = await self.client.get_current_weather(location_name)
        result = self._to_dto(response, location_name)

        # 3. Persist against the provider's resolved location
        if save:
            await self._save_for_resolved_location(response)

        self.cache.put(key, result)
        logs.log(
            logging.DEBUG,
            f"Fetched current weather for {location_name} (temp: {result.temperature}°C, condition: {result.condition})",
        )
        return result

    async def get_current_weather_by_location_id(self, location_id: int, save: bool = True) -> WeatherDto:
        key = f"weather:byId:{location_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        location = await self.location_service.get_location_entity(location_id)
        query = f"{location.name},{location.country}"

        response = await self.client.get_current_weather(query)
        result = self._to_dto(response, query)

        if save:
            await self._save_for_location(response, location_id)
            logs.log(logging.INFO, f"Saved weather record for location ID: {location_id}")

        self.cache.put(key, result)
        return result

    async def get_weather_history(self, location_id: int, page: int, size: int) -> Page[WeatherDto]:
        logs.log(logging.DEBUG, f"Fetching weather history for location ID: {location_id}")
        async with self.db.session() as session:
            await self.location_service.ensure_exists(session, location_id)
            records, total = await WeatherRecordRepository(session).find_page_by_location(location_id, page, size)
        return Page[WeatherDto](
            content=[weather_mapper.to_dto(record) for record in records],
            page=page,
            size=size,
            total_elements=total,
        )

    async def get_weather_history_by_date_range(self, location_id: int, start: datetime, end: datetime) -> List[WeatherDto]:
        validate_weather_history_range(start, end)
        logs.log(logging.DEBUG, f"Fetching weather history for location ID {location_id} from {start} to {end}")
        async with self.db.session() as session:
            await self.location_service.ensure_exists(session, location_id)
            records = await WeatherRecordRepository(session).find_by_location_between(location_id, start, end)
        return [weather_mapper.to_dto(record) for record in records]

    async def delete_old_weather_records(self, cutoff: datetime) -> int:
        logs.log(logging.INFO, f"Deleting weather records before: {cutoff}")
        async with self.db.transaction() as session:
            deleted = await WeatherRecordRepository(session).delete_before(cutoff)
        logs.log(logging.INFO, f"Successfully deleted {deleted} weather records before {cutoff}")
        return deleted

    # --- internals ---

    @staticmethod
    def _to_dto(response: WeatherApiResponse, query: str) -> WeatherDto:
        result = weather_mapper.to_dto_from_api(response)
        if result is None:
            raise EmptyResponseError(f"No current weather data returned for location: {query}")
        return result

    async def _save_for_resolved_location(self, response: WeatherApiResponse) -> None:
        async def work(session):
            location, created = await self.location_service.find_or_create_location(session, response.location)
            await WeatherRecordRepository(session).add(weather_mapper.from_weather_api(response, location))
            return created

        created = await self.db.run_in_transaction(work, "weather record save")
        if created:
            self.location_service.location_created()
        self.metrics.record_weather_records_saved(1)

    async def _save_for_location(self, response: WeatherApiResponse, location_id: int) -> None:
        async with self.db.transaction() as session:
            # re-read in this session; the location may have been deleted meanwhile
            location = await LocationRepository(session).get(location_id)
            if location is None:
                raise LocationNotFoundError(location_id)
            await WeatherRecordRepository(session).add(weather_mapper.from_weather_api(response, location))
        self.metrics.record_weather_records_saved(1)
