import logging
from datetime import date
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from weatherhub.client.weather_api_client import WeatherApiClient
from weatherhub.core.cache import TTLCache
from weatherhub.core.db_connection import Database
from weatherhub.core.exceptions import LocationNotFoundError
from weatherhub.core.logger import logs
from weatherhub.core.validation import validate_forecast_days, validate_forecast_range
from weatherhub.mappers import forecast_mapper
from weatherhub.models.entities import Location
from weatherhub.models.forecast_model import ForecastApiResponse, ForecastDto
from weatherhub.repos.forecast_repo import ForecastRecordRepository
from weatherhub.repos.location_repo import LocationRepository
from weatherhub.services.Location_service import LocationService
from weatherhub.services.Metrics_service import MetricsService


class ForecastService:
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

    async def get_forecast(self, location_name: str, days: int = 3, save: bool = True) -> List[ForecastDto]:
        validate_forecast_days(days)
        logs.log(logging.INFO, f"Fetching {days}-day forecast for location: {location_name}")

        key = f"forecast:byName:{location_name.strip().lower()}:{days}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        response = await self.client.get_forecast(location_name, days)

        if save:
            async def work(session):
                location, created = await self.location_service.find_or_create_location(session, response.location)
                await self._upsert(session, response, location)
                return created

            if await self.db.run_in_transaction(work, "forecast save"):
                self.location_service.location_created()

        result = forecast_mapper.to_dto_from_api(response, location_name)
        if result:
            self.cache.put(key, result)
        return result

    async def get_forecast_by_location_id(self, location_id: int, days: int = 3, save: bool = True) -> List[ForecastDto]:
        validate_forecast_days(days)
        logs.log(logging.INFO, f"Fetching {days}-day forecast for location ID: {location_id}")

        key = f"forecast:byId:{location_id}:{days}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        location = await self.location_service.get_location_entity(location_id)
        response = await self.client.get_forecast(f"{location.name},{location.country}", days)

        if save:
            async def work(session):
                stored = await LocationRepository(session).get(location_id)
                if stored is None:
                    raise LocationNotFoundError(location_id)
                await self._upsert(session, response, stored)

            await self.db.run_in_transaction(work, "forecast save")

        result = forecast_mapper.to_dto_from_api(response, location.name)
        if result:
            self.cache.put(key, result)
        return result

    async def get_stored_forecasts(self, location_id: int) -> List[ForecastDto]:
        async with self.db.session() as session:
            await self.location_service.ensure_exists(session, location_id)
            records = await ForecastRecordRepository(session).find_by_location(location_id)
        return [forecast_mapper.to_dto(record) for record in records]

    async def get_future_forecasts(self, location_id: int) -> List[ForecastDto]:
        today = date.today()
        async with self.db.session() as session:
            await self.location_service.ensure_exists(session, location_id)
            records = await ForecastRecordRepository(session).find_future_by_location(location_id, today)
        return [forecast_mapper.to_dto(record) for record in records]

    async def get_forecasts_by_date_range(self, location_id: int, start: date, end: date) -> List[ForecastDto]:
        validate_forecast_range(start, end)
        async with self.db.session() as session:
            await self.location_service.ensure_exists(session, location_id)
            records = await ForecastRecordRepository(session).find_by_location_between(location_id, start, end)
        return [forecast_mapper.to_dto(record) for record in records]

    async def delete_old_forecasts(self, cutoff: date) -> int:
        logs.log(logging.INFO, f"Deleting forecast records before: {cutoff}")
        async with self.db.transaction() as session:
            deleted = await ForecastRecordRepository(session).delete_before(cutoff)
        logs.log(logging.INFO, f"Successfully deleted {deleted} forecast records before {cutoff}")
        return deleted

    async def _upsert(self, session: AsyncSession, response: ForecastApiResponse, location: Location) -> int:
        """Stores only the dates this location has no forecast for yet."""
        records = forecast_mapper.from_weather_api(response, location)
        if not records:
            return 0

        repo = ForecastRecordRepository(session)
        existing = await repo.find_dates_by_location_in(location.id, [record.forecast_date for record in records])
        new_records = [record for record in records if record.forecast_date not in existing]

        if new_records:
            await repo.add_all(new_records)
            self.metrics.record_forecast_records_saved(len(new_records))
            logs.log(
                logging.INFO,
                f"Saved {len(new_records)} new forecast records for location: {location.name} "
                f"({len(records) - len(new_records)} duplicates skipped)",
            )
        else:
            logs.log(
                logging.INFO,
                f"No new forecast records to save for location: {location.name} "
                f"(all {len(records)} records already exist)",
            )
        return len(new_records)
