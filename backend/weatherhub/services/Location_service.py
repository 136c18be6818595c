import logging
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from weatherhub.core.cache import TTLCache
from weatherhub.core.db_connection import Database
from weatherhub.core.exceptions import (
    LocationAlreadyExistsError,
    LocationNotFoundError,
    WeatherApiError,
)
from weatherhub.core.logger import logs
from weatherhub.mappers import location_mapper
from weatherhub.models.base_model import Page
from weatherhub.models.entities import Location
from weatherhub.models.location_model import CreateLocationRequest, LocationDto
from weatherhub.models.weather_model import LocationInfo
from weatherhub.repos.location_repo import LocationRepository
from weatherhub.services.Metrics_service import MetricsService


class LocationService:
    def __init__(self, db: Database, metrics: MetricsService, cache: TTLCache):
        self.db = db
        self.metrics = metrics
        self.cache = cache

    async def create_location(self, request: CreateLocationRequest) -> LocationDto:
        logs.log(logging.INFO, f"Creating new location: {request.name} in {request.country}")

        async with self.db.transaction() as session:
            repo = LocationRepository(session)
            if await repo.exists_by_name_and_country(request.name, request.country):
                logs.log(logging.WARNING, f"Location already exists: {request.name} in {request.country}")
                raise LocationAlreadyExistsError(request.name, request.country)
            location = await repo.add(location_mapper.to_entity(request))
            result = location_mapper.to_dto(location)

        self.location_created()
        logs.log(logging.INFO, f"Successfully created location with ID: {result.id}")
        return result

    async def get_location_by_id(self, location_id: int) -> LocationDto:
        key = f"location:{location_id}"
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        location = await self.get_location_entity(location_id)
        result = location_mapper.to_dto(location)
        self.cache.put(key, result)
        return result

    async def get_all_locations(self) -> List[LocationDto]:
        cached = self.cache.get("locations:all")
        if cached is not None:
            return cached

        async with self.db.session() as session:
            locations = await LocationRepository(session).find_all()
        result = [location_mapper.to_dto(location) for location in locations]
        self.cache.put("locations:all", result)
        return result

    async def get_locations_page(self, page: int, size: int) -> Page[LocationDto]:
        async with self.db.session() as session:
            locations, total = await LocationRepository(session).find_page(page, size)
        return Page[LocationDto](
            content=[location_mapper.to_dto(location) for location in locations],
            page=page,
            size=size,
            total_elements=total,
        )

    async def search_locations(self, name: str) -> List[LocationDto]:
        logs.log(logging.DEBUG, f"Searching locations by name: {name}")
        async with self.db.session() as session:
            locations = await LocationRepository(session).search_by_name(name)
        return [location_mapper.to_dto(location) for location in locations]

    async def search_locations_page(self, name: str, page: int, size: int) -> Page[LocationDto]:
        async with self.db.session() as session:
            locations, total = await LocationRepository(session).search_page(name, page, size)
        return Page[LocationDto](
            content=[location_mapper.to_dto(location) for location in locations],
            page=page,
            size=size,
            total_elements=total,
        )

    async def update_location(self, location_id: int, request: CreateLocationRequest) -> LocationDto:
        logs.log(logging.INFO, f"Updating location with ID: {location_id}")

        async with self.db.transaction() as session:
            repo = LocationRepository(session)
            location = await repo.get(location_id)
            if location is None:
                raise LocationNotFoundError(location_id)

            renamed = (location.name, location.country) != (request.name, request.country)
            if renamed and await repo.exists_by_name_and_country(request.name, request.country):
                raise LocationAlreadyExistsError(request.name, request.country)

            location_mapper.update_entity_from_request(location, request)
            await session.flush()
            result = location_mapper.to_dto(location)

        self.cache.clear()
        logs.log(logging.INFO, f"Successfully updated location with ID: {location_id}")
        return result

    async def delete_location(self, location_id: int) -> None:
        logs.log(logging.INFO, f"Deleting location with ID: {location_id}")

        async with self.db.transaction() as session:
            repo = LocationRepository(session)
            location = await repo.get(location_id)
            if location is None:
                raise LocationNotFoundError(location_id)
            await repo.delete(location)

        self.cache.clear()
        logs.log(logging.INFO, f"Successfully deleted location with ID: {location_id}")

    async def get_location_entity(self, location_id: int) -> Location:
        async with self.db.session() as session:
            location = await LocationRepository(session).get(location_id)
        if location is None:
            raise LocationNotFoundError(location_id)
        return location

    async def ensure_exists(self, session: AsyncSession, location_id: int) -> None:
        if not await LocationRepository(session).exists(location_id):
            raise LocationNotFoundError(location_id)

    async def find_or_create_location(self, session: AsyncSession, info: LocationInfo) -> Tuple[Location, bool]:
        """
        Location matching the provider's resolved name and country, created in
        the caller's transaction when missing. Returns (location, created).

        A concurrent creator makes the caller's commit fail on the unique
        constraint; Database.run_in_transaction replays the work, which then
        finds the row here.
        """
        if info is None or not info.name or not info.country:
            raise WeatherApiError("Weather API response did not include a resolvable location")

        repo = LocationRepository(session)
        existing = await repo.find_by_name_and_country(info.name, info.country)
        if existing is not None:
            return existing, False

        location = await repo.add(location_mapper.from_weather_api(info))
        logs.log(logging.INFO, f"Created new location with ID: {location.id} ({info.name}, {info.country})")
        return location, True

    def location_created(self) -> None:
        """Call after the creating transaction has committed."""
        self.cache.clear()
        self.metrics.record_location_created()
