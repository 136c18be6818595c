from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from weatherhub.models.entities import Location


class LocationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, location_id: int) -> Optional[Location]:
        return await self.session.get(Location, location_id)

    async def exists(self, location_id: int) -> bool:
        result = await self.session.execute(select(Location.id).where(Location.id == location_id))
        return result.first() is not None

    async def exists_by_name_and_country(self, name: str, country: str) -> bool:
        return await self.find_by_name_and_country(name, country) is not None

    async def find_by_name_and_country(self, name: str, country: str) -> Optional[Location]:
        result = await self.session.execute(
            select(Location).where(Location.name == name, Location.country == country)
        )
        return result.scalars().first()

    async def find_all(self) -> List[Location]:
        result = await self.session.execute(select(Location).order_by(Location.id))
        return list(result.scalars().all())

    async def find_page(self, page: int, size: int) -> Tuple[List[Location], int]:
        total = await self.session.scalar(select(func.count()).select_from(Location))
        result = await self.session.execute(
            select(Location).order_by(Location.id).offset(page * size).limit(size)
        )
        return list(result.scalars().all()), total or 0

    async def search_by_name(self, name: str) -> List[Location]:
        """Case-insensitive substring match on the location name."""
        result = await self.session.execute(
            select(Location).where(Location.name.ilike(f"%{name}%")).order_by(Location.id)
        )
        return list(result.scalars().all())

    async def search_page(self, name: str, page: int, size: int) -> Tuple[List[Location], int]:
        condition = Location.name.ilike(f"%{name}%")
        total = await self.session.scalar(select(func.count()).select_from(Location).where(condition))
        result = await self.session.execute(
            select(Location).where(condition).order_by(Location.id).offset(page * size).limit(size)
        )
        return list(result.scalars().all()), total or 0

    async def add(self, location: Location) -> Location:
        self.session.add(location)
        await self.session.flush()
        return location

    async def delete(self, location: Location) -> None:
        # weather and forecast rows go with it (ON DELETE CASCADE)
        await self.session.delete(location)
        await self.session.flush()

    async def all_ids(self) -> List[int]:
        result = await self.session.execute(select(Location.id).order_by(Location.id))
        return list(result.scalars().all())
