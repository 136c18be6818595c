from datetime import datetime
from typing import List, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from weatherhub.models.entities import WeatherRecord


class WeatherRecordRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, record: WeatherRecord) -> WeatherRecord:
        self.session.add(record)
        await self.session.flush()
        return record

    async def find_page_by_location(self, location_id: int, page: int, size: int) -> Tuple[List[WeatherRecord], int]:
        """Newest first."""
        total = await self.session.scalar(
            select(func.count()).select_from(WeatherRecord).where(WeatherRecord.location_id == location_id)
        )
        result = await self.session.execute(
            select(WeatherRecord)
            .where(WeatherRecord.location_id == location_id)
            .order_by(WeatherRecord.timestamp.desc(), WeatherRecord.id.desc())
            .offset(page * size)
            .limit(size)
        )
        return list(result.scalars().all()), total or 0

    async def find_by_location_between(self, location_id: int, start: datetime, end: datetime) -> List[WeatherRecord]:
        result = await self.session.execute(
            select(WeatherRecord)
            .where(
                WeatherRecord.location_id == location_id,
                WeatherRecord.timestamp >= start,
                WeatherRecord.timestamp <= end,
            )
            .order_by(WeatherRecord.timestamp.desc(), WeatherRecord.id.desc())
        )
        return list(result.scalars().all())

    async def delete_before(self, cutoff: datetime) -> int:
        result = await self.session.execute(delete(WeatherRecord).where(WeatherRecord.timestamp < cutoff))
        return result.rowcount or 0
