from datetime import date
from typing import Iterable, List, Set

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from weatherhub.models.entities import ForecastRecord


class ForecastRecordRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_all(self, records: List[ForecastRecord]) -> List[ForecastRecord]:
        self.session.add_all(records)
        await self.session.flush()
        return records

    async def find_by_location(self, location_id: int) -> List[ForecastRecord]:
        result = await self.session.execute(
            select(ForecastRecord)
            .where(ForecastRecord.location_id == location_id)
            .order_by(ForecastRecord.forecast_date)
        )
        return list(result.scalars().all())

    async def find_future_by_location(self, location_id: int, today: date) -> List[ForecastRecord]:
        result = await self.session.execute(
            select(ForecastRecord)
            .where(ForecastRecord.location_id == location_id, ForecastRecord.forecast_date >= today)
            .order_by(ForecastRecord.forecast_date)
        )
        return list(result.scalars().all())

    async def find_by_location_between(self, location_id: int, start: date, end: date) -> List[ForecastRecord]:
        result = await self.session.execute(
            select(ForecastRecord)
            .where(
                ForecastRecord.location_id == location_id,
                ForecastRecord.forecast_date >= start,
                ForecastRecord.forecast_date <= end,
            )
            .order_by(ForecastRecord.forecast_date)
        )
        return list(result.scalars().all())

    async def find_dates_by_location_in(self, location_id: int, dates: Iterable[date]) -> Set[date]:
        """Which of the given dates already have a stored forecast (one query)."""
        dates = list(dates)
        if not dates:
            return set()
        result = await self.session.execute(
            select(ForecastRecord.forecast_date).where(
                ForecastRecord.location_id == location_id,
                ForecastRecord.forecast_date.in_(dates),
            )
        )
        return set(result.scalars().all())

    async def delete_before(self, cutoff: date) -> int:
        result = await self.session.execute(delete(ForecastRecord).where(ForecastRecord.forecast_date < cutoff))
        return result.rowcount or 0
