"""
Relational schema: locations own weather_records and forecast_records.

Deleting a location cascades to its records at the database level
(ON DELETE CASCADE). Records navigate to their location; a location does
not hold its records, history is fetched through the repositories.
"""
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    # naive UTC, matching what SQLite hands back
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


class Base(DeclarativeBase):
    pass


class AuditMixin:
    """
    Audit timestamps set explicitly: on construction and on touch().
    Every entity inherits this, so an entity without audit columns cannot exist.
    """

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __init__(self, **kwargs):
        now = utcnow()
        kwargs.setdefault("created_at", now)
        kwargs.setdefault("updated_at", kwargs["created_at"])
        super().__init__(**kwargs)

    def touch(self) -> None:
        self.updated_at = utcnow()


class Location(AuditMixin, Base):
    __tablename__ = "locations"
    __table_args__ = (
        UniqueConstraint("name", "country", name="uk_location_name_country"),
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="ck_location_latitude"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="ck_location_longitude"),
        Index("idx_location_name", "name"),
        Index("idx_location_country", "country"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    region: Mapped[Optional[str]] = mapped_column(String(100))

    def __repr__(self):
        return f"<Location(id={self.id}, name='{self.name}', country='{self.country}')>"


class WeatherRecord(AuditMixin, Base):
    __tablename__ = "weather_records"
    __table_args__ = (
        Index("idx_weather_location_id", "location_id"),
        Index("idx_weather_timestamp", "timestamp"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    temperature: Mapped[float] = mapped_column(Float, nullable=False)
    feels_like: Mapped[Optional[float]] = mapped_column(Float)
    humidity: Mapped[int] = mapped_column(Integer, nullable=False)
    wind_speed: Mapped[float] = mapped_column(Float, nullable=False)
    wind_direction: Mapped[Optional[str]] = mapped_column(String(10))
    condition: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))
    pressure_mb: Mapped[Optional[float]] = mapped_column(Float)
    precipitation_mm: Mapped[Optional[float]] = mapped_column(Float)
    cloud_coverage: Mapped[Optional[int]] = mapped_column(Integer)
    uv_index: Mapped[Optional[float]] = mapped_column(Float)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    location: Mapped[Optional[Location]] = relationship(Location, lazy="joined")

    def __repr__(self):
        return f"<WeatherRecord(id={self.id}, location_id={self.location_id}, timestamp={self.timestamp})>"


class ForecastRecord(AuditMixin, Base):
    __tablename__ = "forecast_records"
    __table_args__ = (
        UniqueConstraint("location_id", "forecast_date", name="uk_location_forecast_date"),
        Index("idx_forecast_location_id", "location_id"),
        Index("idx_forecast_date", "forecast_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    location_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False
    )
    forecast_date: Mapped[date] = mapped_column(Date, nullable=False)
    max_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    min_temperature: Mapped[float] = mapped_column(Float, nullable=False)
    avg_temperature: Mapped[Optional[float]] = mapped_column(Float)
    max_wind_speed: Mapped[Optional[float]] = mapped_column(Float)
    avg_humidity: Mapped[Optional[int]] = mapped_column(Integer)
    condition: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))
    precipitation_mm: Mapped[Optional[float]] = mapped_column(Float)
    precipitation_probability: Mapped[Optional[int]] = mapped_column(Integer)
    uv_index: Mapped[Optional[float]] = mapped_column(Float)
    sunrise_time: Mapped[Optional[str]] = mapped_column(String(10))
    sunset_time: Mapped[Optional[str]] = mapped_column(String(10))

    location: Mapped[Optional[Location]] = relationship(Location, lazy="joined")

    def __repr__(self):
        return f"<ForecastRecord(id={self.id}, location_id={self.location_id}, date={self.forecast_date})>"
