import logging
from datetime import datetime
from typing import Optional

from weatherhub.core.exceptions import DataConsistencyError
from weatherhub.core.logger import logs
from weatherhub.models.entities import Location, WeatherRecord, utcnow
from weatherhub.models.weather_model import WeatherApiResponse, WeatherDto

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"


def to_dto(record: Optional[WeatherRecord]) -> Optional[WeatherDto]:
    if record is None:
        return None

    if record.location is None:
        logs.log(logging.ERROR, f"WeatherRecord {record.id} has no location loaded")
        raise DataConsistencyError(
            f"WeatherRecord {record.id} has no associated location; load it with the record"
        )

    return WeatherDto(
        id=record.id,
        location_id=record.location.id,
        location_name=record.location.name,
        temperature=record.temperature,
        feels_like=record.feels_like,
        humidity=record.humidity,
        wind_speed=record.wind_speed,
        wind_direction=record.wind_direction,
        condition=record.condition,
        description=record.description,
        pressure_mb=record.pressure_mb,
        precipitation_mm=record.precipitation_mm,
        cloud_coverage=record.cloud_coverage,
        uv_index=record.uv_index,
        timestamp=record.timestamp,
    )


def from_weather_api(response: Optional[WeatherApiResponse], location: Location) -> Optional[WeatherRecord]:
    if response is None or response.current is None:
        return None

    current = response.current
    condition = current.condition.text if current.condition else None
    return WeatherRecord(
        location=location,
        temperature=current.temp_c,
        feels_like=current.feelslike_c,
        humidity=current.humidity,
        wind_speed=current.wind_kph,
        wind_direction=current.wind_dir,
        condition=condition,
        description=condition,
        pressure_mb=current.pressure_mb,
        precipitation_mm=current.precip_mm,
        cloud_coverage=current.cloud,
        uv_index=current.uv,
        timestamp=_response_timestamp(response),
    )


def to_dto_from_api(response: Optional[WeatherApiResponse]) -> Optional[WeatherDto]:
    """DTO straight from the provider: no id, no location_id."""
    if response is None or response.current is None:
        return None

    current = response.current
    condition = current.condition.text if current.condition else None
    return WeatherDto(
        id=None,
        location_id=None,
        location_name=response.location.name if response.location else None,
        temperature=current.temp_c,
        feels_like=current.feelslike_c,
        humidity=current.humidity,
        wind_speed=current.wind_kph,
        wind_direction=current.wind_dir,
        condition=condition,
        description=condition,
        pressure_mb=current.pressure_mb,
        precipitation_mm=current.precip_mm,
        cloud_coverage=current.cloud,
        uv_index=current.uv,
        timestamp=_response_timestamp(response),
    )


def parse_timestamp(text: Optional[str]) -> Optional[datetime]:
    if not text:
        return None
    try:
        return datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError:
        logs.log(logging.WARNING, f"Failed to parse timestamp '{text}', using current time")
        return utcnow()


def _response_timestamp(response: WeatherApiResponse) -> datetime:
    local_time = response.location.localtime if response.location else None
    return parse_timestamp(local_time) or utcnow()
