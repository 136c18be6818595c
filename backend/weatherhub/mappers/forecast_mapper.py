import logging
from datetime import date
from typing import List, Optional

from weatherhub.core.exceptions import DataConsistencyError
from weatherhub.core.logger import logs
from weatherhub.models.entities import ForecastRecord, Location
from weatherhub.models.forecast_model import ForecastApiResponse, ForecastDay, ForecastDto


def to_dto(record: Optional[ForecastRecord]) -> Optional[ForecastDto]:
    if record is None:
        return None

    if record.location is None:
        logs.log(logging.ERROR, f"ForecastRecord {record.id} has no location loaded")
        raise DataConsistencyError(
            f"ForecastRecord {record.id} has no associated location; load it with the record"
        )

    return ForecastDto(
        id=record.id,
        location_id=record.location.id,
        location_name=record.location.name,
        forecast_date=record.forecast_date,
        max_temperature=record.max_temperature,
        min_temperature=record.min_temperature,
        avg_temperature=record.avg_temperature,
        max_wind_speed=record.max_wind_speed,
        avg_humidity=record.avg_humidity,
        condition=record.condition,
        description=record.description,
        precipitation_mm=record.precipitation_mm,
        precipitation_probability=record.precipitation_probability,
        uv_index=record.uv_index,
        sunrise_time=record.sunrise_time,
        sunset_time=record.sunset_time,
    )


def from_weather_api(response: Optional[ForecastApiResponse], location: Location) -> List[ForecastRecord]:
    records = []
    for forecast_day in _forecast_days(response):
        day = forecast_day.day
        astro = forecast_day.astro
        condition = day.condition.text if day.condition else None
        records.append(
            ForecastRecord(
                location=location,
                forecast_date=date.fromisoformat(forecast_day.date),
                max_temperature=day.maxtemp_c,
                min_temperature=day.mintemp_c,
                avg_temperature=day.avgtemp_c,
                max_wind_speed=day.maxwind_kph,
                avg_humidity=day.avghumidity,
                condition=condition,
                description=condition,
                precipitation_mm=day.totalprecip_mm,
                precipitation_probability=day.daily_chance_of_rain,
                uv_index=day.uv,
                sunrise_time=astro.sunrise if astro else None,
                sunset_time=astro.sunset if astro else None,
            )
        )
    return records


def to_dto_from_api(response: Optional[ForecastApiResponse], location_name: Optional[str]) -> List[ForecastDto]:
    dtos = []
    for forecast_day in _forecast_days(response):
        day = forecast_day.day
        astro = forecast_day.astro
        condition = day.condition.text if day.condition else None
        dtos.append(
            ForecastDto(
                id=None,
                location_id=None,
                location_name=location_name,
                forecast_date=date.fromisoformat(forecast_day.date),
                max_temperature=day.maxtemp_c,
                min_temperature=day.mintemp_c,
                avg_temperature=day.avgtemp_c,
                max_wind_speed=day.maxwind_kph,
                avg_humidity=day.avghumidity,
                condition=condition,
                description=condition,
                precipitation_mm=day.totalprecip_mm,
                precipitation_probability=day.daily_chance_of_rain,
                uv_index=day.uv,
                sunrise_time=astro.sunrise if astro else None,
                sunset_time=astro.sunset if astro else None,
            )
        )
    return dtos


def _forecast_days(response: Optional[ForecastApiResponse]) -> List[ForecastDay]:
    """Usable days only: entries without a day block or a readable date are skipped."""
    if response is None or response.forecast is None or response.forecast.forecastday is None:
        return []

    days = []
    for forecast_day in response.forecast.forecastday:
        if forecast_day is None or forecast_day.day is None:
            continue
        try:
            date.fromisoformat(forecast_day.date or "")
        except ValueError:
            logs.log(logging.WARNING, f"Skipping forecast day with unreadable date '{forecast_day.date}'")
            continue
        days.append(forecast_day)
    return days
