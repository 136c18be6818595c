from pydantic import BaseModel
from typing import Optional, List
from datetime import date

from weatherhub.models.weather_model import ApiModel, Condition, LocationInfo


# --- WeatherAPI.com wire format (/forecast.json) ---

class Day(ApiModel):
    maxtemp_c: Optional[float] = None
    mintemp_c: Optional[float] = None
    avgtemp_c: Optional[float] = None
    maxwind_kph: Optional[float] = None
    totalprecip_mm: Optional[float] = None
    avghumidity: Optional[int] = None
    daily_chance_of_rain: Optional[int] = None
    condition: Optional[Condition] = None
    uv: Optional[float] = None


class Astro(ApiModel):
    sunrise: Optional[str] = None
    sunset: Optional[str] = None


class ForecastDay(ApiModel):
    date: Optional[str] = None
    day: Optional[Day] = None
    astro: Optional[Astro] = None


class Forecast(ApiModel):
    forecastday: Optional[List[Optional[ForecastDay]]] = None


class ForecastApiResponse(ApiModel):
    location: Optional[LocationInfo] = None
    forecast: Optional[Forecast] = None


# --- Outward DTO ---

class ForecastDto(BaseModel):
    id: Optional[int] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    forecast_date: date
    max_temperature: Optional[float] = None
    min_temperature: Optional[float] = None
    avg_temperature: Optional[float] = None
    max_wind_speed: Optional[float] = None
    avg_humidity: Optional[int] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    precipitation_mm: Optional[float] = None
    precipitation_probability: Optional[int] = None
    uv_index: Optional[float] = None
    sunrise_time: Optional[str] = None
    sunset_time: Optional[str] = None
