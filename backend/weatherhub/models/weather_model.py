from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


# --- WeatherAPI.com wire format (/current.json) ---
# Unknown fields are ignored so provider additions never break parsing.

class ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Condition(ApiModel):
    text: Optional[str] = None
    icon: Optional[str] = None
    code: Optional[int] = None


class LocationInfo(ApiModel):
    name: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    tz_id: Optional[str] = None
    localtime: Optional[str] = None


class CurrentWeather(ApiModel):
    temp_c: Optional[float] = None
    feelslike_c: Optional[float] = None
    condition: Optional[Condition] = None
    wind_kph: Optional[float] = None
    wind_dir: Optional[str] = None
    pressure_mb: Optional[float] = None
    precip_mm: Optional[float] = None
    humidity: Optional[int] = None
    cloud: Optional[int] = None
    uv: Optional[float] = None


class WeatherApiResponse(ApiModel):
    location: Optional[LocationInfo] = None
    current: Optional[CurrentWeather] = None


# --- Outward DTO ---

class WeatherDto(BaseModel):
    """id and location_id are None when the data came straight from the provider."""
    id: Optional[int] = None
    location_id: Optional[int] = None
    location_name: Optional[str] = None
    temperature: Optional[float] = None
    feels_like: Optional[float] = None
    humidity: Optional[int] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[str] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    pressure_mb: Optional[float] = None
    precipitation_mm: Optional[float] = None
    cloud_coverage: Optional[int] = None
    uv_index: Optional[float] = None
    timestamp: Optional[datetime] = None
