import os

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("WEATHER_API_KEY", "test-weather-api-key-0123456789")

import asyncio
import json
from datetime import date, datetime, timedelta

import httpx
import pytest

from weatherhub.client.weather_api_client import WeatherApiClient
from weatherhub.core.config import Settings
from weatherhub.core.container import ServiceContainer
from weatherhub.main import create_app
from weatherhub.services.Metrics_service import MetricsService

TEST_API_KEY = "test-weather-api-key-0123456789"

KNOWN_LOCATIONS = {
    "london": ("London", "City of London, Greater London", "United Kingdom", 51.52, -0.11),
    "paris": ("Paris", "Ile-de-France", "France", 48.87, 2.33),
    "tokyo": ("Tokyo", "Tokyo", "Japan", 35.69, 139.69),
}


def location_block(key: str) -> dict:
    name, region, country, lat, lon = KNOWN_LOCATIONS[key]
    return {
        "name": name,
        "region": region,
        "country": country,
        "lat": lat,
        "lon": lon,
        "tz_id": "UTC",
        "localtime": datetime.now().strftime("%Y-%m-%d %H:%M"),
    }


def current_payload(key: str = "london", temp_c: float = 15.5, condition: str = "Partly cloudy") -> dict:
    return {
        "location": location_block(key),
        "current": {
            "temp_c": temp_c,
            "feelslike_c": temp_c - 1.5,
            "condition": {"text": condition, "icon": "//cdn.weatherapi.com/116.png", "code": 1003},
            "wind_kph": 11.2,
            "wind_dir": "WSW",
            "pressure_mb": 1015.0,
            "precip_mm": 0.1,
            "humidity": 72,
            "cloud": 50,
            "uv": 3.0,
            "is_day": 1,
        },
    }


def forecast_payload(key: str = "london", days: int = 3, start: date | None = None) -> dict:
    start = start or date.today()
    return {
        "location": location_block(key),
        "forecast": {
            "forecastday": [
                {
                    "date": (start + timedelta(days=offset)).isoformat(),
                    "day": {
                        "maxtemp_c": 18.0 + offset,
                        "mintemp_c": 9.0 + offset,
                        "avgtemp_c": 13.5 + offset,
                        "maxwind_kph": 20.5,
                        "totalprecip_mm": 1.2,
                        "avghumidity": 70,
                        "daily_chance_of_rain": 40,
                        "condition": {"text": "Patchy rain nearby"},
                        "uv": 4.0,
                    },
                    "astro": {"sunrise": "07:25 AM", "sunset": "06:01 PM"},
                }
                for offset in range(days)
            ]
        },
    }


class FakeWeatherApi:
    """
    Stands in for WeatherAPI.com behind an httpx.MockTransport.

    Locations are matched on the part of ``q`` before the first comma.
    Unknown locations answer 400 like the real provider.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.always_fail: dict[str, int] = {}
        self.queued_statuses: dict[str, list[int]] = {}
        self.raw_bodies: dict[str, bytes] = {}
        self.transport_errors: set[str] = set()
        self.delay = 0.0

    def count(self, endpoint: str | None = None) -> int:
        if endpoint is None:
            return len(self.requests)
        return sum(1 for request in self.requests if request.url.path.endswith(endpoint))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)

        q = request.url.params.get("q", "")
        key = q.split(",")[0].strip().lower()

        if key in self.transport_errors:
            raise httpx.ConnectError("connection refused", request=request)
        if key in self.always_fail:
            return httpx.Response(self.always_fail[key], json={"error": {"message": "failure"}})
        if self.queued_statuses.get(key):
            return httpx.Response(self.queued_statuses[key].pop(0), json={"error": {"message": "failure"}})
        if key in self.raw_bodies:
            return httpx.Response(200, content=self.raw_bodies[key])
        if key not in KNOWN_LOCATIONS:
            return httpx.Response(400, json={"error": {"code": 1006, "message": "No matching location found."}})

        if request.url.path.endswith("/current.json"):
            return httpx.Response(200, content=json.dumps(current_payload(key)).encode())
        days = int(request.url.params.get("days", "3"))
        return httpx.Response(200, content=json.dumps(forecast_payload(key, days)).encode())


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        WEATHER_API_KEY=TEST_API_KEY,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'weatherhub-test.db'}",
        LOG_TO_FILE=False,
        CURRENT_RETRY_WAIT_SECONDS=0,
        FORECAST_RETRY_WAIT_SECONDS=0,
        CURRENT_RATE_LIMIT_PER_PERIOD=1000,
        FORECAST_RATE_LIMIT_PER_PERIOD=1000,
    )


@pytest.fixture
def fake_api():
    return FakeWeatherApi()


@pytest.fixture
async def api_client(test_settings, fake_api):
    client = WeatherApiClient(test_settings, metrics=MetricsService(), transport=httpx.MockTransport(fake_api.handler))
    yield client
    await client.aclose()


@pytest.fixture
async def container(test_settings, fake_api):
    container = ServiceContainer(test_settings, transport=httpx.MockTransport(fake_api.handler))
    await container.database.create_tables()
    yield container
    await container.aclose()


@pytest.fixture
async def http(test_settings, fake_api):
    app = create_app(test_settings, transport=httpx.MockTransport(fake_api.handler))
    await app.state.container.database.create_tables()
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client
    await app.state.container.aclose()
