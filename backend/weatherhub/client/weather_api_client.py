import logging
import time
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from weatherhub.core.config import Settings
from weatherhub.core.exceptions import (
    EmptyResponseError,
    InvalidLocationError,
    ServiceUnavailableError,
    UpstreamServerError,
    UpstreamTransportError,
)
from weatherhub.core.logger import logs
from weatherhub.core.resilience import (
    CircuitBreakerConfig,
    RateLimiterConfig,
    ResilientCall,
    ResiliencePolicy,
    RetryConfig,
)
from weatherhub.core.validation import validate_forecast_days
from weatherhub.models.forecast_model import ForecastApiResponse
from weatherhub.models.weather_model import WeatherApiResponse
from weatherhub.services.Metrics_service import MetricsService

CURRENT_WEATHER_PATH = "/current.json"
FORECAST_PATH = "/forecast.json"


def default_current_policy(config: Settings) -> ResiliencePolicy:
    return ResiliencePolicy(
        name="weatherApi",
        circuit_breaker=CircuitBreakerConfig(
            failure_rate_threshold=config.CURRENT_FAILURE_RATE_THRESHOLD,
            sliding_window_size=config.CURRENT_SLIDING_WINDOW_SIZE,
            wait_duration_in_open_state=config.CURRENT_OPEN_STATE_WAIT_SECONDS,
        ),
        retry=RetryConfig(
            max_retries=config.CURRENT_MAX_RETRIES,
            wait_duration=config.CURRENT_RETRY_WAIT_SECONDS,
        ),
        rate_limiter=RateLimiterConfig(
            limit_for_period=config.CURRENT_RATE_LIMIT_PER_PERIOD,
            limit_refresh_period=config.CURRENT_RATE_LIMIT_PERIOD_SECONDS,
            timeout_duration=config.CURRENT_RATE_LIMIT_TIMEOUT_SECONDS,
        ),
    )


def default_forecast_policy(config: Settings) -> ResiliencePolicy:
    return ResiliencePolicy(
        name="weatherApiForecast",
        circuit_breaker=CircuitBreakerConfig(
            failure_rate_threshold=config.FORECAST_FAILURE_RATE_THRESHOLD,
            sliding_window_size=config.FORECAST_SLIDING_WINDOW_SIZE,
            wait_duration_in_open_state=config.FORECAST_OPEN_STATE_WAIT_SECONDS,
        ),
        retry=RetryConfig(
            max_retries=config.FORECAST_MAX_RETRIES,
            wait_duration=config.FORECAST_RETRY_WAIT_SECONDS,
        ),
        rate_limiter=RateLimiterConfig(
            limit_for_period=config.FORECAST_RATE_LIMIT_PER_PERIOD,
            limit_refresh_period=config.FORECAST_RATE_LIMIT_PERIOD_SECONDS,
            timeout_duration=config.FORECAST_RATE_LIMIT_TIMEOUT_SECONDS,
        ),
    )


class WeatherApiClient:
    """
    Client for WeatherAPI.com.

    Current weather and forecast calls each run under their own resilience
    policy. A 4xx answer is the caller's fault and surfaces immediately as
    InvalidLocationError; 5xx, empty bodies and transport failures are retried
    and end in ServiceUnavailableError once retries run out or the circuit opens.
    """

    def __init__(
        self,
        config: Settings,
        current_policy: Optional[ResiliencePolicy] = None,
        forecast_policy: Optional[ResiliencePolicy] = None,
        metrics: Optional[MetricsService] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = config.WEATHER_API_KEY
        self.metrics = metrics or MetricsService()
        self.current_call = ResilientCall(current_policy or default_current_policy(config))
        self.forecast_call = ResilientCall(forecast_policy or default_forecast_policy(config))
        self._http = httpx.AsyncClient(
            base_url=config.WEATHER_API_BASE_URL,
            timeout=config.WEATHER_API_TIMEOUT,
            transport=transport,
        )

    async def get_current_weather(self, location: str) -> WeatherApiResponse:
        logs.log(logging.INFO, f"Fetching current weather for location: {location}")

        async def call() -> WeatherApiResponse:
            self.metrics.record_weather_api_call()
            payload = await self._get_json(CURRENT_WEATHER_PATH, {"q": location, "aqi": "no"}, location)
            return self._parse(WeatherApiResponse, payload, location)

        def fallback(cause: Exception) -> Exception:
            return ServiceUnavailableError(
                f"Weather service is currently unavailable. Please try again later. Location: {location}",
                cause=cause,
            )

        return await self.current_call.execute(call, fallback)

    async def get_forecast(self, location: str, days: int) -> ForecastApiResponse:
        validate_forecast_days(days)
        logs.log(logging.INFO, f"Fetching {days}-day forecast for location: {location}")

        async def call() -> ForecastApiResponse:
            self.metrics.record_forecast_api_call()
            payload = await self._get_json(
                FORECAST_PATH,
                {"q": location, "days": days, "aqi": "no", "alerts": "no"},
                location,
            )
            return self._parse(ForecastApiResponse, payload, location)

        def fallback(cause: Exception) -> Exception:
            return ServiceUnavailableError(
                f"Forecast service is currently unavailable. Please try again later. Location: {location}",
                cause=cause,
            )

        return await self.forecast_call.execute(call, fallback)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get_json(self, path: str, params: dict, location: str) -> Any:
        started = time.perf_counter()
        try:
            response = await self._http.get(path, params={"key": self.api_key, **params})
        except httpx.HTTPError as e:
            logs.log(logging.ERROR, f"Error calling Weather API for location {location}: {e}")
            raise UpstreamTransportError(f"Error calling Weather API for location: {location}", cause=e) from e
        finally:
            self.metrics.record_external_api_response_time(time.perf_counter() - started)

        status = response.status_code
        if 400 <= status < 500:
            logs.log(logging.ERROR, f"Client error from Weather API ({status}) for location: {location}")
            raise InvalidLocationError(f"Invalid location or API request: {location}")
        if status >= 500:
            logs.log(logging.ERROR, f"Server error from Weather API ({status}) for location: {location}")
            raise UpstreamServerError(f"Weather API server error ({status}) for location: {location}")

        if not response.content.strip():
            raise EmptyResponseError(f"Empty response from Weather API for location: {location}")
        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamTransportError(f"Unreadable response from Weather API for location: {location}", cause=e) from e
        if payload is None:
            raise EmptyResponseError(f"Empty response from Weather API for location: {location}")
        return payload

    @staticmethod
    def _parse(model, payload: Any, location: str):
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise UpstreamTransportError(f"Unexpected response from Weather API for location: {location}", cause=e) from e
