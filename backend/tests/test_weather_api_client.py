import httpx
import pytest

from conftest import TEST_API_KEY
from weatherhub.client.weather_api_client import WeatherApiClient
from weatherhub.core.exceptions import (
    CircuitOpenError,
    EmptyResponseError,
    InvalidInputError,
    InvalidLocationError,
    ServiceUnavailableError,
    UpstreamTransportError,
)
from weatherhub.core.resilience import CircuitBreakerConfig, CircuitState, ResiliencePolicy, RetryConfig
from weatherhub.services.Metrics_service import (
    EXTERNAL_API_RESPONSE_TIME,
    FORECAST_API_CALLS,
    WEATHER_API_CALLS,
    MetricsService,
)


async def test_current_weather_is_parsed(api_client, fake_api):
    response = await api_client.get_current_weather("London")

    assert response.location.name == "London"
    assert response.location.country == "United Kingdom"
    assert response.current.temp_c == 15.5
    assert response.current.condition.text == "Partly cloudy"

    params = fake_api.requests[0].url.params
    assert fake_api.requests[0].url.path.endswith("/current.json")
    assert params["key"] == TEST_API_KEY
    assert params["q"] == "London"
    assert params["aqi"] == "no"


async def test_forecast_request_parameters(api_client, fake_api):
    response = await api_client.get_forecast("Paris", 5)

    assert len(response.forecast.forecastday) == 5
    params = fake_api.requests[0].url.params
    assert fake_api.requests[0].url.path.endswith("/forecast.json")
    assert params["days"] == "5"
    assert params["alerts"] == "no"


async def test_client_error_is_not_retried(api_client, fake_api):
    with pytest.raises(InvalidLocationError, match="Atlantis"):
        await api_client.get_current_weather("Atlantis")
    assert fake_api.count() == 1


async def test_server_errors_are_retried_then_fall_back(api_client, fake_api):
    fake_api.always_fail["london"] = 500

    with pytest.raises(ServiceUnavailableError) as excinfo:
        await api_client.get_current_weather("London")

    assert "Weather service is currently unavailable" in excinfo.value.message
    assert "Location: London" in excinfo.value.message
    assert excinfo.value.status_code == 503
    assert fake_api.count() == 4


async def test_forecast_uses_fewer_retries(api_client, fake_api):
    fake_api.always_fail["london"] = 502

    with pytest.raises(ServiceUnavailableError, match="Forecast service is currently unavailable"):
        await api_client.get_forecast("London", 3)
    assert fake_api.count() == 3


async def test_recovers_after_transient_server_error(api_client, fake_api):
    fake_api.queued_statuses["london"] = [503, 500]

    response = await api_client.get_current_weather("London")

    assert response.current.temp_c == 15.5
    assert fake_api.count() == 3


@pytest.mark.parametrize("body", [b"", b"   ", b"null"])
async def test_empty_body_is_retried(api_client, fake_api, body):
    fake_api.raw_bodies["london"] = body

    with pytest.raises(ServiceUnavailableError) as excinfo:
        await api_client.get_current_weather("London")

    assert isinstance(excinfo.value.__cause__, EmptyResponseError)
    assert fake_api.count() == 4


async def test_transport_failure_is_wrapped_with_cause(api_client, fake_api):
    fake_api.transport_errors.add("london")

    with pytest.raises(ServiceUnavailableError) as excinfo:
        await api_client.get_current_weather("London")

    cause = excinfo.value.__cause__
    assert isinstance(cause, UpstreamTransportError)
    assert isinstance(cause.cause, httpx.ConnectError)


@pytest.mark.parametrize("days", [0, 15, -3])
async def test_forecast_days_out_of_range_never_reach_network(api_client, fake_api, days):
    with pytest.raises(InvalidInputError, match="between 1 and 14"):
        await api_client.get_forecast("London", days)
    assert fake_api.count() == 0


@pytest.mark.parametrize("days", [1, 14])
async def test_forecast_days_at_bounds_are_accepted(api_client, fake_api, days):
    response = await api_client.get_forecast("London", days)
    assert len(response.forecast.forecastday) == days


async def test_open_circuit_skips_the_network(test_settings, fake_api):
    policy = ResiliencePolicy(
        "weatherApi",
        circuit_breaker=CircuitBreakerConfig(sliding_window_size=4),
        retry=RetryConfig(max_retries=0),
    )
    client = WeatherApiClient(
        test_settings, current_policy=policy, transport=httpx.MockTransport(fake_api.handler)
    )
    fake_api.always_fail["tokyo"] = 500
    try:
        await client.get_current_weather("London")
        await client.get_current_weather("London")
        for _ in range(2):
            with pytest.raises(ServiceUnavailableError):
                await client.get_current_weather("Tokyo")

        assert client.current_call.state == CircuitState.OPEN
        assert fake_api.count() == 4

        with pytest.raises(ServiceUnavailableError) as excinfo:
            await client.get_current_weather("London")
        assert isinstance(excinfo.value.__cause__, CircuitOpenError)
        assert fake_api.count() == 4

        # forecast calls have their own breaker
        await client.get_forecast("London", 1)
        assert fake_api.count() == 5
    finally:
        await client.aclose()


async def test_calls_and_response_times_are_recorded(test_settings, fake_api):
    metrics = MetricsService()
    client = WeatherApiClient(test_settings, metrics=metrics, transport=httpx.MockTransport(fake_api.handler))
    fake_api.queued_statuses["london"] = [500]
    try:
        await client.get_current_weather("London")
        await client.get_forecast("Paris", 2)
    finally:
        await client.aclose()

    assert metrics.counter(WEATHER_API_CALLS) == 2
    assert metrics.counter(FORECAST_API_CALLS) == 1
    assert metrics.timer(EXTERNAL_API_RESPONSE_TIME).count == 3
