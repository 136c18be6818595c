import asyncio

import pytest

from weatherhub.core.exceptions import (
    CircuitOpenError,
    InvalidLocationError,
    RateLimitExceededError,
    ServiceUnavailableError,
    UpstreamServerError,
)
from weatherhub.core.resilience import (
    CircuitBreakerConfig,
    CircuitState,
    RateLimiterConfig,
    ResilientCall,
    ResiliencePolicy,
    RetryConfig,
)


class Upstream:
    """Async operations that count how often the network would have been hit."""

    def __init__(self):
        self.invocations = 0

    async def ok(self):
        self.invocations += 1
        return "ok"

    async def down(self):
        self.invocations += 1
        raise UpstreamServerError("down")


def four_call_window(wait=30.0):
    return CircuitBreakerConfig(
        failure_rate_threshold=50.0,
        sliding_window_size=4,
        wait_duration_in_open_state=wait,
    )


def no_retry_call(breaker=None):
    return ResilientCall(
        ResiliencePolicy("test", circuit_breaker=breaker or four_call_window(), retry=RetryConfig(max_retries=0))
    )


def unavailable(cause):
    return ServiceUnavailableError("Service is currently unavailable", cause=cause)


async def trip(call, upstream):
    for _ in range(2):
        with pytest.raises(ServiceUnavailableError):
            await call.execute(upstream.down, unavailable)


# --- circuit breaker ---

def test_failure_threshold_is_the_rate_share_of_the_window():
    assert four_call_window().failure_threshold == 2
    assert CircuitBreakerConfig().failure_threshold == 5
    assert CircuitBreakerConfig(failure_rate_threshold=0.0).failure_threshold == 1


async def test_open_circuit_short_circuits_without_calling():
    call = no_retry_call()
    upstream = Upstream()

    await call.execute(upstream.ok, unavailable)
    await call.execute(upstream.ok, unavailable)
    await trip(call, upstream)

    assert call.state == CircuitState.OPEN
    with pytest.raises(ServiceUnavailableError) as excinfo:
        await call.execute(upstream.ok, unavailable)
    assert isinstance(excinfo.value.__cause__, CircuitOpenError)
    assert upstream.invocations == 4


async def test_success_resets_the_failure_count():
    call = no_retry_call()
    upstream = Upstream()

    for _ in range(3):
        with pytest.raises(ServiceUnavailableError):
            await call.execute(upstream.down, unavailable)
        await call.execute(upstream.ok, unavailable)

    assert call.state == CircuitState.CLOSED


async def test_half_open_success_closes_the_circuit():
    call = no_retry_call(four_call_window(wait=0.05))
    upstream = Upstream()
    await trip(call, upstream)
    assert call.state == CircuitState.OPEN

    await asyncio.sleep(0.1)
    assert call.state == CircuitState.HALF_OPEN

    assert await call.execute(upstream.ok, unavailable) == "ok"
    assert call.state == CircuitState.CLOSED


async def test_half_open_failure_reopens_the_circuit():
    call = no_retry_call(four_call_window(wait=0.05))
    upstream = Upstream()
    await trip(call, upstream)
    await asyncio.sleep(0.1)

    with pytest.raises(ServiceUnavailableError):
        await call.execute(upstream.down, unavailable)

    assert call.state == CircuitState.OPEN
    with pytest.raises(ServiceUnavailableError) as excinfo:
        await call.execute(upstream.ok, unavailable)
    assert isinstance(excinfo.value.__cause__, CircuitOpenError)


# --- retry ---

async def test_transient_failures_are_retried_with_backoff():
    waits = []

    async def sleep(seconds):
        waits.append(seconds)

    call = ResilientCall(ResiliencePolicy("test", retry=RetryConfig(max_retries=3, wait_duration=0.5)), sleep)
    attempts = 0

    async def flaky():
        nonlocal attempts
        attempts += 1
        if attempts < 3:
            raise UpstreamServerError("boom")
        return "ok"

    assert await call.execute(flaky, unavailable) == "ok"
    assert attempts == 3
    assert waits == [0.5, 1.0]


async def test_exhausted_retries_go_to_fallback():
    call = ResilientCall(ResiliencePolicy("test", retry=RetryConfig(max_retries=3, wait_duration=0)))
    upstream = Upstream()

    with pytest.raises(ServiceUnavailableError) as excinfo:
        await call.execute(upstream.down, unavailable)

    assert upstream.invocations == 4
    assert isinstance(excinfo.value.__cause__, UpstreamServerError)


async def test_non_transient_errors_skip_retry_and_fallback():
    call = ResilientCall(ResiliencePolicy("test", retry=RetryConfig(max_retries=3, wait_duration=0)))
    attempts = 0

    async def bad_request():
        nonlocal attempts
        attempts += 1
        raise InvalidLocationError("Invalid location or API request: Atlantis")

    with pytest.raises(InvalidLocationError):
        await call.execute(bad_request, unavailable)

    assert attempts == 1
    assert call.state == CircuitState.CLOSED


# --- rate limiter ---

async def test_rate_limiter_rejects_when_no_permit_within_timeout():
    call = ResilientCall(
        ResiliencePolicy(
            "test",
            rate_limiter=RateLimiterConfig(limit_for_period=2, limit_refresh_period=10.0, timeout_duration=0.05),
        )
    )
    upstream = Upstream()

    await call.execute(upstream.ok, unavailable)
    await call.execute(upstream.ok, unavailable)
    with pytest.raises(RateLimitExceededError):
        await call.execute(upstream.ok, unavailable)

    assert upstream.invocations == 2
    assert call.state == CircuitState.CLOSED


async def test_rate_limiter_waits_for_a_permit_within_timeout():
    call = ResilientCall(
        ResiliencePolicy(
            "test",
            rate_limiter=RateLimiterConfig(limit_for_period=1, limit_refresh_period=0.1, timeout_duration=1.0),
        )
    )
    upstream = Upstream()

    assert await call.execute(upstream.ok, unavailable) == "ok"
    assert await call.execute(upstream.ok, unavailable) == "ok"
    assert upstream.invocations == 2
