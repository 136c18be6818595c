"""
Resilience policies for outbound calls: circuit breaker, retry with
exponential backoff and a rate limiter.

Each client operation gets its own ResilientCall built from an explicit
ResiliencePolicy; nothing is looked up by name. Composition per call is

    Retry( CircuitBreaker( RateLimiter( operation ) ) )

tenacity drives the retries, circuitbreaker keeps the breaker state and
aiolimiter hands out permits. The fallback runs only when retries are
exhausted or the circuit is open.
"""
import asyncio
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from aiolimiter import AsyncLimiter
from circuitbreaker import STATE_CLOSED, STATE_HALF_OPEN, STATE_OPEN, CircuitBreaker
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from weatherhub.core.exceptions import (
    TRANSIENT_ERRORS,
    CircuitOpenError,
    RateLimitExceededError,
)
from weatherhub.core.logger import logs

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]


class CircuitState(str, Enum):
    CLOSED = STATE_CLOSED
    OPEN = STATE_OPEN
    HALF_OPEN = STATE_HALF_OPEN


@dataclass(frozen=True)
class CircuitBreakerConfig:
    failure_rate_threshold: float = 50.0
    sliding_window_size: int = 10
    wait_duration_in_open_state: float = 30.0
    record_exceptions: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS

    @property
    def failure_threshold(self) -> int:
        """Back-to-back failures that trip the breaker: the threshold share of one window."""
        return max(1, math.ceil(self.sliding_window_size * self.failure_rate_threshold / 100))


@dataclass(frozen=True)
class RetryConfig:
    # additional attempts after the first one
    max_retries: int = 3
    wait_duration: float = 0.5
    backoff_multiplier: float = 2.0
    retry_exceptions: Tuple[Type[BaseException], ...] = TRANSIENT_ERRORS


@dataclass(frozen=True)
class RateLimiterConfig:
    limit_for_period: int = 10
    limit_refresh_period: float = 1.0
    timeout_duration: float = 0.5


@dataclass(frozen=True)
class ResiliencePolicy:
    name: str
    circuit_breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    rate_limiter: RateLimiterConfig = field(default_factory=RateLimiterConfig)


class ResilientCall:
    """Runs an async operation under one policy's breaker, retry and rate limiter."""

    def __init__(self, policy: ResiliencePolicy, sleep: Sleep = asyncio.sleep):
        self.policy = policy
        self.circuit_breaker = CircuitBreaker(
            failure_threshold=policy.circuit_breaker.failure_threshold,
            recovery_timeout=policy.circuit_breaker.wait_duration_in_open_state,
            expected_exception=policy.circuit_breaker.record_exceptions,
            name=policy.name,
        )
        self.rate_limiter = AsyncLimiter(
            policy.rate_limiter.limit_for_period,
            policy.rate_limiter.limit_refresh_period,
        )
        self._sleep = sleep

    @property
    def state(self) -> CircuitState:
        return CircuitState(self.circuit_breaker.state)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        fallback: Callable[[Exception], Exception],
    ) -> T:
        """
        fallback receives the final cause and returns the exception to raise;
        it can never produce a result.
        """
        retry = self.policy.retry
        retrying = AsyncRetrying(
            stop=stop_after_attempt(retry.max_retries + 1),
            wait=wait_exponential(multiplier=retry.wait_duration, exp_base=retry.backoff_multiplier),
            retry=retry_if_exception_type(retry.retry_exceptions),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            return await retrying(self._attempt, operation)
        except CircuitOpenError as e:
            logs.log(logging.ERROR, f"Circuit breaker fallback triggered for '{self.policy.name}': {e}")
            raise fallback(e) from e
        except retry.retry_exceptions as e:
            logs.log(
                logging.ERROR,
                f"'{self.policy.name}' failed after {retry.max_retries + 1} attempts, falling back: {e}",
            )
            raise fallback(e) from e

    async def _attempt(self, operation: Callable[[], Awaitable[T]]) -> T:
        previous = self.state
        if previous == CircuitState.OPEN:
            raise CircuitOpenError(self.policy.name)
        await self._acquire_permit()
        try:
            with self.circuit_breaker:
                return await operation()
        finally:
            self._log_transition(previous)

    async def _acquire_permit(self) -> None:
        timeout = self.policy.rate_limiter.timeout_duration
        try:
            await asyncio.wait_for(self.rate_limiter.acquire(), timeout=timeout)
        except asyncio.TimeoutError as e:
            logs.log(logging.WARNING, f"Rate limiter '{self.policy.name}' rejected a call")
            raise RateLimitExceededError(self.policy.name) from e

    def _log_retry(self, retry_state: RetryCallState) -> None:
        logs.log(
            logging.WARNING,
            f"'{self.policy.name}' attempt {retry_state.attempt_number} failed "
            f"({retry_state.outcome.exception()}); retrying in {retry_state.next_action.sleep:.2f}s",
        )

    def _log_transition(self, previous: CircuitState) -> None:
        current = self.state
        if current != previous:
            level = logging.WARNING if current == CircuitState.OPEN else logging.INFO
            logs.log(level, f"Circuit breaker '{self.policy.name}' transitioned from {previous.name} to {current.name}")
