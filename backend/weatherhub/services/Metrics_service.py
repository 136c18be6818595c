"""
In-process metrics: counters, gauges and timers keyed by dotted names.

Shared by concurrent callers; all mutation goes through one lock.
"""
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List

WEATHER_API_CALLS = "weather.api.calls.total"
FORECAST_API_CALLS = "forecast.api.calls.total"
CACHE_HITS = "cache.hits.total"
CACHE_MISSES = "cache.misses.total"
LOCATIONS_CREATED = "locations.created.total"
WEATHER_RECORDS_SAVED = "weather.records.saved.total"
FORECAST_RECORDS_SAVED = "forecast.records.saved.total"
EXTERNAL_API_RESPONSE_TIME = "external.api.response.time"


@dataclass
class TimerStats:
    count: int = 0
    total_seconds: float = 0.0
    max_seconds: float = 0.0
    samples: List[float] = field(default_factory=list)

    def record(self, seconds: float) -> None:
        self.count += 1
        self.total_seconds += seconds
        self.max_seconds = max(self.max_seconds, seconds)
        self.samples.append(seconds)
        # keep the most recent samples only
        if len(self.samples) > 1000:
            del self.samples[: len(self.samples) - 1000]

    @property
    def mean_seconds(self) -> float:
        return self.total_seconds / self.count if self.count else 0.0


class MetricsService:
    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[str, float] = {}
        self._gauges: Dict[str, float] = {}
        self._timers: Dict[str, TimerStats] = {}

    # --- primitives ---

    def register_counter(self, name: str) -> None:
        with self._lock:
            self._counters.setdefault(name, 0)

    def increment(self, name: str, amount: float = 1) -> None:
        with self._lock:
            self._counters[name] = self._counters.get(name, 0) + amount

    def counter(self, name: str) -> float:
        with self._lock:
            return self._counters.get(name, 0)

    def set_gauge(self, name: str, value: float) -> None:
        with self._lock:
            self._gauges[name] = value

    def gauge(self, name: str) -> float | None:
        with self._lock:
            return self._gauges.get(name)

    def record_time(self, name: str, seconds: float) -> None:
        with self._lock:
            self._timers.setdefault(name, TimerStats()).record(seconds)

    def timer(self, name: str) -> TimerStats:
        with self._lock:
            return self._timers.setdefault(name, TimerStats())

    @contextmanager
    def time(self, name: str) -> Iterator[None]:
        started = time.perf_counter()
        try:
            yield
        finally:
            self.record_time(name, time.perf_counter() - started)

    # --- domain shortcuts ---

    def record_weather_api_call(self) -> None:
        self.increment(WEATHER_API_CALLS)

    def record_forecast_api_call(self) -> None:
        self.increment(FORECAST_API_CALLS)

    def record_cache_hit(self) -> None:
        self.increment(CACHE_HITS)

    def record_cache_miss(self) -> None:
        self.increment(CACHE_MISSES)

    def record_location_created(self) -> None:
        self.increment(LOCATIONS_CREATED)

    def record_weather_records_saved(self, count: int) -> None:
        self.increment(WEATHER_RECORDS_SAVED, count)

    def record_forecast_records_saved(self, count: int) -> None:
        self.increment(FORECAST_RECORDS_SAVED, count)

    def record_external_api_response_time(self, seconds: float) -> None:
        self.record_time(EXTERNAL_API_RESPONSE_TIME, seconds)

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "gauges": dict(self._gauges),
                "timers": {
                    name: {
                        "count": stats.count,
                        "total_seconds": round(stats.total_seconds, 6),
                        "mean_seconds": round(stats.mean_seconds, 6),
                        "max_seconds": round(stats.max_seconds, 6),
                    }
                    for name, stats in self._timers.items()
                },
            }
