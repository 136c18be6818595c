import logging
import time
from typing import Any, Callable, Hashable, Optional

import cachetools

from weatherhub.core.logger import logs
from weatherhub.services.Metrics_service import MetricsService

DEFAULT_CACHE_SIZE = 500


class TTLCache:
    """
    Bounded in-memory cache where every entry expires a fixed time after it
    was stored; the least recently used entry goes first once the cache is full.
    Hits and misses are logged and counted.
    """

    def __init__(self, name: str, ttl_seconds: float, metrics: Optional[MetricsService] = None,
                 clock: Callable[[], float] = time.monotonic, max_size: int = DEFAULT_CACHE_SIZE):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.metrics = metrics
        self._entries = cachetools.TTLCache(maxsize=max_size, ttl=ttl_seconds, timer=clock)

    @property
    def max_size(self) -> int:
        return int(self._entries.maxsize)

    def get(self, key: Hashable) -> Any:
        self._entries.expire()
        value = self._entries.get(key)
        if value is not None:
            logs.log(logging.INFO, f"✓ {self.name} cache HIT for {key}")
            if self.metrics:
                self.metrics.record_cache_hit()
            return value

        logs.log(logging.INFO, f"✗ {self.name} cache MISS for {key}")
        if self.metrics:
            self.metrics.record_cache_miss()
        return None

    def put(self, key: Hashable, value: Any) -> None:
        if value is None:
            return
        self._entries[key] = value

    def evict(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        if self._entries:
            logs.log(logging.INFO, f"Evicting all {len(self._entries)} {self.name} cache entries")
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
