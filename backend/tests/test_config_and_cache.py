import logging

import pytest

from weatherhub.core.cache import TTLCache
from weatherhub.core.config import Settings, validate_settings
from weatherhub.core.exceptions import ConfigurationError
from weatherhub.services.Metrics_service import CACHE_HITS, CACHE_MISSES, MetricsService


def make_settings(**overrides):
    values = dict(_env_file=None, WEATHER_API_KEY="a-real-looking-weather-api-key", LOG_TO_FILE=False)
    values.update(overrides)
    return Settings(**values)


def test_valid_settings_pass():
    validate_settings(make_settings())


@pytest.mark.parametrize("key", ["", "   ", "your-key-here", "changeme", "your_weatherapi_com_key"])
def test_missing_or_placeholder_api_key_fails_fast(key):
    with pytest.raises(ConfigurationError):
        validate_settings(make_settings(WEATHER_API_KEY=key))


def test_empty_database_url_fails_fast():
    with pytest.raises(ConfigurationError, match="Database URL"):
        validate_settings(make_settings(DATABASE_URL=""))


def test_short_api_key_only_warns(caplog):
    logger = logging.getLogger("weatherhub.test.config")
    with caplog.at_level(logging.WARNING, logger="weatherhub.test.config"):
        validate_settings(make_settings(WEATHER_API_KEY="short-key"), logger)
    assert "shorter than" in caplog.text


def test_cache_entries_expire_after_ttl():
    now = [0.0]
    metrics = MetricsService()
    cache = TTLCache("Weather", 300, metrics, clock=lambda: now[0])

    assert cache.get("london") is None
    cache.put("london", {"temp": 15.5})
    now[0] = 299
    assert cache.get("london") == {"temp": 15.5}
    now[0] = 300
    assert cache.get("london") is None
    assert len(cache) == 0

    assert metrics.counter(CACHE_HITS) == 1
    assert metrics.counter(CACHE_MISSES) == 2


def test_cache_ignores_none_and_clears():
    cache = TTLCache("Location", 60)
    cache.put("missing", None)
    cache.put("a", 1)
    cache.put("b", 2)
    assert len(cache) == 2

    cache.evict("a")
    assert cache.get("a") is None
    cache.clear()
    assert len(cache) == 0


def test_cache_drops_least_recently_used_entry_when_full():
    cache = TTLCache("Weather", 3600, max_size=3)
    for name in ("london", "paris", "tokyo"):
        cache.put(name, {"name": name})
    assert cache.get("london") is not None

    cache.put("berlin", {"name": "berlin"})

    assert len(cache) == 3
    assert cache.get("paris") is None
    assert cache.get("london") == {"name": "london"}
    assert cache.get("berlin") == {"name": "berlin"}


def test_cache_size_stays_bounded_for_many_distinct_keys():
    cache = TTLCache("Weather", 3600)
    for i in range(5000):
        cache.put(f"location-{i}", i)
    assert len(cache) == cache.max_size == 500
