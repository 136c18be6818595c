import logging
from pydantic_settings import BaseSettings, SettingsConfigDict

from weatherhub.core.exceptions import ConfigurationError

PLACEHOLDER_API_KEYS = {
    "your-key-here", "your_api_key_here", "your_weatherapi_com_key", "changeme", "demo", "test",
}
MIN_API_KEY_LENGTH = 20


class Settings(BaseSettings):
    # WeatherAPI.com
    WEATHER_API_KEY: str = ""
    WEATHER_API_BASE_URL: str = "https://api.weatherapi.com/v1"
    WEATHER_API_TIMEOUT: float = 10.0

    # Database (any SQLAlchemy async URL)
    DATABASE_URL: str = "sqlite+aiosqlite:///./weatherhub.db"
    DATABASE_ECHO: bool = False

    LOGGER: int = 20
    LOG_DIRECTORY: str = "logs"
    LOG_TO_FILE: bool = True

    # Resilience: current weather
    CURRENT_MAX_RETRIES: int = 3
    CURRENT_RETRY_WAIT_SECONDS: float = 0.5
    CURRENT_FAILURE_RATE_THRESHOLD: float = 50.0
    CURRENT_SLIDING_WINDOW_SIZE: int = 10
    CURRENT_OPEN_STATE_WAIT_SECONDS: float = 30.0
    CURRENT_RATE_LIMIT_PER_PERIOD: int = 10
    CURRENT_RATE_LIMIT_PERIOD_SECONDS: float = 1.0
    CURRENT_RATE_LIMIT_TIMEOUT_SECONDS: float = 0.5

    # Resilience: forecast (heavier payloads, fewer retries)
    FORECAST_MAX_RETRIES: int = 2
    FORECAST_RETRY_WAIT_SECONDS: float = 1.0
    FORECAST_FAILURE_RATE_THRESHOLD: float = 50.0
    FORECAST_SLIDING_WINDOW_SIZE: int = 10
    FORECAST_OPEN_STATE_WAIT_SECONDS: float = 60.0
    FORECAST_RATE_LIMIT_PER_PERIOD: int = 5
    FORECAST_RATE_LIMIT_PERIOD_SECONDS: float = 1.0
    FORECAST_RATE_LIMIT_TIMEOUT_SECONDS: float = 1.0

    # Cache TTLs in seconds
    WEATHER_CACHE_TTL: int = 300
    FORECAST_CACHE_TTL: int = 1800
    LOCATION_CACHE_TTL: int = 3600
    CACHE_MAX_SIZE: int = 500

    # Retention sweep
    WEATHER_RETENTION_DAYS: int = 90
    FORECAST_RETENTION_DAYS: int = 30

    ASYNC_TIMEOUT_SECONDS: float = 60.0
    COMPOSITE_TIMEOUT_SECONDS: float = 30.0

    model_config = SettingsConfigDict(
        # Look for .env in the current folder OR the parent folder
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore"
    )


def validate_settings(config: Settings, logger: logging.Logger | None = None) -> None:
    """
    Fail fast on configuration the service cannot run without.
    Called once at startup, before any request is served.
    """
    logger = logger or logging.getLogger(__name__)
    logger.info("Validating application configuration...")

    api_key = (config.WEATHER_API_KEY or "").strip()
    if not api_key:
        raise ConfigurationError(
            "Weather API key is not configured. Please set the WEATHER_API_KEY environment variable."
        )
    if api_key.lower() in PLACEHOLDER_API_KEYS:
        raise ConfigurationError(
            f"Weather API key appears to be a placeholder value ('{api_key}'). Please set a real key."
        )
    if len(api_key) < MIN_API_KEY_LENGTH:
        logger.warning(
            f"Weather API key is shorter than {MIN_API_KEY_LENGTH} characters - it may be invalid"
        )

    if not config.WEATHER_API_BASE_URL.strip():
        raise ConfigurationError("Weather API base URL is required.")
    if not config.DATABASE_URL.strip():
        raise ConfigurationError("Database URL is required. Set the DATABASE_URL environment variable.")

    logger.info("Configuration validation successful")


settings = Settings()
