"""
Input bounds shared by request models, services and the API client.

Every check here runs before any network or database work and raises
InvalidInputError, which the API surfaces as 400 VALIDATION_ERROR.
"""
from datetime import date, datetime, timedelta

from weatherhub.core.exceptions import InvalidInputError

LOCATION_NAME_MIN_LENGTH = 2
LOCATION_NAME_MAX_LENGTH = 100
COUNTRY_NAME_MIN_LENGTH = 2
COUNTRY_NAME_MAX_LENGTH = 100
REGION_MAX_LENGTH = 100

LATITUDE_MIN = -90
LATITUDE_MAX = 90
LONGITUDE_MIN = -180
LONGITUDE_MAX = 180

FORECAST_DAYS_MIN = 1
FORECAST_DAYS_MAX = 14
FORECAST_DAYS_RANGE_MESSAGE = f"Forecast days must be between {FORECAST_DAYS_MIN} and {FORECAST_DAYS_MAX}"

MAX_BULK_ITEMS = 100

MAX_WEATHER_HISTORY_DAYS = 90
MAX_FORECAST_RANGE_DAYS = 365
FORECAST_RANGE_MAX_PAST_DAYS = 30


def validate_forecast_days(days: int) -> None:
    if days < FORECAST_DAYS_MIN or days > FORECAST_DAYS_MAX:
        raise InvalidInputError(f"{FORECAST_DAYS_RANGE_MESSAGE} (got {days})", {"days": days})


def validate_weather_history_range(start: datetime, end: datetime, now: datetime | None = None) -> None:
    if start is None or end is None:
        raise InvalidInputError("Start date and end date cannot be null")
    if start > end:
        raise InvalidInputError("Start date must be before or equal to end date")

    days_between = (end - start).days
    if days_between > MAX_WEATHER_HISTORY_DAYS:
        raise InvalidInputError(
            f"Date range exceeds maximum of {MAX_WEATHER_HISTORY_DAYS} days "
            f"(requested: {days_between} days). Please narrow your query range."
        )

    now = now or datetime.now()
    if start < now - timedelta(days=365):
        raise InvalidInputError(
            "Start date cannot be more than 1 year in the past. "
            "Historical data older than 1 year is archived."
        )


def validate_forecast_range(start: date, end: date, today: date | None = None) -> None:
    if start is None or end is None:
        raise InvalidInputError("Start date and end date cannot be null")
    if start > end:
        raise InvalidInputError("Start date must be before or equal to end date")

    days_between = (end - start).days
    if days_between > MAX_FORECAST_RANGE_DAYS:
        raise InvalidInputError(
            f"Date range exceeds maximum of {MAX_FORECAST_RANGE_DAYS} days "
            f"(requested: {days_between} days). Please narrow your query range."
        )

    today = today or date.today()
    if end < today - timedelta(days=FORECAST_RANGE_MAX_PAST_DAYS):
        raise InvalidInputError(
            f"End date cannot be more than {FORECAST_RANGE_MAX_PAST_DAYS} days in the past. "
            "Use weather history API for past data."
        )
