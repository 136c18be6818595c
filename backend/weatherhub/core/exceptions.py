"""
Error taxonomy for the service.

Every error that can reach a client carries a stable code and an HTTP status;
the handlers in main.py turn them into ErrorResponse bodies.
"""
from typing import Any, Dict, Optional


class WeatherHubError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(WeatherHubError):
    code = "CONFIGURATION_ERROR"


class InvalidInputError(WeatherHubError, ValueError):
    """User input outside the allowed range. Raised before any network or database work."""
    code = "VALIDATION_ERROR"
    status_code = 400


class LocationNotFoundError(WeatherHubError):
    code = "LOCATION_NOT_FOUND"
    status_code = 404

    def __init__(self, location_id: int):
        super().__init__(f"Location not found with ID: {location_id}", {"locationId": location_id})
        self.location_id = location_id


class LocationAlreadyExistsError(WeatherHubError):
    code = "LOCATION_ALREADY_EXISTS"
    status_code = 409

    def __init__(self, name: str, country: str):
        super().__init__(f"Location already exists: {name} in {country}")


class DataConsistencyError(WeatherHubError):
    """A persisted record is missing a required association. Programming error, never user error."""
    code = "DATA_CONSISTENCY_ERROR"
    status_code = 500


# --- Upstream (WeatherAPI.com) errors ---

class WeatherApiError(WeatherHubError):
    code = "WEATHER_API_ERROR"
    status_code = 503

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class InvalidLocationError(WeatherApiError):
    """4xx from the provider. Not retried."""
    code = "INVALID_LOCATION"
    status_code = 400


class UpstreamServerError(WeatherApiError):
    """5xx from the provider. Retried."""
    code = "WEATHER_API_SERVER_ERROR"


class EmptyResponseError(WeatherApiError):
    """Successful status but no body. Retried."""
    code = "WEATHER_API_EMPTY_RESPONSE"


class UpstreamTransportError(WeatherApiError):
    """Low-level transport failure (connect, timeout, bad payload). Retried."""
    code = "WEATHER_API_TRANSPORT_ERROR"


class ServiceUnavailableError(WeatherApiError):
    """Produced by the fallback once retries are exhausted or the circuit is open."""
    code = "SERVICE_UNAVAILABLE"


class CircuitOpenError(WeatherApiError):
    code = "CIRCUIT_OPEN"

    def __init__(self, name: str):
        super().__init__(f"Circuit breaker '{name}' is OPEN and does not permit further calls")
        self.name = name


class RateLimitExceededError(WeatherHubError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, name: str):
        super().__init__(f"Rate limiter '{name}' does not permit further calls")
        self.name = name


TRANSIENT_ERRORS = (UpstreamServerError, EmptyResponseError, UpstreamTransportError)


class OperationTimeoutError(WeatherHubError):
    code = "OPERATION_TIMEOUT"
    status_code = 504
