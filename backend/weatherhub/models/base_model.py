from pydantic import BaseModel, Field, computed_field
from typing import Any, Dict, Generic, List, Optional, TypeVar
from datetime import date, datetime, timezone
import math

from weatherhub.models.forecast_model import ForecastDto
from weatherhub.models.location_model import LocationDto
from weatherhub.models.weather_model import WeatherDto

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


# --- Pagination ---
class Page(BaseModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int

    @computed_field
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.size else 0

    @computed_field
    @property
    def number_of_elements(self) -> int:
        return len(self.content)


# --- Errors ---
class ValidationErrorDetail(BaseModel):
    field: str
    rejected_value: Any = None
    message: str


class ErrorResponse(BaseModel):
    code: str
    message: str
    path: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    validation_errors: Optional[List[ValidationErrorDetail]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# --- Bulk & composite results ---
class BulkOperationResult(BaseModel):
    success_count: int
    failure_count: int
    total_count: int

    @computed_field
    @property
    def all_successful(self) -> bool:
        return self.failure_count == 0

    @computed_field
    @property
    def success_rate(self) -> float:
        return self.success_count / self.total_count if self.total_count > 0 else 0.0


class WeatherWithForecast(BaseModel):
    """Current weather and forecast fetched concurrently."""
    weather: WeatherDto
    forecasts: List[ForecastDto]


class CompleteLocationInfo(BaseModel):
    location: LocationDto
    weather: WeatherDto
    forecasts: List[ForecastDto]


class RetentionResult(BaseModel):
    weather_records_deleted: int
    forecast_records_deleted: int
    weather_cutoff: datetime
    forecast_cutoff: date
