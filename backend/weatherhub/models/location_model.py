from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from weatherhub.core.validation import (
    COUNTRY_NAME_MAX_LENGTH,
    COUNTRY_NAME_MIN_LENGTH,
    LATITUDE_MAX,
    LATITUDE_MIN,
    LOCATION_NAME_MAX_LENGTH,
    LOCATION_NAME_MIN_LENGTH,
    LONGITUDE_MAX,
    LONGITUDE_MIN,
    REGION_MAX_LENGTH,
)


class CreateLocationRequest(BaseModel):
    """Body for creating or replacing a location."""
    name: str = Field(..., min_length=LOCATION_NAME_MIN_LENGTH, max_length=LOCATION_NAME_MAX_LENGTH)
    country: str = Field(..., min_length=COUNTRY_NAME_MIN_LENGTH, max_length=COUNTRY_NAME_MAX_LENGTH)
    latitude: float = Field(..., ge=LATITUDE_MIN, le=LATITUDE_MAX)
    longitude: float = Field(..., ge=LONGITUDE_MIN, le=LONGITUDE_MAX)
    region: Optional[str] = Field(None, max_length=REGION_MAX_LENGTH)

    @field_validator("name", "country")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class LocationDto(BaseModel):
    id: int
    name: str
    country: str
    latitude: float
    longitude: float
    region: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
