from typing import Optional

from weatherhub.models.entities import Location
from weatherhub.models.location_model import CreateLocationRequest, LocationDto
from weatherhub.models.weather_model import LocationInfo


def to_dto(location: Optional[Location]) -> Optional[LocationDto]:
    if location is None:
        return None
    return LocationDto(
        id=location.id,
        name=location.name,
        country=location.country,
        latitude=location.latitude,
        longitude=location.longitude,
        region=location.region,
        created_at=location.created_at,
        updated_at=location.updated_at,
    )


def to_entity(request: Optional[CreateLocationRequest]) -> Optional[Location]:
    if request is None:
        return None
    return Location(
        name=request.name,
        country=request.country,
        latitude=request.latitude,
        longitude=request.longitude,
        region=request.region,
    )


def from_weather_api(info: Optional[LocationInfo]) -> Optional[Location]:
    """Location as resolved by the provider (its canonical name and coordinates)."""
    if info is None:
        return None
    return Location(
        name=info.name,
        country=info.country,
        latitude=info.lat,
        longitude=info.lon,
        region=info.region,
    )


def update_entity_from_request(location: Location, request: CreateLocationRequest) -> Location:
    # id and created_at are kept
    location.name = request.name
    location.country = request.country
    location.latitude = request.latitude
    location.longitude = request.longitude
    location.region = request.region
    location.touch()
    return location
