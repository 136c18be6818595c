from typing import List

from fastapi import APIRouter, Depends, Path, Query, Response, status

from weatherhub.models.base_model import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, Page
from weatherhub.models.location_model import CreateLocationRequest, LocationDto
from weatherhub.routes.deps import get_location_service
from weatherhub.services.Location_service import LocationService

router = APIRouter(prefix="/api/locations", tags=["Locations"])


@router.post("", response_model=LocationDto, status_code=status.HTTP_201_CREATED)
async def create_location(
    request: CreateLocationRequest,
    service: LocationService = Depends(get_location_service)
):
    return await service.create_location(request)

@router.get("", response_model=List[LocationDto])
async def get_all_locations(service: LocationService = Depends(get_location_service)):
    return await service.get_all_locations()

@router.get("/page", response_model=Page[LocationDto])
async def get_locations_page(
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: LocationService = Depends(get_location_service)
):
    return await service.get_locations_page(page, size)

@router.get("/search", response_model=List[LocationDto])
async def search_locations(
    name: str = Query(..., min_length=1),
    service: LocationService = Depends(get_location_service)
):
    return await service.search_locations(name)

@router.get("/search/page", response_model=Page[LocationDto])
async def search_locations_page(
    name: str = Query(..., min_length=1),
    page: int = Query(0, ge=0),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    service: LocationService = Depends(get_location_service)
):
    return await service.search_locations_page(name, page, size)

@router.get("/{location_id}", response_model=LocationDto)
async def get_location(
    location_id: int = Path(..., ge=1),
    service: LocationService = Depends(get_location_service)
):
    return await service.get_location_by_id(location_id)

@router.put("/{location_id}", response_model=LocationDto)
async def update_location(
    request: CreateLocationRequest,
    location_id: int = Path(..., ge=1),
    service: LocationService = Depends(get_location_service)
):
    return await service.update_location(location_id, request)

@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_location(
    location_id: int = Path(..., ge=1),
    service: LocationService = Depends(get_location_service)
):
    await service.delete_location(location_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
