from fastapi import Depends, Request

from weatherhub.core.container import ServiceContainer
from weatherhub.services.Bulk_service import AsyncBulkWeatherService
from weatherhub.services.Composite_service import CompositeWeatherService
from weatherhub.services.Forecast_service import ForecastService
from weatherhub.services.Location_service import LocationService
from weatherhub.services.Maintenance_service import MaintenanceService
from weatherhub.services.Metrics_service import MetricsService
from weatherhub.services.Weather_service import WeatherService


# --- Dependency Injection ---
def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container

def get_location_service(container: ServiceContainer = Depends(get_container)) -> LocationService:
    return container.location_service

def get_weather_service(container: ServiceContainer = Depends(get_container)) -> WeatherService:
    return container.weather_service

def get_forecast_service(container: ServiceContainer = Depends(get_container)) -> ForecastService:
    return container.forecast_service

def get_composite_service(container: ServiceContainer = Depends(get_container)) -> CompositeWeatherService:
    return container.composite_service

def get_bulk_service(container: ServiceContainer = Depends(get_container)) -> AsyncBulkWeatherService:
    return container.bulk_service

def get_maintenance_service(container: ServiceContainer = Depends(get_container)) -> MaintenanceService:
    return container.maintenance_service

def get_metrics(container: ServiceContainer = Depends(get_container)) -> MetricsService:
    return container.metrics
