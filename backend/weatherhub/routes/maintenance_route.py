from fastapi import APIRouter, Depends

from weatherhub.models.base_model import RetentionResult
from weatherhub.routes.deps import get_maintenance_service, get_metrics
from weatherhub.services.Maintenance_service import MaintenanceService
from weatherhub.services.Metrics_service import MetricsService

router = APIRouter(prefix="/api", tags=["Maintenance"])


@router.post("/maintenance/retention", response_model=RetentionResult)
async def run_retention(service: MaintenanceService = Depends(get_maintenance_service)):
    return await service.run_retention()

@router.get("/metrics")
async def get_metrics_snapshot(metrics: MetricsService = Depends(get_metrics)):
    return metrics.snapshot()
