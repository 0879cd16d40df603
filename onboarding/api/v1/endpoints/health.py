"""Health check API endpoints."""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from onboarding.core.config import settings
from onboarding.core.database import db_client
from onboarding.utils.logging import get_logger

LOGGER = get_logger(__name__)

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str = Field(..., description="Health check status")
    version: str = Field(..., description="Running application version")
    service: str = Field(..., description="Service name")
    storage: str = Field(..., description="Active document store backend")


@router.get(
    "/",
    response_model=HealthCheckResponse,
    tags=["Health"],
    summary="Health check endpoint",
    description="Check if the service is running and healthy",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint."""
    status = "healthy"
    if settings.storage_backend != "memory":
        db_health = await db_client.health_check()
        status = "healthy" if db_health["status"] == "healthy" else "degraded"

    return HealthCheckResponse(
        status=status,
        version=settings.app_version,
        service=settings.app_name,
        storage=settings.storage_backend,
    )
