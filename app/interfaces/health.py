"""
Liveness endpoint.

GET /api/v1/health answers without touching the database or any
provider, so a slow Polygon or FRED never fails the probe.
"""

from fastapi import APIRouter

from app.core.config import settings
from app.interfaces.forecasting.schemas import HealthResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns application health status and version.",
)
def health_check() -> HealthResponse:
    """Return current application health status."""
    return HealthResponse(status="ok", version=settings.version)
