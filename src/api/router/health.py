from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import PlainTextResponse

from src.api.models.response_models import HealthCheckResponseDTO
from src.infra.config.settings import settings

router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "Leafora Admin Server is running"


@router.get("/api/v1/health", status_code=status.HTTP_200_OK, response_model=HealthCheckResponseDTO)
async def health_check() -> HealthCheckResponseDTO:
    """Liveness check; does not touch Firebase."""
    return HealthCheckResponseDTO(
        status="healthy",
        service=settings.APP_NAME,
        version=settings.APP_VERSION,
        timestamp=datetime.utcnow().isoformat() + "Z"
    )
