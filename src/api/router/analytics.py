from fastapi import APIRouter, Depends

from src.api.middleware.authentication.firebase_bearer import get_current_admin
from src.api.models.response_models import AnalyticsResponseDTO
from src.core.dependencies import get_user_service
from src.core.service.user.user_service import UserService

router = APIRouter(prefix="/admin", tags=["admin-analytics"])


@router.get(
    "/analytics",
    response_model=AnalyticsResponseDTO,
    dependencies=[Depends(get_current_admin)],
)
async def get_analytics(service: UserService = Depends(get_user_service)) -> AnalyticsResponseDTO:
    """User counts by role, status, plan and subscription status, plus the newest users."""
    return AnalyticsResponseDTO(**await service.analytics())
