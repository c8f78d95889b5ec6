"""Admin session endpoints."""

from fastapi import APIRouter, Depends

from src.api.middleware.authentication.firebase_bearer import get_current_admin
from src.api.models.request_models import AdminLoginRequestDTO
from src.api.models.response_models import MessageResponseDTO, UserMutationResponseDTO
from src.core.dependencies import get_user_service
from src.core.exceptions.base import ValidationError
from src.core.service.user.models.user import UserRecord
from src.core.service.user.user_service import UserService

router = APIRouter(
    prefix="/admin",
    tags=["admin-auth"],
    responses={
        401: {"description": "Invalid or missing token"},
        403: {"description": "Admin access required"},
    }
)


@router.post("/login", response_model=UserMutationResponseDTO)
async def admin_login(
    request: AdminLoginRequestDTO,
    service: UserService = Depends(get_user_service),
) -> UserMutationResponseDTO:
    """
    Exchange a Firebase ID token for an admin session.

    The token's uid must belong to a stored record with the admin role.
    The record is marked online and its last activity refreshed.
    """
    if not request.idToken:
        raise ValidationError(["ID token is required"], message="ID token is required")

    user = await service.admin_login(request.idToken)
    return UserMutationResponseDTO(message="Admin login successful", user=user.to_response())


@router.post("/logout", response_model=MessageResponseDTO)
async def admin_logout(
    admin: UserRecord = Depends(get_current_admin),
    service: UserService = Depends(get_user_service),
) -> MessageResponseDTO:
    await service.admin_logout(admin.user_id)
    return MessageResponseDTO(message="Logout successful")
