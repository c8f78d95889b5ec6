"""Self-service profile endpoints for app users."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from src.api.middleware.authentication.firebase_bearer import get_current_claims
from src.api.models.response_models import UserMutationResponseDTO
from src.core.dependencies import get_user_service
from src.core.service.user.user_service import UserService

router = APIRouter(prefix="/users", tags=["profile"])


@router.get("/profile")
async def get_profile(
    claims: Dict[str, Any] = Depends(get_current_claims),
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    user = await service.get_profile(claims)
    return user.to_response()


@router.put("/profile", response_model=UserMutationResponseDTO)
async def update_profile(
    payload: Dict[str, Any] = Body(...),
    claims: Dict[str, Any] = Depends(get_current_claims),
    service: UserService = Depends(get_user_service),
) -> UserMutationResponseDTO:
    """Only userName, userPhone, userAddress, gender, dob, about and userImage are applied."""
    user = await service.update_profile(claims, payload)
    return UserMutationResponseDTO(message="Profile updated successfully", user=user.to_response())
