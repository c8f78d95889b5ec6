"""Administrative user management endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query, status

from src.api.middleware.authentication.firebase_bearer import get_current_admin
from src.api.models.request_models import SubscriptionUpdateDTO
from src.api.models.response_models import (
    MessageResponseDTO,
    UserListResponseDTO,
    UserMutationResponseDTO,
)
from src.core.dependencies import get_user_service
from src.core.service.user.user_service import UserService
from src.infra.config.settings import settings

# Every route here requires an admin caller
router = APIRouter(
    prefix="/admin/users",
    tags=["admin-users"],
    dependencies=[Depends(get_current_admin)],
    responses={
        400: {"description": "Record validation failed"},
        401: {"description": "Invalid or missing token"},
        403: {"description": "Admin access required"},
        404: {"description": "User not found"},
        500: {"description": "Store or identity provider failure"},
    }
)


@router.get("", response_model=UserListResponseDTO)
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=500),
    search: str = Query(""),
    role: str = Query(""),
    status_filter: str = Query("", alias="status"),
    plan: str = Query(""),
    service: UserService = Depends(get_user_service),
) -> UserListResponseDTO:
    """
    List users, filtered by role/status/plan in the store and by a free-text
    search over name, email and phone, one page at a time.
    """
    result = await service.list_users(
        page=page,
        limit=limit,
        search=search,
        role=role,
        status=status_filter,
        plan=plan,
    )
    return UserListResponseDTO(**result)


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> Dict[str, Any]:
    user = await service.get_user(user_id)
    return user.to_response()


@router.post("", response_model=UserMutationResponseDTO, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: Dict[str, Any] = Body(...),
    service: UserService = Depends(get_user_service),
) -> UserMutationResponseDTO:
    """
    Create the Firebase account and the stored record.

    ``password`` is used for the account only and never stored; when absent
    the configured temporary password is used.
    """
    user = await service.create_user(payload, password=payload.get("password"))
    return UserMutationResponseDTO(message="User created successfully", user=user.to_response())


@router.put("/{user_id}", response_model=UserMutationResponseDTO)
async def update_user(
    user_id: str,
    payload: Dict[str, Any] = Body(...),
    service: UserService = Depends(get_user_service),
) -> UserMutationResponseDTO:
    user = await service.update_user(user_id, payload)
    return UserMutationResponseDTO(message="User updated successfully", user=user.to_response())


@router.delete("/{user_id}", response_model=MessageResponseDTO)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> MessageResponseDTO:
    await service.delete_user(user_id)
    return MessageResponseDTO(message="User deleted successfully")


@router.put("/{user_id}/subscription", response_model=UserMutationResponseDTO)
async def update_subscription(
    user_id: str,
    request: SubscriptionUpdateDTO,
    service: UserService = Depends(get_user_service),
) -> UserMutationResponseDTO:
    """Apply an activate, cancel or extend transition to the user's subscription."""
    user = await service.update_subscription(
        user_id,
        action=request.action,
        subscription_type=request.type,
        duration=request.duration,
        auto_renewal=request.autoRenewal,
    )
    return UserMutationResponseDTO(message="Subscription updated successfully", user=user.to_response())
