from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer

from src.core.dependencies import get_identity_gateway, get_user_service
from src.core.exceptions.base import AuthError
from src.core.service.auth.identity_gateway import IdentityGateway
from src.core.service.user.models.user import UserRecord, UserRole
from src.core.service.user.user_service import UserService
from src.core.logger.logger import get_logger

logger = get_logger(__name__)


class FirebaseBearer(HTTPBearer):
    """Extracts the bearer credential; verification is left to the identity gateway."""

    def __init__(self):
        super().__init__(auto_error=False, description="Firebase ID token")

    async def __call__(self, request: Request) -> Optional[str]:
        credentials = await super().__call__(request)
        if credentials is None:
            if request.headers.get("Authorization"):
                raise AuthError("Invalid authorization header")
            raise AuthError("No token provided")
        return credentials.credentials


bearer_scheme = FirebaseBearer()


async def get_current_claims(
    token: str = Depends(bearer_scheme),
    gateway: IdentityGateway = Depends(get_identity_gateway),
) -> Dict[str, Any]:
    """Decoded token claims of the caller."""
    return await gateway.verify_token(token)


async def get_current_admin(
    claims: Dict[str, Any] = Depends(get_current_claims),
    service: UserService = Depends(get_user_service),
) -> UserRecord:
    """Caller's record, required to carry the admin role."""
    admin = await service.require_role(claims["uid"], UserRole.ADMIN.value)
    logger.debug("Admin request authorized", extra={"user_id": admin.user_id})
    return admin
