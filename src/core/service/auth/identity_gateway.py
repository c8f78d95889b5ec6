"""
Identity provider access: token verification and account management.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from src.core.exceptions.base import AuthError, StoreError
from src.core.logger.logger import get_logger

logger = get_logger(__name__)


class IdentityGateway(ABC):
    """Abstract identity provider consumed by the user service."""

    @abstractmethod
    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Return the decoded claims (always containing ``uid``) or raise AuthError."""
        pass

    @abstractmethod
    async def create_user(self, email: str, password: str, display_name: Optional[str] = None) -> str:
        """Create an account and return its uid."""
        pass

    @abstractmethod
    async def update_user(self, uid: str, email: Optional[str] = None, display_name: Optional[str] = None) -> None:
        pass

    @abstractmethod
    async def delete_user(self, uid: str) -> None:
        pass


class FirebaseIdentityGateway(IdentityGateway):
    """Firebase Authentication backed gateway.

    The Admin SDK is synchronous, so every call runs in a worker thread.
    """

    def __init__(self, app: firebase_admin.App, check_revoked: bool = False):
        self.app = app
        self.check_revoked = check_revoked

    async def verify_token(self, token: str) -> Dict[str, Any]:
        if not token:
            raise AuthError("No token provided")
        try:
            claims = await asyncio.to_thread(
                firebase_auth.verify_id_token,
                token,
                app=self.app,
                check_revoked=self.check_revoked,
            )
        except firebase_auth.ExpiredIdTokenError as e:
            raise AuthError("Token has expired") from e
        except firebase_auth.RevokedIdTokenError as e:
            raise AuthError("Token has been revoked") from e
        except (firebase_auth.InvalidIdTokenError, firebase_auth.UserDisabledError, ValueError) as e:
            logger.warning(f"Token verification error: {e}")
            raise AuthError("Invalid token") from e
        except firebase_exceptions.FirebaseError as e:
            # Certificate fetch and other provider-side failures
            logger.error(f"Identity provider error during verification: {e}")
            raise AuthError("Invalid token") from e
        return claims

    async def create_user(self, email: str, password: str, display_name: Optional[str] = None) -> str:
        try:
            record = await asyncio.to_thread(
                firebase_auth.create_user,
                email=email,
                password=password,
                display_name=display_name,
                app=self.app,
            )
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            logger.error("Failed to create identity account", extra={"email": email, "error": str(e)})
            raise StoreError("Failed to create user account", context={"error": str(e)}) from e

        logger.info("Identity account created", extra={"user_id": record.uid})
        return record.uid

    async def update_user(self, uid: str, email: Optional[str] = None, display_name: Optional[str] = None) -> None:
        changes = {}
        if email is not None:
            changes["email"] = email
        if display_name is not None:
            changes["display_name"] = display_name
        if not changes:
            return

        try:
            await asyncio.to_thread(firebase_auth.update_user, uid, app=self.app, **changes)
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            logger.error("Failed to update identity account", extra={"user_id": uid, "error": str(e)})
            raise StoreError("Failed to update user account", context={"user_id": uid, "error": str(e)}) from e

    async def delete_user(self, uid: str) -> None:
        try:
            await asyncio.to_thread(firebase_auth.delete_user, uid, app=self.app)
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            logger.error("Failed to delete identity account", extra={"user_id": uid, "error": str(e)})
            raise StoreError("Failed to delete user account", context={"user_id": uid, "error": str(e)}) from e

        logger.info("Identity account deleted", extra={"user_id": uid})
