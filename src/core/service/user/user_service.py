"""
User management workflows for the admin dashboard and the profile API.

Every operation is a single read-modify-write against the store; there is
no locking, so concurrent writers to one record are last-writer-wins.
"""

import math
from typing import Any, Dict, List, Optional

from src.core.exceptions.base import AuthorizationError, NotFoundError, ValidationError
from src.core.service.auth.identity_gateway import IdentityGateway
from src.core.service.user.models.user import (
    SELF_SERVICE_FIELDS,
    SubscriptionStatus,
    UserPlan,
    UserRecord,
    UserRole,
    UserStatus,
    parse_timestamp,
    to_iso,
    utc_now,
)
from src.core.service.user.store import UserStore
from src.core.logger.logger import get_logger

logger = get_logger(__name__)

SUBSCRIPTION_ACTIONS = ("activate", "cancel", "extend")


class UserService:
    """User record workflows over an injected store and identity gateway."""

    def __init__(
        self,
        store: UserStore,
        gateway: IdentityGateway,
        default_password: str = "TempPassword123!",
        recent_users_limit: int = 5,
    ):
        self.store = store
        self.gateway = gateway
        self.default_password = default_password
        self.recent_users_limit = recent_users_limit

    async def _write(self, user: UserRecord, create: bool = False) -> None:
        """Persist the record and carry the stamped ``updatedAt`` back onto it."""
        document = user.to_storage()
        if create:
            await self.store.set(user.user_id, document)
        else:
            await self.store.update(user.user_id, document)
        user.updated_at = document["updatedAt"]

    # --- Lookups ----------------------------------------------------------

    async def find_user(self, user_id: str) -> Optional[UserRecord]:
        data = await self.store.get(user_id)
        if data is None:
            return None
        return UserRecord.from_storage(user_id, data)

    async def get_user(self, user_id: str) -> UserRecord:
        user = await self.find_user(user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return user

    async def require_role(self, user_id: str, role: str = UserRole.ADMIN.value) -> UserRecord:
        """Fetch the caller's record and check its role."""
        user = await self.find_user(user_id)
        if user is None:
            raise AuthorizationError("User not found")
        if user.role != role:
            logger.warning(
                "Role check failed",
                extra={"user_id": user_id, "required_role": role, "actual_role": user.role}
            )
            raise AuthorizationError(f"{role.capitalize()} access required")
        return user

    # --- Admin session ----------------------------------------------------

    async def admin_login(self, id_token: str) -> UserRecord:
        """Verify an ID token, require an admin record and mark it online."""
        claims = await self.gateway.verify_token(id_token)
        uid = claims["uid"]

        user = await self.get_user(uid)
        if user.role != UserRole.ADMIN.value:
            raise AuthorizationError("Admin access required")

        now = to_iso(utc_now())
        await self.store.update(uid, {"lastActive": now, "isOnline": True})
        user.last_active = now
        user.is_online = True

        logger.info("Admin logged in", extra={"user_id": uid})
        return user

    async def admin_logout(self, user_id: str) -> None:
        await self.store.update(user_id, {"isOnline": False, "lastActive": to_iso(utc_now())})
        logger.info("Admin logged out", extra={"user_id": user_id})

    # --- Admin CRUD -------------------------------------------------------

    async def list_users(
        self,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        role: str = "",
        status: str = "",
        plan: str = "",
    ) -> Dict[str, Any]:
        """
        List users with store-side equality filters and in-process search.

        Args:
            page: 1-based page number
            limit: Page size
            search: Case-insensitive match on name/email, raw match on phone
            role, status, plan: Exact-match filters; empty means no filter

        Returns:
            Page of users plus totals
        """
        documents = await self.store.list({"role": role, "status": status, "plan": plan})
        users = [UserRecord.from_storage(doc_id, data) for doc_id, data in documents]

        if search:
            needle = search.lower()
            users = [
                user for user in users
                if (user.user_name and needle in user.user_name.lower())
                or (user.user_email and needle in user.user_email.lower())
                or (user.user_phone and search in user.user_phone)
            ]

        start = (page - 1) * limit
        return {
            "users": [user.to_response() for user in users[start:start + limit]],
            "totalUsers": len(users),
            "currentPage": page,
            "totalPages": math.ceil(len(users) / limit),
        }

    async def create_user(self, payload: Dict[str, Any], password: Optional[str] = None) -> UserRecord:
        """Validate, create the identity account, then persist the record under its uid."""
        user = UserRecord.model_validate({key: value for key, value in payload.items() if key != "userId"})

        errors = user.validate_for_persistence()
        if errors:
            raise ValidationError(errors)

        uid = await self.gateway.create_user(
            email=user.user_email,
            password=password or self.default_password,
            display_name=user.user_name,
        )
        user.user_id = uid
        await self._write(user, create=True)

        logger.info("User created", extra={"user_id": uid, "role": user.role})
        return user

    async def update_user(self, user_id: str, payload: Dict[str, Any]) -> UserRecord:
        """Admin update: any known field except userId, subject to validation."""
        existing = await self.get_user(user_id)
        updated = existing.merge(payload)

        errors = updated.validate_for_persistence()
        if errors:
            raise ValidationError(errors)

        await self._write(updated)

        new_email = payload.get("userEmail")
        if new_email and new_email != existing.user_email:
            await self.gateway.update_user(
                user_id,
                email=new_email,
                display_name=payload.get("userName") or existing.user_name,
            )

        ignored = sorted(set(payload) - set(UserRecord.field_aliases()))
        if ignored:
            logger.debug("Ignored unknown update fields", extra={"user_id": user_id, "fields": ignored})

        return updated

    async def delete_user(self, user_id: str) -> None:
        """Remove the identity account, then the stored record. Not compensated on partial failure."""
        await self.get_user(user_id)
        await self.gateway.delete_user(user_id)
        await self.store.delete(user_id)
        logger.info("User deleted", extra={"user_id": user_id})

    async def update_subscription(
        self,
        user_id: str,
        action: str,
        subscription_type: Optional[str] = None,
        duration: Optional[str] = None,
        auto_renewal: Optional[bool] = None,
    ) -> UserRecord:
        if action not in SUBSCRIPTION_ACTIONS:
            raise ValidationError(["Invalid action"], message="Invalid action")

        user = await self.get_user(user_id)

        if action == "activate":
            user.activate_subscription(subscription_type, duration)
            user.auto_renewal = bool(auto_renewal)
        elif action == "cancel":
            user.cancel_subscription()
        else:
            try:
                user.extend_subscription(duration)
            except ValueError as e:
                raise ValidationError(
                    ["Subscription end date is not a valid timestamp"],
                    message="Invalid subscription end date",
                ) from e

        await self._write(user)

        logger.info(
            "Subscription updated",
            extra={
                "user_id": user_id,
                "action": action,
                "subscription_status": user.subscription_status,
                "subscription_end_date": user.subscription_end_date,
            }
        )
        return user

    # --- Analytics --------------------------------------------------------

    async def analytics(self) -> Dict[str, Any]:
        documents = await self.store.list()
        users = [UserRecord.from_storage(doc_id, data) for doc_id, data in documents]

        def count_by(attribute: str, values: List[str]) -> Dict[str, int]:
            return {value: sum(1 for user in users if getattr(user, attribute) == value) for value in values}

        recent = sorted(users, key=_created_sort_key, reverse=True)[:self.recent_users_limit]

        return {
            "totalUsers": len(users),
            "usersByRole": count_by("role", [role.value for role in UserRole]),
            "usersByStatus": count_by("status", [status.value for status in UserStatus]),
            "usersByPlan": count_by("plan", [plan.value for plan in UserPlan]),
            "subscriptionStats": count_by("subscription_status", [status.value for status in SubscriptionStatus]),
            "recentUsers": [user.to_response() for user in recent],
        }

    # --- Self service -----------------------------------------------------

    async def get_profile(self, claims: Dict[str, Any]) -> UserRecord:
        """Fetch the caller's record, creating a default one on first access."""
        uid = claims["uid"]
        user = await self.find_user(uid)
        if user is not None:
            return user

        user = UserRecord(
            user_id=uid,
            user_email=claims.get("email"),
            user_name=claims.get("name"),
        )
        await self._write(user, create=True)
        logger.info("Profile created on first access", extra={"user_id": uid})
        return user

    async def update_profile(self, claims: Dict[str, Any], payload: Dict[str, Any]) -> UserRecord:
        """Apply allow-listed profile fields only; role, plan and the rest are never touched."""
        existing = await self.get_profile(claims)
        updated = existing.merge(payload, allowed=SELF_SERVICE_FIELDS)
        await self._write(updated)
        return updated


def _created_sort_key(user: UserRecord) -> float:
    try:
        return parse_timestamp(user.created_at).timestamp()
    except ValueError:
        return 0.0
