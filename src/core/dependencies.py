"""
FastAPI dependency injection functions.
Provider handles are resolved here and passed explicitly, so tests can swap in fakes
through ``app.dependency_overrides``.
"""

from fastapi import Depends

from src.infra.config.settings import Settings, get_settings
from src.infra.firebase import get_firebase_manager
from src.infra.repository.user_repository import FirestoreUserRepository
from src.core.service.auth.identity_gateway import IdentityGateway, FirebaseIdentityGateway
from src.core.service.user.store import UserStore
from src.core.service.user.user_service import UserService


def get_app_settings() -> Settings:
    """Get application settings dependency."""
    return get_settings()


async def get_user_store(settings: Settings = Depends(get_app_settings)) -> UserStore:
    """Get the Firestore backed user store."""
    client = get_firebase_manager().get_firestore()
    return FirestoreUserRepository(client, collection=settings.USERS_COLLECTION)


async def get_identity_gateway() -> IdentityGateway:
    """Get the Firebase Authentication gateway."""
    return FirebaseIdentityGateway(get_firebase_manager().get_app())


async def get_user_service(
    store: UserStore = Depends(get_user_store),
    gateway: IdentityGateway = Depends(get_identity_gateway),
    settings: Settings = Depends(get_app_settings),
) -> UserService:
    """Get user service with store and gateway dependencies."""
    return UserService(
        store,
        gateway,
        default_password=settings.DEFAULT_TEMP_PASSWORD,
        recent_users_limit=settings.RECENT_USERS_LIMIT,
    )
