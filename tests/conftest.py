"""
Shared fixtures: fake providers and an app wired to them through dependency overrides.
"""

from typing import Dict

import pytest
from fastapi.testclient import TestClient

from src.app import create_app
from src.core.dependencies import get_identity_gateway, get_user_store
from src.core.service.user.user_service import UserService

from tests.helpers import (
    ADMIN_TOKEN,
    ADMIN_UID,
    NEWCOMER_TOKEN,
    NEWCOMER_UID,
    USER_TOKEN,
    USER_UID,
    FakeIdentityGateway,
    InMemoryUserStore,
    make_record,
)


@pytest.fixture
def store() -> InMemoryUserStore:
    store = InMemoryUserStore()
    admin = make_record(ADMIN_UID, userName="Ada Admin", role="admin", createdAt="2024-01-01T00:00:00.000Z")
    member = make_record(USER_UID, userName="Rosa Petal", plan="pro", createdAt="2024-03-01T00:00:00.000Z")
    store.docs[ADMIN_UID] = admin.to_storage()
    store.docs[USER_UID] = member.to_storage()
    return store


@pytest.fixture
def gateway() -> FakeIdentityGateway:
    gateway = FakeIdentityGateway()
    gateway.tokens[ADMIN_TOKEN] = {"uid": ADMIN_UID, "email": f"{ADMIN_UID}@leafora.app"}
    gateway.tokens[USER_TOKEN] = {"uid": USER_UID, "email": f"{USER_UID}@leafora.app"}
    gateway.tokens[NEWCOMER_TOKEN] = {"uid": NEWCOMER_UID, "email": "newcomer@leafora.app", "name": "New Sprout"}
    gateway.accounts[ADMIN_UID] = {"email": f"{ADMIN_UID}@leafora.app"}
    gateway.accounts[USER_UID] = {"email": f"{USER_UID}@leafora.app"}
    return gateway


@pytest.fixture
def service(store, gateway) -> UserService:
    return UserService(store, gateway, default_password="TempPassword123!", recent_users_limit=5)


@pytest.fixture
def app(store, gateway):
    app = create_app()
    app.dependency_overrides[get_user_store] = lambda: store
    app.dependency_overrides[get_identity_gateway] = lambda: gateway
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}


@pytest.fixture
def user_headers() -> Dict[str, str]:
    return {"Authorization": f"Bearer {USER_TOKEN}"}
