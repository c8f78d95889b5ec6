"""
In-memory stand-ins for Firestore and Firebase Auth used across the test suite.
"""

import copy
from typing import Any, Dict, List, Optional, Tuple

from src.core.exceptions.base import AuthError, StoreError
from src.core.service.auth.identity_gateway import IdentityGateway
from src.core.service.user.models.user import UserRecord
from src.core.service.user.store import UserStore

ADMIN_UID = "admin-uid"
ADMIN_TOKEN = "admin-token"
USER_UID = "user-uid"
USER_TOKEN = "user-token"
NEWCOMER_UID = "newcomer-uid"
NEWCOMER_TOKEN = "newcomer-token"


class InMemoryUserStore(UserStore):
    def __init__(self):
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.fail_on: Optional[str] = None

    def _check(self, operation: str):
        if self.fail_on == operation:
            raise StoreError(f"Failed to {operation} user")

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        self._check("get")
        doc = self.docs.get(user_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def list(self, filters: Optional[Dict[str, str]] = None) -> List[Tuple[str, Dict[str, Any]]]:
        self._check("list")
        active = {field: value for field, value in (filters or {}).items() if value}
        return [
            (doc_id, copy.deepcopy(doc))
            for doc_id, doc in self.docs.items()
            if all(doc.get(field) == value for field, value in active.items())
        ]

    async def set(self, user_id: str, document: Dict[str, Any]) -> None:
        self._check("set")
        self.docs[user_id] = copy.deepcopy(document)

    async def update(self, user_id: str, document: Dict[str, Any]) -> None:
        self._check("update")
        if user_id not in self.docs:
            raise StoreError("Failed to update user")
        self.docs[user_id].update(copy.deepcopy(document))

    async def delete(self, user_id: str) -> None:
        self._check("delete")
        self.docs.pop(user_id, None)


class FakeIdentityGateway(IdentityGateway):
    def __init__(self):
        self.tokens: Dict[str, Dict[str, Any]] = {}
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.fail_on: Optional[str] = None
        self._next_uid = 0

    async def verify_token(self, token: str) -> Dict[str, Any]:
        if not token or token not in self.tokens:
            raise AuthError("Invalid token")
        return dict(self.tokens[token])

    async def create_user(self, email: str, password: str, display_name: Optional[str] = None) -> str:
        if self.fail_on == "create":
            raise StoreError("Failed to create user account")
        self._next_uid += 1
        uid = f"generated-{self._next_uid}"
        self.accounts[uid] = {"email": email, "password": password, "display_name": display_name}
        return uid

    async def update_user(self, uid: str, email: Optional[str] = None, display_name: Optional[str] = None) -> None:
        if self.fail_on == "update":
            raise StoreError("Failed to update user account")
        account = self.accounts.setdefault(uid, {})
        if email is not None:
            account["email"] = email
        if display_name is not None:
            account["display_name"] = display_name

    async def delete_user(self, uid: str) -> None:
        if self.fail_on == "delete":
            raise StoreError("Failed to delete user account")
        self.accounts.pop(uid, None)


def make_record(uid: str, **fields) -> UserRecord:
    """A record that passes validation, with overrides."""
    data = {
        "userName": "Fern Gully",
        "userEmail": f"{uid}@leafora.app",
        "userPhone": "01712345678",
        "role": "user",
        "status": "verified",
        "plan": "basic",
    }
    data.update(fields)
    return UserRecord.model_validate({**data, "userId": uid})
