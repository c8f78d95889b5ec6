"""
User repository backed by Cloud Firestore
"""

from typing import Any, Dict, List, Optional, Tuple
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore import AsyncClient, FieldFilter

from src.core.exceptions.base import StoreError
from src.core.service.user.store import UserStore
from src.core.logger.logger import get_logger

logger = get_logger(__name__)


class FirestoreUserRepository(UserStore):
    """Repository for user documents in a Firestore collection"""

    def __init__(self, client: AsyncClient, collection: str = "users"):
        self.client = client
        self.collection = collection

    def _document(self, user_id: str):
        return self.client.collection(self.collection).document(user_id)

    def _failure(self, operation: str, error: Exception, user_id: Optional[str] = None) -> StoreError:
        logger.error(
            f"Firestore {operation} failed",
            extra={
                "collection": self.collection,
                "user_id": user_id,
                "error": str(error)
            }
        )
        return StoreError(
            f"Failed to {operation} user",
            context={"user_id": user_id, "error": str(error)}
        )

    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a user document

        Args:
            user_id: Document id (the identity provider uid)

        Returns:
            Document body or None if the document does not exist
        """
        try:
            snapshot = await self._document(user_id).get()
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("fetch", e, user_id) from e

        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def list(self, filters: Optional[Dict[str, str]] = None) -> List[Tuple[str, Dict[str, Any]]]:
        """
        List user documents matching equality filters

        Args:
            filters: Field name -> required value; empty values are skipped

        Returns:
            (document id, body) pairs
        """
        query = self.client.collection(self.collection)
        for field, value in (filters or {}).items():
            if value:
                query = query.where(filter=FieldFilter(field, "==", value))

        try:
            documents = []
            async for snapshot in query.stream():
                documents.append((snapshot.id, snapshot.to_dict() or {}))
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("list", e) from e

        logger.debug(
            "Listed user documents",
            extra={"filters": filters or {}, "count": len(documents)}
        )
        return documents

    async def set(self, user_id: str, document: Dict[str, Any]) -> None:
        try:
            await self._document(user_id).set(document)
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("create", e, user_id) from e

        logger.info("User document written", extra={"user_id": user_id})

    async def update(self, user_id: str, document: Dict[str, Any]) -> None:
        try:
            await self._document(user_id).update(document)
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("update", e, user_id) from e

        logger.debug("User document updated", extra={"user_id": user_id, "fields": sorted(document)})

    async def delete(self, user_id: str) -> None:
        try:
            await self._document(user_id).delete()
        except google_exceptions.GoogleAPIError as e:
            raise self._failure("delete", e, user_id) from e

        logger.info("User document deleted", extra={"user_id": user_id})
