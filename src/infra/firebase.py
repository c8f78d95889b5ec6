"""
Firebase Admin SDK connection management (Authentication + Cloud Firestore)
"""

from typing import Optional
from functools import lru_cache

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.cloud.firestore import AsyncClient

from src.infra.config.settings import get_settings
from src.core.logger.logger import get_logger

logger = get_logger(__name__)
settings = get_settings()


class FirebaseManager:
    """Lazily initialised Firebase app and Firestore client"""

    def __init__(self):
        self._app: Optional[firebase_admin.App] = None
        self._firestore: Optional[AsyncClient] = None

    def _build_credential(self) -> credentials.Base:
        """Service account file when configured, application default credentials otherwise"""
        if settings.FIREBASE_CREDENTIALS_PATH:
            return credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
        return credentials.ApplicationDefault()

    def connect(self) -> firebase_admin.App:
        """Initialize the Firebase app once per process"""
        if self._app is not None:
            return self._app

        try:
            options = {}
            if settings.FIREBASE_PROJECT_ID:
                options["projectId"] = settings.FIREBASE_PROJECT_ID

            self._app = firebase_admin.initialize_app(
                credential=self._build_credential(),
                options=options or None,
            )
            logger.info(
                "Firebase app initialized",
                extra={
                    "project_id": self._app.project_id,
                    "credentials": "service_account" if settings.FIREBASE_CREDENTIALS_PATH else "application_default",
                }
            )
            return self._app

        except Exception as e:
            logger.error(
                "Failed to initialize Firebase app",
                extra={
                    "project_id": settings.FIREBASE_PROJECT_ID,
                    "error": str(e)
                }
            )
            raise

    def get_app(self) -> firebase_admin.App:
        return self.connect()

    def get_firestore(self) -> AsyncClient:
        """Get the async Firestore client bound to the app"""
        if self._firestore is None:
            self._firestore = firestore_async.client(app=self.connect())
        return self._firestore

    def close(self):
        """Delete the Firebase app and drop the cached Firestore client"""
        if self._app is None:
            return
        try:
            firebase_admin.delete_app(self._app)
            logger.info("Firebase app closed")
        except Exception as e:
            logger.error(f"Error closing Firebase app: {e}")
        finally:
            self._app = None
            self._firestore = None


@lru_cache()
def get_firebase_manager() -> FirebaseManager:
    """Get the process-wide Firebase manager (cached)"""
    return FirebaseManager()
