from typing import Any, Dict, List, Optional
from fastapi import status

from src.core.exceptions.handler import ServiceError, ServiceErrorCode


class AuthError(ServiceError):
    """Missing, malformed, expired or revoked credential."""

    def __init__(self, message: str = "Invalid token", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ServiceErrorCode.INVALID_TOKEN,
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            details=details,
        )


class AuthorizationError(ServiceError):
    """Authenticated caller without the required role."""

    def __init__(self, message: str = "Admin access required", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ServiceErrorCode.FORBIDDEN,
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            details=details,
        )


class NotFoundError(ServiceError):
    def __init__(self, message: str = "User not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ServiceErrorCode.NOT_FOUND,
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
        )


class ValidationError(ServiceError):
    """Carries every failed record rule, not just the first one."""

    def __init__(self, errors: List[str], message: str = "Validation failed"):
        self.errors = list(errors)
        super().__init__(
            code=ServiceErrorCode.INVALID_INPUT,
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"errors": self.errors},
        )


class StoreError(ServiceError):
    """Failure reported by the document store or the identity provider."""

    def __init__(self, message: str = "Storage operation failed", context: Optional[Dict[str, Any]] = None):
        super().__init__(
            code=ServiceErrorCode.STORE_ERROR,
            message=message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            context=context,
        )
