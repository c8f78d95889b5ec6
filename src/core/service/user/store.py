"""
Storage port for user records.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple


class UserStore(ABC):
    """Document store keyed by uid. Implementations raise StoreError on provider failures."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored document body, or None when absent."""
        pass

    @abstractmethod
    async def list(self, filters: Optional[Dict[str, str]] = None) -> List[Tuple[str, Dict[str, Any]]]:
        """Return (document id, body) pairs matching every equality filter."""
        pass

    @abstractmethod
    async def set(self, user_id: str, document: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def update(self, user_id: str, document: Dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        pass
