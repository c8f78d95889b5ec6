"""
Response DTOs for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List


class MessageResponseDTO(BaseModel):
    message: str


class UserMutationResponseDTO(BaseModel):
    """Message plus the full user record."""

    message: str
    user: Dict[str, Any]


class UserListResponseDTO(BaseModel):
    users: List[Dict[str, Any]] = Field(default_factory=list)
    totalUsers: int
    currentPage: int
    totalPages: int


class AnalyticsResponseDTO(BaseModel):
    totalUsers: int
    usersByRole: Dict[str, int]
    usersByStatus: Dict[str, int]
    usersByPlan: Dict[str, int]
    subscriptionStats: Dict[str, int]
    recentUsers: List[Dict[str, Any]] = Field(default_factory=list)


class HealthCheckResponseDTO(BaseModel):
    status: str
    service: str
    version: str
    timestamp: str
