"""
Request DTOs for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional


class AdminLoginRequestDTO(BaseModel):
    """Admin login request. Only the Firebase ID token is checked; email/password are accepted for client compatibility."""

    email: Optional[str] = None
    password: Optional[str] = None
    idToken: Optional[str] = Field(
        None,
        description="Firebase ID token obtained by the dashboard after sign-in"
    )


class SubscriptionUpdateDTO(BaseModel):
    """Request model for subscription transitions."""

    model_config = ConfigDict(populate_by_name=True)

    action: str = Field(
        ...,
        description="Transition to apply: activate, cancel or extend"
    )
    type: Optional[str] = Field(
        None,
        description="Subscription type stored on activation (monthly, yearly)"
    )
    duration: Optional[Literal["monthly", "yearly"]] = Field(
        None,
        description="Period added to the end date on activate and extend"
    )
    autoRenewal: Optional[bool] = Field(
        None,
        description="Auto renewal flag applied on activation"
    )
