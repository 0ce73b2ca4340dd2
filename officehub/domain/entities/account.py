"""Account entity model."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from officehub.domain.value_objects import UserRole


class Account(BaseModel):
    """Profile row paired 1:1 with an auth identity."""

    id: str = Field(..., description="Auth identity ID")
    email: str = Field(..., description="Sign-in email")
    user_type: UserRole = Field(..., description="Account role, fixed at sign-up")
    full_name: str | None = Field(None, description="Display name")
    phone_number: str | None = Field(None, description="Phone number")
    created_at: datetime | None = Field(None, description="Registration timestamp")
    updated_at: datetime | None = Field(None, description="Last profile update")

    class Config:
        """Pydantic config."""

        from_attributes = True
        use_enum_values = True

    @property
    def is_owner(self) -> bool:
        """Check if account lists spaces."""
        return self.user_type == UserRole.OWNER

    @property
    def display_name(self) -> str:
        """Get account's display name."""
        return self.full_name or self.email

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "id": self.id,
            "email": self.email,
            "user_type": self.user_type.value
            if isinstance(self.user_type, UserRole)
            else self.user_type,
            "full_name": self.full_name,
            "phone_number": self.phone_number,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


class Requester(BaseModel):
    """Subset of an account embedded in owner-side booking rows."""

    id: str
    email: str | None = None
    full_name: str | None = None
    phone_number: str | None = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or self.id
