"""Value Objects for domain model."""
from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Account roles. Seekers are stored as ``user``."""

    OWNER = "owner"
    SEEKER = "user"


class BookingStatus(str, Enum):
    """Booking status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: str | BookingStatus) -> BookingStatus:
        """Parse a raw status string, raising ValueError for unknown values."""
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class ChangeEventType(str, Enum):
    """Row-level change events delivered by the change feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ALL = "*"


class AuthEvent(str, Enum):
    """Auth-state events emitted by the backend."""

    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    USER_UPDATED = "USER_UPDATED"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
