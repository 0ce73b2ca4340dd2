"""Domain package."""

from .entities import Account, Booking, Listing, Requester
from .value_objects import AuthEvent, BookingStatus, ChangeEventType, UserRole

__all__ = [
    # Entities
    "Account",
    "Requester",
    "Listing",
    "Booking",
    # Value Objects
    "UserRole",
    "BookingStatus",
    "ChangeEventType",
    "AuthEvent",
]
