"""Domain entities package."""

from .account import Account, Requester
from .booking import Booking
from .listing import Listing

__all__ = [
    "Account",
    "Requester",
    "Listing",
    "Booking",
]
