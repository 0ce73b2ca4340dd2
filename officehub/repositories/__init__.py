"""Repository layer for data access abstraction."""
from __future__ import annotations

from .base import BaseRepository
from .booking_repository import BookingRepository
from .listing_repository import ListingRepository
from .owner_booking_repository import OwnerBookingRepository

__all__ = [
    "BaseRepository",
    "ListingRepository",
    "BookingRepository",
    "OwnerBookingRepository",
]
