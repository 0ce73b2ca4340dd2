"""Service layer: session state and browsing helpers."""
from __future__ import annotations

from .browse import (
    booking_total,
    count_by_status,
    filter_by_status,
    partition_by_availability,
    search_available,
)
from .session import SessionService

__all__ = [
    "SessionService",
    "search_available",
    "partition_by_availability",
    "filter_by_status",
    "count_by_status",
    "booking_total",
]
