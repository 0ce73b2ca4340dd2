"""Browsing helpers and dashboard summaries over cached lists."""
from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from officehub.core.constants import TIME_FORMAT
from officehub.domain.entities import Booking, Listing
from officehub.domain.value_objects import BookingStatus

ALL_STATUSES = "all"


@dataclass
class AvailabilitySplit:
    available: list[Listing] = field(default_factory=list)
    unavailable: list[Listing] = field(default_factory=list)


def search_available(listings: Iterable[Listing], query: str = "") -> list[Listing]:
    """Available listings whose title, location or description contains ``query``."""
    return [item for item in listings if item.is_available and item.matches(query)]


def partition_by_availability(listings: Iterable[Listing]) -> AvailabilitySplit:
    split = AvailabilitySplit()
    for item in listings:
        (split.available if item.is_available else split.unavailable).append(item)
    return split


def filter_by_status(bookings: Iterable[Booking], status: str = ALL_STATUSES) -> list[Booking]:
    if status == ALL_STATUSES:
        return list(bookings)
    return [b for b in bookings if b.status == status]


def count_by_status(bookings: Iterable[Booking]) -> dict[str, int]:
    """Counts per status plus the ``all`` total; every status is present."""
    bookings = list(bookings)
    counts = Counter(str(b.status) for b in bookings)
    result = {ALL_STATUSES: len(bookings)}
    for status in BookingStatus:
        result[status.value] = counts.get(status.value, 0)
    return result


def booking_duration_hours(start_time: str, end_time: str) -> Decimal:
    """Hours between two same-day times, e.g. 09:00 -> 10:30 is 1.5; never negative."""
    day = datetime(2000, 1, 1)
    start = datetime.combine(day, datetime.strptime(start_time[:5], TIME_FORMAT).time())
    end = datetime.combine(day, datetime.strptime(end_time[:5], TIME_FORMAT).time())
    seconds = Decimal(max((end - start).total_seconds(), 0))
    return seconds / Decimal(3600)


def format_duration(start_time: str, end_time: str) -> str:
    hours = booking_duration_hours(start_time, end_time).normalize()
    return f"{hours:f} hour{'' if hours == 1 else 's'}"


def booking_total(booking: Booking) -> Decimal:
    """Duration times the listing's hourly price, to 2 decimal places."""
    if booking.office is None:
        return Decimal("0.00")
    hours = booking_duration_hours(booking.start_time, booking.end_time)
    total = hours * Decimal(str(booking.office.price_per_hour))
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
