"""Booking entity model."""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, Field

from officehub.domain.entities.account import Requester
from officehub.domain.entities.listing import Listing
from officehub.domain.value_objects import BookingStatus


class Booking(BaseModel):
    """Booking entity with type-safe fields."""

    id: str = Field(..., description="Booking ID")
    office_id: str = Field(..., description="Booked listing ID")
    user_id: str = Field(..., description="Requesting account ID")
    booking_date: date = Field(..., description="Day of the booking")
    start_time: str = Field(..., description="Start time, HH:MM")
    end_time: str = Field(..., description="End time, HH:MM")
    status: BookingStatus = Field(BookingStatus.PENDING, description="Booking status")
    created_at: datetime | None = Field(None, description="Booking creation time")
    updated_at: datetime | None = Field(None, description="Last status change")
    office: Listing | None = Field(None, description="Embedded listing")
    user: Requester | None = Field(None, description="Embedded requester")

    class Config:
        """Pydantic config."""

        from_attributes = True
        use_enum_values = True

    @property
    def is_pending(self) -> bool:
        return self.status == BookingStatus.PENDING

    @property
    def can_be_cancelled(self) -> bool:
        """Requesters are only offered cancellation while pending."""
        return self.is_pending

    @property
    def starts_at(self) -> time:
        return time.fromisoformat(self.start_time)

    @property
    def ends_at(self) -> time:
        return time.fromisoformat(self.end_time)

    def overlaps(self, booking_date: date, start: time, end: time) -> bool:
        """Check if [start, end) on booking_date intersects this booking's window."""
        if self.booking_date != booking_date:
            return False
        return start < self.ends_at and self.starts_at < end

    def merge(self, fields: dict[str, Any]) -> Booking:
        """Return a copy with ``fields`` applied over the current values."""
        data = self.model_dump()
        data.update(fields)
        return Booking.model_validate(data)

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "id": self.id,
            "office_id": self.office_id,
            "user_id": self.user_id,
            "booking_date": self.booking_date.isoformat(),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "status": self.status.value if isinstance(self.status, BookingStatus) else self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
