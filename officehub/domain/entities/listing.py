"""Listing (office) entity model."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Listing(BaseModel):
    """Office space offered for hourly or daily booking."""

    id: str = Field(..., description="Listing ID")
    owner_id: str = Field(..., description="Owning account ID")
    title: str = Field(..., description="Listing title")
    description: str = Field("", description="Free-form description")
    location: str = Field(..., description="Location label")
    price_per_hour: float = Field(..., ge=0, description="Hourly price")
    price_per_day: float = Field(..., ge=0, description="Daily price")
    amenities: list[str] = Field(default_factory=list, description="Amenity labels")
    images: list[str] = Field(default_factory=list, description="Image URLs")
    is_available: bool = Field(True, description="Open for new bookings")
    booking_count: int = Field(0, ge=0, description="Cumulative bookings made")
    created_at: datetime | None = Field(None, description="Creation time")

    class Config:
        """Pydantic config."""

        from_attributes = True

    def matches(self, query: str) -> bool:
        """Case-insensitive match on title, location or description."""
        needle = query.strip().lower()
        if not needle:
            return True
        return any(
            needle in (value or "").lower()
            for value in (self.title, self.location, self.description)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for database storage."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "price_per_hour": self.price_per_hour,
            "price_per_day": self.price_per_day,
            "amenities": list(self.amenities),
            "images": list(self.images),
            "is_available": self.is_available,
            "booking_count": self.booking_count,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
