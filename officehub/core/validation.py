"""Client-side form validation.

Every check raises ValidationException before any remote call is made.
"""
from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, time
from typing import Any

from officehub.core.constants import MIN_PASSWORD_LENGTH
from officehub.core.exceptions import ValidationException

PRICE_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$")


def _blank(value: Any) -> bool:
    return value is None or not str(value).strip()


def validate_sign_up(email: str, password: str, confirm_password: str) -> None:
    if _blank(email) or not password or not confirm_password:
        raise ValidationException("Please fill in all fields")
    if password != confirm_password:
        raise ValidationException("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationException(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def validate_sign_in(email: str, password: str) -> None:
    if _blank(email) or not password:
        raise ValidationException("Please fill in all fields")


def parse_price(value: Any, field_name: str) -> float:
    """Parse a price entered as text or number into a non-negative float."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        price = float(value)
    else:
        text = str(value or "").strip()
        if not PRICE_PATTERN.match(text):
            raise ValidationException(f"Invalid {field_name}: {value!r}")
        price = float(text)
    if price < 0:
        raise ValidationException(f"Invalid {field_name}: {value!r}")
    return price


def validate_listing_form(
    title: str | None,
    location: str | None,
    price_per_hour: Any,
    price_per_day: Any,
    amenities: Iterable[str] | None,
) -> tuple[float, float]:
    """Check the listing form and return the parsed (hourly, daily) prices."""
    if _blank(title) or _blank(location) or _blank(price_per_hour) or _blank(price_per_day):
        raise ValidationException("Please fill in all required fields")
    if not list(amenities or []):
        raise ValidationException("Please select at least one amenity")
    return (
        parse_price(price_per_hour, "price per hour"),
        parse_price(price_per_day, "price per day"),
    )


def parse_time(value: str, field_name: str) -> time:
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationException(f"Invalid {field_name}: {value!r}") from None


def parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationException(f"Invalid booking date: {value!r}") from None


def validate_booking_window(
    booking_date: str | date,
    start_time: str,
    end_time: str,
    today: date | None = None,
) -> tuple[date, time, time]:
    """Check the booking form and return the parsed (date, start, end)."""
    day = parse_date(booking_date)
    start = parse_time(start_time, "start time")
    end = parse_time(end_time, "end time")

    if day < (today or date.today()):
        raise ValidationException("Please select a future date")
    if start >= end:
        raise ValidationException("End time must be after start time")
    return day, start, end


def clean_profile_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Trim profile fields and require a non-blank full name when given."""
    cleaned = {
        key: value.strip() if isinstance(value, str) else value
        for key, value in fields.items()
    }
    if "full_name" in cleaned and _blank(cleaned["full_name"]):
        raise ValidationException("Full name is required")
    return cleaned
