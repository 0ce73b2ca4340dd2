"""Booking status transition rules.

The client allows any status change by default. ``strict=True`` applies the
transition table below instead.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from officehub.domain.value_objects import BookingStatus


ALLOWED_TRANSITIONS: Mapping[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset(
        {
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
        }
    ),
    BookingStatus.CONFIRMED: frozenset(
        {
            BookingStatus.COMPLETED,
            BookingStatus.CANCELLED,
        }
    ),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_booking_transition(
    *,
    current_status: str | None,
    target_status: str,
    strict: bool = False,
) -> TransitionValidationResult:
    """Validate a status change; unknown statuses are always rejected."""
    if not target_status:
        return TransitionValidationResult(False, "New status is missing.")

    try:
        target = BookingStatus.parse(target_status)
    except ValueError:
        return TransitionValidationResult(False, f"Unsupported status: {target_status}")

    if not strict or current_status is None:
        return TransitionValidationResult(True)

    try:
        current = BookingStatus.parse(current_status)
    except ValueError:
        return TransitionValidationResult(False, f"Unsupported current status: {current_status}")

    if current == target:
        return TransitionValidationResult(True)

    if current in TERMINAL_STATUSES:
        return TransitionValidationResult(
            False,
            f"Cannot change terminal status '{current.value}'.",
        )

    if target not in ALLOWED_TRANSITIONS[current]:
        return TransitionValidationResult(
            False,
            f"Transition '{current.value} -> {target.value}' is not allowed.",
        )

    return TransitionValidationResult(True)


def status_options(current_status: str | None) -> list[str]:
    """Statuses offered to an owner for a booking: every status but the current one."""
    return [status.value for status in BookingStatus if status.value != current_status]
