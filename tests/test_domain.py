"""Tests for domain entities and booking status rules."""
from __future__ import annotations

from datetime import date, time

import pytest

from officehub.domain.booking_fsm import status_options, validate_booking_transition
from officehub.domain.entities import Account, Booking, Listing
from officehub.domain.value_objects import BookingStatus, UserRole


def _listing(**overrides) -> Listing:
    data = {
        "id": "l1",
        "owner_id": "o1",
        "title": "Sunny Loft",
        "location": "Old Town",
        "description": "Quiet room near the park",
        "price_per_hour": 10,
        "price_per_day": 60,
    }
    data.update(overrides)
    return Listing(**data)


def _booking(**overrides) -> Booking:
    data = {
        "id": "b1",
        "office_id": "l1",
        "user_id": "u1",
        "booking_date": "2030-01-01",
        "start_time": "09:00",
        "end_time": "11:00",
    }
    data.update(overrides)
    return Booking.model_validate(data)


class TestEntities:
    """Tests for entity models."""

    def test_account_role_and_display_name(self):
        account = Account(id="u1", email="a@x.com", user_type="owner")

        assert account.is_owner
        assert account.user_type == UserRole.OWNER.value
        assert account.display_name == "a@x.com"
        assert account.to_dict()["user_type"] == "owner"

    def test_listing_rejects_negative_price(self):
        with pytest.raises(ValueError):
            _listing(price_per_hour=-1)

    @pytest.mark.parametrize("query", ["loft", "OLD", "park", ""])
    def test_listing_matches(self, query):
        assert _listing().matches(query)

    def test_listing_does_not_match(self):
        assert not _listing().matches("garage")

    def test_booking_defaults_to_pending(self):
        booking = _booking()

        assert booking.status == "pending"
        assert booking.is_pending
        assert booking.can_be_cancelled
        assert booking.booking_date == date(2030, 1, 1)

    def test_confirmed_booking_is_not_offered_cancellation(self):
        assert not _booking(status="confirmed").can_be_cancelled

    def test_merge_keeps_embedded_listing(self):
        booking = _booking(office=_listing().model_dump())

        merged = booking.merge({"status": "confirmed", "updated_at": "2030-01-01T10:00:00+00:00"})

        assert merged.status == "confirmed"
        assert merged.office == booking.office
        assert merged.updated_at is not None
        assert booking.status == "pending"

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (time(8), time(9), False),
            (time(8), time(9, 30), True),
            (time(10), time(10, 30), True),
            (time(11), time(12), False),
        ],
    )
    def test_overlap_is_half_open(self, start, end, expected):
        assert _booking().overlaps(date(2030, 1, 1), start, end) is expected

    def test_overlap_requires_same_day(self):
        assert not _booking().overlaps(date(2030, 1, 2), time(9), time(10))


class TestBookingTransitions:
    """Tests for status transition validation."""

    @pytest.mark.parametrize("current", [s.value for s in BookingStatus])
    @pytest.mark.parametrize("target", [s.value for s in BookingStatus])
    def test_lenient_mode_allows_everything(self, current, target):
        assert validate_booking_transition(current_status=current, target_status=target).allowed

    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            ("pending", "confirmed", True),
            ("pending", "cancelled", True),
            ("pending", "completed", False),
            ("confirmed", "completed", True),
            ("completed", "pending", False),
            ("cancelled", "confirmed", False),
            ("completed", "completed", True),
        ],
    )
    def test_strict_mode(self, current, target, allowed):
        result = validate_booking_transition(
            current_status=current, target_status=target, strict=True
        )

        assert result.allowed is allowed
        if not allowed:
            assert result.reason

    def test_unknown_target_always_rejected(self):
        result = validate_booking_transition(current_status="pending", target_status="archived")

        assert not result.allowed
        assert "archived" in result.reason

    def test_status_options_exclude_current(self):
        assert status_options("pending") == ["confirmed", "completed", "cancelled"]
        assert len(status_options(None)) == 4
