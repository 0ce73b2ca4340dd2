"""Tests for the owner-side booking repository."""
from __future__ import annotations

import pytest
from factories import FlakyBackend, make_account, make_listing

from officehub.core.exceptions import BackendException, ValidationException
from officehub.repositories import BookingRepository, OwnerBookingRepository


async def _book(backend, office_id: str, account_id: str, day: str, start="09:00", end="10:00"):
    repo = BookingRepository(backend, account_id)
    result = await repo.create(office_id, day, start, end)
    assert result.ok
    return result.data


class TestOwnerBookingList:
    """Tests for listing bookings across an owner's listings."""

    @pytest.mark.asyncio
    async def test_owner_without_listings_sees_nothing(self, backend, tomorrow):
        """No listings means an empty list without querying bookings."""
        other = await make_listing(backend, "owner-b")
        await _book(backend, other["id"], "seeker-1", tomorrow)
        flaky = FlakyBackend(backend)
        repo = OwnerBookingRepository(flaky, "owner-a")

        result = await repo.list()

        assert result.ok
        assert result.data == []
        assert repo.loading is False
        assert flaky.calls["select"] == 1

    @pytest.mark.asyncio
    async def test_only_bookings_on_own_listings(self, backend, tomorrow):
        """Owner A never sees a booking made on owner B's listing."""
        mine = await make_listing(backend, "owner-a", "mine")
        theirs = await make_listing(backend, "owner-b", "theirs")
        own = await _book(backend, mine["id"], "seeker-1", tomorrow)
        await _book(backend, theirs["id"], "seeker-1", tomorrow, "12:00", "13:00")
        repo = OwnerBookingRepository(backend, "owner-a")

        result = await repo.list()

        assert [b.id for b in result.data] == [own.id]

    @pytest.mark.asyncio
    async def test_listing_and_requester_are_embedded(self, backend, tomorrow):
        """Each booking carries its listing and the requester's contact fields."""
        await make_account(backend, "seeker-1", full_name="Sam", phone_number="+15550101")
        office = await make_listing(backend, "owner-a", "Loft")
        await _book(backend, office["id"], "seeker-1", tomorrow)
        repo = OwnerBookingRepository(backend, "owner-a")

        result = await repo.list()

        booking = result.data[0]
        assert booking.office.title == "Loft"
        assert booking.user.full_name == "Sam"
        assert booking.user.phone_number == "+15550101"
        assert booking.user.email == "seeker-1@example.com"

    @pytest.mark.asyncio
    async def test_newest_first_across_listings(self, backend, tomorrow):
        """Bookings from several listings are merged, newest first."""
        first = await make_listing(backend, "owner-a", "one")
        second = await make_listing(backend, "owner-a", "two")
        older = await _book(backend, first["id"], "seeker-1", tomorrow)
        newer = await _book(backend, second["id"], "seeker-2", tomorrow)
        repo = OwnerBookingRepository(backend, "owner-a")

        result = await repo.list()

        assert [b.id for b in result.data] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_list_failure_is_returned(self, backend):
        flaky = FlakyBackend(backend)
        flaky.fail("select", BackendException("bad gateway"))
        repo = OwnerBookingRepository(flaky, "owner-a")

        result = await repo.list()

        assert isinstance(result.error, BackendException)
        assert repo.loading is False


class TestOwnerBookingSubscription:
    """Tests for the refetch-on-change subscription."""

    @pytest.mark.asyncio
    async def test_new_booking_triggers_refetch(self, backend, tomorrow):
        """A booking made elsewhere shows up without a manual refresh."""
        office = await make_listing(backend, "owner-a")
        repo = OwnerBookingRepository(backend, "owner-a")
        await repo.list()
        await repo.subscribe()

        created = await _book(backend, office["id"], "seeker-1", tomorrow)

        assert [b.id for b in repo.items] == [created.id]
        await repo.unsubscribe()

    @pytest.mark.asyncio
    async def test_cancellation_by_requester_is_seen(self, backend, tomorrow):
        office = await make_listing(backend, "owner-a")
        created = await _book(backend, office["id"], "seeker-1", tomorrow)
        repo = OwnerBookingRepository(backend, "owner-a")
        await repo.list()
        await repo.subscribe()

        await BookingRepository(backend, "seeker-1").cancel(created.id)

        assert repo.items[0].status == "cancelled"
        await repo.unsubscribe()

    @pytest.mark.asyncio
    async def test_unsubscribe_stops_refetching(self, backend, tomorrow):
        office = await make_listing(backend, "owner-a")
        repo = OwnerBookingRepository(backend, "owner-a")
        await repo.list()
        await repo.subscribe()

        await repo.unsubscribe()
        await repo.unsubscribe()
        await _book(backend, office["id"], "seeker-1", tomorrow)

        assert repo.items == []


class TestUpdateStatus:
    """Tests for owner status changes."""

    @pytest.mark.asyncio
    async def test_any_status_can_follow_any_other(self, backend, tomorrow):
        """Without strict transitions a completed booking can go back to pending."""
        office = await make_listing(backend, "owner-a")
        created = await _book(backend, office["id"], "seeker-1", tomorrow)
        repo = OwnerBookingRepository(backend, "owner-a")
        await repo.list()

        assert await repo.update_status(created.id, "completed") is None
        assert await repo.update_status(created.id, "pending") is None

        assert repo.items[0].status == "pending"
        row = backend.tables["bookings"][0]
        assert row["status"] == "pending"
        assert row["updated_at"] is not None

    @pytest.mark.asyncio
    async def test_status_change_reaches_requester(self, backend, tomorrow):
        """The requester's subscribed cache follows the owner's decision."""
        office = await make_listing(backend, "owner-a")
        seeker = BookingRepository(backend, "seeker-1")
        created = await seeker.create(office["id"], tomorrow, "09:00", "10:00")
        await seeker.subscribe()
        owner = OwnerBookingRepository(backend, "owner-a")
        await owner.list()

        await owner.update_status(created.data.id, "confirmed")

        assert seeker.items[0].status == "confirmed"
        assert seeker.items[0].office is not None
        await seeker.unsubscribe()

    @pytest.mark.asyncio
    async def test_strict_mode_blocks_reopening(self, backend, tomorrow):
        office = await make_listing(backend, "owner-a")
        created = await _book(backend, office["id"], "seeker-1", tomorrow)
        repo = OwnerBookingRepository(backend, "owner-a", strict_transitions=True)
        await repo.list()

        assert await repo.update_status(created.id, "confirmed") is None
        assert await repo.update_status(created.id, "completed") is None
        error = await repo.update_status(created.id, "pending")

        assert isinstance(error, ValidationException)
        assert backend.tables["bookings"][0]["status"] == "completed"

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, backend, tomorrow):
        office = await make_listing(backend, "owner-a")
        created = await _book(backend, office["id"], "seeker-1", tomorrow)
        repo = OwnerBookingRepository(backend, "owner-a")
        await repo.list()

        error = await repo.update_status(created.id, "archived")

        assert isinstance(error, ValidationException)
        assert backend.tables["bookings"][0]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_remote_failure_leaves_cache(self, backend, tomorrow):
        office = await make_listing(backend, "owner-a")
        created = await _book(backend, office["id"], "seeker-1", tomorrow)
        flaky = FlakyBackend(backend)
        repo = OwnerBookingRepository(flaky, "owner-a")
        await repo.list()
        flaky.fail("update", BackendException("offline"))

        error = await repo.update_status(created.id, "confirmed")

        assert isinstance(error, BackendException)
        assert repo.items[0].status == "pending"
