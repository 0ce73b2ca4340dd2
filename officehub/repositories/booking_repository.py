"""Booking repository for a requester's own bookings."""
from __future__ import annotations

import logging
from datetime import date, time

from officehub.backend.protocol import BackendProtocol, ChangeEvent, ChangeFilter, Embed, Query
from officehub.core.constants import (
    BOOKINGS_TABLE,
    INCREMENT_BOOKING_COUNT_RPC,
    OFFICES_TABLE,
    TIME_FORMAT,
)
from officehub.core.exceptions import (
    AuthenticationException,
    OfficeHubException,
    ValidationException,
)
from officehub.core.result import Result
from officehub.core.validation import validate_booking_window
from officehub.domain.entities import Booking
from officehub.domain.value_objects import BookingStatus, ChangeEventType

from .base import BaseRepository

logger = logging.getLogger(__name__)

OFFICE_EMBED = Embed("office", OFFICES_TABLE, "office_id")


class BookingRepository(BaseRepository[Booking]):
    """Repository for the bookings of a single requesting account."""

    def __init__(
        self,
        backend: BackendProtocol,
        account_id: str | None = None,
        *,
        prevent_overlaps: bool = False,
    ) -> None:
        super().__init__(backend)
        self.account_id = account_id
        self.prevent_overlaps = prevent_overlaps

    # -------------------- Reads --------------------
    async def list(self, account_id: str | None = None) -> Result[list[Booking]]:
        """Fetch the account's bookings joined with their listing, newest first.

        Args:
            account_id: Requesting account; defaults to the repository's account

        Returns:
            Result with the bookings (empty without an account)
        """
        if account_id is not None:
            self.account_id = account_id
        if not self.account_id:
            self.loading = False
            return Result.success([])

        query = Query(
            BOOKINGS_TABLE,
            eq={"user_id": self.account_id},
            embeds=(OFFICE_EMBED,),
            order_by="created_at",
            descending=True,
        )
        try:
            rows = await self.backend.select(query)
            self.items = [Booking.model_validate(row) for row in rows]
            return Result.success(list(self.items))
        except Exception as e:
            return self._failure("list_bookings", e)
        finally:
            self.loading = False

    async def refetch(self) -> Result[list[Booking]]:
        return await self.list()

    # -------------------- Change feed --------------------
    async def subscribe(self) -> None:
        """Merge status updates for this account's bookings into the cache."""
        if self.subscribed or not self.account_id:
            return
        change_filter = ChangeFilter(
            BOOKINGS_TABLE,
            ChangeEventType.UPDATE,
            column="user_id",
            value=self.account_id,
        )
        self._subscription = await self.backend.subscribe(
            "bookings-changes", change_filter, self._on_change
        )

    async def _on_change(self, change: ChangeEvent) -> None:
        booking_id = change.new.get("id")
        if booking_id is None:
            return
        # Embedded listing is kept; only the columns in the event are merged
        self._patch(lambda b: b.id == booking_id, lambda b: b.merge(change.new))

    # -------------------- Writes --------------------
    async def _check_overlap(self, office_id: str, day: date, start: time, end: time) -> None:
        query = Query(
            BOOKINGS_TABLE,
            eq={
                "office_id": office_id,
                "booking_date": day.isoformat(),
                "status": BookingStatus.CONFIRMED.value,
            },
        )
        rows = await self.backend.select(query)
        for row in rows:
            if Booking.model_validate(row).overlaps(day, start, end):
                raise ValidationException("This office is already booked for that time")

    async def create(
        self,
        office_id: str,
        booking_date: str | date,
        start_time: str,
        end_time: str,
    ) -> Result[Booking]:
        """Book ``office_id`` for the account.

        The booking is stored as pending. The listing's booking counter is
        then incremented best-effort: a failed increment is logged and the
        booking still stands.

        Returns:
            Result with the created booking
        """
        if not self.account_id:
            return Result.failure(AuthenticationException("User not logged in"))

        try:
            day, start, end = validate_booking_window(booking_date, start_time, end_time)
            if self.prevent_overlaps:
                await self._check_overlap(office_id, day, start, end)
        except Exception as e:
            return self._failure("create_booking", e)

        values = {
            "office_id": office_id,
            "user_id": self.account_id,
            "booking_date": day.isoformat(),
            "start_time": start.strftime(TIME_FORMAT),
            "end_time": end.strftime(TIME_FORMAT),
            "status": BookingStatus.PENDING.value,
        }
        try:
            row = await self.backend.insert(BOOKINGS_TABLE, values)
            booking = Booking.model_validate(row)
        except Exception as e:
            return self._failure("create_booking", e)

        try:
            await self.backend.rpc(INCREMENT_BOOKING_COUNT_RPC, {"office_id": office_id})
        except Exception as e:
            logger.warning(f"Error updating booking count for office {office_id}: {e}")

        await self.refetch()
        return Result.success(booking)

    async def cancel(self, booking_id: str) -> OfficeHubException | None:
        """Set a booking to cancelled, whatever its current status."""
        try:
            await self.backend.update(
                BOOKINGS_TABLE,
                {"status": BookingStatus.CANCELLED.value},
                {"id": booking_id},
            )
        except Exception as e:
            return self._handle_backend_error("cancel_booking", e)

        await self.refetch()
        return None
