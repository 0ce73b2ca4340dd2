"""Booking repository aggregating bookings across an owner's listings."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from officehub.backend.protocol import BackendProtocol, ChangeEvent, ChangeFilter, Embed, Query
from officehub.core.constants import (
    BOOKING_REQUESTER_COLUMNS,
    BOOKINGS_TABLE,
    OFFICES_TABLE,
    USERS_TABLE,
)
from officehub.core.exceptions import OfficeHubException, ValidationException
from officehub.core.result import Result
from officehub.domain.booking_fsm import validate_booking_transition
from officehub.domain.entities import Booking
from officehub.domain.value_objects import BookingStatus, ChangeEventType

from .base import BaseRepository

logger = logging.getLogger(__name__)

OWNER_BOOKING_EMBEDS = (
    Embed("office", OFFICES_TABLE, "office_id"),
    Embed("user", USERS_TABLE, "user_id", BOOKING_REQUESTER_COLUMNS),
)


class OwnerBookingRepository(BaseRepository[Booking]):
    """Repository for bookings made against one owner's listings.

    Any change to the bookings table triggers a full refetch, so a missed
    event is repaired by the next one.
    """

    def __init__(
        self,
        backend: BackendProtocol,
        owner_id: str | None = None,
        *,
        strict_transitions: bool = False,
    ) -> None:
        super().__init__(backend)
        self.owner_id = owner_id
        self.strict_transitions = strict_transitions

    async def _owner_listing_ids(self) -> list[str]:
        query = Query(OFFICES_TABLE, columns=("id",), eq={"owner_id": self.owner_id})
        rows = await self.backend.select(query)
        return [row["id"] for row in rows]

    async def list(self, owner_id: str | None = None) -> Result[list[Booking]]:
        """Fetch bookings on the owner's listings with listing and requester embedded.

        Args:
            owner_id: Owning account; defaults to the repository's owner

        Returns:
            Result with the bookings, newest first; empty when the owner has
            no listings
        """
        if owner_id is not None:
            self.owner_id = owner_id
        if not self.owner_id:
            self.loading = False
            return Result.success([])

        try:
            listing_ids = await self._owner_listing_ids()
            if not listing_ids:
                logger.debug(f"No listings found for owner {self.owner_id}")
                self.items = []
                return Result.success([])

            query = Query(
                BOOKINGS_TABLE,
                in_={"office_id": tuple(listing_ids)},
                embeds=OWNER_BOOKING_EMBEDS,
                order_by="created_at",
                descending=True,
            )
            rows = await self.backend.select(query)
            self.items = [Booking.model_validate(row) for row in rows]
            logger.debug(f"Fetched {len(self.items)} bookings for owner {self.owner_id}")
            return Result.success(list(self.items))
        except Exception as e:
            return self._failure("list_owner_bookings", e)
        finally:
            self.loading = False

    async def refetch(self) -> Result[list[Booking]]:
        return await self.list()

    async def subscribe(self) -> None:
        """Refetch on every insert, update or delete in the bookings table."""
        if self.subscribed or not self.owner_id:
            return
        self._subscription = await self.backend.subscribe(
            "owner-bookings-changes",
            ChangeFilter(BOOKINGS_TABLE, ChangeEventType.ALL),
            self._on_change,
        )

    async def _on_change(self, change: ChangeEvent) -> None:
        await self.refetch()

    async def update_status(self, booking_id: str, status: str) -> OfficeHubException | None:
        """Overwrite a booking's status.

        Any status may move to any other unless strict transitions are on.

        Returns:
            None on success, otherwise the failure
        """
        current = next((b for b in self.items if b.id == booking_id), None)
        check = validate_booking_transition(
            current_status=current.status if current else None,
            target_status=status,
            strict=self.strict_transitions,
        )
        if not check.allowed:
            return self._handle_backend_error("update_booking_status", ValidationException(check.reason))

        new_status = BookingStatus.parse(status).value
        try:
            await self.backend.update(
                BOOKINGS_TABLE,
                {"status": new_status, "updated_at": datetime.now(timezone.utc).isoformat()},
                {"id": booking_id},
            )
        except Exception as e:
            return self._handle_backend_error("update_booking_status", e)

        self._patch(
            lambda b: b.id == booking_id,
            lambda b: b.model_copy(update={"status": new_status}),
        )
        return None
