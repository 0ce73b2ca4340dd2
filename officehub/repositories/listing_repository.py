"""Listing repository for office listing operations."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from officehub.backend.protocol import BackendProtocol, Query
from officehub.core.constants import OFFICES_TABLE
from officehub.core.exceptions import OfficeHubException
from officehub.core.result import Result
from officehub.core.validation import validate_listing_form
from officehub.domain.entities import Listing

from .base import BaseRepository

logger = logging.getLogger(__name__)


class ListingRepository(BaseRepository[Listing]):
    """Repository for office listings, optionally scoped to one owner.

    Refreshed on demand only; there is no change subscription.
    """

    def __init__(self, backend: BackendProtocol, owner_id: str | None = None) -> None:
        super().__init__(backend)
        self.owner_id = owner_id

    async def list(self, owner_id: str | None = None) -> Result[list[Listing]]:
        """Fetch listings newest first.

        Args:
            owner_id: Only return this owner's listings; defaults to the
                repository's owner scope

        Returns:
            Result with the listings; the cache is replaced on success
        """
        if owner_id is not None:
            self.owner_id = owner_id

        eq = {"owner_id": self.owner_id} if self.owner_id else {}
        query = Query(OFFICES_TABLE, eq=eq, order_by="created_at", descending=True)
        try:
            rows = await self.backend.select(query)
            self.items = [Listing.model_validate(row) for row in rows]
            return Result.success(list(self.items))
        except Exception as e:
            return self._failure("list_listings", e)
        finally:
            self.loading = False

    async def refetch(self) -> Result[list[Listing]]:
        return await self.list()

    def get_cached(self, listing_id: str) -> Listing | None:
        return next((item for item in self.items if item.id == listing_id), None)

    async def set_availability(self, listing_id: str, is_available: bool) -> OfficeHubException | None:
        """Toggle whether a listing accepts new bookings.

        Args:
            listing_id: Listing ID
            is_available: New availability flag

        Returns:
            None on success, otherwise the failure
        """
        try:
            await self.backend.update(
                OFFICES_TABLE, {"is_available": is_available}, {"id": listing_id}
            )
        except Exception as e:
            return self._handle_backend_error("set_availability", e)

        self._patch(
            lambda item: item.id == listing_id,
            lambda item: item.model_copy(update={"is_available": is_available}),
        )
        return None

    async def remove(self, listing_id: str) -> OfficeHubException | None:
        """Delete a listing.

        Args:
            listing_id: Listing ID

        Returns:
            None on success, otherwise the failure
        """
        try:
            await self.backend.delete(OFFICES_TABLE, {"id": listing_id})
        except Exception as e:
            return self._handle_backend_error("remove_listing", e)

        self._discard(lambda item: item.id == listing_id)
        return None

    async def create(
        self,
        owner_id: str,
        *,
        title: str,
        location: str,
        price_per_hour: Any,
        price_per_day: Any,
        amenities: Iterable[str],
        description: str = "",
    ) -> Result[Listing]:
        """Create a listing for ``owner_id``.

        New listings always start available, with no images and a zero
        booking counter.

        Returns:
            Result with the created listing
        """
        amenities = list(amenities or [])
        try:
            hourly, daily = validate_listing_form(
                title, location, price_per_hour, price_per_day, amenities
            )
        except OfficeHubException as e:
            return Result.failure(e)

        values = {
            "owner_id": owner_id,
            "title": title.strip(),
            "description": (description or "").strip(),
            "location": location.strip(),
            "price_per_hour": hourly,
            "price_per_day": daily,
            "amenities": amenities,
            "images": [],
            "is_available": True,
            "booking_count": 0,
        }
        try:
            row = await self.backend.insert(OFFICES_TABLE, values)
            listing = Listing.model_validate(row)
        except Exception as e:
            return self._failure("create_listing", e)

        logger.info(f"Listing {listing.id} created by {owner_id}")
        if self.owner_id in (None, owner_id):
            self.items = [listing, *self.items]
        return Result.success(listing)
