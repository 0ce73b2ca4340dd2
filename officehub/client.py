"""Composition root: one backend, one session, repositories on demand."""
from __future__ import annotations

import logging

from officehub.backend.protocol import BackendProtocol
from officehub.core.config import Settings, load_settings
from officehub.core.logging_config import setup_logging
from officehub.core.retry import RetryPolicy
from officehub.repositories import BookingRepository, ListingRepository, OwnerBookingRepository
from officehub.services.session import SessionService

logger = logging.getLogger(__name__)


class OfficeHubClient:
    """Wires settings into the session and the repositories.

    Repositories receive account ids explicitly; the session is shared by
    reference and never read as global state.
    """

    def __init__(self, backend: BackendProtocol, settings: Settings) -> None:
        self.backend = backend
        self.settings = settings
        self.session = SessionService(
            backend,
            retry_policy=RetryPolicy(
                max_retries=settings.retry.attempts,
                base_delay=settings.retry.delay,
            ),
        )

    @classmethod
    async def from_env(cls) -> OfficeHubClient:
        """Build a client for the Supabase project configured in the environment."""
        from officehub.backend.supabase_backend import create_backend

        settings = load_settings()
        setup_logging(settings.log_level)
        backend = await create_backend(settings)
        return cls(backend, settings)

    async def start(self) -> None:
        await self.session.start()

    async def close(self) -> None:
        await self.session.close()

    def listings(self, owner_id: str | None = None) -> ListingRepository:
        return ListingRepository(self.backend, owner_id)

    def bookings(self, account_id: str | None = None) -> BookingRepository:
        return BookingRepository(
            self.backend,
            account_id,
            prevent_overlaps=self.settings.prevent_overlaps,
        )

    def owner_bookings(self, owner_id: str | None = None) -> OwnerBookingRepository:
        return OwnerBookingRepository(
            self.backend,
            owner_id,
            strict_transitions=self.settings.strict_status_transitions,
        )
