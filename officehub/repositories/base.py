"""Base repository with the write-through list cache."""
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

from officehub.backend.protocol import BackendProtocol, Subscription
from officehub.core.exceptions import BackendException, OfficeHubException
from officehub.core.result import Result

logger = logging.getLogger(__name__)

E = TypeVar("E")


class BaseRepository(Generic[E]):
    """Base repository owning an ordered, newest-first list of entities.

    Writes go to the backend first; the cache is then patched with a local
    map/filter mirroring the remote effect. Refetching replaces the cache.
    """

    def __init__(self, backend: BackendProtocol) -> None:
        """Initialize repository with a backend.

        Args:
            backend: Backend implementing BackendProtocol
        """
        self.backend = backend
        self.items: list[E] = []
        self.loading = True
        self._subscription: Subscription | None = None

    def _handle_backend_error(self, operation: str, error: Exception) -> OfficeHubException:
        """Log a failed operation and return it as an OfficeHub error.

        Args:
            operation: Name of the operation that failed
            error: Original exception

        Returns:
            The error to hand back to the caller in a Result
        """
        logger.error(f"Error in {operation}: {error}")
        if isinstance(error, OfficeHubException):
            return error
        wrapped = BackendException(f"Backend operation '{operation}' failed: {error}")
        wrapped.__cause__ = error
        return wrapped

    def _failure(self, operation: str, error: Exception) -> Result:
        return Result.failure(self._handle_backend_error(operation, error))

    def _patch(self, predicate: Callable[[E], bool], transform: Callable[[E], E]) -> None:
        self.items = [transform(item) if predicate(item) else item for item in self.items]

    def _discard(self, predicate: Callable[[E], bool]) -> None:
        self.items = [item for item in self.items if not predicate(item)]

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def unsubscribe(self) -> None:
        """Tear down the change subscription; safe to call repeatedly."""
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            await subscription.unsubscribe()
