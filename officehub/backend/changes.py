"""In-memory change feed with per-channel subscribers.

Delivers row-level change events to async handlers in the current process.
Handler failures are logged and never reach the writer.
"""
from __future__ import annotations

import asyncio
import logging

from officehub.backend.protocol import ChangeEvent, ChangeFilter, ChangeHandler, Subscription

logger = logging.getLogger(__name__)


class InMemoryChangeFeed:
    """Change feed for single-process backends."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[tuple[ChangeFilter, ChangeHandler]]] = {}
        self._lock = asyncio.Lock()

    @property
    def channels(self) -> list[str]:
        return list(self._subscribers)

    async def publish(self, change: ChangeEvent) -> None:
        """Deliver ``change`` to every matching subscriber."""
        targets = [
            (channel, handler)
            for channel, entries in list(self._subscribers.items())
            for change_filter, handler in list(entries)
            if change_filter.matches(change)
        ]

        for channel, handler in targets:
            try:
                await handler(change)
            except Exception as e:
                logger.error(f"Change handler error in channel {channel}: {e}")

    async def subscribe(
        self, channel: str, change_filter: ChangeFilter, handler: ChangeHandler
    ) -> Subscription:
        """Register ``handler`` on ``channel`` for changes matching ``change_filter``."""
        entry = (change_filter, handler)
        async with self._lock:
            self._subscribers.setdefault(channel, []).append(entry)
            logger.debug(f"Subscribed to {channel}, total: {len(self._subscribers[channel])}")

        async def _cancel() -> None:
            async with self._lock:
                entries = self._subscribers.get(channel, [])
                self._subscribers[channel] = [e for e in entries if e is not entry]
                if not self._subscribers[channel]:
                    del self._subscribers[channel]

        return Subscription(channel, _cancel)

    async def close(self) -> None:
        """Drop all subscribers."""
        async with self._lock:
            self._subscribers.clear()
