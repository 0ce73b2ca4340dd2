"""Test doubles and row factories shared across the suite."""
from __future__ import annotations

import asyncio
from collections import Counter
from typing import Any

from officehub.backend import InMemoryBackend
from officehub.domain.value_objects import AuthEvent


class RecordingSleep:
    """Awaitable sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class DeferredAuthBackend(InMemoryBackend):
    """In-memory backend delivering auth events as tasks, like the realtime client."""

    def __init__(self) -> None:
        super().__init__()
        self._auth_tasks: set[asyncio.Task] = set()

    async def _emit_auth(self, event: AuthEvent) -> None:
        session = self._session
        for handler in list(self._auth_handlers):
            task = asyncio.ensure_future(handler(event, session))
            self._auth_tasks.add(task)
            task.add_done_callback(self._auth_tasks.discard)

    async def drain(self) -> None:
        while pending := [t for t in self._auth_tasks if not t.done()]:
            await asyncio.gather(*pending)


class FlakyBackend:
    """Proxy that makes chosen backend calls fail before delegating."""

    def __init__(self, inner: InMemoryBackend) -> None:
        self.inner = inner
        self.calls: Counter[str] = Counter()
        self._failures: dict[str, list[Exception]] = {}

    def fail(self, method: str, error: Exception, times: int = 1) -> None:
        self._failures.setdefault(method, []).extend([error] * times)

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self.inner, name)
        if not callable(attr):
            return attr

        async def _call(*args: Any, **kwargs: Any) -> Any:
            self.calls[name] += 1
            pending = self._failures.get(name)
            if pending:
                raise pending.pop(0)
            return await attr(*args, **kwargs)

        return _call


async def make_listing(
    backend: Any, owner_id: str, title: str = "Desk", **overrides: Any
) -> dict[str, Any]:
    values = {
        "owner_id": owner_id,
        "title": title,
        "location": "Downtown",
        "price_per_hour": 10.0,
        "price_per_day": 60.0,
        "amenities": ["WiFi"],
    }
    values.update(overrides)
    return await backend.insert("offices", values)


async def make_account(
    backend: Any, account_id: str, role: str = "user", **overrides: Any
) -> dict[str, Any]:
    values = {"id": account_id, "email": f"{account_id}@example.com", "user_type": role}
    values.update(overrides)
    return await backend.insert("users", values)
