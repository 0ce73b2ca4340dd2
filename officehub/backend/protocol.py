"""Backend contract shared by the Supabase and in-memory implementations."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from officehub.domain.value_objects import AuthEvent, ChangeEventType

logger = logging.getLogger(__name__)

Row = dict[str, Any]


@dataclass(frozen=True, slots=True)
class Embed:
    """Referenced row fetched together with the parent row.

    ``alias:fk (columns)`` in PostgREST select syntax.
    """

    alias: str
    table: str
    foreign_key: str
    columns: tuple[str, ...] = ()

    def to_select(self) -> str:
        cols = ", ".join(self.columns) if self.columns else "*"
        return f"{self.alias}:{self.foreign_key} ({cols})"


@dataclass(frozen=True, slots=True)
class Query:
    """Read description translated by each backend."""

    table: str
    columns: tuple[str, ...] = ()
    eq: dict[str, Any] = field(default_factory=dict)
    in_: dict[str, tuple[Any, ...]] = field(default_factory=dict)
    embeds: tuple[Embed, ...] = ()
    order_by: str | None = None
    descending: bool = False

    def select_clause(self) -> str:
        parts = [", ".join(self.columns) if self.columns else "*"]
        parts.extend(embed.to_select() for embed in self.embeds)
        return ", ".join(parts)


@dataclass(frozen=True, slots=True)
class ChangeFilter:
    """Change-feed subscription scope: table, event type, optional column equality."""

    table: str
    event: ChangeEventType = ChangeEventType.ALL
    column: str | None = None
    value: Any = None

    def to_filter_string(self) -> str | None:
        if self.column is None:
            return None
        return f"{self.column}=eq.{self.value}"

    def matches(self, change: ChangeEvent) -> bool:
        if change.table != self.table:
            return False
        if self.event != ChangeEventType.ALL and change.type != self.event:
            return False
        if self.column is None:
            return True
        record = change.new or change.old
        return str(record.get(self.column)) == str(self.value)


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """Row-level change delivered by the change feed."""

    table: str
    type: ChangeEventType
    new: Row = field(default_factory=dict)
    old: Row = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AuthUser:
    id: str
    email: str


@dataclass(frozen=True, slots=True)
class AuthSession:
    user: AuthUser
    access_token: str | None = None


ChangeHandler = Callable[[ChangeEvent], Awaitable[None]]
AuthStateHandler = Callable[[AuthEvent, "AuthSession | None"], Awaitable[None]]


class Subscription:
    """Handle for a live subscription. ``unsubscribe`` is idempotent."""

    def __init__(self, name: str, cancel: Callable[[], Awaitable[None]]) -> None:
        self.name = name
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    async def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        await self._cancel()
        logger.debug(f"Unsubscribed from {self.name}")


class BackendProtocol(Protocol):
    """Operations the client needs from the hosted backend."""

    # Tables
    async def select(self, query: Query) -> list[Row]:
        """Return every row matching ``query``."""
        ...

    async def select_one(self, query: Query) -> Row:
        """Return exactly one row or raise RecordNotFoundException."""
        ...

    async def insert(self, table: str, values: Row) -> Row:
        """Insert one row and return it as stored."""
        ...

    async def update(self, table: str, values: Row, eq: dict[str, Any]) -> list[Row]:
        """Update matching rows and return them."""
        ...

    async def delete(self, table: str, eq: dict[str, Any]) -> None:
        """Delete matching rows."""
        ...

    async def rpc(self, name: str, params: dict[str, Any]) -> Any:
        """Call a remote procedure."""
        ...

    # Auth
    async def sign_up(self, email: str, password: str) -> AuthUser | None:
        ...

    async def sign_in(self, email: str, password: str) -> AuthSession:
        ...

    async def sign_out(self) -> None:
        ...

    async def get_session(self) -> AuthSession | None:
        ...

    async def on_auth_state_change(self, handler: AuthStateHandler) -> Subscription:
        ...

    # Change feed
    async def subscribe(
        self, channel: str, change_filter: ChangeFilter, handler: ChangeHandler
    ) -> Subscription:
        ...
