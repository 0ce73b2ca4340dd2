"""Supabase implementation of the backend contract."""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from supabase import AsyncClient, AuthError, PostgrestAPIError, acreate_client

from officehub.backend.protocol import (
    AuthSession,
    AuthStateHandler,
    AuthUser,
    ChangeEvent,
    ChangeFilter,
    ChangeHandler,
    Query,
    Row,
    Subscription,
)
from officehub.core.config import Settings
from officehub.core.exceptions import (
    AuthenticationException,
    BackendException,
    OfficeHubException,
    RecordNotFoundException,
)
from officehub.domain.value_objects import AuthEvent, ChangeEventType

logger = logging.getLogger(__name__)

T = TypeVar("T")

NOT_FOUND_CODE = "PGRST116"


def change_from_payload(table: str, payload: dict[str, Any]) -> ChangeEvent:
    """Normalize a realtime postgres_changes payload into a ChangeEvent.

    Accepts both the wire shape (``data.record`` / ``data.old_record`` /
    ``data.type``) and the flattened one (``new`` / ``old`` / ``eventType``).
    """
    data = payload.get("data", payload) or {}
    event_type = data.get("type") or data.get("eventType") or payload.get("eventType")
    new = data.get("record") if "record" in data else data.get("new")
    old = data.get("old_record") if "old_record" in data else data.get("old")
    return ChangeEvent(
        table=data.get("table", table),
        type=ChangeEventType(str(event_type).upper()),
        new=dict(new or {}),
        old=dict(old or {}),
    )


def _session_from_auth(session: Any) -> AuthSession | None:
    if session is None or getattr(session, "user", None) is None:
        return None
    user = session.user
    return AuthSession(
        user=AuthUser(id=str(user.id), email=user.email or ""),
        access_token=getattr(session, "access_token", None),
    )


class SupabaseBackend:
    """Backend talking to a Supabase project through the async client."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    async def connect(cls, url: str, key: str) -> SupabaseBackend:
        client = await acreate_client(url, key)
        return cls(client)

    async def _call(self, operation: str, func: Callable[[], Awaitable[T]]) -> T:
        """Run a client call, translating client errors into OfficeHub exceptions."""
        try:
            return await func()
        except OfficeHubException:
            raise
        except PostgrestAPIError as e:
            if e.code == NOT_FOUND_CODE:
                raise RecordNotFoundException(operation) from e
            raise BackendException(e.message or str(e), code=e.code) from e
        except AuthError as e:
            raise AuthenticationException(e.message) from e
        except Exception as e:
            raise BackendException(f"Backend operation '{operation}' failed: {e}") from e

    def _spawn(self, coro: Awaitable[None]) -> None:
        # Realtime and auth callbacks are synchronous; handlers run as tasks
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # -------------------- Tables --------------------
    def _build(self, query: Query):
        builder = self.client.table(query.table).select(query.select_clause())
        for column, value in query.eq.items():
            builder = builder.eq(column, value)
        for column, values in query.in_.items():
            builder = builder.in_(column, list(values))
        if query.order_by:
            builder = builder.order(query.order_by, desc=query.descending)
        return builder

    async def select(self, query: Query) -> list[Row]:
        response = await self._call(query.table, lambda: self._build(query).execute())
        return list(response.data or [])

    async def select_one(self, query: Query) -> Row:
        response = await self._call(query.table, lambda: self._build(query).single().execute())
        if not response.data:
            raise RecordNotFoundException(query.table, query.eq.get("id"))
        return response.data

    async def insert(self, table: str, values: Row) -> Row:
        response = await self._call(table, lambda: self.client.table(table).insert(values).execute())
        if not response.data:
            raise BackendException(f"Insert into {table} returned no row")
        return response.data[0]

    async def update(self, table: str, values: Row, eq: dict[str, Any]) -> list[Row]:
        def _run():
            builder = self.client.table(table).update(values)
            for column, value in eq.items():
                builder = builder.eq(column, value)
            return builder.execute()

        response = await self._call(table, _run)
        return list(response.data or [])

    async def delete(self, table: str, eq: dict[str, Any]) -> None:
        def _run():
            builder = self.client.table(table).delete()
            for column, value in eq.items():
                builder = builder.eq(column, value)
            return builder.execute()

        await self._call(table, _run)

    async def rpc(self, name: str, params: dict[str, Any]) -> Any:
        response = await self._call(name, lambda: self.client.rpc(name, params).execute())
        return response.data

    # -------------------- Auth --------------------
    async def sign_up(self, email: str, password: str) -> AuthUser | None:
        response = await self._call(
            "sign_up",
            lambda: self.client.auth.sign_up({"email": email, "password": password}),
        )
        if response.user is None:
            return None
        return AuthUser(id=str(response.user.id), email=response.user.email or email)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        response = await self._call(
            "sign_in",
            lambda: self.client.auth.sign_in_with_password({"email": email, "password": password}),
        )
        session = _session_from_auth(response.session)
        if session is None:
            raise AuthenticationException("Sign-in returned no session")
        return session

    async def sign_out(self) -> None:
        await self._call("sign_out", lambda: self.client.auth.sign_out())

    async def get_session(self) -> AuthSession | None:
        session = await self._call("get_session", lambda: self.client.auth.get_session())
        return _session_from_auth(session)

    async def on_auth_state_change(self, handler: AuthStateHandler) -> Subscription:
        def _callback(event: Any, session: Any) -> None:
            try:
                auth_event = AuthEvent(str(getattr(event, "value", event)))
            except ValueError:
                logger.debug(f"Ignoring auth event {event}")
                return
            self._spawn(handler(auth_event, _session_from_auth(session)))

        subscription = self.client.auth.on_auth_state_change(_callback)

        async def _cancel() -> None:
            subscription.unsubscribe()

        return Subscription("auth-state", _cancel)

    # -------------------- Change feed --------------------
    async def subscribe(
        self, channel: str, change_filter: ChangeFilter, handler: ChangeHandler
    ) -> Subscription:
        realtime_channel = self.client.channel(channel)

        def _callback(payload: dict[str, Any]) -> None:
            try:
                change = change_from_payload(change_filter.table, payload)
            except ValueError as e:
                logger.error(f"Bad change payload on {channel}: {e}")
                return
            self._spawn(handler(change))

        kwargs: dict[str, Any] = {"schema": "public", "table": change_filter.table}
        filter_string = change_filter.to_filter_string()
        if filter_string:
            kwargs["filter"] = filter_string

        realtime_channel.on_postgres_changes(change_filter.event.value, _callback, **kwargs)
        await self._call(channel, lambda: realtime_channel.subscribe())
        logger.debug(f"Subscribed to {channel} ({change_filter.table} {change_filter.event.value})")

        async def _cancel() -> None:
            await self.client.remove_channel(realtime_channel)

        return Subscription(channel, _cancel)


async def create_backend(settings: Settings) -> SupabaseBackend:
    """Build the Supabase backend from settings."""
    url, key = settings.require_backend()
    return await SupabaseBackend.connect(url, key)
