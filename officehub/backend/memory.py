"""Process-local backend with the same semantics as the hosted one.

Used by the test-suite and for local development without a Supabase
project. Rows are plain dicts with ISO-8601 string timestamps, exactly as
the hosted REST API returns them.
"""
from __future__ import annotations

import copy
import hashlib
import logging
import secrets
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta, timezone
from typing import Any

from officehub.backend.changes import InMemoryChangeFeed
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
from officehub.core.constants import (
    BOOKINGS_TABLE,
    INCREMENT_BOOKING_COUNT_RPC,
    MIN_PASSWORD_LENGTH,
    OFFICES_TABLE,
    USERS_TABLE,
)
from officehub.core.exceptions import (
    AuthenticationException,
    BackendException,
    RecordNotFoundException,
)
from officehub.domain.value_objects import AuthEvent, ChangeEventType

logger = logging.getLogger(__name__)

RpcFunc = Callable[[dict[str, Any]], Awaitable[Any]]

# Column defaults applied on insert, mirroring the table definitions
TABLE_DEFAULTS: dict[str, dict[str, Any]] = {
    USERS_TABLE: {"full_name": None, "phone_number": None, "updated_at": None},
    OFFICES_TABLE: {
        "description": "",
        "amenities": [],
        "images": [],
        "is_available": True,
        "booking_count": 0,
    },
    BOOKINGS_TABLE: {"status": "pending", "updated_at": None},
}


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}{password}".encode()).hexdigest()


class InMemoryBackend:
    """Backend keeping tables, auth identities and the change feed in memory."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_timestamp: datetime | None = None
        self.tables: dict[str, list[Row]] = {
            USERS_TABLE: [],
            OFFICES_TABLE: [],
            BOOKINGS_TABLE: [],
        }
        self.changes = InMemoryChangeFeed()
        self._identities: dict[str, dict[str, str]] = {}
        self._session: AuthSession | None = None
        self._auth_handlers: list[AuthStateHandler] = []
        self._rpcs: dict[str, RpcFunc] = {
            INCREMENT_BOOKING_COUNT_RPC: self._increment_booking_count,
        }

    # -------------------- Helpers --------------------
    def _now(self) -> str:
        """Strictly increasing timestamp so created_at ordering is total."""
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now.isoformat()

    def _table(self, name: str) -> list[Row]:
        try:
            return self.tables[name]
        except KeyError:
            raise BackendException(f'relation "public.{name}" does not exist', code="42P01") from None

    @staticmethod
    def _matches(row: Row, eq: dict[str, Any], in_: dict[str, tuple[Any, ...]] | None = None) -> bool:
        if any(row.get(column) != value for column, value in eq.items()):
            return False
        for column, values in (in_ or {}).items():
            if row.get(column) not in values:
                return False
        return True

    @staticmethod
    def _project(row: Row, columns: tuple[str, ...]) -> Row:
        if not columns:
            return copy.deepcopy(row)
        return {column: copy.deepcopy(row.get(column)) for column in columns}

    def _embed(self, row: Row, query: Query) -> Row:
        result = self._project(row, query.columns)
        for embed in query.embeds:
            ref_id = row.get(embed.foreign_key)
            referenced = next(
                (r for r in self._table(embed.table) if r.get("id") == ref_id),
                None,
            )
            result[embed.alias] = (
                self._project(referenced, embed.columns) if referenced is not None else None
            )
        return result

    # -------------------- Tables --------------------
    async def select(self, query: Query) -> list[Row]:
        rows = [r for r in self._table(query.table) if self._matches(r, query.eq, query.in_)]
        if query.order_by:
            # None sorts last regardless of direction
            present = [r for r in rows if r.get(query.order_by) is not None]
            missing = [r for r in rows if r.get(query.order_by) is None]
            present.sort(key=lambda r: r[query.order_by], reverse=query.descending)
            rows = present + missing
        return [self._embed(r, query) for r in rows]

    async def select_one(self, query: Query) -> Row:
        rows = await self.select(query)
        if len(rows) != 1:
            record_id = query.eq.get("id")
            raise RecordNotFoundException(query.table, str(record_id) if record_id else None)
        return rows[0]

    async def insert(self, table: str, values: Row) -> Row:
        rows = self._table(table)
        row = copy.deepcopy(TABLE_DEFAULTS.get(table, {}))
        row.update(copy.deepcopy(values))
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", self._now())

        if any(r["id"] == row["id"] for r in rows):
            raise BackendException(
                f'duplicate key value violates unique constraint "{table}_pkey"', code="23505"
            )

        rows.append(row)
        await self.changes.publish(ChangeEvent(table, ChangeEventType.INSERT, new=copy.deepcopy(row)))
        return copy.deepcopy(row)

    async def update(self, table: str, values: Row, eq: dict[str, Any]) -> list[Row]:
        changed: list[tuple[Row, Row]] = []
        for row in self._table(table):
            if self._matches(row, eq):
                old = copy.deepcopy(row)
                row.update(copy.deepcopy(values))
                changed.append((old, copy.deepcopy(row)))

        for old, new in changed:
            await self.changes.publish(ChangeEvent(table, ChangeEventType.UPDATE, new=new, old=old))
        return [copy.deepcopy(new) for _, new in changed]

    async def delete(self, table: str, eq: dict[str, Any]) -> None:
        rows = self._table(table)
        removed = [r for r in rows if self._matches(r, eq)]
        self.tables[table] = [r for r in rows if not self._matches(r, eq)]

        for old in removed:
            await self.changes.publish(ChangeEvent(table, ChangeEventType.DELETE, old=old))

    def register_rpc(self, name: str, func: RpcFunc) -> None:
        self._rpcs[name] = func

    async def rpc(self, name: str, params: dict[str, Any]) -> Any:
        func = self._rpcs.get(name)
        if func is None:
            raise BackendException(f"Could not find the function public.{name}", code="PGRST202")
        return await func(params)

    async def _increment_booking_count(self, params: dict[str, Any]) -> None:
        office_id = params.get("office_id")
        offices = [r for r in self._table(OFFICES_TABLE) if r.get("id") == office_id]
        for office in offices:
            await self.update(
                OFFICES_TABLE,
                {"booking_count": int(office.get("booking_count") or 0) + 1},
                {"id": office_id},
            )

    # -------------------- Auth --------------------
    async def _emit_auth(self, event: AuthEvent) -> None:
        for handler in list(self._auth_handlers):
            try:
                await handler(event, self._session)
            except Exception as e:
                logger.error(f"Auth handler error on {event.value}: {e}")

    async def sign_up(self, email: str, password: str) -> AuthUser | None:
        key = email.strip().lower()
        if key in self._identities:
            raise AuthenticationException("User already registered")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthenticationException(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters"
            )

        salt = secrets.token_hex(8)
        user = AuthUser(id=str(uuid.uuid4()), email=email)
        self._identities[key] = {
            "id": user.id,
            "email": email,
            "salt": salt,
            "password": _hash_password(password, salt),
        }
        self._session = AuthSession(user=user, access_token=secrets.token_urlsafe(16))
        await self._emit_auth(AuthEvent.SIGNED_IN)
        return user

    async def sign_in(self, email: str, password: str) -> AuthSession:
        identity = self._identities.get(email.strip().lower())
        if identity is None or identity["password"] != _hash_password(password, identity["salt"]):
            raise AuthenticationException("Invalid login credentials")

        user = AuthUser(id=identity["id"], email=identity["email"])
        self._session = AuthSession(user=user, access_token=secrets.token_urlsafe(16))
        await self._emit_auth(AuthEvent.SIGNED_IN)
        return self._session

    async def sign_out(self) -> None:
        self._session = None
        await self._emit_auth(AuthEvent.SIGNED_OUT)

    async def get_session(self) -> AuthSession | None:
        return self._session

    async def on_auth_state_change(self, handler: AuthStateHandler) -> Subscription:
        self._auth_handlers.append(handler)

        async def _cancel() -> None:
            self._auth_handlers = [h for h in self._auth_handlers if h is not handler]

        return Subscription("auth-state", _cancel)

    # -------------------- Change feed --------------------
    async def subscribe(
        self, channel: str, change_filter: ChangeFilter, handler: ChangeHandler
    ) -> Subscription:
        return await self.changes.subscribe(channel, change_filter, handler)
