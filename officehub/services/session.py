"""Session service: owns the signed-in account.

Wraps the backend's auth and the ``users`` profile table. The profile row
may not be visible right after the auth identity is created, so profile
creation and profile fetches are retried with linear backoff.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from officehub.backend.protocol import AuthSession, BackendProtocol, Query, Subscription
from officehub.core.constants import USERS_TABLE
from officehub.core.exceptions import (
    AuthenticationException,
    BackendException,
    OfficeHubException,
    RecordNotFoundException,
    ValidationException,
)
from officehub.core.result import Result
from officehub.core.retry import RetryPolicy, SleepFunc, retry_async
from officehub.core.validation import clean_profile_fields, validate_sign_in, validate_sign_up
from officehub.domain.entities import Account
from officehub.domain.value_objects import AuthEvent, UserRole

logger = logging.getLogger(__name__)

AccountListener = Callable[["Account | None"], None]

# Only these profile columns may be changed after sign-up
EDITABLE_PROFILE_FIELDS = frozenset({"full_name", "phone_number"})

ROLE_ALIASES = {"seeker": UserRole.SEEKER}


def parse_role(role: str | UserRole) -> UserRole:
    if isinstance(role, UserRole):
        return role
    value = str(role).strip().lower()
    if value in ROLE_ALIASES:
        return ROLE_ALIASES[value]
    try:
        return UserRole(value)
    except ValueError:
        raise ValidationException(f"Unknown account role: {role}") from None


class SessionService:
    """Current-account state plus sign-up, sign-in, sign-out and profile edits."""

    def __init__(
        self,
        backend: BackendProtocol,
        *,
        retry_policy: RetryPolicy | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.backend = backend
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._account: Account | None = None
        self.loading = True
        self._listeners: list[AccountListener] = []
        self._auth_subscription: Subscription | None = None
        self._own_auth_call = False
        # Identity this session is loading or has loaded; None after sign-out
        self._expected_user_id: str | None = None

    # -------------------- Observable state --------------------
    @property
    def current_account(self) -> Account | None:
        return self._account

    def subscribe(self, listener: AccountListener) -> Callable[[], None]:
        """Call ``listener`` on every account change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            self._listeners = [other for other in self._listeners if other is not listener]

        return _unsubscribe

    def _set_account(self, account: Account | None) -> None:
        self._account = account
        for listener in list(self._listeners):
            try:
                listener(account)
            except Exception as e:
                logger.error(f"Account listener failed: {e}")

    # -------------------- Lifecycle --------------------
    async def start(self) -> None:
        """Restore the persisted session and follow auth-state changes."""
        await self.restore()
        if self._auth_subscription is None:
            self._auth_subscription = await self.backend.on_auth_state_change(self._on_auth_event)

    async def close(self) -> None:
        subscription, self._auth_subscription = self._auth_subscription, None
        if subscription is not None:
            await subscription.unsubscribe()

    async def restore(self) -> None:
        """Load the profile for a session persisted by the backend, if any."""
        try:
            session = await self.backend.get_session()
        except OfficeHubException as e:
            logger.error(f"Error restoring session: {e}")
            session = None

        if session is None:
            self.loading = False
            return
        await self._fetch_profile(session.user.id)

    async def _on_auth_event(self, event: AuthEvent, session: AuthSession | None) -> None:
        if self._own_auth_call:
            return
        if event == AuthEvent.SIGNED_OUT or session is None:
            self._expected_user_id = None
            self._set_account(None)
            self.loading = False
            return
        # Events for our own sign-in may arrive after the call returned
        if session.user.id == self._expected_user_id:
            return
        await self._fetch_profile(session.user.id)

    # -------------------- Profile --------------------
    async def _fetch_profile(self, user_id: str) -> Account | None:
        """Fetch the profile, retrying while the row is not yet visible.

        Gives up silently once retries are exhausted: the account stays
        unset and loading clears.
        """
        self._expected_user_id = user_id
        query = Query(USERS_TABLE, eq={"id": user_id})

        async def _load() -> dict[str, Any]:
            return await self.backend.select_one(query)

        try:
            row = await retry_async(
                _load,
                policy=self.retry_policy,
                exceptions=(RecordNotFoundException,),
                sleep=self._sleep,
                operation="fetch_user_profile",
            )
        except OfficeHubException as e:
            logger.error(f"Error fetching user profile {user_id}: {e}")
            return None
        finally:
            self.loading = False

        if self._expected_user_id != user_id:
            logger.debug(f"Discarding stale profile {user_id}")
            return None

        account = Account.model_validate(row)
        self._set_account(account)
        return account

    async def refresh_account(self) -> Account | None:
        if self._account is None:
            return None
        return await self._fetch_profile(self._account.id)

    # -------------------- Auth --------------------
    async def register(
        self,
        email: str,
        password: str,
        role: str | UserRole,
        profile: dict[str, Any] | None = None,
        *,
        confirm_password: str | None = None,
    ) -> Result[Account]:
        """Create an auth identity and its profile row.

        Args:
            email: Sign-in email
            password: Password
            role: ``owner`` or ``user`` (``seeker`` is accepted as an alias)
            profile: Optional ``full_name`` / ``phone_number``
            confirm_password: When given, the sign-up form checks are applied

        Returns:
            Result with the created account
        """
        try:
            if confirm_password is not None:
                validate_sign_up(email, password, confirm_password)
            user_type = parse_role(role)
        except OfficeHubException as e:
            return Result.failure(e)

        self._own_auth_call = True
        try:
            try:
                auth_user = await self.backend.sign_up(email, password)
            except OfficeHubException as e:
                logger.error(f"Sign up error: {e}")
                return Result.failure(e)

            if auth_user is None:
                return Result.failure(AuthenticationException("Registration failed"))

            self._expected_user_id = auth_user.id
            profile = profile or {}
            values = {
                "id": auth_user.id,
                "email": email,
                "user_type": user_type.value,
                "full_name": profile.get("full_name"),
                "phone_number": profile.get("phone_number"),
            }

            async def _create() -> dict[str, Any]:
                return await self.backend.insert(USERS_TABLE, values)

            try:
                row = await retry_async(
                    _create,
                    policy=self.retry_policy,
                    exceptions=(BackendException,),
                    sleep=self._sleep,
                    operation="create_user_profile",
                )
            except OfficeHubException as e:
                return Result.failure(e)
        finally:
            self._own_auth_call = False

        account = Account.model_validate(row)
        self._set_account(account)
        self.loading = False
        logger.info(f"Registered {account.user_type} account {account.id}")
        return Result.success(account)

    async def login(self, email: str, password: str) -> Result[Account]:
        """Sign in and load the profile.

        A profile that never becomes visible is not a sign-in failure: the
        result is successful with no data and ``current_account`` stays unset.
        """
        try:
            validate_sign_in(email, password)
        except OfficeHubException as e:
            return Result.failure(e)

        self._own_auth_call = True
        try:
            session = await self.backend.sign_in(email, password)
        except OfficeHubException as e:
            logger.error(f"Sign in error: {e}")
            return Result.failure(e)
        finally:
            self._own_auth_call = False

        account = await self._fetch_profile(session.user.id)
        return Result.success(account)

    async def logout(self) -> OfficeHubException | None:
        """Sign out remotely; local state is cleared even if that fails."""
        error: OfficeHubException | None = None
        self._expected_user_id = None
        self._own_auth_call = True
        try:
            await self.backend.sign_out()
        except OfficeHubException as e:
            logger.error(f"Sign out error: {e}")
            error = e
        finally:
            self._own_auth_call = False

        self._set_account(None)
        return error

    async def update_profile(self, fields: dict[str, Any]) -> OfficeHubException | None:
        """Update ``full_name`` / ``phone_number``; any other key is ignored.

        Returns:
            None on success, otherwise the failure
        """
        if self._account is None:
            return AuthenticationException("No user logged in")

        try:
            changes = clean_profile_fields(
                {k: v for k, v in fields.items() if k in EDITABLE_PROFILE_FIELDS}
            )
        except OfficeHubException as e:
            return e

        if not changes:
            return None

        now = datetime.now(timezone.utc)
        try:
            await self.backend.update(
                USERS_TABLE,
                {**changes, "updated_at": now.isoformat()},
                {"id": self._account.id},
            )
        except OfficeHubException as e:
            logger.error(f"Update profile error: {e}")
            return e

        self._set_account(self._account.model_copy(update={**changes, "updated_at": now}))
        return None
