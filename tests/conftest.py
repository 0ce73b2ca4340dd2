"""Shared pytest fixtures for backend-backed tests."""
from __future__ import annotations

from datetime import date, timedelta

import pytest
from factories import FlakyBackend, RecordingSleep

from officehub.backend import InMemoryBackend
from officehub.core.retry import RetryPolicy
from officehub.services.session import SessionService


@pytest.fixture()
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def flaky(backend: InMemoryBackend) -> FlakyBackend:
    return FlakyBackend(backend)


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def session(backend: InMemoryBackend, sleep: RecordingSleep) -> SessionService:
    return SessionService(backend, retry_policy=RetryPolicy(), sleep=sleep)


@pytest.fixture()
def tomorrow() -> str:
    return (date.today() + timedelta(days=1)).isoformat()
