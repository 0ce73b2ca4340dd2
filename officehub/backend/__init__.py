"""Backend layer: contract plus in-memory implementation.

The Supabase adapter lives in ``officehub.backend.supabase_backend``.
"""
from __future__ import annotations

from .changes import InMemoryChangeFeed
from .memory import InMemoryBackend
from .protocol import (
    AuthSession,
    AuthUser,
    BackendProtocol,
    ChangeEvent,
    ChangeFilter,
    Embed,
    Query,
    Subscription,
)

__all__ = [
    "BackendProtocol",
    "InMemoryBackend",
    "InMemoryChangeFeed",
    "Query",
    "Embed",
    "ChangeFilter",
    "ChangeEvent",
    "AuthUser",
    "AuthSession",
    "Subscription",
]
