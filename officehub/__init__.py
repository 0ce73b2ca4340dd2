"""OfficeHub: client for listing and booking shared office spaces."""
from __future__ import annotations

from .client import OfficeHubClient
from .core.result import Result

__all__ = ["OfficeHubClient", "Result"]

__version__ = "0.1.0"
