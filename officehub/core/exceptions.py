"""Custom exceptions for OfficeHub."""
from __future__ import annotations


class OfficeHubException(Exception):
    """Base exception for all OfficeHub errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class BackendException(OfficeHubException):
    """Backend (network, storage, RPC) errors."""

    def __init__(self, message: str, *args: object, code: str | None = None) -> None:
        super().__init__(message, *args)
        self.code = code


class RecordNotFoundException(BackendException):
    """A single-row fetch matched no rows."""

    def __init__(self, table: str, record_id: str | None = None) -> None:
        if record_id is None:
            message = f"No matching row in {table}"
        else:
            message = f"Record {record_id} not found in {table}"
        super().__init__(message, code="PGRST116")
        self.table = table
        self.record_id = record_id


class AuthenticationException(OfficeHubException):
    """Authentication and session errors."""

    pass


class ValidationException(OfficeHubException):
    """Input validation errors."""

    pass


class ConfigurationException(OfficeHubException):
    """Configuration errors."""

    pass
