"""Environment-driven configuration objects for the client."""
from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from officehub.core.constants import PROFILE_RETRY_ATTEMPTS, PROFILE_RETRY_DELAY_SECONDS
from officehub.core.exceptions import ConfigurationException


def _str_to_bool(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"true", "1", "yes", "y"}


@dataclass(slots=True)
class RetryConfig:
    attempts: int = PROFILE_RETRY_ATTEMPTS
    delay: float = PROFILE_RETRY_DELAY_SECONDS


@dataclass(slots=True)
class Settings:
    supabase_url: str | None
    supabase_key: str | None
    retry: RetryConfig = field(default_factory=RetryConfig)
    strict_status_transitions: bool = False
    prevent_overlaps: bool = False
    log_level: str = "INFO"

    def require_backend(self) -> tuple[str, str]:
        """Return (url, key) or raise if the backend is not configured."""
        if not self.supabase_url:
            raise ConfigurationException("SUPABASE_URL environment variable is not set")
        if not self.supabase_key:
            raise ConfigurationException("SUPABASE_KEY environment variable is not set")
        return self.supabase_url, self.supabase_key


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    try:
        retry = RetryConfig(
            attempts=int(os.getenv("OFFICEHUB_RETRY_ATTEMPTS", str(PROFILE_RETRY_ATTEMPTS))),
            delay=float(os.getenv("OFFICEHUB_RETRY_DELAY", str(PROFILE_RETRY_DELAY_SECONDS))),
        )
    except ValueError as e:
        raise ConfigurationException(f"Invalid retry settings: {e}") from e

    if retry.attempts < 0 or retry.delay < 0:
        raise ConfigurationException("Retry settings must not be negative")

    return Settings(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_KEY"),
        retry=retry,
        strict_status_transitions=_str_to_bool(os.getenv("OFFICEHUB_STRICT_STATUS_TRANSITIONS")),
        prevent_overlaps=_str_to_bool(os.getenv("OFFICEHUB_PREVENT_OVERLAPS")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
