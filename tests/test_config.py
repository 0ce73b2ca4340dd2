"""Tests for environment-driven settings."""
from __future__ import annotations

import logging

import pytest

from officehub.core import config
from officehub.core.config import Settings, load_settings
from officehub.core.exceptions import ConfigurationException
from officehub.core.logging_config import setup_logging

ENV_KEYS = (
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "OFFICEHUB_RETRY_ATTEMPTS",
    "OFFICEHUB_RETRY_DELAY",
    "OFFICEHUB_STRICT_STATUS_TRANSITIONS",
    "OFFICEHUB_PREVENT_OVERLAPS",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    # Keep a developer's .env out of the results
    monkeypatch.setattr(config, "load_dotenv", lambda *args, **kwargs: False)


def test_defaults():
    settings = load_settings()

    assert settings.supabase_url is None
    assert settings.retry.attempts == 3
    assert settings.retry.delay == 1.0
    assert settings.strict_status_transitions is False
    assert settings.prevent_overlaps is False
    assert settings.log_level == "INFO"


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon-key")
    monkeypatch.setenv("OFFICEHUB_RETRY_ATTEMPTS", "5")
    monkeypatch.setenv("OFFICEHUB_RETRY_DELAY", "0.5")
    monkeypatch.setenv("OFFICEHUB_STRICT_STATUS_TRANSITIONS", "yes")
    monkeypatch.setenv("OFFICEHUB_PREVENT_OVERLAPS", "1")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.require_backend() == ("https://demo.supabase.co", "anon-key")
    assert settings.retry.attempts == 5
    assert settings.retry.delay == 0.5
    assert settings.strict_status_transitions is True
    assert settings.prevent_overlaps is True
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "key,value",
    [
        ("OFFICEHUB_RETRY_ATTEMPTS", "three"),
        ("OFFICEHUB_RETRY_ATTEMPTS", "-1"),
        ("OFFICEHUB_RETRY_DELAY", "-0.5"),
    ],
)
def test_invalid_retry_settings(monkeypatch, key, value):
    monkeypatch.setenv(key, value)

    with pytest.raises(ConfigurationException):
        load_settings()


def test_require_backend_names_missing_variable():
    with pytest.raises(ConfigurationException, match="SUPABASE_URL"):
        Settings(supabase_url=None, supabase_key="k").require_backend()
    with pytest.raises(ConfigurationException, match="SUPABASE_KEY"):
        Settings(supabase_url="https://x", supabase_key=None).require_backend()


def test_setup_logging_accepts_names_and_falls_back(monkeypatch):
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: None)

    assert setup_logging("debug").level == logging.DEBUG
    assert setup_logging("chatty").level == logging.INFO
    assert setup_logging(logging.WARNING).level == logging.WARNING
    logging.getLogger("officehub").setLevel(logging.NOTSET)
