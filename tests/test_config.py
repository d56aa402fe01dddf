"""Tests for environment-driven settings."""

import logging

from schema_validator.config import _env_flag, configure_logging, settings


def test_env_flag(monkeypatch):
    monkeypatch.setenv("SCHEMA_VALIDATOR_TEST_FLAG", "Yes")
    assert _env_flag("SCHEMA_VALIDATOR_TEST_FLAG") is True

    monkeypatch.setenv("SCHEMA_VALIDATOR_TEST_FLAG", "0")
    assert _env_flag("SCHEMA_VALIDATOR_TEST_FLAG") is False

    monkeypatch.delenv("SCHEMA_VALIDATOR_TEST_FLAG")
    assert _env_flag("SCHEMA_VALIDATOR_TEST_FLAG") is False


def test_configure_logging_uses_log_level(monkeypatch):
    calls = []
    monkeypatch.setattr(settings, "LOG_LEVEL", "DEBUG")
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging()
    assert calls[0]["level"] == "DEBUG"
