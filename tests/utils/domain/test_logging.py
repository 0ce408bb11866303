"""Tests for logging configuration helpers."""

import structlog
from storefront.utils.logging import bind_shopper, clear_context, get_log_level, redact_secrets


class TestLogLevel:
    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "error")
        assert get_log_level() == "ERROR"

    def test_level_follows_environment(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert get_log_level() == "INFO"

    def test_unknown_environment_defaults_to_info(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("ENVIRONMENT", "qa")
        assert get_log_level() == "INFO"


class TestRedaction:
    def test_secrets_are_masked(self):
        event = redact_secrets(None, "info", {"event": "login", "password": "hunter22", "access_token": "jwt"})
        assert event == {"event": "login", "password": "[REDACTED]", "access_token": "[REDACTED]"}

    def test_other_keys_untouched(self):
        assert redact_secrets(None, "info", {"event": "x", "email": "a@b.c"}) == {"event": "x", "email": "a@b.c"}


class TestShopperContext:
    def test_bind_and_unbind(self):
        clear_context()
        bind_shopper("u1", "jane@example.com")
        assert structlog.contextvars.get_contextvars() == {"user_id": "u1", "email": "jane@example.com"}

        bind_shopper(None)
        assert structlog.contextvars.get_contextvars() == {}
