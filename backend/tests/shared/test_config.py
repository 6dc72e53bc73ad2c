"""Tests for shared/config.py."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from shared.config import Settings, get_settings


class TestSettings:
    def test_default_values(self):
        """Settings should have sensible defaults."""
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)
        assert settings.app_name == "Ledgerly API"
        assert settings.debug is False
        assert settings.port == 8000
        assert settings.storage_backend == "memory"
        assert settings.jwt_secrets == []
        assert settings.bind_request_ttl_minutes == 15
        assert settings.approaching_limit_ratio == 0.8
        assert settings.default_cycle_start_day == 1

    def test_loads_from_env(self):
        """Settings should load from environment variables."""
        with patch.dict(os.environ, {"DEBUG": "true", "PORT": "9000"}):
            settings = Settings(_env_file=None)
            assert settings.debug is True
            assert settings.port == 9000

    def test_loads_secret_lists_from_env(self):
        """Secret lists are JSON arrays, primary first."""
        with patch.dict(os.environ, {
            "JWT_SECRETS": '["new-secret", "old-secret"]',
            "CHAT_RELAY_SECRETS": '["relay-secret"]',
        }):
            settings = Settings(_env_file=None)
            assert settings.jwt_secrets == ["new-secret", "old-secret"]
            assert settings.chat_relay_secrets == ["relay-secret"]

    def test_rejects_unknown_storage_backend(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, storage_backend="sqlite")

    def test_rejects_out_of_range_ratio(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, approaching_limit_ratio=1.5)

    def test_rejects_out_of_range_cycle_day(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, default_cycle_start_day=31)


class TestGetSettings:
    def test_returns_cached_instance(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()
