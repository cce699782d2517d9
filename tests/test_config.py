"""
Configuration tests.

Run with:
    pytest tests/test_config.py -v
"""

import logging

from taskforce.config.logging_config import configure_logging
from taskforce.config.settings import Settings, get_settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.work_hours_per_day == 9
        assert settings.max_active_tasks == 3
        assert settings.llm_assignment_temperature == 0.1
        assert settings.llm_extraction_temperature == 0.3
        assert settings.redis_url == "redis://127.0.0.1:6379/0"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MAX_ACTIVE_TASKS", "5")
        monkeypatch.setenv("REDIS_PASSWORD", "secret")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings(_env_file=None)

        assert settings.max_active_tasks == 5
        assert settings.redis_url.startswith("redis://:secret@")
        assert settings.is_production

    def test_get_settings_cached(self):
        get_settings.cache_clear()
        assert get_settings() is get_settings()
        get_settings.cache_clear()


class TestLogging:
    """Tests for logging setup."""

    def test_quiets_transport_loggers(self):
        configure_logging(Settings(_env_file=None, log_level="DEBUG"))
        assert logging.getLogger("httpx").level == logging.WARNING
