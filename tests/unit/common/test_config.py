"""Tests for application settings."""

import pytest

from riskflow.core.config import Settings


class TestSettings:
    """Tests for Settings defaults and environment overrides."""

    def test_defaults(self):
        """Pagination and webhook defaults."""
        settings = Settings(_env_file=None)

        assert settings.default_page_size == 10
        assert settings.max_page_size == 100
        assert settings.webhook_max_retries == 3
        assert settings.webhook_retry_delay == 5.0
        assert settings.api_prefix == "/api/v1"

    def test_celery_falls_back_to_redis(self):
        """Broker and backend default to the Redis URL."""
        settings = Settings(redis_url="redis://cache:6379/2")

        assert settings.celery_broker == "redis://cache:6379/2"
        assert settings.celery_backend == "redis://cache:6379/2"

    def test_explicit_celery_urls(self):
        settings = Settings(
            celery_broker_url="amqp://guest@rabbit//",
            celery_result_backend="redis://results:6379/1",
        )

        assert settings.celery_broker == "amqp://guest@rabbit//"
        assert settings.celery_backend == "redis://results:6379/1"

    def test_cors_origins_list(self):
        settings = Settings(cors_origins="https://a.example.com, https://b.example.com,")
        assert settings.cors_origins_list == ["https://a.example.com", "https://b.example.com"]

    def test_environment_override(self, monkeypatch):
        """Environment variables are read case-insensitively."""
        monkeypatch.setenv("WEBHOOK_MAX_RETRIES", "5")
        monkeypatch.setenv("notifications_enabled", "false")

        settings = Settings()

        assert settings.webhook_max_retries == 5
        assert settings.notifications_enabled is False

    def test_invalid_value_rejected(self, monkeypatch):
        monkeypatch.setenv("WEBHOOK_TIMEOUT", "soon")
        with pytest.raises(ValueError):
            Settings()
