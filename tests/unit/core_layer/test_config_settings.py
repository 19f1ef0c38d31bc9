"""
Unit Tests for Configuration Settings

Tests the settings loading, validation, and default values.
"""

import pytest
from pydantic import ValidationError

from insights_cache.core.config.constants import CacheKind
from insights_cache.core.config.settings import Settings, get_settings, reload_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep host environment variables out of the defaults under test."""
    for name in ("REDIS_URL", "CACHE_KEY_NAMESPACE", "LOG_LEVEL", "CACHE_ANCHOR_TTL", "CACHE_DEFAULT_TTL"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
class TestSettingsDefaults:
    """Test Settings defaults."""

    def test_settings_has_section_views(self):
        settings = Settings(_env_file=None)

        assert hasattr(settings, "redis")
        assert hasattr(settings, "cache")
        assert hasattr(settings, "logging")
        assert hasattr(settings, "app")

    def test_remote_is_unconfigured_by_default(self):
        settings = Settings(_env_file=None)
        assert settings.redis.REDIS_URL is None

    def test_default_ttls(self):
        settings = Settings(_env_file=None)

        assert settings.cache.CACHE_CORRIDOR_TTL == 300
        assert settings.cache.CACHE_ANCHOR_TTL == 600
        assert settings.cache.CACHE_DASHBOARD_TTL == 60
        assert settings.cache.CACHE_DEFAULT_TTL == 300

    def test_operation_timeout_is_bounded(self):
        settings = Settings(_env_file=None)

        assert 0 < settings.redis.REDIS_OPERATION_TIMEOUT <= settings.redis.REDIS_SOCKET_TIMEOUT

    def test_degraded_probing_and_write_through_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.cache.CACHE_REMOTE_RETRY_INTERVAL == 0.0
        assert settings.cache.CACHE_WRITE_THROUGH_ON_FALLBACK_HIT is False


@pytest.mark.unit
class TestSettingsFromEnvironment:
    """Test environment variable loading and validation."""

    def test_redis_url_from_env(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")
        settings = Settings(_env_file=None)

        assert settings.redis.REDIS_URL == "redis://cache:6379/2"

    def test_blank_redis_url_means_unconfigured(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "  ")
        settings = Settings(_env_file=None)

        assert settings.REDIS_URL is None

    def test_ttl_override_from_env(self, monkeypatch):
        monkeypatch.setenv("CACHE_ANCHOR_TTL", "120")
        settings = Settings(_env_file=None)

        assert settings.cache.ttl_for(CacheKind.ANCHOR) == 120

    def test_log_level_is_normalized(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)

        assert settings.logging.LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_is_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)


@pytest.mark.unit
class TestTtlLookup:
    """Test per-kind TTL lookup."""

    @pytest.mark.parametrize(
        "kind,expected",
        [
            (CacheKind.CORRIDOR, 300),
            (CacheKind.ANCHOR, 600),
            (CacheKind.DASHBOARD, 60),
            ("dashboard", 60),
        ],
    )
    def test_ttl_for_known_kinds(self, kind, expected):
        assert Settings(_env_file=None).cache.ttl_for(kind) == expected

    def test_ttl_for_unknown_kind_uses_default(self, monkeypatch):
        monkeypatch.setenv("CACHE_DEFAULT_TTL", "42")
        assert Settings(_env_file=None).cache.ttl_for("asset") == 42


@pytest.mark.unit
class TestSettingsSingleton:
    """Test the lazy global accessor."""

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reload_settings_replaces_instance(self):
        first = get_settings()
        second = reload_settings()

        assert second is not first
        assert get_settings() is second
