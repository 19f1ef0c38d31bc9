"""
Unit Tests for Logging Module

Tests logger configuration, request context, and logging utilities.
"""

from unittest.mock import MagicMock

import pytest

from insights_cache.core.config.constants import Stage
from insights_cache.core.logging.logger import (
    add_log_level_name,
    add_request_id,
    add_timestamp,
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)


@pytest.mark.unit
class TestLoggerCreation:
    """Test logger creation and configuration."""

    def test_get_logger_returns_logger_instance(self):
        logger = get_logger(__name__)
        assert hasattr(logger, "info")

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_logging_accepts_both_formats(self, log_format):
        setup_logging(log_level="DEBUG", log_format=log_format)
        get_logger("test").info("configured", stage=Stage.INITIALIZATION.value)


@pytest.mark.unit
class TestRequestContext:
    """Test request ID context management."""

    def test_set_and_get_request_id(self):
        set_request_id("req-123")
        assert get_request_id() == "req-123"

    def test_clear_request_id(self):
        set_request_id("req-123")
        clear_request_id()
        assert get_request_id() is None


@pytest.mark.unit
class TestProcessors:
    """Test the structlog processors."""

    def test_add_request_id_injects_context(self):
        set_request_id("req-9")
        event = add_request_id(None, "info", {"event": "x"})
        assert event["request_id"] == "req-9"

    def test_add_request_id_without_context(self):
        event = add_request_id(None, "info", {"event": "x"})
        assert "request_id" not in event

    def test_add_timestamp_is_utc_iso(self):
        event = add_timestamp(None, "info", {})
        assert event["timestamp"].endswith("Z")

    def test_add_log_level_name_upper_cases(self):
        assert add_log_level_name(None, "info", {"level": "warning"})["level"] == "WARNING"


@pytest.mark.unit
class TestLogStage:
    """Test the stage logging helper."""

    def test_log_stage_uses_enum_value(self):
        logger = MagicMock()

        log_stage(logger, Stage.CACHE_GET, "Cache hit (remote)", cache_key="anchor:detail:42")

        logger.info.assert_called_once_with(
            "Cache hit (remote)", stage="CACHE.GET", cache_key="anchor:detail:42"
        )

    def test_log_stage_respects_level(self):
        logger = MagicMock()

        log_stage(logger, "REDIS.STATE", "Remote cache degraded", level="warning")

        logger.warning.assert_called_once_with("Remote cache degraded", stage="REDIS.STATE")
