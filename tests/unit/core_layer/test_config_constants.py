"""
Unit Tests for Configuration Constants

Tests the enums and key tokens shared across the cache layer.
"""

from urllib.parse import quote

import pytest

from insights_cache.core.config.constants import (
    ANCHOR_TTL,
    BOOL_MARKER,
    CORRIDOR_TTL,
    DASHBOARD_TTL,
    FILTER_MARKER,
    KEY_SEPARATOR,
    KEY_WILDCARD,
    NO_FILTER_TOKEN,
    VERSION_MARKER,
    CacheKind,
    ConnectionState,
    Stage,
)


@pytest.mark.unit
class TestEnums:
    """Test enum values."""

    def test_connection_states(self):
        assert {state.value for state in ConnectionState} == {"unconfigured", "connected", "degraded"}

    def test_cache_kinds_contain_no_separator(self):
        for kind in CacheKind:
            assert KEY_SEPARATOR not in kind.value
            assert KEY_WILDCARD not in kind.value

    def test_stage_values_are_unique(self):
        values = [stage.value for stage in Stage]
        assert len(set(values)) == len(values)

    def test_enums_compare_as_strings(self):
        assert CacheKind.ANCHOR == "anchor"
        assert ConnectionState.DEGRADED == "degraded"


@pytest.mark.unit
class TestKeyTokens:
    """Test key construction tokens."""

    def test_no_filter_token_is_not_empty(self):
        assert NO_FILTER_TOKEN
        assert KEY_SEPARATOR not in NO_FILTER_TOKEN

    def test_segment_markers_are_always_percent_encoded(self):
        for marker in (FILTER_MARKER, VERSION_MARKER, BOOL_MARKER):
            assert quote(marker, safe="") != marker

    def test_ttls_are_positive(self):
        assert DASHBOARD_TTL < CORRIDOR_TTL < ANCHOR_TTL
        assert DASHBOARD_TTL > 0
