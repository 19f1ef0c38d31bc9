"""
System Constants and Enumerations

This module defines constants and enumerations shared by the cache layer,
the invalidation service and the administrative API.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for key tokens and default TTLs
- Type-safe enums for connection state and cache kinds
- Easy to update and track changes
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Cache operation stages used as the ``stage`` field of log entries.

    Format: {AREA}.{OPERATION}

    Examples:
        log_stage(logger, Stage.CACHE_GET, "Cache hit (remote)", cache_key=key)
        log_stage(logger, Stage.REMOTE_STATE, "Remote cache degraded", level="warning")
    """

    INITIALIZATION = "CACHE.INIT"
    CACHE_GET = "CACHE.GET"
    CACHE_SET = "CACHE.SET"
    CACHE_DELETE = "CACHE.DEL"
    CACHE_DELETE_PATTERN = "CACHE.DEL_PATTERN"
    CACHE_CLEAR = "CACHE.CLEAR"
    CACHE_SWEEP = "CACHE.SWEEP"
    CACHE_COMPUTE = "CACHE.COMPUTE"
    REMOTE_STATE = "REDIS.STATE"
    REMOTE_CONNECT = "REDIS.CONNECT"
    REMOTE_COMMAND = "REDIS.CMD"
    INVALIDATION = "INVALIDATION"
    ADMIN = "ADMIN"


# ============================================================================
# Remote Connection State
# ============================================================================


class ConnectionState(str, Enum):
    """
    Routing state of the remote cache backend.

    UNCONFIGURED: No remote endpoint given, local store only
    CONNECTED: Remote backend reachable, used first
    DEGRADED: Last remote call failed, local store serves requests
    """

    UNCONFIGURED = "unconfigured"
    CONNECTED = "connected"
    DEGRADED = "degraded"


# ============================================================================
# Cache Kinds
# ============================================================================


class CacheKind(str, Enum):
    """
    Entity kinds that own a key namespace.

    Every key starts with its kind token followed by KEY_SEPARATOR, so the
    pattern for one kind never matches another kind's keys.
    """

    CORRIDOR = "corridor"
    ANCHOR = "anchor"
    DASHBOARD = "dashboard"


# ============================================================================
# Key Construction
# ============================================================================

KEY_SEPARATOR = ":"
KEY_WILDCARD = "*"
NO_FILTER_TOKEN = "nofilter"
VERSION_PREFIX = "v"

# Segment markers. quote(safe="") always escapes these, so an identifier
# segment can never start with one.
FILTER_MARKER = "#"
VERSION_MARKER = "@"
BOOL_MARKER = "!"

# ============================================================================
# Default TTLs (seconds)
# ============================================================================

CORRIDOR_TTL = 300  # 5 minutes
ANCHOR_TTL = 600  # 10 minutes
DASHBOARD_TTL = 60  # 1 minute
DEFAULT_TTL = 300

# Local fallback store
LOCAL_CACHE_MAX_ENTRIES = 10000
LOCAL_CACHE_SWEEP_INTERVAL = 60.0

# Remote scan batch size (SCAN COUNT hint)
REDIS_SCAN_COUNT = 500

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
