"""
Configuration Module

Centralized, type-safe configuration for the cache layer.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Enums (Stage, ConnectionState, CacheKind), key tokens, default TTLs

Usage:
------
```python
from insights_cache.core.config import CacheKind, get_settings

settings = get_settings()
ttl = settings.cache.ttl_for(CacheKind.ANCHOR)
```

Environment Variables:
---------------------
```bash
REDIS_URL=redis://localhost:6379/0   # unset = local-only cache
REDIS_OPERATION_TIMEOUT=0.5
CACHE_ANCHOR_TTL=600
CACHE_KEY_NAMESPACE=insights
LOG_LEVEL=INFO
LOG_FORMAT=json
```
"""

from insights_cache.core.config.constants import (
    ANCHOR_TTL,
    CORRIDOR_TTL,
    DASHBOARD_TTL,
    DEFAULT_TTL,
    HEADER_REQUEST_ID,
    KEY_SEPARATOR,
    KEY_WILDCARD,
    NO_FILTER_TOKEN,
    CacheKind,
    ConnectionState,
    Stage,
)
from insights_cache.core.config.settings import Settings, get_settings, reload_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "reload_settings",
    # Enums
    "Stage",
    "ConnectionState",
    "CacheKind",
    # Keys
    "KEY_SEPARATOR",
    "KEY_WILDCARD",
    "NO_FILTER_TOKEN",
    # TTLs
    "ANCHOR_TTL",
    "CORRIDOR_TTL",
    "DASHBOARD_TTL",
    "DEFAULT_TTL",
    # HTTP headers
    "HEADER_REQUEST_ID",
]
