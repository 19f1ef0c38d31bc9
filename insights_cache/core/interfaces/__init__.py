"""
Core Interfaces Module

Protocols for pluggable components, following PEP 544 structural subtyping:
- Runtime type checking with @runtime_checkable
- No inheritance required
- Easy to fake in tests

Components:
-----------
- **cache.py**: RemoteCacheBackend protocol for the shared remote cache
"""

from insights_cache.core.interfaces.cache import RemoteCacheBackend

__all__ = [
    "RemoteCacheBackend",
]
