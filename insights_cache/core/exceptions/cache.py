"""
Cache-Related Exceptions

All exceptions raised by the remote backend, the local store and the value
codec. Only CacheSerializationError ever reaches callers of the cache facade;
the others are absorbed as remote failures.
"""

from typing import Any

from insights_cache.core.exceptions.base import InsightsCacheError


class CacheError(InsightsCacheError):
    """Base exception for cache-related errors."""
    pass


class CacheConnectionError(CacheError):
    """
    Raised when the remote cache is unreachable.

    Common causes:
    - Redis server is down
    - Network connectivity issues
    - Command exceeded REDIS_OPERATION_TIMEOUT
    - Invalid REDIS_URL
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when the remote cache rejects a command.

    Common causes:
    - Wrong value type stored under the key
    - Memory limit exceeded (OOM command not allowed)
    - Authentication failure
    """
    pass


class CacheSerializationError(CacheError):
    """
    Raised when a value cannot be encoded for storage or a stored payload
    cannot be decoded.

    This is a real error, distinct from a cache miss.
    """
    pass


class PatternDeleteError(CacheError):
    """
    Raised when a pattern delete fails part-way through.

    Keys deleted before the failure stay deleted; ``deleted`` carries how many
    that was.
    """

    def __init__(
        self,
        message: str,
        deleted: int = 0,
        request_id: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, request_id=request_id, details=details)
        self.deleted = deleted
        self.details.setdefault("deleted", deleted)
