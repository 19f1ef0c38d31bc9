"""
Remote Cache Backend Protocol

This module defines the protocol the cache facade expects from a shared remote
cache, so the facade can be exercised against an in-memory fake in tests and
against Redis in production.

Architectural Decision: Protocol-based abstraction
- Facade depends on the protocol, not on redis.asyncio
- Facilitates testing with fake implementations and failure injection
- Type-safe interface with runtime checking
"""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RemoteCacheBackend(Protocol):
    """
    Protocol for the shared remote cache used ahead of the local store.

    Failure contract: every I/O method raises CacheConnectionError when the
    backend cannot be reached or a command times out, and CacheKeyError when
    the backend rejects a command. Absence is never an error: ``get`` returns
    None for a missing key and ``delete`` returns 0.

    Implementations:
    - RedisClient: redis.asyncio with a connection pool
    - FakeRemoteCache (tests): dict-backed with failure injection
    """

    async def connect(self) -> None:
        """
        Establish the connection and verify it with a handshake.

        Raises:
            CacheConnectionError: If the endpoint is invalid or unreachable
        """
        ...

    async def disconnect(self) -> None:
        """Close the connection and release pooled sockets."""
        ...

    async def ping(self) -> bool:
        """
        Check if the backend answers.

        Returns:
            bool: True if healthy, False otherwise (never raises)
        """
        ...

    async def get(self, key: str) -> str | bytes | None:
        """
        Get the stored payload for a key.

        The payload is returned as stored, undecoded; the caller turns an
        invalid payload into CacheSerializationError.

        Returns:
            Payload or None if absent or expired
        """
        ...

    async def set(self, key: str, value: str, ttl: int) -> bool:
        """
        Store a payload with an expiry of ``ttl`` seconds.

        Returns:
            bool: True if stored
        """
        ...

    async def delete(self, *keys: str) -> int:
        """
        Delete keys.

        Returns:
            int: Number of keys that existed and were removed
        """
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob pattern, incrementally.

        Returns:
            int: Number of keys removed

        Raises:
            PatternDeleteError: If the scan fails part-way; ``deleted`` holds
                the number already removed
        """
        ...

    async def health_check(self) -> dict[str, Any]:
        """
        Perform a health check.

        Returns:
            Dict with at least ``status`` and ``connected``
        """
        ...

    def is_connected(self) -> bool:
        """Whether the last handshake or command succeeded."""
        ...
