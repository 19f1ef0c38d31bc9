"""
Cache value codec.

Values are stored as UTF-8 JSON text in both stores, so an entry written to
Redis by one process reads back identically from the local store of another.
"""

from typing import Any

import orjson

from insights_cache.core.exceptions import CacheSerializationError


def encode_value(value: Any, key: str | None = None) -> str:
    """
    Serialize a value for storage.

    Raises:
        CacheSerializationError: If the value is not JSON-serializable
    """
    try:
        return orjson.dumps(value).decode("utf-8")
    except TypeError as e:
        raise CacheSerializationError.from_exception(
            e, message=f"Value for cache key is not serializable: {e}", cache_key=key
        )


def decode_value(payload: str | bytes, key: str | None = None) -> Any:
    """
    Deserialize a stored payload.

    Raises:
        CacheSerializationError: If the payload is not valid JSON
    """
    try:
        return orjson.loads(payload)
    except orjson.JSONDecodeError as e:
        raise CacheSerializationError.from_exception(
            e, message=f"Stored cache payload could not be decoded: {e}", cache_key=key
        )
