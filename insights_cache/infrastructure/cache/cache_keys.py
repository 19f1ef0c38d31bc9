"""
Cache Key Namespace

Deterministic key construction for every cached entity, plus the glob patterns
used for bulk invalidation.

Key layout:
    [<namespace>:]<kind>:<variant>[:<identifier>...][:#<filter digest>][:@v<version>]

Rules:
- Free-form identifiers are percent-encoded, so they never contain the
  separator, a glob metacharacter (``*``, ``?``, ``[``) or a segment marker.
- Integers render in plain decimal (``str(int)``), so ``42`` and ``"42"``
  address the same entry. Booleans render as ``!true`` / ``!false``.
- The filter segment starts with ``#`` and the version segment with ``@``.
  Identifiers can never produce either, so apart from the int/str equivalence
  above, different parameters give different keys.
- A missing filter renders as ``#nofilter``; a real filter, including an empty
  one, renders as ``#`` plus a SHA-256 digest of its canonical JSON form. Sets
  are sorted and non-string mapping keys stringified, so the digest is the
  same in every process.
- Every key has a separator right after the kind token, so ``anchor:*`` cannot
  match a key of some other kind that merely starts with ``anchor``.

Usage:
    keys = CacheKeys()
    keys.anchor_detail(42)                         # "anchor:detail:42"
    keys.corridor_list(50, 0, {"asset": "USDC"})   # "corridor:list:50:0:#<sha256>"
    keys.pattern(CacheKind.ANCHOR)                 # "anchor:*"
"""

import hashlib
from collections.abc import Mapping
from enum import Enum
from typing import Any
from urllib.parse import quote

import orjson

from insights_cache.core.config.constants import (
    BOOL_MARKER,
    FILTER_MARKER,
    KEY_SEPARATOR,
    KEY_WILDCARD,
    NO_FILTER_TOKEN,
    VERSION_MARKER,
    VERSION_PREFIX,
    CacheKind,
)

# Marks "no filter segment at all", distinct from filters=None ("#nofilter")
_NO_SEGMENT = object()


def _render_segment(value: Any) -> str:
    """Render one identifier segment."""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return f"{BOOL_MARKER}{'true' if value else 'false'}"
    if isinstance(value, int):
        return str(int(value))
    return quote(str(value), safe="")


_CANONICAL_JSON = orjson.OPT_SORT_KEYS | orjson.OPT_NON_STR_KEYS


def _canonical_default(value: Any) -> Any:
    """orjson fallback: sets become sorted lists, anything else its str()."""
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=_canonical_json)
    return str(value)


def _canonical_json(value: Any) -> bytes:
    return orjson.dumps(value, default=_canonical_default, option=_CANONICAL_JSON)


def hash_filters(filters: Mapping[str, Any] | str | None) -> str:
    """
    Digest a set of filter parameters for use as a key segment.

    Mappings are serialized with sorted keys and with None-valued entries
    dropped, so ``{"a": 1, "b": None}`` and ``{"a": 1}`` hash the same. Set
    values are sorted and nested non-string keys stringified, so the digest
    never depends on hash seeds. A pre-serialized string is hashed as-is.

    Args:
        filters: Filter parameters, a raw filter string, or None

    Returns:
        str: 64-char hex SHA-256 digest, or ``nofilter`` for None
    """
    if filters is None:
        return NO_FILTER_TOKEN

    if isinstance(filters, str):
        payload = filters.encode("utf-8")
    else:
        payload = _canonical_json({str(k): v for k, v in filters.items() if v is not None})

    return hashlib.sha256(payload).hexdigest()


class CacheKeys:
    """
    Builds cache keys and invalidation patterns.

    A namespace, when configured, prefixes every key and pattern so several
    deployments can share one Redis database without touching each other's
    keys.
    """

    def __init__(self, namespace: str | None = None):
        self._namespace = namespace or None

    @property
    def namespace(self) -> str | None:
        return self._namespace

    def _prefix(self) -> str:
        if self._namespace:
            return f"{_render_segment(self._namespace)}{KEY_SEPARATOR}"
        return ""

    def build(
        self,
        kind: CacheKind | str,
        variant: str,
        *identifiers: Any,
        filters: Any = _NO_SEGMENT,
        version: int | str | None = None,
    ) -> str:
        """
        Build a cache key.

        Args:
            kind: Entity kind owning the key
            variant: What is cached for the entity (e.g. "detail", "list")
            *identifiers: Identifier segments, in order
            filters: Filter parameters; omit for keys without a filter segment,
                pass None for the ``#nofilter`` sentinel
            version: Optional schema version, appended as ``@v<version>``

        Returns:
            str: Cache key
        """
        segments = [_render_segment(kind), _render_segment(variant)]
        segments.extend(_render_segment(identifier) for identifier in identifiers)

        if filters is not _NO_SEGMENT:
            segments.append(f"{FILTER_MARKER}{hash_filters(filters)}")

        if version is not None:
            segments.append(f"{VERSION_MARKER}{VERSION_PREFIX}{_render_segment(version)}")

        return self._prefix() + KEY_SEPARATOR.join(segments)

    def pattern(self, kind: CacheKind | str) -> str:
        """Glob matching every key built for ``kind`` and nothing else."""
        return f"{self._prefix()}{_render_segment(kind)}{KEY_SEPARATOR}{KEY_WILDCARD}"

    def clear_pattern(self) -> str:
        """Glob matching every key under this namespace (``*`` without one)."""
        return f"{self._prefix()}{KEY_WILDCARD}"

    # -------------------------------------------------------------------------
    # Corridor keys (TTL: 5 minutes)
    # -------------------------------------------------------------------------

    def corridor_metrics(self, corridor_key: str) -> str:
        return self.build(CacheKind.CORRIDOR, "metrics", corridor_key)

    def corridor_list(
        self, limit: int, offset: int, filters: Mapping[str, Any] | str | None = None
    ) -> str:
        return self.build(CacheKind.CORRIDOR, "list", limit, offset, filters=filters)

    def corridor_detail(self, corridor_key: str) -> str:
        return self.build(CacheKind.CORRIDOR, "detail", corridor_key)

    # -------------------------------------------------------------------------
    # Anchor keys (TTL: 10 minutes)
    # -------------------------------------------------------------------------

    def anchor_data(self, anchor_id: Any) -> str:
        return self.build(CacheKind.ANCHOR, "data", anchor_id)

    def anchor_list(self, limit: int, offset: int) -> str:
        return self.build(CacheKind.ANCHOR, "list", limit, offset)

    def anchor_detail(self, anchor_id: Any) -> str:
        return self.build(CacheKind.ANCHOR, "detail", anchor_id)

    def anchor_assets(self, anchor_id: Any) -> str:
        return self.build(CacheKind.ANCHOR, "assets", anchor_id)

    def anchor_account(self, stellar_account: str) -> str:
        return self.build(CacheKind.ANCHOR, "account", stellar_account)

    # -------------------------------------------------------------------------
    # Dashboard keys (TTL: 1 minute)
    # -------------------------------------------------------------------------

    def dashboard_stats(self) -> str:
        return self.build(CacheKind.DASHBOARD, "stats")

    def dashboard_overview(self) -> str:
        return self.build(CacheKind.DASHBOARD, "overview")

    # -------------------------------------------------------------------------
    # Invalidation patterns
    # -------------------------------------------------------------------------

    def corridor_pattern(self) -> str:
        return self.pattern(CacheKind.CORRIDOR)

    def anchor_pattern(self) -> str:
        return self.pattern(CacheKind.ANCHOR)

    def dashboard_pattern(self) -> str:
        return self.pattern(CacheKind.DASHBOARD)
