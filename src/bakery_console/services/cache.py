"""Query cache keyed by resource and request parameters."""

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

QueryKey = tuple[object, ...]


class QueryCache(Protocol):
    """Cache interface for query results."""

    def get(self, key: QueryKey) -> object | None:
        """Return a cached value if present and still fresh."""

    def set(self, key: QueryKey, value: object, ttl_seconds: int) -> None:
        """Store a value with a freshness window in seconds."""

    def invalidate(self, predicate: Callable[[QueryKey], bool]) -> int:
        """Drop every entry whose key matches and return how many were dropped."""

    def invalidate_prefix(self, *prefix: object) -> int:
        """Drop every entry whose key starts with ``prefix``."""


def params_key(params: Mapping[str, object] | None) -> str:
    """Return a stable string for a parameter mapping."""
    if not params:
        return ""
    return json.dumps(params, sort_keys=True, ensure_ascii=False, default=str)


def prefix_predicate(*prefix: object) -> Callable[[QueryKey], bool]:
    """Match keys starting with ``prefix``."""

    def matches(key: QueryKey) -> bool:
        return key[: len(prefix)] == prefix

    return matches


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryQueryCache(QueryCache):
    """In-memory query cache; last write wins."""

    _entries: dict[QueryKey, _CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: QueryKey) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: QueryKey, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def invalidate(self, predicate: Callable[[QueryKey], bool]) -> int:
        """Drop matching entries."""
        stale = [key for key in self._entries if predicate(key)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def invalidate_prefix(self, *prefix: object) -> int:
        """Drop entries whose key starts with ``prefix``."""
        return self.invalidate(prefix_predicate(*prefix))

    def __len__(self) -> int:
        return len(self._entries)
