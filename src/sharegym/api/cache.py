"""
In-memory response cache for GET requests.

Entries are keyed by ``"METHOD:URL"`` and expire after a TTL chosen by
the longest path prefix in PATH_CACHE_TTL (default 60 s).  Expired
entries are dropped lazily when read; there is no background sweep.
Mutations do not invalidate anything automatically: call sites bust
related keys with invalidate().
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from ..core.config import DEFAULT_CACHE_TTL, PATH_CACHE_TTL


@dataclass
class CacheEntry:
    data: Any
    expires_at: float  # epoch seconds


def get_cache_key(method: str, url: str) -> str:
    return f"{method.upper()}:{url}"


def resolve_ttl(
    path: str,
    table: Mapping[str, float] = PATH_CACHE_TTL,
    default: float = DEFAULT_CACHE_TTL,
) -> float:
    """
    TTL for a request path: the longest matching prefix wins.

    Args:
        path: Request path, e.g. "/users/42/workouts" (query string allowed)
        table: Prefix → TTL seconds
        default: TTL when no prefix matches

    Returns:
        TTL in seconds
    """
    normalized = "/" + path.lstrip("/")
    best: str | None = None
    for prefix in table:
        if normalized.startswith(prefix) and (best is None or len(prefix) > len(best)):
            best = prefix
    return table[best] if best is not None else default


class ResponseCache:
    """TTL cache of parsed GET responses."""

    def __init__(
        self,
        ttl_table: Mapping[str, float] | None = None,
        default_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self._entries: dict[str, CacheEntry] = {}
        self._ttl_table = dict(PATH_CACHE_TTL if ttl_table is None else ttl_table)
        self._default_ttl = default_ttl
        self._clock = clock

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> Any | None:
        """Cached data for key, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return None
        return entry.data

    def set(self, key: str, data: Any, path: str) -> None:
        ttl = resolve_ttl(path, self._ttl_table, self._default_ttl)
        self._entries[key] = CacheEntry(data=data, expires_at=self._clock() + ttl)

    def invalidate(self, pattern: str | re.Pattern[str]) -> int:
        """
        Drop every key containing the substring (or matching the regex).

        Returns:
            Number of entries removed
        """
        if isinstance(pattern, str):
            doomed = [k for k in self._entries if pattern in k]
        else:
            doomed = [k for k in self._entries if pattern.search(k)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()
