"""In-memory TTL cache used to avoid re-reading unchanged files within a process."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

__all__ = ["DeterministicCache", "file_cache_key"]


@dataclass(slots=True)
class _Entry(Generic[T]):
    value: T
    expires_at: float


class DeterministicCache(Generic[T]):
    """Key/value cache with per-entry expiry.

    Hits and misses are observably equivalent: the cache only short-circuits
    recomputation of values that are pure functions of their key. Keys that
    embed a file's mtime are never read again once the file changes, so every
    ``set`` purges expired entries.
    """

    def __init__(
        self,
        default_ttl_seconds: float = 300.0,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._default_ttl = default_ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: dict[str, _Entry[T]] = {}

    def get(self, key: str) -> T | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return None
        return entry.value

    def set(self, key: str, value: T, ttl_seconds: float | None = None) -> None:
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        now = self._clock()
        self._purge_expired(now)
        self._entries[key] = _Entry(value=value, expires_at=now + ttl)

    def get_or_compute(
        self,
        key: str,
        compute: Callable[[], T],
        ttl_seconds: float | None = None,
    ) -> T:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = compute()
        self.set(key, value, ttl_seconds)
        return value

    def clear(self) -> None:
        self._entries.clear()

    @property
    def size(self) -> int:
        """Number of live entries; expired entries are purged first."""
        self._purge_expired(self._clock())
        return len(self._entries)

    def _purge_expired(self, now: float) -> None:
        for key in [key for key, entry in self._entries.items() if now > entry.expires_at]:
            del self._entries[key]


def file_cache_key(path: str, mtime: float, size: int) -> str:
    """Content-addressing key for a file: changes whenever mtime or size changes."""
    return f"{path}:{mtime}:{size}"
