"""In-memory response caching with TTL, oldest-inserted eviction and periodic sweeps."""

from __future__ import annotations

import asyncio
import json
import logging
import re
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry:
    key: str
    value: Any
    expires_at: Optional[float]  # None: lives until invalidated or swept

    def is_fresh(self, now: float) -> bool:
        return self.expires_at is None or now < self.expires_at


def make_cache_key(name: str, **params: Any) -> str:
    """Build a stable cache key from an operation name and its parameters."""
    if not params:
        return name
    parts = [f"{key}={json.dumps(params[key], sort_keys=True, default=str)}" for key in sorted(params)]
    return f"{name}:" + "&".join(parts)


class TTLCache:
    """Process-wide TTL cache.

    Entries expire ``ttl`` seconds after they are stored. When the store is
    full the oldest-inserted entry is evicted, regardless of how recently it
    was read. All operations hold a re-entrant lock, so the cache can be
    shared between the threads FastAPI uses for sync endpoints.
    """

    def __init__(
        self,
        default_ttl_seconds: Optional[float] = 300,
        max_entries: int = 150,
        clock: Clock = time.monotonic,
        name: str = "cache",
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.default_ttl_seconds = default_ttl_seconds
        self.max_entries = max_entries
        self.name = name
        self._clock = clock
        self._store: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: str) -> bool:
        # no stats or expiry side effects
        with self._lock:
            entry = self._store.get(key)
            return entry is not None and entry.is_fresh(self._clock())

    def get(self, key: str, default: Any = None) -> Any:
        """Return the cached value, or ``default`` if absent or expired."""
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return default
            if not entry.is_fresh(self._clock()):
                del self._store[key]
                self._misses += 1
                logger.debug("%s: expired %s", self.name, key)
                return default
            self._hits += 1
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        """Store ``value`` under ``key``; ``ttl_seconds`` defaults to the cache default."""
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        with self._lock:
            expires_at = None if ttl is None else self._clock() + ttl
            if key in self._store:
                # re-insert so the key counts as newest
                del self._store[key]
            elif len(self._store) >= self.max_entries:
                oldest, _ = self._store.popitem(last=False)
                self._evictions += 1
                logger.debug("%s: evicted %s", self.name, oldest)
            self._store[key] = CacheEntry(key=key, value=value, expires_at=expires_at)

    def get_or_fetch(self, key: str, fetch: Callable[[], T], ttl_seconds: Optional[float] = None) -> T:
        """Return the cached value for ``key`` or call ``fetch`` and cache its result.

        A failing ``fetch`` leaves the key empty and its exception propagates.
        """
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug("%s: hit %s", self.name, key)
            return cached
        logger.debug("%s: miss %s", self.name, key)
        value = fetch()
        self.set(key, value, ttl_seconds)
        return value

    def invalidate(self, key: str) -> int:
        """Drop ``key``; returns the number of entries removed (0 or 1)."""
        with self._lock:
            removed = 1 if self._store.pop(key, None) is not None else 0
        if removed:
            logger.debug("%s: invalidated %s", self.name, key)
        return removed

    def invalidate_pattern(self, pattern: str) -> int:
        """Drop every key matching the regular expression ``pattern``."""
        regex = re.compile(pattern)
        with self._lock:
            doomed = [key for key in self._store if regex.search(key)]
            for key in doomed:
                del self._store[key]
        if doomed:
            logger.debug("%s: invalidated %d keys matching %r", self.name, len(doomed), pattern)
        return len(doomed)

    def purge_expired(self) -> int:
        """Remove expired entries, returning how many were dropped."""
        with self._lock:
            now = self._clock()
            doomed = [key for key, entry in self._store.items() if not entry.is_fresh(now)]
            for key in doomed:
                del self._store[key]
        return len(doomed)

    def clear(self) -> int:
        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.info("%s cleared (%d entries)", self.name, count)
        return count

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._lock:
            now = self._clock()
            active = sum(1 for entry in self._store.values() if entry.is_fresh(now))
            total = len(self._store)
            return {
                "name": self.name,
                "total_entries": total,
                "active_entries": active,
                "expired_entries": total - active,
                "max_entries": self.max_entries,
                "percent_used": round(total / self.max_entries * 100, 1),
                "default_ttl_seconds": self.default_ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
            }


class CacheSweeper:
    """Runs ``action`` every ``interval_seconds`` measured on an injectable clock.

    ``tick`` is the deterministic unit used by tests; ``run`` drives it from an
    asyncio task for the lifetime of the application.
    """

    def __init__(
        self,
        action: Callable[[], Any],
        interval_seconds: float,
        clock: Clock = time.monotonic,
        name: str = "sweeper",
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.action = action
        self.interval_seconds = interval_seconds
        self.name = name
        self._clock = clock
        self._next_run = clock() + interval_seconds
        self.runs = 0

    def tick(self) -> bool:
        """Run the action if it is due; returns True when it ran."""
        now = self._clock()
        if now < self._next_run:
            return False
        result = self.action()
        self.runs += 1
        # skip missed intervals instead of running them back to back
        while self._next_run <= now:
            self._next_run += self.interval_seconds
        logger.info("%s ran (result=%s)", self.name, result)
        return True

    async def run(self, poll_seconds: Optional[float] = None) -> None:
        poll = poll_seconds if poll_seconds is not None else min(self.interval_seconds, 30)
        while True:
            try:
                self.tick()
            except Exception as exc:  # pragma: no cover - defensive logging
                logger.warning("%s loop error: %s", self.name, exc)
            await asyncio.sleep(poll)
