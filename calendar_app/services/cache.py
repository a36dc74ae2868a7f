"""
Holiday Cache
=============
In-memory key/value store with a per-entry time-to-live.

  get(key)                       — fresh value or None (expired entries evicted)
  get(key, include_expired=True) — value even if expired (stale fallback)
  cleanup()                      — sweep all expired entries, run every
                                   CACHE_CLEANUP_MINUTES by calendar_app/scheduler.py

Expired entries are kept until read or swept, so the holiday service can
still serve them when the upstream API is down. All operations share one
lock; none of them raise.
"""

import json
import logging
import os
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "3600"))


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at


class HolidayCache:
    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl if default_ttl > 0 else 3600.0
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        if not ttl or ttl <= 0:
            ttl = self.default_ttl
        now = self._clock()
        with self._lock:
            self._entries[key] = CacheEntry(value=value, created_at=now, expires_at=now + ttl)
        logger.debug(f"[cache] Cached {key} (expires in {round(ttl)}s)")

    def get(self, key: str, include_expired: bool = False) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            now = self._clock()
            if not include_expired and entry.is_expired(now):
                del self._entries[key]
                logger.debug(f"[cache] Expired and removed: {key}")
                return None
        logger.debug(f"[cache] Hit: {key} (age: {round(now - entry.created_at)}s)")
        return entry.value

    def delete(self, key: str) -> bool:
        with self._lock:
            deleted = self._entries.pop(key, None) is not None
        if deleted:
            logger.info(f"[cache] Deleted: {key}")
        return deleted

    def clear(self) -> None:
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
        logger.info(f"[cache] Cleared: {size} entries removed")

    def has(self, key: str) -> bool:
        """True if the key is stored, expired or not."""
        with self._lock:
            return key in self._entries

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def prewarm(self, data: Dict[str, Any]) -> None:
        for key, value in data.items():
            self.set(key, value)
        logger.info(f"[cache] Prewarmed with {len(data)} entries")

    def cleanup(self) -> int:
        """Evict every expired entry. Returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if e.is_expired(now)]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.info(f"[cache] Cleanup removed {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> dict:
        with self._lock:
            now = self._clock()
            entries = list(self._entries.items())
        expired = sum(1 for _, e in entries if e.is_expired(now))
        size = sum(len(key) + _approx_size(e.value) for key, e in entries)
        return {
            "total_entries":   len(entries),
            "valid_entries":   len(entries) - expired,
            "expired_entries": expired,
            "memory_usage": {
                "bytes": size,
                "kb":    round(size / 1024),
                "mb":    round(size / (1024 * 1024)),
            },
        }


def _approx_size(value: Any) -> int:
    """Length of the JSON form of a cached value."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    elif isinstance(value, (list, tuple)):
        value = [v.model_dump(mode="json") if isinstance(v, BaseModel) else v for v in value]
    try:
        return len(json.dumps(value, default=str))
    except (TypeError, ValueError):
        return len(repr(value))
