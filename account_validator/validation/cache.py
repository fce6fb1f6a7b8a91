"""
Result Cache — time-boxed, capacity-bounded store of finished validations.

- TTL is enforced lazily on get(): an entry older than ttl_ms since creation
  is dropped and counted as a miss. There is no background sweep.
- At capacity, set() evicts exactly one entry: the one with the smallest
  last_access_ms (least recently *accessed*; first found wins on ties).
- Values are deep-copied both on set() and on get(); callers never share
  the stored instance.
"""
from __future__ import annotations

import copy
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from account_validator.config.constants import CACHE_KEY_NAMESPACE
from account_validator.validation.metrics import record_cache_lookup

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


def cache_key(jid: str) -> str:
    """Namespaced cache key for a normalized account identifier."""
    return f"{CACHE_KEY_NAMESPACE}{jid}"


@dataclass
class CacheEntry:
    value: Any
    created_at_ms: float
    last_access_ms: float
    access_count: int = 1


class ResultCache:
    """LRU-by-access cache with lazy TTL expiry."""

    def __init__(
        self,
        ttl_ms: int = 3_600_000,
        max_size: int = 1000,
        clock: Optional[Callable[[], float]] = None,
    ):
        if ttl_ms <= 0:
            raise ValueError(f"ttl_ms must be positive, got {ttl_ms}")
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.ttl_ms = ttl_ms
        self.max_size = max_size
        self._clock = clock or _now_ms
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                record_cache_lookup(hit=False)
                return None

            now = self._clock()
            if now - entry.created_at_ms > self.ttl_ms:
                del self._entries[key]
                self.misses += 1
                record_cache_lookup(hit=False)
                logger.debug("Cache entry expired: %s", key)
                return None

            self.hits += 1
            entry.access_count += 1
            entry.last_access_ms = now
            record_cache_lookup(hit=True)
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_size:
                self._evict_lru()
            now = self._clock()
            self._entries[key] = CacheEntry(
                value=copy.deepcopy(value),
                created_at_ms=now,
                last_access_ms=now,
            )

    def entry(self, key: str) -> Optional[CacheEntry]:
        """Raw entry for inspection; does not touch hit/miss bookkeeping."""
        return self._entries.get(key)

    def _evict_lru(self) -> None:
        oldest_key: Optional[str] = None
        oldest_time = float("inf")
        for key, entry in self._entries.items():
            if entry.last_access_ms < oldest_time:
                oldest_time = entry.last_access_ms
                oldest_key = key

        if oldest_key is not None:
            del self._entries[oldest_key]
            logger.debug("Cache evicted LRU entry: %s", oldest_key)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0

    def stats(self) -> dict:
        total = self.hits + self.misses
        return {
            "size": len(self._entries),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / total if total > 0 else 0.0,
            "max_size": self.max_size,
        }
