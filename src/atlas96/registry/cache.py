import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import RLock
from typing import Generic, TypeVar

from atlas96.config import DEFAULT_CONFIG, EvictionPolicy

logger = logging.getLogger(__name__)

EntryT = TypeVar("EntryT")


@dataclass(frozen=True, slots=True)
class CacheStats:
    hits: int
    misses: int
    evictions: int
    size: int
    max_entries: int


@dataclass(slots=True)
class CompiledOperationCache(Generic[EntryT]):
    """Bounded, lock-guarded map from cache keys to compiled artifacts.

    `fifo` evicts the oldest insertion; `lru` also refreshes on every hit.
    """

    max_entries: int = DEFAULT_CONFIG.cache_max_entries
    eviction: EvictionPolicy = DEFAULT_CONFIG.eviction
    _entries: OrderedDict[str, EntryT] = field(default_factory=OrderedDict)
    _lock: RLock = field(default_factory=RLock)
    _hits: int = 0
    _misses: int = 0
    _evictions: int = 0

    def __post_init__(self) -> None:
        if self.max_entries < 1:
            raise ValueError("cache max_entries must be positive")
        if self.eviction not in ("fifo", "lru"):
            raise ValueError(f"unknown eviction policy {self.eviction!r}")

    def get(self, key: str, /) -> EntryT | None:
        """Return the cached artifact for one key, if present."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            if self.eviction == "lru":
                self._entries.move_to_end(key)
            return entry

    def set_if_absent(self, key: str, entry: EntryT, /) -> EntryT:
        """Store `entry` unless another thread won the race; return the stored one."""
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None:
                if self.eviction == "lru":
                    self._entries.move_to_end(key)
                return existing
            self._entries[key] = entry
            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                self._evictions += 1
                logger.debug("evicted compiled operation %s", evicted_key)
            return entry

    def evict(self, key: str, /) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            self._evictions = 0

    def keys(self) -> tuple[str, ...]:
        """Keys from oldest to newest."""
        with self._lock:
            return tuple(self._entries)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                evictions=self._evictions,
                size=len(self._entries),
                max_entries=self.max_entries,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


__all__ = ["CacheStats", "CompiledOperationCache"]
