"""
Two-tier cache for PokeAPI records.

Each entity type ("species", "pokemon", "ability", ...) gets its own namespace:
an in-memory dict for the current run, backed by one JSON file per key under
`<cache_dir>/<entity_type>/`. Files never expire; delete the directory to force
a fresh crawl.
"""

import asyncio
import json
import logging
import os
import tempfile
from collections import defaultdict
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union
from urllib.parse import quote

from catalog.api_models import BatchCacheStats, CacheStats
from catalog.constants import CACHE_FILE_SUFFIX

logger = logging.getLogger("dexport.cache")


class CacheSource(Enum):
    """Where a cache lookup was answered from."""

    MEMORY = "memory"
    DISK = "disk"
    MISS = "miss"


def make_cache_key(arg: Any) -> str:
    """
    Reduce a lookup argument to a stable string key.

    Strings are used verbatim. Anything else is serialized as compact JSON with
    sorted keys, so `{"limit": 1, "offset": 0}` and `{"offset": 0, "limit": 1}`
    share a key.

    Args:
        arg: The lookup argument (a name, or a dict/list of query parameters).

    Returns:
        Key string.
    """
    if isinstance(arg, str):
        return arg
    return json.dumps(arg, sort_keys=True, separators=(",", ":"), default=str)


def _read_entry(path: Path) -> Optional[Any]:
    """Read a persisted entry; None if missing or unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug(
            "Discarding unreadable cache entry",
            extra={"path": str(path), "error": str(e)},
        )
        return None


def _write_entry(path: Path, value: Any) -> None:
    """Atomically write a JSON entry by writing a temp file then renaming."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(
        prefix=path.name + ".", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(value, f, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


class CacheStore:
    """
    Per-entity-type memory + disk cache.

    Lookups check memory first, then the persisted file. Writes land in memory
    immediately and are flushed to disk before `set` returns, so a crashed run
    leaves every completed entry behind for the next one.

    Counters come in two flavours: per-batch (`memory_hits`, `disk_hits`,
    `misses`), reset by the batch fetcher at the start of every window, and
    cumulative totals for the end-of-run summary.
    """

    def __init__(self, cache_dir: Union[str, Path]):
        """
        Initialize the cache store.

        Args:
            cache_dir: Root directory holding one sub-directory per entity type.
                Created lazily on first write.
        """
        self.cache_dir = Path(cache_dir)
        self._memory: Dict[str, Dict[str, Any]] = defaultdict(dict)

        # Per-batch counters
        self.memory_hits = 0
        self.disk_hits = 0
        self.misses = 0

        # Whole-run counters
        self._total_hits = 0
        self._total_misses = 0

    def entry_path(self, entity_type: str, arg: Any) -> Path:
        """Return the persisted file path for a lookup argument."""
        key = make_cache_key(arg)
        filename = quote(key, safe="") + CACHE_FILE_SUFFIX
        return self.cache_dir / entity_type / filename

    async def get(self, entity_type: str, arg: Any) -> Tuple[Optional[Any], CacheSource]:
        """
        Look up a cached value.

        Args:
            entity_type: Cache namespace.
            arg: Lookup argument, reduced with `make_cache_key`.

        Returns:
            Tuple of (value or None, source of the answer).
        """
        key = make_cache_key(arg)
        namespace = self._memory[entity_type]

        if key in namespace:
            self.memory_hits += 1
            self._total_hits += 1
            return namespace[key], CacheSource.MEMORY

        value = await asyncio.to_thread(_read_entry, self.entry_path(entity_type, key))
        if value is not None:
            namespace[key] = value
            self.disk_hits += 1
            self._total_hits += 1
            return value, CacheSource.DISK

        self.misses += 1
        self._total_misses += 1
        return None, CacheSource.MISS

    async def set(self, entity_type: str, arg: Any, value: Any) -> None:
        """
        Store a value in memory and durably on disk.

        A key that is already held in memory is left untouched: entries do not
        change within a run.

        Args:
            entity_type: Cache namespace.
            arg: Lookup argument, reduced with `make_cache_key`.
            value: JSON-serializable record.
        """
        key = make_cache_key(arg)
        namespace = self._memory[entity_type]
        if key in namespace:
            logger.debug(
                "Cache entry already set for this run",
                extra={"entity_type": entity_type, "cache_key": key[:50]},
            )
            return

        namespace[key] = value
        await asyncio.to_thread(_write_entry, self.entry_path(entity_type, key), value)
        logger.debug(
            "Data cached", extra={"entity_type": entity_type, "cache_key": key[:50]}
        )

    def wrap(
        self, entity_type: str, fetch: Callable[[Any], Awaitable[Any]]
    ) -> Callable[[Any], Awaitable[Any]]:
        """
        Put the cache in front of a fetch function.

        Args:
            entity_type: Cache namespace for the fetched records.
            fetch: Async function taking the lookup argument.

        Returns:
            Async function with the same signature that only calls `fetch`
            on a cache miss.
        """

        async def cached_fetch(arg: Any) -> Any:
            value, source = await self.get(entity_type, arg)
            if source is not CacheSource.MISS:
                return value

            value = await fetch(arg)
            await self.set(entity_type, arg, value)
            return value

        cached_fetch.__name__ = f"cached_{getattr(fetch, '__name__', 'fetch')}"
        return cached_fetch

    def reset_batch_stats(self) -> None:
        """Clear the per-batch counters."""
        self.memory_hits = 0
        self.disk_hits = 0
        self.misses = 0

    def get_batch_stats(self) -> BatchCacheStats:
        """
        Get the counters for the current batch window.

        Returns:
            BatchCacheStats object.
        """
        return {
            "memory_hits": self.memory_hits,
            "disk_hits": self.disk_hits,
            "misses": self.misses,
        }

    def get_cache_stats(self) -> CacheStats:
        """
        Get cumulative cache statistics.

        Returns:
            CacheStats object containing hit rates and counts.
        """
        total_requests = self._total_hits + self._total_misses
        hit_rate = (
            (self._total_hits / total_requests * 100) if total_requests > 0 else 0
        )

        return {
            "size": sum(len(namespace) for namespace in self._memory.values()),
            "hits": self._total_hits,
            "misses": self._total_misses,
            "hit_rate": f"{hit_rate:.1f}%",
        }
