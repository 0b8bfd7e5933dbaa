"""
Windowed concurrent fetching.

PokeAPI is a free service with fair-use limits, so requests go out in fixed
size windows: every fetch in a window runs concurrently, the window must fully
finish, then there is a short pause before the next window starts.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from catalog.cache_store import CacheStore

logger = logging.getLogger("dexport.batch")

T = TypeVar("T")
R = TypeVar("R")


def _windows(items: Sequence[T], window_size: int):
    if window_size < 1:
        raise ValueError("window_size must be at least 1")
    for start in range(0, len(items), window_size):
        yield start, items[start : start + window_size]


async def _pace(start: int, window_size: int, total: int, delay: float) -> None:
    # No pause after the last window
    if delay and start + window_size < total:
        await asyncio.sleep(delay)


def _log_window(cache: Optional[CacheStore], start: int, size: int, total: int) -> None:
    if cache is None:
        return
    stats = cache.get_batch_stats()
    logger.debug(
        f"Batch window {start + 1}-{start + size} of {total} complete: "
        f"{stats['memory_hits']} memory hits, {stats['disk_hits']} disk hits, "
        f"{stats['misses']} misses",
        extra={"start": start, "size": size, "total": total, **stats},
    )


async def run_batched(
    keys: Sequence[T],
    fetch: Callable[[T], Awaitable[R]],
    window_size: int = 20,
    delay: float = 0.0,
    cache: Optional[CacheStore] = None,
) -> List[R]:
    """
    Apply `fetch` to every key, a window at a time.

    Results come back in the order of `keys` no matter which fetch finished
    first. An exception from any fetch aborts the whole run; windows after the
    failing one are never started.

    Args:
        keys: Lookup arguments.
        fetch: Async function called once per key (usually a
            `CacheStore.wrap`-ped client method).
        window_size: Maximum number of concurrent fetches.
        delay: Seconds to pause between windows.
        cache: Cache whose per-batch counters are reset and logged per window.

    Returns:
        List of results, index-aligned with `keys`.

    Raises:
        ValueError: If `window_size` is less than 1.
    """
    results: List[R] = []
    total = len(keys)

    for start, window in _windows(keys, window_size):
        if cache is not None:
            cache.reset_batch_stats()

        results.extend(await asyncio.gather(*(fetch(key) for key in window)))

        _log_window(cache, start, len(window), total)
        await _pace(start, window_size, total, delay)

    return results


async def run_batched_map(
    items: Sequence[T],
    mapper: Callable[[T, int], Awaitable[Optional[R]]],
    window_size: int = 20,
    delay: float = 0.0,
    cache: Optional[CacheStore] = None,
) -> Dict[str, R]:
    """
    Windowed map that builds a lookup table keyed by each item's string form.

    Used for reference data that is resolved once per distinct identifier,
    such as the unique ability names across the whole catalog.

    Args:
        items: Items to resolve.
        mapper: Async function receiving `(item, index)` where index is the
            item's position in `items`. Returning None drops the item.
        window_size: Maximum number of concurrent mapper calls.
        delay: Seconds to pause between windows.
        cache: Cache whose per-batch counters are reset and logged per window.

    Returns:
        Dictionary mapping `str(item)` to its non-None result.
    """
    out: Dict[str, Any] = {}
    total = len(items)

    for start, window in _windows(items, window_size):
        if cache is not None:
            cache.reset_batch_stats()

        results = await asyncio.gather(
            *(mapper(item, start + offset) for offset, item in enumerate(window))
        )
        for item, result in zip(window, results):
            if result is not None:
                out[str(item)] = result

        _log_window(cache, start, len(window), total)
        await _pace(start, window_size, total, delay)

    return out
