"""
One export run: resolve the catalog, project rows, write the CSV.
"""

import logging
import time
from pathlib import Path
from typing import Union

from catalog.api_client import PokeAPIClient
from catalog.cache_store import CacheStore
from catalog.projector import project_rows
from catalog.resolver import RelationResolver
from catalog.serializer import write_table

logger = logging.getLogger("dexport.pipeline")


async def run_export(
    client: PokeAPIClient,
    cache: CacheStore,
    output_path: Union[str, Path],
    sprite_base_url: str,
    window_size: int = 20,
    delay: float = 0.0,
    growth_rate_window_size: int = 10,
    species_limit: int = 1025,
    species_offset: int = 0,
) -> Path:
    """
    Run the full export against `client`, caching through `cache`.

    Any unrecovered error propagates; cache entries written before the failure
    stay on disk and speed up the next attempt.

    Returns:
        Path of the written CSV file.
    """
    started = time.monotonic()

    resolver = RelationResolver(
        client,
        cache,
        window_size=window_size,
        delay=delay,
        growth_rate_window_size=growth_rate_window_size,
        species_limit=species_limit,
        species_offset=species_offset,
    )
    tables = await resolver.resolve()
    rows = project_rows(tables, sprite_base_url)

    logger.info("Writing CSV file...")
    path = await write_table(rows, output_path)

    logger.info(f"Total rows processed: {len(rows)}")
    stats = cache.get_cache_stats()
    logger.info(
        f"Cache stats: {stats['hits']} hits, {stats['misses']} misses "
        f"({stats['hit_rate']} hit rate, {stats['size']} entries)",
        extra=stats,
    )
    logger.info(f"Elapsed time: {time.monotonic() - started:.2f} seconds")
    return path
