"""
Main entry point for the Pokedex CMS export.

Configures logging, validates settings, and runs one export: the PokeAPI
catalog is crawled (through the on-disk cache), flattened to one row per
species variant, and written as CSV for the CMS import.
"""

import asyncio
import logging
import sys

from catalog.api_client import PokeAPIClient
from catalog.cache_store import CacheStore
from catalog.pipeline import run_export
from config.settings import (
    BATCH_DELAY,
    BATCH_SIZE,
    CACHE_DIR,
    GROWTH_RATE_BATCH_SIZE,
    LOG_FILE,
    LOG_LEVEL,
    OUTPUT_PATH,
    SPECIES_LIMIT,
    SPECIES_OFFSET,
    SPRITE_BASE_URL,
    validate_settings,
)

logger = logging.getLogger("dexport")


def configure_logging() -> None:
    """Send log records to stdout and to the log file."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(LOG_FILE, encoding="utf-8"),
        ],
    )
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    logging.getLogger().setLevel(level)
    logger.setLevel(level)


async def main() -> None:
    """Run one export with the configured client, cache and output path."""
    client = PokeAPIClient()
    cache = CacheStore(CACHE_DIR)

    try:
        await run_export(
            client,
            cache,
            OUTPUT_PATH,
            SPRITE_BASE_URL,
            window_size=BATCH_SIZE,
            delay=BATCH_DELAY,
            growth_rate_window_size=GROWTH_RATE_BATCH_SIZE,
            species_limit=SPECIES_LIMIT,
            species_offset=SPECIES_OFFSET,
        )
    finally:
        await client.close()


def run() -> None:
    """Console entry point."""
    configure_logging()

    try:
        validate_settings()
    except ValueError as e:
        logger.critical(f"❌ Configuration validation failed: {e}")
        sys.exit(1)

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Export stopped by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        logger.critical(f"Export failed: {e}", exc_info=e)
        sys.exit(1)


if __name__ == "__main__":
    run()
