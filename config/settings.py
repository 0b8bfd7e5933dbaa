import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

"""
Configuration settings for the Pokedex CMS export.

This module loads environment variables (optionally from a `.env` file),
defines the tunables for the export run, and validates them so a bad value
fails at startup instead of halfway through a catalog crawl.
"""

load_dotenv()

logger = logging.getLogger("dexport.config")


# Values that could not be parsed, reported by validate_settings()
_invalid_settings: List[str] = []


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        _invalid_settings.append(f"{name} must be an integer, got {raw!r}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        _invalid_settings.append(f"{name} must be a number, got {raw!r}")
        return default


# API Configuration
POKEAPI_URL = os.getenv("POKEAPI_URL", "https://pokeapi.co/api/v2").rstrip("/")
SPRITE_BASE_URL = os.getenv(
    "SPRITE_BASE_URL",
    "https://raw.githubusercontent.com/blai30/PokemonSpritesDump/refs/heads/main/sprites",
).rstrip("/")

# Data Storage
CACHE_DIR = Path(os.getenv("CACHE_DIR", ".cache"))
OUTPUT_PATH = Path(os.getenv("OUTPUT_PATH", "out/pokemon-cms.csv"))

# Catalog window (the National Dex currently ends at 1025)
SPECIES_LIMIT = _int_env("SPECIES_LIMIT", 1025)
SPECIES_OFFSET = _int_env("SPECIES_OFFSET", 0)

# Batching (requests per window, pause between windows in seconds)
BATCH_SIZE = _int_env("BATCH_SIZE", 20)
BATCH_DELAY = _float_env("BATCH_DELAY", 0.1)
GROWTH_RATE_BATCH_SIZE = _int_env("GROWTH_RATE_BATCH_SIZE", 10)

# API Rate Limiting
MAX_CONCURRENT_API_REQUESTS = _int_env("MAX_CONCURRENT_API_REQUESTS", 10)
API_REQUEST_TIMEOUT = _float_env("API_REQUEST_TIMEOUT", 30)

# Retry Configuration
MAX_RETRY_ATTEMPTS = _int_env("MAX_RETRY_ATTEMPTS", 3)
RETRY_BASE_DELAY = _float_env("RETRY_BASE_DELAY", 1)  # Base delay for exponential backoff
RETRY_MAX_DELAY = _float_env("RETRY_MAX_DELAY", 10)  # Cap between retries

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "export.log")


def validate_settings():
    """
    Validate all configuration settings to catch errors at startup.

    Raises:
        ValueError: If any configuration value is invalid (e.g., a zero batch
            size, negative delays, or a retry cap below the base delay).
    """
    if _invalid_settings:
        raise ValueError("; ".join(_invalid_settings))

    if not POKEAPI_URL.startswith(("http://", "https://")):
        raise ValueError("POKEAPI_URL must be an http(s) URL")

    # Validate catalog window
    if SPECIES_LIMIT < 1:
        raise ValueError("SPECIES_LIMIT must be at least 1")

    if SPECIES_OFFSET < 0:
        raise ValueError("SPECIES_OFFSET must be non-negative")

    # Validate batching
    if BATCH_SIZE < 1:
        raise ValueError("BATCH_SIZE must be at least 1")

    if GROWTH_RATE_BATCH_SIZE < 1:
        raise ValueError("GROWTH_RATE_BATCH_SIZE must be at least 1")

    if BATCH_DELAY < 0:
        raise ValueError("BATCH_DELAY must be non-negative")

    # Validate API settings
    if MAX_CONCURRENT_API_REQUESTS < 1:
        raise ValueError("MAX_CONCURRENT_API_REQUESTS must be at least 1")

    if API_REQUEST_TIMEOUT <= 0:
        raise ValueError("API_REQUEST_TIMEOUT must be positive")

    # Validate retry settings
    if MAX_RETRY_ATTEMPTS < 1:
        raise ValueError("MAX_RETRY_ATTEMPTS must be at least 1")

    if RETRY_BASE_DELAY < 0:
        raise ValueError("RETRY_BASE_DELAY must be non-negative")

    if RETRY_MAX_DELAY < RETRY_BASE_DELAY:
        raise ValueError("RETRY_MAX_DELAY must be >= RETRY_BASE_DELAY")

    logger.info("✅ Configuration validation completed successfully")
