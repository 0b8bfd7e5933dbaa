"""
This module contains static constant definitions used throughout the export,
including:
- HTTP client tuning (connection pool, user agent)
- Cache layout details
- Upstream catalog conventions (language tags, sentinels, table indices)
- Progress logging intervals
"""

# Connection pool settings
CONNECTION_POOL_LIMIT = 100  # Total connections across all hosts
CONNECTION_POOL_LIMIT_PER_HOST = 30  # Max connections per host
CONNECTION_KEEPALIVE_TIMEOUT = 30  # Seconds to keep idle connections
USER_AGENT = "Pokedex-CMS-Export/1.0"

# Retry defaults for decorators used outside the configured client
DEFAULT_RETRY_ATTEMPTS = 3
RETRY_BASE_DELAY = 1  # Seconds
RETRY_MAX_DELAY = 10  # Seconds

# Circuit breaker
BREAKER_FAILURE_THRESHOLD = 5
BREAKER_RECOVERY_TIMEOUT = 60.0  # Seconds

# Cache layout
CACHE_FILE_SUFFIX = ".json"

# Cache namespaces (one directory per entity type)
CACHE_SPECIES_LIST = "species-list"
CACHE_SPECIES = "species"
CACHE_POKEMON = "pokemon"
CACHE_POKEMON_FORM = "pokemon-form"
CACHE_ABILITY = "ability"
CACHE_GROWTH_RATE_LIST = "growth-rate-list"
CACHE_GROWTH_RATE = "growth-rate"

# Upstream catalog conventions
DISPLAY_LANGUAGE = "en"
GENDERLESS_RATE = -1  # gender_rate sentinel for genderless species
GENDER_RATE_DENOMINATOR = 8  # gender_rate is expressed in eighths female
MAX_LEVEL_INDEX = 99  # levels[99] holds the experience needed for level 100
UNIT_DIVISOR = 10  # decimetres -> metres, hectograms -> kilograms

# Progress logging intervals
SPECIES_PROGRESS_INTERVAL = 50
VARIANT_PROGRESS_INTERVAL = 100
ABILITY_PROGRESS_INTERVAL = 50
GROWTH_RATE_PROGRESS_INTERVAL = 5
