"""
Type definitions for PokeAPI records and internal statistics.

Only the fields the export actually reads are declared. Upstream records carry
many more keys; those pass through the cache untouched.
"""

from typing import List, Optional, TypedDict


class NamedResource(TypedDict):
    """A `{name, url}` reference to another PokeAPI resource."""

    name: str
    url: str


class NamedResourceList(TypedDict):
    """A paged list endpoint response (`/pokemon-species?limit=...`)."""

    count: int
    next: Optional[str]
    previous: Optional[str]
    results: List[NamedResource]


class LocalizedName(TypedDict):
    name: str
    language: NamedResource


class LocalizedGenus(TypedDict):
    genus: str
    language: NamedResource


class LocalizedEffect(TypedDict, total=False):
    effect: str
    short_effect: str
    language: NamedResource


class SpeciesVariety(TypedDict):
    is_default: bool
    pokemon: NamedResource


class Species(TypedDict, total=False):
    """
    A `pokemon-species` record.

    Attributes:
        gender_rate: Chance of being female in eighths, or -1 for genderless.
        hatch_counter: Egg cycles needed to hatch.
        shape: May be null for a handful of newer species.
    """

    id: int
    name: str
    names: List[LocalizedName]
    genera: List[LocalizedGenus]
    varieties: List[SpeciesVariety]
    growth_rate: NamedResource
    is_baby: bool
    is_legendary: bool
    is_mythical: bool
    capture_rate: int
    base_happiness: Optional[int]
    hatch_counter: Optional[int]
    gender_rate: int
    color: NamedResource
    shape: Optional[NamedResource]
    generation: NamedResource
    egg_groups: List[NamedResource]


class PokemonType(TypedDict):
    slot: int
    type: NamedResource


class PokemonAbility(TypedDict):
    is_hidden: bool
    slot: int
    ability: NamedResource


class PokemonStat(TypedDict):
    base_stat: int
    effort: int
    stat: NamedResource


class Pokemon(TypedDict, total=False):
    """
    A `pokemon` record, one concrete variant of a species.

    Height is in decimetres and weight in hectograms.
    """

    id: int
    name: str
    is_default: bool
    types: List[PokemonType]
    abilities: List[PokemonAbility]
    stats: List[PokemonStat]
    height: int
    weight: int
    base_experience: Optional[int]
    forms: List[NamedResource]


class PokemonForm(TypedDict, total=False):
    id: int
    name: str
    is_default: bool
    names: List[LocalizedName]


class Ability(TypedDict, total=False):
    id: int
    name: str
    names: List[LocalizedName]
    effect_entries: List[LocalizedEffect]


class GrowthRateLevel(TypedDict):
    level: int
    experience: int


class GrowthRate(TypedDict, total=False):
    id: int
    name: str
    levels: List[GrowthRateLevel]


class AbilityEntry(TypedDict):
    """
    Resolved display data for one ability.

    Attributes:
        name: English display name, or the ability identifier when untranslated.
        description: English short effect, or an empty string.
    """

    name: str
    description: str


class BatchCacheStats(TypedDict):
    """
    Cache counters for the current batch window.

    Attributes:
        memory_hits: Lookups answered from the in-memory tier.
        disk_hits: Lookups answered from a persisted file.
        misses: Lookups that fell through to the remote API.
    """

    memory_hits: int
    disk_hits: int
    misses: int


class CacheStats(TypedDict):
    """
    Cumulative cache statistics for the whole run.

    Attributes:
        size: Number of entries currently held in memory (all namespaces).
        hits: Memory plus disk hits.
        misses: Lookups that resulted in API calls.
        hit_rate: Percentage string (e.g., '85.5%').
    """

    size: int
    hits: int
    misses: int
    hit_rate: str


class DeduplicationStats(TypedDict):
    """
    Represents request deduplication statistics.

    Attributes:
        pending_requests: Number of API requests currently in flight (deduplicated).
        active_locks: Number of locks currently held for request coordination.
    """

    pending_requests: int
    active_locks: int
