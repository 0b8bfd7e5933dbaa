"""
Relation resolver for the export.

Walks the PokeAPI reference graph in dependency order and returns normalized
lookup tables for the row projector:

    species list -> species -> varieties (pokemon) -> forms
                                        \\-> abilities (deduplicated)
    growth-rate list -> growth rates (level-100 experience)

Every remote lookup goes through the cache store, so a warm cache resolves the
whole catalog without a single HTTP request.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from catalog.api_client import PokeAPIClient
from catalog.api_models import (
    Ability,
    AbilityEntry,
    GrowthRate,
    NamedResourceList,
    Pokemon,
    PokemonForm,
    Species,
)
from catalog.batch import run_batched, run_batched_map
from catalog.cache_store import CacheStore
from catalog.constants import (
    ABILITY_PROGRESS_INTERVAL,
    CACHE_ABILITY,
    CACHE_GROWTH_RATE,
    CACHE_GROWTH_RATE_LIST,
    CACHE_POKEMON,
    CACHE_POKEMON_FORM,
    CACHE_SPECIES,
    CACHE_SPECIES_LIST,
    DISPLAY_LANGUAGE,
    GROWTH_RATE_PROGRESS_INTERVAL,
    MAX_LEVEL_INDEX,
    SPECIES_PROGRESS_INTERVAL,
    VARIANT_PROGRESS_INTERVAL,
)

logger = logging.getLogger("dexport.resolver")

# The growth-rate list has no query parameters; this is its cache key.
GROWTH_RATE_LIST_KEY = "all"


@dataclass
class CatalogTables:
    """
    Normalized lookup tables produced by `RelationResolver.resolve`.

    Attributes:
        species: Species records in catalog list order.
        species_variants: Species name -> pokemon records in variety order.
        variant_forms: Pokemon name -> form records in form list order.
        abilities: Ability name -> resolved display data.
        growth_rates: Growth rate name -> experience required for level 100.
    """

    species: List[Species] = field(default_factory=list)
    species_variants: Dict[str, List[Pokemon]] = field(default_factory=dict)
    variant_forms: Dict[str, List[PokemonForm]] = field(default_factory=dict)
    abilities: Dict[str, AbilityEntry] = field(default_factory=dict)
    growth_rates: Dict[str, int] = field(default_factory=dict)


def localized(
    entries: Optional[List[Dict[str, Any]]],
    fallback: str = "",
    prop: str = "name",
    language: str = DISPLAY_LANGUAGE,
) -> str:
    """
    Pick a property from the entry tagged with `language`.

    Args:
        entries: Language-tagged entries (`names`, `genera`, `effect_entries`).
        fallback: Returned when the list is missing or has no such entry.
        prop: Property to read from the matching entry.
        language: Language identifier to match.

    Returns:
        The localized text, or `fallback`.
    """
    if not entries:
        return fallback
    for entry in entries:
        if (entry.get("language") or {}).get("name") == language:
            return entry.get(prop, fallback)
    return fallback


def unique_ability_names(
    species: List[Species], species_variants: Dict[str, List[Pokemon]]
) -> List[str]:
    """Distinct ability identifiers across all variants, in first-seen order."""
    seen: Dict[str, None] = {}
    for specie in species:
        for variant in species_variants.get(specie["name"], []):
            for entry in variant.get("abilities", []):
                seen.setdefault(entry["ability"]["name"], None)
    return list(seen)


def level_100_experience(growth_rate: GrowthRate) -> int:
    """Experience at level 100 (`levels[99]`), or 0 when the table is short."""
    levels = growth_rate.get("levels") or []
    if len(levels) <= MAX_LEVEL_INDEX:
        return 0
    return levels[MAX_LEVEL_INDEX].get("experience") or 0


class RelationResolver:
    """
    Materializes every lookup table the row projector needs.

    Stages run in dependency order: species before their varieties, varieties
    before their forms and abilities. The growth-rate stage has no upstream
    dependency and runs alongside the variety chain. Any fetch failure
    propagates and aborts the whole resolution.
    """

    def __init__(
        self,
        client: PokeAPIClient,
        cache: CacheStore,
        window_size: int = 20,
        delay: float = 0.0,
        growth_rate_window_size: int = 10,
        species_limit: int = 1025,
        species_offset: int = 0,
    ):
        """
        Initialize the resolver.

        Args:
            client: Remote catalog client.
            cache: Cache placed in front of every client lookup.
            window_size: Concurrent requests per batch window.
            delay: Seconds between batch windows.
            growth_rate_window_size: Window size for growth-rate lookups.
            species_limit: Size of the species list page.
            species_offset: Offset of the species list page.
        """
        self.client = client
        self.cache = cache
        self.window_size = window_size
        self.delay = delay
        self.growth_rate_window_size = growth_rate_window_size
        self.species_limit = species_limit
        self.species_offset = species_offset

        self._fetch_species_list = cache.wrap(
            CACHE_SPECIES_LIST, self._species_page
        )
        self._fetch_species = cache.wrap(CACHE_SPECIES, client.get_species)
        self._fetch_pokemon = cache.wrap(CACHE_POKEMON, client.get_pokemon)
        self._fetch_form = cache.wrap(CACHE_POKEMON_FORM, client.get_pokemon_form)
        self._fetch_ability = cache.wrap(CACHE_ABILITY, client.get_ability)
        self._fetch_growth_rate_list = cache.wrap(
            CACHE_GROWTH_RATE_LIST, self._growth_rate_page
        )
        self._fetch_growth_rate = cache.wrap(CACHE_GROWTH_RATE, client.get_growth_rate)

    async def _species_page(self, page: Dict[str, int]) -> NamedResourceList:
        return await self.client.list_species(page["limit"], page["offset"])

    async def _growth_rate_page(self, _key: str) -> NamedResourceList:
        return await self.client.list_growth_rates()

    async def _batched(self, keys, fetch, window_size: Optional[int] = None):
        return await run_batched(
            keys,
            fetch,
            window_size=window_size or self.window_size,
            delay=self.delay,
            cache=self.cache,
        )

    async def _batched_map(self, items, mapper, window_size: Optional[int] = None):
        return await run_batched_map(
            items,
            mapper,
            window_size=window_size or self.window_size,
            delay=self.delay,
            cache=self.cache,
        )

    async def resolve(self) -> CatalogTables:
        """
        Resolve the full catalog.

        Returns:
            CatalogTables with every lookup table populated.
        """
        tables = CatalogTables()
        tables.species = await self.resolve_species()

        variant_chain = self._resolve_variant_chain(tables)
        growth_rates = self.resolve_growth_rates()
        _, tables.growth_rates = await asyncio.gather(variant_chain, growth_rates)

        return tables

    async def _resolve_variant_chain(self, tables: CatalogTables) -> None:
        tables.species_variants = await self.resolve_variants(tables.species)

        all_variants = [
            variant
            for specie in tables.species
            for variant in tables.species_variants.get(specie["name"], [])
        ]
        forms, abilities = await asyncio.gather(
            self.resolve_forms(all_variants),
            self.resolve_abilities(
                unique_ability_names(tables.species, tables.species_variants)
            ),
        )
        tables.variant_forms = forms
        tables.abilities = abilities

    async def resolve_species(self) -> List[Species]:
        """Stage 1: the species list page, then every species record."""
        logger.info("Fetching Pokémon species list...")
        species_list = await self._fetch_species_list(
            {"limit": self.species_limit, "offset": self.species_offset}
        )
        names = [entry["name"] for entry in species_list.get("results", [])]
        logger.info(f"Fetched {len(names)} species.")

        logger.info("Fetching species details in batches...")
        species = await self._batched(names, self._fetch_species)
        logger.info("Fetched all species details.")
        return species

    async def resolve_variants(self, species: List[Species]) -> Dict[str, List[Pokemon]]:
        """Stage 2: every variety of every species, species processed concurrently."""
        logger.info("Fetching variants for each species...")

        async def variants_for(index: int, specie: Species) -> List[Pokemon]:
            if index % SPECIES_PROGRESS_INTERVAL == 0:
                logger.info(f"  Processing species {index + 1} / {len(species)}")
            names = [v["pokemon"]["name"] for v in specie.get("varieties", [])]
            return await self._batched(names, self._fetch_pokemon)

        results = await asyncio.gather(
            *(variants_for(index, specie) for index, specie in enumerate(species))
        )
        logger.info("Fetched all variants.")
        return {specie["name"]: variants for specie, variants in zip(species, results)}

    async def resolve_forms(self, variants: List[Pokemon]) -> Dict[str, List[PokemonForm]]:
        """Stage 3: every form of every variant, variants processed concurrently."""
        logger.info("Fetching forms for each variant...")

        async def forms_for(index: int, variant: Pokemon) -> List[PokemonForm]:
            if index % VARIANT_PROGRESS_INTERVAL == 0:
                logger.info(f"  Processing variant {index + 1} / {len(variants)}")
            names = [form["name"] for form in variant.get("forms", [])]
            return await self._batched(names, self._fetch_form)

        results = await asyncio.gather(
            *(forms_for(index, variant) for index, variant in enumerate(variants))
        )
        logger.info("Fetched all forms.")
        return {variant["name"]: forms for variant, forms in zip(variants, results)}

    async def resolve_abilities(self, ability_names: List[str]) -> Dict[str, AbilityEntry]:
        """Stage 4: each distinct ability once, reduced to name and short effect."""
        logger.info(f"Fetching {len(ability_names)} unique abilities...")

        async def ability_entry(name: str, index: int) -> AbilityEntry:
            if index % ABILITY_PROGRESS_INTERVAL == 0:
                logger.info(f"  Processing ability {index + 1} / {len(ability_names)}")
            ability: Ability = await self._fetch_ability(name)
            return {
                "name": localized(ability.get("names"), name),
                "description": localized(
                    ability.get("effect_entries"), "", prop="short_effect"
                ),
            }

        abilities = await self._batched_map(ability_names, ability_entry)
        logger.info("Fetched all abilities.")
        return abilities

    async def resolve_growth_rates(self) -> Dict[str, int]:
        """Stage 5: every growth rate, reduced to its level-100 experience."""
        growth_rate_list = await self._fetch_growth_rate_list(GROWTH_RATE_LIST_KEY)
        names = [entry["name"] for entry in growth_rate_list.get("results", [])]
        logger.info(f"Fetching {len(names)} growth rates...")

        async def total_experience(name: str, index: int) -> int:
            if index % GROWTH_RATE_PROGRESS_INTERVAL == 0:
                logger.info(f"  Processing growth rate {index + 1} / {len(names)}")
            return level_100_experience(await self._fetch_growth_rate(name))

        growth_rates = await self._batched_map(
            names, total_experience, window_size=self.growth_rate_window_size
        )
        logger.info("Fetched all growth rates.")
        return growth_rates
