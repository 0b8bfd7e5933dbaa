import asyncio
import os
import sys
from collections import Counter

import pytest

# Add project root to python path so we can import modules
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from catalog.api_client import CatalogNotFoundError  # noqa: E402
from catalog.cache_store import CacheStore  # noqa: E402

SPRITES = "https://sprites.example/sprites"


def en(text, prop="name"):
    return {prop: text, "language": {"name": "en", "url": ""}}


def ja(text, prop="name"):
    return {prop: text, "language": {"name": "ja", "url": ""}}


def ref(name):
    return {"name": name, "url": f"https://pokeapi.example/{name}/"}


def make_species(
    id_,
    name,
    display,
    varieties,
    growth_rate="medium-slow",
    gender_rate=1,
    egg_groups=("monster", "plant"),
    is_baby=False,
    is_legendary=False,
    is_mythical=False,
):
    return {
        "id": id_,
        "name": name,
        "names": [ja(display.upper()), en(display)],
        "genera": [en("Seed Pokémon", prop="genus")],
        "varieties": [
            {"is_default": index == 0, "pokemon": ref(variety)}
            for index, variety in enumerate(varieties)
        ],
        "growth_rate": ref(growth_rate),
        "is_baby": is_baby,
        "is_legendary": is_legendary,
        "is_mythical": is_mythical,
        "capture_rate": 45,
        "base_happiness": 50,
        "hatch_counter": 20,
        "gender_rate": gender_rate,
        "color": ref("green"),
        "shape": ref("quadruped"),
        "generation": ref("generation-i"),
        "egg_groups": [ref(group) for group in egg_groups],
    }


def make_pokemon(
    name,
    types=("grass", "poison"),
    abilities=(("overgrow", False), ("chlorophyll", True)),
    stats=(45, 49, 49, 65, 65, 45),
    efforts=(0, 0, 0, 1, 0, 0),
    is_default=True,
    forms=None,
    height=7,
    weight=69,
):
    stat_names = ["hp", "attack", "defense", "special-attack", "special-defense", "speed"]
    return {
        "id": sum(map(ord, name)),
        "name": name,
        "is_default": is_default,
        "types": [{"slot": i + 1, "type": ref(t)} for i, t in enumerate(types)],
        "abilities": [
            {"is_hidden": hidden, "slot": 3 if hidden else i + 1, "ability": ref(a)}
            for i, (a, hidden) in enumerate(abilities)
        ],
        "stats": [
            {"base_stat": base, "effort": effort, "stat": ref(stat)}
            for stat, base, effort in zip(stat_names, stats, efforts)
        ],
        "height": height,
        "weight": weight,
        "base_experience": 64,
        "forms": [ref(form) for form in (forms or [name])],
    }


def make_form(name, display, is_default=True):
    return {"name": name, "is_default": is_default, "names": [en(display)] if display else []}


def make_ability(name, display, short_effect):
    return {
        "name": name,
        "names": [ja(display.upper()), en(display)],
        "effect_entries": [
            {"effect": "long text", "short_effect": short_effect, "language": ref("en")}
        ],
    }


def make_growth_rate(name, level_100_exp):
    levels = [{"level": level, "experience": level**3} for level in range(1, 100)]
    levels.append({"level": 100, "experience": level_100_exp})
    return {"name": name, "levels": levels}


class FakeCatalogClient:
    """
    In-memory stand-in for PokeAPIClient.

    Records every call in `calls` as `(method, arg)` and can delay individual
    lookups via `delays[(method, arg)] = seconds`.
    """

    def __init__(self, species, pokemon, forms, abilities, growth_rates):
        self.species = {s["name"]: s for s in species}
        self.species_order = [s["name"] for s in species]
        self.pokemon = {p["name"]: p for p in pokemon}
        self.forms = {f["name"]: f for f in forms}
        self.abilities = {a["name"]: a for a in abilities}
        self.growth_rates = {g["name"]: g for g in growth_rates}
        self.calls = Counter()
        self.delays = {}

    @property
    def total_calls(self):
        return sum(self.calls.values())

    async def _lookup(self, method, table, name):
        self.calls[(method, name)] += 1
        await asyncio.sleep(self.delays.get((method, name), 0))
        if name not in table:
            raise CatalogNotFoundError(f"{method}: {name}")
        return table[name]

    async def list_species(self, limit, offset=0):
        self.calls[("list_species", (limit, offset))] += 1
        names = self.species_order[offset : offset + limit]
        return {
            "count": len(self.species_order),
            "next": None,
            "previous": None,
            "results": [ref(name) for name in names],
        }

    async def get_species(self, name):
        return await self._lookup("get_species", self.species, name)

    async def get_pokemon(self, name):
        return await self._lookup("get_pokemon", self.pokemon, name)

    async def get_pokemon_form(self, name):
        return await self._lookup("get_pokemon_form", self.forms, name)

    async def get_ability(self, name):
        return await self._lookup("get_ability", self.abilities, name)

    async def list_growth_rates(self):
        self.calls[("list_growth_rates", None)] += 1
        return {
            "count": len(self.growth_rates),
            "next": None,
            "previous": None,
            "results": [ref(name) for name in self.growth_rates],
        }

    async def get_growth_rate(self, name):
        return await self._lookup("get_growth_rate", self.growth_rates, name)


@pytest.fixture
def bulbasaur_species():
    return make_species(1, "bulbasaur", "Bulbasaur", ["bulbasaur"])


@pytest.fixture
def bulbasaur():
    return make_pokemon("bulbasaur")


@pytest.fixture
def ability_table():
    return {
        "overgrow": {"name": "Overgrow", "description": "Powers up Grass moves in a pinch."},
        "chlorophyll": {"name": "Chlorophyll", "description": "Doubles Speed in sunshine."},
    }


@pytest.fixture
def fake_client():
    """Two grass starters sharing abilities, plus Venusaur and its Mega form."""
    species = [
        make_species(1, "bulbasaur", "Bulbasaur", ["bulbasaur"]),
        make_species(2, "ivysaur", "Ivysaur", ["ivysaur"]),
        make_species(3, "venusaur", "Venusaur", ["venusaur", "venusaur-mega"]),
    ]
    pokemon = [
        make_pokemon("bulbasaur"),
        make_pokemon("ivysaur", stats=(60, 62, 63, 80, 80, 60), efforts=(0, 0, 0, 1, 1, 0)),
        make_pokemon("venusaur", height=20, weight=1000),
        make_pokemon(
            "venusaur-mega",
            abilities=(("thick-fat", False),),
            is_default=False,
            height=24,
            weight=1555,
        ),
    ]
    forms = [
        make_form("bulbasaur", ""),
        make_form("ivysaur", ""),
        make_form("venusaur", ""),
        make_form("venusaur-mega", "Mega Venusaur"),
    ]
    abilities = [
        make_ability("overgrow", "Overgrow", "Powers up Grass moves in a pinch."),
        make_ability("chlorophyll", "Chlorophyll", "Doubles Speed in sunshine."),
        make_ability("thick-fat", "Thick Fat", "Halves damage from Fire and Ice moves."),
    ]
    growth_rates = [
        make_growth_rate("medium-slow", 1059860),
        make_growth_rate("fast", 800000),
    ]
    return FakeCatalogClient(species, pokemon, forms, abilities, growth_rates)


@pytest.fixture
def cache(tmp_path):
    return CacheStore(tmp_path / "cache")
