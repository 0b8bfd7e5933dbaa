"""
Display labels for PokeAPI enumeration identifiers.

Every table is a read-only mapping built once at import time. Lookups for an
identifier that is not listed should go through `label_for`, which returns
None instead of raising.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class StatKey(str, Enum):
    """Stat identifiers as used by the `stat.name` field of a pokemon record."""

    HP = "hp"
    ATTACK = "attack"
    DEFENSE = "defense"
    SPECIAL_ATTACK = "special-attack"
    SPECIAL_DEFENSE = "special-defense"
    SPEED = "speed"


GENERATION_NUMBERS: Mapping[str, int] = MappingProxyType(
    {
        "generation-i": 1,
        "generation-ii": 2,
        "generation-iii": 3,
        "generation-iv": 4,
        "generation-v": 5,
        "generation-vi": 6,
        "generation-vii": 7,
        "generation-viii": 8,
        "generation-ix": 9,
    }
)

TYPE_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "normal": "Normal",
        "fighting": "Fighting",
        "flying": "Flying",
        "poison": "Poison",
        "ground": "Ground",
        "rock": "Rock",
        "bug": "Bug",
        "ghost": "Ghost",
        "steel": "Steel",
        "fire": "Fire",
        "water": "Water",
        "grass": "Grass",
        "electric": "Electric",
        "psychic": "Psychic",
        "ice": "Ice",
        "dragon": "Dragon",
        "dark": "Dark",
        "fairy": "Fairy",
    }
)

EGG_GROUP_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "monster": "Monster",
        "water1": "Water 1",
        "bug": "Bug",
        "flying": "Flying",
        "ground": "Ground",
        "fairy": "Fairy",
        "plant": "Plant",
        "humanshape": "Human-Like",
        "water3": "Water 3",
        "mineral": "Mineral",
        "indeterminate": "Amorphous",
        "water2": "Water 2",
        "ditto": "Ditto",
        "dragon": "Dragon",
        "no-eggs": "Undiscovered",
    }
)

# The CMS already keys on the lowercase "fluctuating" label, keep it as is.
GROWTH_RATE_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "slow": "Slow",
        "medium": "Medium",
        "fast": "Fast",
        "medium-slow": "Medium Slow",
        "slow-then-very-fast": "Erratic",
        "fast-then-very-slow": "fluctuating",
    }
)

COLOR_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "black": "Black",
        "blue": "Blue",
        "brown": "Brown",
        "gray": "Gray",
        "green": "Green",
        "pink": "Pink",
        "purple": "Purple",
        "red": "Red",
        "white": "White",
        "yellow": "Yellow",
    }
)

SHAPE_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "ball": "Ball",
        "squiggle": "Squiggle",
        "fish": "Fish",
        "arms": "Arms",
        "blob": "Blob",
        "upright": "Upright",
        "legs": "Legs",
        "quadruped": "Quadruped",
        "wings": "Wings",
        "tentacles": "Tentacles",
        "heads": "Heads",
        "humanoid": "Humanoid",
        "bug-wings": "Bug wings",
        "armor": "Armor",
    }
)


def label_for(table: Mapping[str, object], key: Optional[str]) -> Optional[object]:
    """Look up `key` in a label table, returning None for missing or unknown keys."""
    if key is None:
        return None
    return table.get(key)
