"""
The flat export record.

One `Row` per (species, variant). Field order here is the column order of the
CSV, so new fields go where the CMS expects them, not at the end by default.
"""

from dataclasses import astuple, dataclass, fields
from typing import Any, Optional, Tuple


@dataclass
class Row:
    dex_id: Optional[int] = None
    image_url: Optional[str] = None
    species_slug: Optional[str] = None
    slug: Optional[str] = None
    species: Optional[str] = None
    variant: Optional[str] = None
    is_default: Optional[bool] = None
    genera: Optional[str] = None
    generation: Optional[int] = None
    type1: Optional[str] = None
    type2: Optional[str] = None
    height: Optional[float] = None  # metres
    weight: Optional[float] = None  # kilograms
    ability1: Optional[str] = None
    ability2: Optional[str] = None
    ability_hidden: Optional[str] = None
    ability1_description: Optional[str] = None
    ability2_description: Optional[str] = None
    ability_hidden_description: Optional[str] = None
    hp: Optional[int] = None
    attack: Optional[int] = None
    defense: Optional[int] = None
    special_attack: Optional[int] = None
    special_defense: Optional[int] = None
    speed: Optional[int] = None
    ev_hp: Optional[int] = None
    ev_attack: Optional[int] = None
    ev_defense: Optional[int] = None
    ev_special_attack: Optional[int] = None
    ev_special_defense: Optional[int] = None
    ev_speed: Optional[int] = None
    catch_rate: Optional[int] = None
    base_happiness: Optional[int] = None
    base_exp: Optional[int] = None
    total_exp: Optional[int] = None
    growth_rate: Optional[str] = None
    gender_male: Optional[float] = None
    gender_female: Optional[float] = None
    genderless: Optional[bool] = None
    egg_cycles: Optional[int] = None
    egg_group1: Optional[str] = None
    egg_group2: Optional[str] = None
    color: Optional[str] = None
    shape: Optional[str] = None
    category: Optional[str] = None

    def values(self) -> Tuple[Any, ...]:
        """Field values in column order."""
        return astuple(self)


ROW_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(Row))
