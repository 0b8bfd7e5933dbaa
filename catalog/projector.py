"""
Row projection: joins the resolved catalog tables into flat export rows.

All fallback policy for missing sub-entities lives here, so the serializer only
ever sees finished values.
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from catalog.api_models import AbilityEntry, Pokemon, PokemonAbility, PokemonForm, Species
from catalog.constants import GENDER_RATE_DENOMINATOR, GENDERLESS_RATE, UNIT_DIVISOR
from catalog.labels import (
    COLOR_LABELS,
    EGG_GROUP_LABELS,
    GENERATION_NUMBERS,
    GROWTH_RATE_LABELS,
    SHAPE_LABELS,
    TYPE_LABELS,
    StatKey,
    label_for,
)
from catalog.resolver import CatalogTables, localized
from catalog.row import Row

logger = logging.getLogger("dexport.projector")


def category_for(species: Species) -> str:
    """Baby, then Legendary, then Mythical, otherwise Ordinary."""
    if species.get("is_baby"):
        return "Baby"
    if species.get("is_legendary"):
        return "Legendary"
    if species.get("is_mythical"):
        return "Mythical"
    return "Ordinary"


def gender_split(gender_rate: int) -> Tuple[Optional[float], Optional[float], bool]:
    """
    Convert a gender rate (eighths female) to percentages.

    Args:
        gender_rate: 0-8, or -1 for genderless species.

    Returns:
        Tuple of (male %, female %, genderless). Percentages are None for
        genderless species.
    """
    if gender_rate >= 0:
        female = gender_rate / GENDER_RATE_DENOMINATOR * 100
        return 100 - female, female, False
    return None, None, gender_rate == GENDERLESS_RATE


def resolve_display(
    table: Mapping[str, AbilityEntry], key: Optional[str], prop: str = "name"
) -> str:
    """
    Resolve display text for a referenced identifier.

    Precedence: the table entry's `prop`, then the raw identifier itself, then
    an empty string when there is no identifier at all.
    """
    if key is None:
        return ""
    entry = table.get(key)
    if entry is not None and entry.get(prop) is not None:
        return entry[prop]
    return key


def _ability_slots(
    abilities: List[PokemonAbility],
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    # Positional: the first two list entries, whatever their slot numbers say.
    first = abilities[0]["ability"]["name"] if len(abilities) > 0 else None
    second = abilities[1]["ability"]["name"] if len(abilities) > 1 else None
    hidden = next(
        (a["ability"]["name"] for a in abilities if a.get("is_hidden")), None
    )
    return first, second, hidden


def stat_values(variant: Pokemon) -> Dict[str, Tuple[int, int]]:
    """Map each stat identifier to (base value, effort yield); missing stats are (0, 0)."""
    by_name = {entry["stat"]["name"]: entry for entry in variant.get("stats", [])}
    values = {}
    for key in StatKey:
        entry = by_name.get(key.value, {})
        values[key.value] = (entry.get("base_stat") or 0, entry.get("effort") or 0)
    return values


def variant_display_name(
    species: Species, variant: Pokemon, forms: List[PokemonForm]
) -> str:
    """Species name for the default variant, otherwise the default form's name."""
    if variant.get("is_default") or species["name"] == variant["name"]:
        return localized(species.get("names"), "")
    default_form = next((form for form in forms if form.get("is_default")), None)
    if default_form is None:
        return ""
    return localized(default_form.get("names"), "")


def image_url(species: Species, variant: Pokemon, sprite_base_url: str) -> str:
    image_id = f"{species['id']:04d}"
    if variant.get("is_default"):
        return f"{sprite_base_url}/sprite_{image_id}_s0.webp"
    return f"{sprite_base_url}/sprite_{image_id}_{variant['name']}_s0.webp"


def _name_of(resource: Optional[Dict[str, str]]) -> Optional[str]:
    return resource.get("name") if resource else None


def _type_label(variant: Pokemon, index: int) -> Optional[str]:
    types = variant.get("types", [])
    if len(types) <= index:
        return None
    return label_for(TYPE_LABELS, types[index]["type"]["name"])


def _egg_group_label(species: Species, index: int) -> Optional[str]:
    egg_groups = species.get("egg_groups", [])
    if len(egg_groups) <= index:
        return None
    return label_for(EGG_GROUP_LABELS, egg_groups[index]["name"])


def build_row(
    species: Species,
    variant: Pokemon,
    forms: List[PokemonForm],
    abilities: Mapping[str, AbilityEntry],
    growth_rates: Mapping[str, int],
    sprite_base_url: str,
) -> Row:
    """
    Build the flat row for one (species, variant) pair.

    Args:
        species: The owning species record.
        variant: The pokemon record.
        forms: Form records of the variant.
        abilities: Ability name -> resolved display data.
        growth_rates: Growth rate name -> level-100 experience.
        sprite_base_url: Base URL of the sprite dump.

    Returns:
        Populated Row.
    """
    ability1, ability2, hidden = _ability_slots(variant.get("abilities", []))
    stats = stat_values(variant)
    gender_male, gender_female, genderless = gender_split(species["gender_rate"])
    growth_rate_name = _name_of(species.get("growth_rate"))

    return Row(
        dex_id=species["id"],
        image_url=image_url(species, variant, sprite_base_url),
        species_slug=species["name"],
        slug=variant["name"],
        species=localized(species.get("names"), ""),
        variant=variant_display_name(species, variant, forms),
        is_default=bool(variant.get("is_default", False)),
        genera=localized(species.get("genera"), "", prop="genus"),
        generation=label_for(GENERATION_NUMBERS, _name_of(species.get("generation"))),
        type1=_type_label(variant, 0),
        type2=_type_label(variant, 1),
        height=variant["height"] / UNIT_DIVISOR,
        weight=variant["weight"] / UNIT_DIVISOR,
        ability1=resolve_display(abilities, ability1) if ability1 else None,
        ability2=resolve_display(abilities, ability2) if ability2 else None,
        ability_hidden=resolve_display(abilities, hidden) if hidden else None,
        ability1_description=resolve_display(abilities, ability1, "description"),
        ability2_description=resolve_display(abilities, ability2, "description"),
        ability_hidden_description=resolve_display(abilities, hidden, "description"),
        hp=stats[StatKey.HP.value][0],
        attack=stats[StatKey.ATTACK.value][0],
        defense=stats[StatKey.DEFENSE.value][0],
        special_attack=stats[StatKey.SPECIAL_ATTACK.value][0],
        special_defense=stats[StatKey.SPECIAL_DEFENSE.value][0],
        speed=stats[StatKey.SPEED.value][0],
        ev_hp=stats[StatKey.HP.value][1],
        ev_attack=stats[StatKey.ATTACK.value][1],
        ev_defense=stats[StatKey.DEFENSE.value][1],
        ev_special_attack=stats[StatKey.SPECIAL_ATTACK.value][1],
        ev_special_defense=stats[StatKey.SPECIAL_DEFENSE.value][1],
        ev_speed=stats[StatKey.SPEED.value][1],
        catch_rate=species.get("capture_rate"),
        base_happiness=species.get("base_happiness"),
        base_exp=variant.get("base_experience"),
        total_exp=growth_rates.get(growth_rate_name, 0) if growth_rate_name else 0,
        growth_rate=label_for(GROWTH_RATE_LABELS, growth_rate_name),
        gender_male=gender_male,
        gender_female=gender_female,
        genderless=genderless,
        egg_cycles=species.get("hatch_counter"),
        egg_group1=_egg_group_label(species, 0),
        egg_group2=_egg_group_label(species, 1),
        color=label_for(COLOR_LABELS, _name_of(species.get("color"))),
        shape=label_for(SHAPE_LABELS, _name_of(species.get("shape"))),
        category=category_for(species),
    )


def project_rows(tables: CatalogTables, sprite_base_url: str) -> List[Row]:
    """
    Flatten the catalog tables into rows.

    Rows are grouped by species in catalog order, then by variant fetch order.
    """
    logger.info("Building rows for CSV export...")
    rows: List[Row] = []
    for specie in tables.species:
        variants = tables.species_variants.get(specie["name"], [])
        if variants:
            logger.debug(f"  Processing variants for species {specie['name']}")
        for variant in variants:
            rows.append(
                build_row(
                    specie,
                    variant,
                    tables.variant_forms.get(variant["name"], []),
                    tables.abilities,
                    tables.growth_rates,
                    sprite_base_url,
                )
            )
    logger.info(f"Rows built: {len(rows)}", extra={"row_count": len(rows)})
    return rows
