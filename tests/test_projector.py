import pytest

from catalog.projector import (
    build_row,
    category_for,
    gender_split,
    project_rows,
    resolve_display,
    stat_values,
    variant_display_name,
)
from catalog.resolver import CatalogTables
from conftest import SPRITES, make_form, make_pokemon, make_species


def row_for(species, variant, abilities, forms=None, growth_rates=None):
    return build_row(
        species,
        variant,
        forms or [],
        abilities,
        growth_rates or {"medium-slow": 1059860},
        SPRITES,
    )


class TestCategory:
    def test_precedence(self):
        assert category_for({"is_baby": True, "is_legendary": True}) == "Baby"
        assert category_for({"is_legendary": True, "is_mythical": True}) == "Legendary"
        assert category_for({"is_mythical": True}) == "Mythical"
        assert category_for({}) == "Ordinary"


class TestGender:
    @pytest.mark.parametrize("rate", range(0, 9))
    def test_percentages_sum_to_100(self, rate):
        male, female, genderless = gender_split(rate)
        assert female == rate / 8 * 100
        assert male + female == 100
        assert genderless is False

    def test_genderless(self):
        assert gender_split(-1) == (None, None, True)


class TestResolveDisplay:
    def test_table_hit(self, ability_table):
        assert resolve_display(ability_table, "overgrow") == "Overgrow"
        assert (
            resolve_display(ability_table, "overgrow", "description")
            == "Powers up Grass moves in a pinch."
        )

    def test_falls_back_to_identifier(self, ability_table):
        assert resolve_display(ability_table, "stench") == "stench"
        assert resolve_display(ability_table, "stench", "description") == "stench"

    def test_no_identifier_is_empty(self, ability_table):
        assert resolve_display(ability_table, None) == ""


class TestBuildRow:
    def test_bulbasaur(self, bulbasaur_species, bulbasaur, ability_table):
        forms = [make_form("bulbasaur", "")]
        row = row_for(bulbasaur_species, bulbasaur, ability_table, forms)

        assert row.dex_id == 1
        assert row.species_slug == "bulbasaur"
        assert row.slug == "bulbasaur"
        assert row.species == "Bulbasaur"
        assert row.variant == "Bulbasaur"
        assert row.is_default is True
        assert row.genera == "Seed Pokémon"
        assert row.generation == 1
        assert row.category == "Ordinary"
        assert (row.type1, row.type2) == ("Grass", "Poison")
        assert (row.height, row.weight) == (0.7, 6.9)
        assert row.ability1 == "Overgrow"
        assert row.ability2 == "Chlorophyll"
        assert row.ability_hidden == "Chlorophyll"
        assert row.ability_hidden_description == "Doubles Speed in sunshine."
        assert (row.hp, row.attack, row.defense) == (45, 49, 49)
        assert (row.special_attack, row.special_defense, row.speed) == (65, 65, 45)
        assert row.ev_special_attack == 1
        assert row.ev_hp == 0
        assert row.gender_female == 12.5
        assert row.gender_male == 87.5
        assert row.genderless is False
        assert row.total_exp == 1059860
        assert row.growth_rate == "Medium Slow"
        assert (row.egg_group1, row.egg_group2) == ("Monster", "Plant")
        assert (row.color, row.shape) == ("Green", "Quadruped")
        assert (row.catch_rate, row.base_happiness, row.egg_cycles) == (45, 50, 20)
        assert row.base_exp == 64
        assert row.image_url == f"{SPRITES}/sprite_0001_s0.webp"

    def test_units_divide_by_ten_exactly(self, bulbasaur_species, ability_table):
        variant = make_pokemon("bulbasaur", height=3, weight=1)
        row = row_for(bulbasaur_species, variant, ability_table)
        assert row.height == 3 / 10
        assert row.weight == 1 / 10

    def test_hidden_ability_regardless_of_position(self, bulbasaur_species, ability_table):
        variant = make_pokemon(
            "bulbasaur", abilities=(("chlorophyll", True), ("overgrow", False))
        )
        row = row_for(bulbasaur_species, variant, ability_table)

        # Positional slots, even though the first entry is the hidden one
        assert row.ability1 == "Chlorophyll"
        assert row.ability2 == "Overgrow"
        assert row.ability_hidden == "Chlorophyll"

    def test_single_ability(self, bulbasaur_species, ability_table):
        variant = make_pokemon("bulbasaur", abilities=(("overgrow", False),))
        row = row_for(bulbasaur_species, variant, ability_table)

        assert row.ability1 == "Overgrow"
        assert row.ability2 is None
        assert row.ability_hidden is None
        assert row.ability2_description == ""
        assert row.ability_hidden_description == ""

    def test_unresolved_ability_uses_identifier(self, bulbasaur_species):
        variant = make_pokemon("bulbasaur", abilities=(("stench", False),))
        row = row_for(bulbasaur_species, variant, {})
        assert row.ability1 == "stench"
        assert row.ability1_description == "stench"

    def test_stats_looked_up_by_name(self, bulbasaur_species, bulbasaur, ability_table):
        bulbasaur["stats"].reverse()
        row = row_for(bulbasaur_species, bulbasaur, ability_table)
        assert (row.hp, row.speed, row.special_attack) == (45, 45, 65)
        assert row.ev_special_attack == 1

    def test_missing_stat_defaults_to_zero(self, bulbasaur):
        bulbasaur["stats"] = [s for s in bulbasaur["stats"] if s["stat"]["name"] != "speed"]
        assert stat_values(bulbasaur)["speed"] == (0, 0)

    def test_single_type_and_egg_group(self, ability_table):
        species = make_species(129, "magikarp", "Magikarp", ["magikarp"], egg_groups=("water2",))
        variant = make_pokemon("magikarp", types=("water",))
        row = row_for(species, variant, ability_table)

        assert (row.type1, row.type2) == ("Water", None)
        assert (row.egg_group1, row.egg_group2) == ("Water 2", None)

    def test_unknown_labels_are_none(self, bulbasaur_species, bulbasaur, ability_table):
        bulbasaur_species["color"] = {"name": "chartreuse", "url": ""}
        bulbasaur_species["shape"] = None
        bulbasaur_species["generation"] = {"name": "generation-x", "url": ""}
        bulbasaur_species["growth_rate"] = {"name": "glacial", "url": ""}
        bulbasaur["types"][0]["type"]["name"] = "stellar"

        row = row_for(bulbasaur_species, bulbasaur, ability_table)

        assert row.color is None
        assert row.shape is None
        assert row.generation is None
        assert row.growth_rate is None
        assert row.total_exp == 0
        assert row.type1 is None

    def test_genderless_species(self, bulbasaur, ability_table):
        species = make_species(81, "magnemite", "Magnemite", ["magnemite"], gender_rate=-1)
        row = row_for(species, bulbasaur, ability_table)
        assert (row.gender_male, row.gender_female, row.genderless) == (None, None, True)


class TestVariantDisplayName:
    def test_non_default_variant_uses_default_form(self):
        species = make_species(3, "venusaur", "Venusaur", ["venusaur", "venusaur-mega"])
        mega = make_pokemon("venusaur-mega", is_default=False)
        forms = [
            make_form("venusaur-mega-alt", "Alt Venusaur", is_default=False),
            make_form("venusaur-mega", "Mega Venusaur"),
        ]
        assert variant_display_name(species, mega, forms) == "Mega Venusaur"

    def test_non_default_variant_without_default_form(self):
        species = make_species(3, "venusaur", "Venusaur", ["venusaur", "venusaur-mega"])
        mega = make_pokemon("venusaur-mega", is_default=False)
        assert variant_display_name(species, mega, []) == ""

    def test_same_name_counts_as_default(self):
        species = make_species(3, "venusaur", "Venusaur", ["venusaur"])
        variant = make_pokemon("venusaur", is_default=False)
        assert variant_display_name(species, variant, []) == "Venusaur"

    def test_non_default_image_url(self, ability_table):
        species = make_species(3, "venusaur", "Venusaur", ["venusaur", "venusaur-mega"])
        mega = make_pokemon("venusaur-mega", is_default=False)
        row = row_for(species, mega, ability_table)
        assert row.image_url == f"{SPRITES}/sprite_0003_venusaur-mega_s0.webp"


class TestProjectRows:
    def test_rows_follow_species_then_variant_order(self, ability_table):
        species = [
            make_species(3, "venusaur", "Venusaur", ["venusaur", "venusaur-mega"]),
            make_species(1, "bulbasaur", "Bulbasaur", ["bulbasaur"]),
        ]
        tables = CatalogTables(
            species=species,
            species_variants={
                "venusaur": [
                    make_pokemon("venusaur"),
                    make_pokemon("venusaur-mega", is_default=False),
                ],
                "bulbasaur": [make_pokemon("bulbasaur")],
            },
            abilities=ability_table,
            growth_rates={"medium-slow": 1059860},
        )

        rows = project_rows(tables, SPRITES)

        assert [row.slug for row in rows] == ["venusaur", "venusaur-mega", "bulbasaur"]

    def test_species_without_variants_yields_no_rows(self):
        tables = CatalogTables(species=[make_species(1, "bulbasaur", "Bulbasaur", [])])
        assert project_rows(tables, SPRITES) == []
