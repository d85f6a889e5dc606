"""Tests for src.gamemaster_pipeline.classification."""

import pytest

from src.gamemaster_pipeline.classification import (
    TemplateKind,
    classify_template_name,
    normalize_name,
)


class TestClassifyTemplateName:
    def test_creature(self):
        result = classify_template_name("V0149_POKEMON_DRAGONITE")
        assert result.kind is TemplateKind.CREATURE
        assert result.number == 149
        assert result.remainder == "DRAGONITE"
        assert result.raw == "V0149_POKEMON_DRAGONITE"

    def test_ability(self):
        result = classify_template_name("V0204_MOVE_DRAGON_BREATH")
        assert result.kind is TemplateKind.ABILITY
        assert result.number == 204
        assert result.remainder == "DRAGON_BREATH"

    def test_type_has_no_number(self):
        result = classify_template_name("POKEMON_TYPE_DRAGON")
        assert result.kind is TemplateKind.TYPE
        assert result.number is None
        assert result.remainder == "DRAGON"

    @pytest.mark.parametrize("name", [
        "",
        "SPAWN_V0001_POKEMON_BULBASAUR",
        "BADGE_BATTLE_ATTACK_WON",
        "V0001_FAMILY_BULBASAUR",
        "VX_POKEMON_BULBASAUR",
    ])
    def test_out_of_scope_names(self, name):
        assert classify_template_name(name) is None

    def test_underscores_stay_in_remainder(self):
        result = classify_template_name("V0250_POKEMON_HO_OH")
        assert result.remainder == "HO_OH"


class TestNormalizeName:
    @pytest.mark.parametrize("raw,expected", [
        ("Dragon Breath", "DRAGON_BREATH"),
        ("  ho-oh ", "HO_OH"),
        ('"DRAGONITE"', "DRAGONITE"),
        ("mr  mime", "MR_MIME"),
    ])
    def test_normalizes(self, raw, expected):
        assert normalize_name(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "nan"])
    def test_blank_is_none(self, raw):
        assert normalize_name(raw) is None
