"""
Tests for the scale value advancement.
"""

import pytest
from pydantic import ValidationError as ModelValidationError

from advancement_engine.advancement.scale_value import ScaleValueAdvancement, is_valid_identifier


@pytest.fixture
def die_scale():
    return ScaleValueAdvancement.model_validate(
        {
            "title": "Force-Empowered Die",
            "configuration": {"type": "dice", "scale": {2: "d4", 5: "2d6", 11: 8}},
        }
    )


@pytest.fixture
def speed_scale():
    return ScaleValueAdvancement.model_validate(
        {
            "configuration": {
                "identifier": "unarmored-movement",
                "type": "distance",
                "distance_units": "ft",
                "scale": {"2": 10, "6": 15},
            }
        }
    )


def test_levels_and_configuration(die_scale):
    assert die_scale.levels == [2, 5, 11]
    assert not die_scale.configured_for_level(1)
    assert die_scale.configured_for_level(3)


@pytest.mark.parametrize(
    "level, formula",
    [(1, ""), (2, "1d4"), (4, "1d4"), (5, "2d6"), (11, "1d8"), (20, "1d8")],
)
def test_dice_formula(die_scale, level, formula):
    assert die_scale.formula_for_level(level) == formula


def test_distance_display(speed_scale):
    assert speed_scale.value_for_level(7) == 15
    assert speed_scale.display_for_level(7) == "15 ft"
    assert speed_scale.summary_for_level(2) == "10 ft"


def test_identifier_falls_back_to_title(die_scale, speed_scale):
    assert die_scale.identifier == "force-empowered-die"
    assert speed_scale.identifier == "unarmored-movement"


def test_title_includes_value(die_scale):
    assert die_scale.title_for_level(5) == "Force-Empowered Die: 2d6"
    assert die_scale.title_for_level(1) == "Force-Empowered Die"
    assert die_scale.title_for_level(5, config_mode=True) == "Force-Empowered Die"


def test_invalid_identifier():
    assert is_valid_identifier("force_die-2")
    assert not is_valid_identifier("force die")
    with pytest.raises(ModelValidationError):
        ScaleValueAdvancement.model_validate({"configuration": {"identifier": "bad id!"}})


def test_application_changes_nothing(die_scale):
    before = die_scale.model_dump()
    die_scale.apply(5, {})
    assert die_scale.reverse(5) is None
    die_scale.restore(5, None)
    assert die_scale.model_dump() == before


@pytest.mark.parametrize("key", ["abc", "-2", "1.5", ""])
def test_scale_keys_must_be_levels(key):
    with pytest.raises(ModelValidationError):
        ScaleValueAdvancement.model_validate({"configuration": {"scale": {key: "d6"}}})


def test_scale_keys_are_normalized():
    scale = ScaleValueAdvancement.model_validate({"configuration": {"scale": {" 03 ": 5}}})
    assert scale.configuration.scale == {"3": 5}
    assert scale.levels == [3]
