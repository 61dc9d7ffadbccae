"""
Tests for the hit points advancement.
"""

import pytest
from factories import CLASS_ID, hit_points_for, make_actor

from advancement_engine.advancement.hit_points import HitPointRoll, HitPointsAdvancement
from advancement_engine.core.constants import HitPointMode
from advancement_engine.core.error_handling import AdvancementError, ValidationError
from advancement_engine.core.host import configure_host


@pytest.fixture
def hit_points(guardian):
    return guardian.get_embedded(CLASS_ID).get_advancement("hitPoints0000001")


def hp(actor):
    return actor.system.attributes.hp


def test_levels_and_configuration(hit_points):
    assert hit_points.levels[0] == 1
    assert hit_points.levels[-1] == 20
    assert hit_points.configured_for_level(3)
    assert not hit_points.configured_for_level(4)


def test_hit_die(hit_points):
    assert hit_points.hit_die == "d10"
    assert hit_points.hit_die_faces == 10
    assert hit_points.average() == 6


def test_average_adds_constitution(guardian, hit_points):
    """Taking the average records the roll and raises the maximum."""
    hit_points.apply(4, {"mode": "avg"})

    roll = hit_points.roll_for_level(4)
    assert roll == HitPointRoll(level=4, mode=HitPointMode.AVG, result=6, bonus=2)
    assert hp(guardian).max == hit_points_for(4)
    assert hp(guardian).value == hit_points_for(4)


def test_roll_uses_host_evaluator(guardian, hit_points, mocker):
    evaluate = mocker.Mock(return_value=3)
    configure_host(evaluate_roll=evaluate)

    hit_points.apply(4, {"mode": "roll"})

    assert evaluate.call_args.args[0] == "1d10"
    assert hit_points.roll_for_level(4).result == 3
    assert hp(guardian).max == hit_points_for(3) + 5


def test_roll_from_form_value(hit_points):
    hit_points.apply(4, {"mode": "roll", "value": 9})
    assert hit_points.roll_for_level(4).total == 11


def test_roll_value_outside_die_is_rejected(guardian, hit_points):
    before = guardian.snapshot()
    with pytest.raises(ValidationError):
        hit_points.apply(4, {"mode": "roll", "value": 11})
    assert guardian.snapshot() == before


def test_max_only_at_first_level(guardian, hit_points):
    with pytest.raises(ValidationError):
        hit_points.apply(4, {"mode": "max"})
    with pytest.raises(ValidationError):
        hit_points.apply(4, {"mode": "fudge"})
    assert not hit_points.configured_for_level(4)


def test_first_level_always_takes_max(store):
    actor = make_actor(
        {
            "id": "guardianClass001",
            "name": "Guardian",
            "type": "class",
            "system": {"identifier": "guardian", "levels": 1, "hit_dice": "d10"},
            "advancement": [{"id": "hp", "type": "HitPoints"}],
        },
        hp=0,
    )
    hit_points = actor.get_embedded("guardianClass001").get_advancement("hp")

    hit_points.apply(1, {"mode": "avg"})

    assert hit_points.roll_for_level(1).mode is HitPointMode.MAX
    assert hp(actor).max == 12


def test_minimum_of_one_hit_point(store):
    """A negative constitution modifier never reduces the gain below one."""
    actor = make_actor(con=3)
    hit_points = actor.get_embedded(CLASS_ID).get_advancement("hitPoints0000001")
    before = hp(actor).max

    hit_points.apply(4, {"mode": "roll", "value": 1})

    assert hit_points.roll_for_level(4).bonus == -4
    assert hp(actor).max == before + 1


def test_apply_twice_is_ignored(guardian, hit_points):
    hit_points.apply(4, {"mode": "avg"})
    hit_points.apply(4, {"mode": "roll", "value": 1})
    assert [r.level for r in hit_points.value.rolls] == [1, 2, 3, 4]
    assert hp(guardian).max == hit_points_for(4)


def test_reverse_then_restore(guardian, hit_points):
    """Reversing returns the roll, restoring it brings the same state back."""
    hit_points.apply(4, {"mode": "roll", "value": 8})
    applied = guardian.snapshot()

    removed = hit_points.reverse(4)

    assert removed == {
        "level": 4,
        "mode": "roll",
        "result": 8,
        "bonus": 2,
        "value_change": -10,
    }
    assert hp(guardian).max == hit_points_for(3)
    assert not hit_points.configured_for_level(4)

    hit_points.restore(4, removed)
    assert guardian.snapshot() == applied


def test_reverse_unconfigured_level(hit_points):
    assert hit_points.reverse(7) is None


def test_summary(hit_points):
    assert hit_points.summary_for_level(1) == "10 (Max)"
    assert hit_points.summary_for_level(2) == "6 (Average)"
    assert hit_points.summary_for_level(9) == ""
    assert hit_points.summary_for_level(1, config_mode=True) == ""


def test_changes_on_staged_actor_are_recorded(guardian):
    staged = guardian.clone()
    hit_points = staged.get_embedded(CLASS_ID).get_advancement("hitPoints0000001")

    hit_points.apply(4, {"mode": "avg"})

    assert len(staged.changes) == 2
    assert hp(guardian).max == hit_points_for(3)


def test_unowned_advancement_cannot_apply():
    with pytest.raises(AdvancementError):
        HitPointsAdvancement().apply(2, {"mode": "avg"})


def test_restore_after_reverse_on_damaged_character(store):
    """Current hit points come back by what reversing took, not by the full gain."""
    actor = make_actor()
    actor.update({"system.attributes.hp.value": 3})
    hit_points = actor.get_embedded(CLASS_ID).get_advancement("hitPoints0000001")
    before = actor.snapshot()

    removed = hit_points.reverse(3)
    assert hp(actor).value == 0
    assert hp(actor).max == hit_points_for(2)

    hit_points.restore(3, removed)
    assert actor.snapshot() == before


def test_reverse_takes_the_roll_of_its_level(guardian, hit_points):
    """Reversing a level removes its own roll wherever it sits in the history."""
    removed = hit_points.reverse(2)
    hit_points.restore(2, removed)
    assert [r.level for r in hit_points.value.rolls] == [1, 3, 2]

    hit_points.reverse(3)

    assert [r.level for r in hit_points.value.rolls] == [1, 2]
    assert hit_points.configured_for_level(2)
    assert not hit_points.configured_for_level(3)
    assert hp(guardian).max == hit_points_for(2)


@pytest.mark.parametrize("value", ["abc", "  ", [3]])
def test_non_numeric_roll_is_rejected(guardian, hit_points, value):
    before = guardian.snapshot()
    with pytest.raises(ValidationError):
        hit_points.apply(4, {"mode": "roll", "value": value})
    assert guardian.snapshot() == before
