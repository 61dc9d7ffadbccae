"""
Tests for the advancement manager: step ordering, navigation, completion and
cancellation.
"""

import pytest
from factories import (
    BATTLE_MEDITATION,
    CLASS_ID,
    DEFENSE,
    FORCE_JUMP,
    RIFLE,
    guardian_data,
    hit_points_for,
    make_actor,
)

from advancement_engine.applications.advancement_manager import (
    AdvancementManager,
    ManagerState,
)
from advancement_engine.core.constants import StepType
from advancement_engine.core.error_handling import (
    ConfirmationDeclined,
    ManagerStateError,
    PersistenceError,
    ValidationError,
)

# Form data answering every step of a 3 -> 6 level up.
LEVEL_UP_ANSWERS = {
    "HitPoints": {"mode": "avg"},
    "ItemGrant": {},
    "ScaleValue": {},
    "auraPower0000001": {"selected": [BATTLE_MEDITATION]},
    "styleChoice00006": {"selected": [DEFENSE]},
}


def answer_for(step):
    advancement = step.advancement
    return LEVEL_UP_ANSWERS.get(advancement.id, LEVEL_UP_ANSWERS.get(advancement.type))


def run_to_end(manager):
    while manager.current_step is not None and not manager.state.is_finished:
        step = manager.current_step
        manager.advance(answer_for(step) if step.type is StepType.FORWARD else None)


def accept(_item):
    return True


def decline(_item):
    return False


def close_prompt(_item):
    raise ConfirmationDeclined("closed")


def describe(manager):
    return [(step.advancement.id, step.level) for step in manager.steps]


@pytest.fixture
def level_up(guardian, store):
    return AdvancementManager.for_level_change(guardian, CLASS_ID, 3, store=store)


@pytest.fixture
def leveled(guardian, level_up):
    """The Guardian after completing the level up to 6."""
    run_to_end(level_up)
    return guardian


def test_level_up_steps_in_order(level_up):
    assert level_up.state is ManagerState.BUILT
    assert describe(level_up) == [
        ("hitPoints0000001", 4),
        ("grantLevel000004", 4),
        ("hitPoints0000001", 5),
        ("scaleEmpowered01", 5),
        ("hitPoints0000001", 6),
        ("styleChoice00006", 6),
    ]
    assert all(step.type is StepType.FORWARD for step in level_up.steps)
    assert not any(step.automatic for step in level_up.steps)


def test_granted_item_steps_are_inserted(guardian, level_up):
    """Items granted by a step bring their own advancements as the next steps."""
    level_up.advance({"mode": "avg"})
    level_up.advance({})

    step = level_up.current_step
    assert step.advancement.id == "auraPower0000001"
    assert step.automatic
    assert step.level == 4
    assert len(level_up.steps) == 7


def test_steps_run_on_a_staged_clone(guardian, level_up):
    before = guardian.snapshot()
    level_up.advance({"mode": "avg"})
    level_up.advance({})

    assert guardian.snapshot() == before
    clone_class = level_up.clone.get_embedded(CLASS_ID)
    assert clone_class.system.levels == 4
    assert len(level_up.clone.items) == 3


def test_complete_level_up(leveled, level_up, store):
    assert level_up.state is ManagerState.COMPLETE
    assert level_up.clone is None
    assert level_up.current_step is None

    class_item = leveled.get_embedded(CLASS_ID)
    assert class_item.system.levels == 6
    assert leveled.system.attributes.hp.max == hit_points_for(6)
    assert sorted(item.name for item in leveled.items.values()) == [
        "Battle Meditation",
        "Defense Fighting Style",
        "Force-Empowered Self",
        "Guardian",
        "Guardian Aura",
    ]
    assert leveled.scale_values["guardian"]["force-empowered"] == "1d6"
    assert len(store.history) == 1


def test_level_down_reverses_in_opposite_order(leveled, store):
    manager = AdvancementManager.for_level_change(leveled, CLASS_ID, -3, confirm=accept, store=store)

    assert describe(manager) == [
        ("styleChoice00006", 6),
        ("hitPoints0000001", 6),
        ("scaleEmpowered01", 5),
        ("hitPoints0000001", 5),
        ("auraPower0000001", 4),
        ("grantLevel000004", 4),
        ("hitPoints0000001", 4),
    ]
    assert all(step.type is StepType.REVERSE for step in manager.steps)


def test_level_up_then_down_restores_actor(guardian, store):
    """Going 3 -> 6 -> 3 gives back the original character."""
    original = guardian.snapshot()
    run_to_end(AdvancementManager.for_level_change(guardian, CLASS_ID, 3, store=store))
    assert guardian.snapshot() != original

    manager = AdvancementManager.for_level_change(guardian, CLASS_ID, -3, confirm=accept, store=store)
    run_to_end(manager)

    assert manager.state is ManagerState.COMPLETE
    assert guardian.snapshot() == original


@pytest.mark.parametrize("confirm", [decline, close_prompt])
def test_declined_level_down_is_cancelled(leveled, store, confirm):
    before = leveled.snapshot()

    manager = AdvancementManager.for_level_change(leveled, CLASS_ID, -1, confirm=confirm, store=store)

    assert manager.state is ManagerState.CANCELLED
    assert manager.steps == []
    assert leveled.snapshot() == before
    with pytest.raises(ManagerStateError):
        manager.advance()


def test_cancel_discards_staged_changes(guardian, level_up):
    before = guardian.snapshot()
    level_up.advance({"mode": "avg"})
    level_up.advance({})

    level_up.cancel()

    assert level_up.state is ManagerState.CANCELLED
    assert level_up.clone is None
    assert guardian.snapshot() == before
    level_up.cancel()
    with pytest.raises(ManagerStateError):
        level_up.retreat()


def test_context_manager_cancels_unfinished_workflow(guardian, level_up):
    before = guardian.snapshot()
    with level_up as manager:
        manager.advance({"mode": "avg"})
    assert level_up.state is ManagerState.CANCELLED
    assert guardian.snapshot() == before


def test_completed_workflow_cannot_be_cancelled(leveled, level_up):
    with pytest.raises(ManagerStateError):
        level_up.cancel()
    level_up.close()
    assert level_up.state is ManagerState.COMPLETE


def test_persistence_failure_cancels(guardian, level_up, store):
    before = guardian.snapshot()
    store.fail_next_commit()

    with pytest.raises(PersistenceError):
        run_to_end(level_up)

    assert level_up.state is ManagerState.CANCELLED
    assert level_up.clone is None
    assert guardian.snapshot() == before
    assert store.history == []


def test_rejected_form_data_keeps_step(level_up):
    level_up.advance({"mode": "avg"})
    level_up.advance({})
    step = level_up.current_step

    with pytest.raises(ValidationError):
        level_up.advance({"selected": [FORCE_JUMP]})

    assert level_up.current_step is step
    assert level_up.state is ManagerState.STEPPING
    level_up.advance({"selected": [BATTLE_MEDITATION]})
    assert level_up.previous_step is step


def test_retreat_reverses_and_redo_restores(level_up):
    """Going back removes the granted items, advancing again recreates them."""
    level_up.advance({"mode": "avg"})
    level_up.advance({})
    grant = level_up.clone.get_embedded(CLASS_ID).get_advancement("grantLevel000004")
    granted = sorted(grant.granted_items(4))
    assert len(level_up.steps) == 7

    step = level_up.retreat()

    assert step.advancement.id == "grantLevel000004"
    assert step.flow.retained_data is not None
    assert len(level_up.steps) == 6
    assert all(level_up.clone.get_embedded(i) is None for i in granted)

    level_up.advance()

    assert sorted(level_up.clone.get_embedded(i).id for i in granted) == granted
    assert level_up.current_step.advancement.id == "auraPower0000001"


def test_retreat_restores_class_level(level_up):
    level_up.advance({"mode": "avg"})
    level_up.advance({})
    level_up.advance({"selected": [BATTLE_MEDITATION]})
    level_up.advance({"mode": "avg"})
    assert level_up.clone.get_embedded(CLASS_ID).system.levels == 5

    level_up.retreat()
    assert level_up.clone.get_embedded(CLASS_ID).system.levels == 4

    for _ in range(3):
        level_up.retreat()
    assert level_up.step_index == 0
    assert level_up.clone.get_embedded(CLASS_ID).system.levels == 3
    with pytest.raises(ManagerStateError):
        level_up.retreat()


def test_retreat_over_reverse_step_restores(leveled, store):
    manager = AdvancementManager.for_level_change(leveled, CLASS_ID, -1, confirm=accept, store=store)
    clone_items = len(manager.clone.items)

    manager.advance()
    assert len(manager.clone.items) == clone_items - 1
    assert manager.clone.get_embedded(CLASS_ID).system.levels == 5

    manager.retreat()
    assert len(manager.clone.items) == clone_items
    assert manager.clone.get_embedded(CLASS_ID).system.levels == 6


def test_target_level_is_clamped(guardian, store):
    manager = AdvancementManager.for_level_change(guardian, CLASS_ID, 30, store=store)
    assert manager.target_level == 20
    assert manager.steps[-1].level == 20


@pytest.mark.parametrize("class_id, delta", [("missing", 1), (CLASS_ID, 0)])
def test_nothing_to_advance(guardian, store, class_id, delta):
    manager = AdvancementManager.for_level_change(guardian, class_id, delta, store=store)
    assert manager.state is ManagerState.IDLE
    assert not manager.has_steps
    with pytest.raises(ManagerStateError):
        manager.advance()


def test_multiclass_only_advancement_is_skipped(guardian, store):
    """Advancements restricted to multiclasses are skipped for the original class."""
    advancement = guardian.get_embedded(CLASS_ID).get_advancement("grantLevel000004")
    advancement.class_restriction = "secondary"

    manager = AdvancementManager.for_level_change(guardian, CLASS_ID, 1, store=store)

    assert describe(manager) == [("hitPoints0000001", 4)]


def test_archetype_steps_sorted_with_class_steps(store):
    """Class and archetype advancements at a level share one ordering."""
    archetype = {
        "id": "shienArchetype01",
        "name": "Shien Form",
        "type": "archetype",
        "system": {"identifier": "shien-form", "class_identifier": "guardian"},
        "advancement": [
            {
                "id": "archetypeGrant01",
                "type": "ItemGrant",
                "configuration": {"items": [RIFLE], "level": 5},
            }
        ],
    }
    actor = make_actor(guardian_data(4), archetype)

    manager = AdvancementManager.for_level_change(actor, CLASS_ID, 1, store=store)

    assert [(step.advancement.type, step.advancement.ORDER) for step in manager.steps] == [
        ("HitPoints", 10),
        ("ItemGrant", 40),
        ("ScaleValue", 60),
    ]
    assert manager.steps[1].advancement.id == "archetypeGrant01"
