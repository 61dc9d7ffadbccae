"""
Entry point for changing the level of a class on a character.

Mirrors the level selector of a character sheet: when advancements are
enabled the change is routed through an AdvancementManager, otherwise (or
when there is nothing to advance) the class level is updated directly.
"""

from __future__ import annotations

from catchery import ensure_int_in_range, log_debug, log_warning

from ..core.config import get_config
from ..core.error_handling import ConfirmationDeclined
from ..core.host import HostServices
from ..documents.actor import Actor
from ..documents.store import DocumentStore, commit_changes
from .advancement_manager import AdvancementManager, LevelDownConfirm, ManagerState
from .confirmation_dialog import AdvancementConfirmationDialog


def _confirmed(_item: object) -> bool:
    return True


def update_class_level(
    actor: Actor, class_id: str, level: int, store: DocumentStore | None = None
) -> None:
    """Sets a class level directly, without running any advancement."""
    staged = actor.clone(staged=True)
    staged.update_embedded([{"_id": class_id, "system.levels": level}])
    commit_changes(actor, staged.changes, store or HostServices().store)


def change_class_level(
    actor: Actor,
    class_id: str,
    delta: int,
    confirm: LevelDownConfirm | None = None,
    store: DocumentStore | None = None,
) -> AdvancementManager | None:
    """
    Changes the level of a class, running its advancements when enabled.

    Args:
        actor (Actor):
            The character whose class changes.
        class_id (str):
            Id of the class item.
        delta (int):
            Levels to add (positive) or remove (negative).
        confirm (LevelDownConfirm | None):
            Asked whether advancements should be removed when levels are lost.
            Returning False keeps them and only changes the level; raising
            ConfirmationDeclined aborts the change.
        store (DocumentStore | None):
            Where the changes are committed, the host's store when None.

    Returns:
        AdvancementManager | None:
            A manager with steps waiting to be taken, or None when the level
            was changed directly or the change was aborted.

    """
    class_item = actor.get_embedded(class_id)
    if class_item is None or not delta:
        log_warning(
            f"Cannot change level of class '{class_id}' on actor '{actor.name}'",
            {"actor": actor.id, "class": class_id, "delta": delta},
        )
        return None

    current = class_item.system.levels
    target = ensure_int_in_range(
        current + delta,
        "class level",
        1,
        get_config().max_level,
        context={"actor": actor.id, "class": class_id},
    )
    if target == current:
        return None

    if get_config().disable_advancements:
        update_class_level(actor, class_id, target, store)
        return None

    if target < current:
        confirm = confirm or AdvancementConfirmationDialog.for_level_down
        try:
            remove_advancements = confirm(class_item)
        except ConfirmationDeclined:
            log_debug("Level change aborted", {"actor": actor.id, "class": class_id})
            return None
        if not remove_advancements:
            update_class_level(actor, class_id, target, store)
            return None

    manager = AdvancementManager.for_level_change(
        actor, class_id, target - current, confirm=_confirmed, store=store
    )
    if manager.state is ManagerState.BUILT and manager.has_steps:
        return manager
    manager.close()
    update_class_level(actor, class_id, target, store)
    return None
