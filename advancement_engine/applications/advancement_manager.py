"""
Advancement manager.

Walks a character through the consequences of a class level change, one
advancement at a time. Every step runs against a staged clone of the actor;
the real actor is only changed once the last step has been taken, when the
recorded changes are committed as a single batch.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from catchery import ensure_int_in_range, log_debug, log_error, log_info, log_warning

from ..advancement.base_advancement import Advancement
from ..core.config import get_config
from ..core.constants import NiceEnum, StepType
from ..core.error_handling import ConfirmationDeclined, ManagerStateError, PersistenceError
from ..core.host import HostServices
from ..documents.actor import Actor
from ..documents.item import Item
from ..documents.store import DocumentStore, commit_changes
from .advancement_flow import AdvancementFlow
from .confirmation_dialog import AdvancementConfirmationDialog
from .flow_factory import FlowFactory

# Asks whether the advancements of a class losing levels should be removed.
LevelDownConfirm = Callable[[Item], bool]


class ManagerState(NiceEnum):
    """Lifecycle of an advancement manager."""

    IDLE = "idle"
    BUILT = "built"
    STEPPING = "stepping"
    COMMITTING = "committing"
    COMPLETE = "complete"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self in (ManagerState.COMPLETE, ManagerState.CANCELLED)


@dataclass(eq=False)
class AdvancementStep:
    """One advancement to apply or reverse at one level."""

    type: StepType
    flow: AdvancementFlow
    class_item_id: str
    class_level: int
    automatic: bool = False
    children: list[AdvancementStep] = field(default_factory=list)

    @property
    def level(self) -> int:
        return self.flow.level

    @property
    def advancement(self) -> Advancement | None:
        return self.flow.advancement


class AdvancementManager:
    """
    Application for controlling the advancement workflow and displaying the
    interface.

    Attributes:
        actor (Actor):
            The real actor, only changed when the workflow completes.
        clone (Actor | None):
            Staged copy of the actor on which every step is performed.
        steps (list[AdvancementStep]):
            The steps to take, in order.
        step_index (int):
            Index of the next step to take, len(steps) once all are taken.
        state (ManagerState):
            Where the manager is in its lifecycle.

    """

    def __init__(self, actor: Actor, store: DocumentStore | None = None) -> None:
        self.actor = actor
        self.clone: Actor | None = actor.clone(staged=True)
        self.steps: list[AdvancementStep] = []
        self.step_index = 0
        self.state = ManagerState.IDLE
        self.store = store
        self.class_item_id: str | None = None
        self.start_level: int | None = None
        self.target_level: int | None = None

    # ---- Construction ----

    @classmethod
    def for_level_change(
        cls,
        actor: Actor,
        class_id: str,
        delta: int,
        confirm: LevelDownConfirm | None = None,
        store: DocumentStore | None = None,
    ) -> AdvancementManager:
        """
        Construct a manager for a change in a class's levels.

        Args:
            actor (Actor):
                Actor for whom the advancements are being performed.
            class_id (str):
                Id of the class item whose levels are changing.
            delta (int):
                Levels by which to increase or decrease the class.
            confirm (LevelDownConfirm | None):
                Asked before removing levels, the confirmation dialog when None.
            store (DocumentStore | None):
                Where the changes are committed, the host's store when None.

        Returns:
            AdvancementManager:
                The prepared manager, CANCELLED if the player declined to
                remove advancements.

        """
        manager = cls(actor, store=store)
        class_item = manager.clone.get_embedded(class_id)
        if class_item is None or not delta:
            log_warning(
                f"Nothing to advance for class '{class_id}' on actor '{actor.name}'",
                {"actor": actor.id, "class": class_id, "delta": delta},
            )
            return manager

        current = class_item.system.levels
        target = ensure_int_in_range(
            current + delta,
            "class level",
            1,
            get_config().max_level,
            context={"actor": actor.id, "class": class_id},
        )
        manager.class_item_id = class_id
        manager.start_level = current
        manager.target_level = target

        if target < current:
            confirm = confirm or AdvancementConfirmationDialog.for_level_down
            try:
                confirmed = confirm(class_item)
            except ConfirmationDeclined:
                confirmed = False
            if not confirmed:
                log_info(
                    f"Removal of advancements from '{class_item.name}' declined",
                    {"actor": actor.id, "class": class_id},
                )
                manager.cancel()
                return manager
            for level in range(current, target, -1):
                manager.steps.extend(manager._steps_for_level(class_item, level, StepType.REVERSE))
        else:
            for level in range(current + 1, target + 1):
                manager.steps.extend(manager._steps_for_level(class_item, level, StepType.FORWARD))

        manager.state = ManagerState.BUILT
        log_debug(
            f"Built {len(manager.steps)} advancement step(s) for '{class_item.name}' "
            f"{current} -> {target}",
            {"actor": actor.id, "class": class_id, "steps": len(manager.steps)},
        )
        return manager

    def _is_original_class(self, class_item: Item) -> bool:
        original = self.clone.original_class
        return original is None or original.id == class_item.id

    def _sources_for_class(self, class_item: Item) -> list[Item]:
        """The class item and its archetypes."""
        return [class_item, *self.clone.archetypes_for(class_item)]

    def _expand_granted(
        self, item: Item, advancement: Advancement, level: int, is_original: bool
    ) -> Iterator[tuple[Item, Advancement]]:
        """
        Yields an advancement followed by the advancements of the items it
        granted at that level.
        """
        yield item, advancement
        for granted_id in advancement.granted_items(level):
            granted = self.clone.get_embedded(granted_id)
            if granted is None:
                continue
            for child in granted.advancement_for_level(level):
                if child.applies_to_class(is_original):
                    yield from self._expand_granted(granted, child, level, is_original)

    def _ordered_advancements(
        self, class_item: Item, level: int, is_original: bool
    ) -> Iterator[tuple[Item, Advancement]]:
        """
        Yields the advancements of a class and its archetypes at a level in
        forward order, sorted together by type order then id.
        """
        top_level = sorted(
            (
                (source, advancement)
                for source in self._sources_for_class(class_item)
                for advancement in source.advancement_for_level(level)
                if advancement.applies_to_class(is_original)
            ),
            key=lambda pair: (pair[1].ORDER, pair[1].id),
        )
        for item, advancement in top_level:
            yield from self._expand_granted(item, advancement, level, is_original)

    def _steps_for_level(
        self, class_item: Item, level: int, step_type: StepType
    ) -> list[AdvancementStep]:
        is_original = self._is_original_class(class_item)
        pairs = list(self._ordered_advancements(class_item, level, is_original))
        if step_type is StepType.FORWARD:
            # Skip what was already chosen, scale values are always shown.
            pairs = [
                (item, adv)
                for item, adv in pairs
                if not (adv.TRACKS_VALUE and adv.configured_for_level(level))
            ]
        else:
            pairs = [
                (item, adv)
                for item, adv in reversed(pairs)
                if adv.configured_for_level(level)
            ]
        return [
            AdvancementStep(
                type=step_type,
                flow=FlowFactory.create(self.clone, item, adv, level),
                class_item_id=class_item.id,
                class_level=level,
                automatic=item.advancement_origin is not None,
            )
            for item, adv in pairs
        ]

    def _steps_for_granted_items(self, step: AdvancementStep) -> list[AdvancementStep]:
        """Forward steps for the advancements of items granted by a step."""
        advancement = step.advancement
        if advancement is None:
            return []
        is_original = self._is_original_class(self.clone.get_embedded(step.class_item_id))
        steps = []
        for granted_id in advancement.granted_items(step.level):
            granted = self.clone.get_embedded(granted_id)
            if granted is None:
                continue
            for adv in granted.advancement_for_level(step.level):
                if not adv.applies_to_class(is_original):
                    continue
                if adv.TRACKS_VALUE and adv.configured_for_level(step.level):
                    continue
                steps.append(
                    AdvancementStep(
                        type=StepType.FORWARD,
                        flow=FlowFactory.create(self.clone, granted, adv, step.level),
                        class_item_id=step.class_item_id,
                        class_level=step.class_level,
                        automatic=True,
                    )
                )
        return steps

    # ---- Navigation ----

    @property
    def current_step(self) -> AdvancementStep | None:
        """The next step to take, None once every step was taken."""
        if self.step_index < len(self.steps):
            return self.steps[self.step_index]
        return None

    @property
    def previous_step(self) -> AdvancementStep | None:
        if self.step_index > 0:
            return self.steps[self.step_index - 1]
        return None

    @property
    def has_steps(self) -> bool:
        return bool(self.steps)

    def _ensure_active(self, operation: str) -> None:
        if self.state.is_finished or self.state is ManagerState.COMMITTING:
            raise ManagerStateError(
                f"Cannot {operation} a manager that is {self.state.value}",
                {"state": self.state.value, "operation": operation},
            )
        if self.state is ManagerState.IDLE:
            raise ManagerStateError(
                f"Cannot {operation} a manager without a level change",
                {"state": self.state.value, "operation": operation},
            )

    def _set_class_level(self, class_item_id: str, level: int) -> None:
        class_item = self.clone.get_embedded(class_item_id)
        if class_item is not None and class_item.system.levels != level:
            self.clone.update_embedded([{"_id": class_item_id, "system.levels": level}])

    def _level_before(self, index: int) -> int:
        """Class level of the clone before the step at index was taken."""
        step = self.steps[index]
        if step.type is StepType.REVERSE:
            return step.class_level
        if index > 0:
            return self.steps[index - 1].class_level
        return self.start_level

    def advance(self, form_data: dict[str, Any] | None = None) -> AdvancementStep | None:
        """
        Takes the current step, committing once the last step was taken.

        Args:
            form_data (dict[str, Any] | None):
                Data submitted by the current step's form. Ignored by reverse
                steps and by steps being redone from retained data.

        Returns:
            AdvancementStep | None:
                The new current step, None once the workflow is complete.

        Raises:
            ValidationError: If the advancement rejected the form data. The
                step is not taken and can be submitted again.
            PersistenceError: If the commit failed. The manager is cancelled
                and the actor left untouched.

        """
        self._ensure_active("advance")
        step = self.current_step
        if step is None:
            self._complete()
            return None
        self.state = ManagerState.STEPPING

        if step.advancement is None:
            log_warning(
                f"Skipping step {step.flow.id}, its advancement no longer exists",
                {"step": step.flow.id},
            )
        elif step.type is StepType.FORWARD:
            self._set_class_level(step.class_item_id, step.class_level)
            restored = step.flow.retained_data is not None
            step.flow.submit(form_data)
            if not (restored and step.children):
                step.children = self._steps_for_granted_items(step)
            position = self.step_index + 1
            self.steps[position:position] = step.children
        else:
            step.flow.reverse()
            self._set_class_level(step.class_item_id, step.class_level - 1)

        self.step_index += 1
        if self.current_step is None:
            self._complete()
        return self.current_step

    def retreat(self) -> AdvancementStep:
        """
        Undoes the previous step, which becomes the current step again.

        Forward steps are reversed and keep the data needed to redo them;
        reverse steps are restored.

        Returns:
            AdvancementStep: The new current step.

        Raises:
            ManagerStateError: If there is no previous step.

        """
        self._ensure_active("retreat")
        if self.step_index == 0:
            raise ManagerStateError(
                "There is no previous step to go back to",
                {"step_index": self.step_index},
            )
        self.state = ManagerState.STEPPING
        self.step_index -= 1
        step = self.steps[self.step_index]

        if step.advancement is not None:
            if step.type is StepType.FORWARD:
                step.flow.reverse()
                self.steps = [s for s in self.steps if s not in step.children]
            else:
                step.flow.require_advancement().restore(step.level, step.flow.retained_data)
        self._set_class_level(step.class_item_id, self._level_before(self.step_index))
        return step

    # ---- Completion ----

    def _complete(self) -> None:
        self.state = ManagerState.COMMITTING
        if self.class_item_id is not None and self.target_level is not None:
            self._set_class_level(self.class_item_id, self.target_level)
        store = self.store or HostServices().store
        try:
            commit_changes(self.actor, self.clone.changes, store)
        except PersistenceError as e:
            log_error(
                f"Advancement of '{self.actor.name}' could not be saved: {e.message}",
                {"actor": self.actor.id, "steps": len(self.steps)},
            )
            self.clone = None
            self.state = ManagerState.CANCELLED
            raise
        self.clone = None
        self.state = ManagerState.COMPLETE
        log_info(
            f"Advancement of '{self.actor.name}' complete",
            {"actor": self.actor.id, "steps": len(self.steps)},
        )

    def cancel(self) -> None:
        """Drops the staged changes, leaving the actor untouched."""
        if self.state is ManagerState.COMPLETE:
            raise ManagerStateError(
                "Cannot cancel a completed advancement", {"state": self.state.value}
            )
        if self.state is ManagerState.CANCELLED:
            return
        self.clone = None
        self.state = ManagerState.CANCELLED
        log_debug(f"Advancement of '{self.actor.name}' cancelled", {"actor": self.actor.id})

    def close(self) -> None:
        """Closes the workflow, cancelling it unless it already finished."""
        if not self.state.is_finished:
            self.cancel()

    def __enter__(self) -> AdvancementManager:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"AdvancementManager({self.actor.name}, state={self.state.value}, "
            f"step={self.step_index}/{len(self.steps)})"
        )
