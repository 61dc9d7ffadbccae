"""
Actor documents.

An actor is a character owning a collection of embedded items. Every change to
an actor goes through its create / update / delete methods; a staged clone
records those changes in a ChangeBuffer so they can be replayed on the real
actor once the user confirms them.
"""

from __future__ import annotations

import copy
from typing import Any, Literal

from catchery import log_debug, log_warning
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from ..core.constants import ItemType
from ..core.dice_parser import VarInfo
from ..core.utils import apply_changes, random_id
from .changes import ActorUpdated, ChangeBuffer, ItemsCreated, ItemsDeleted, ItemUpdated
from .item import Item

ABILITIES = ("str", "dex", "con", "int", "wis", "cha")


class HitPointsData(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    value: int = Field(default=0, description="Current hit points.")
    max: int = Field(default=0, description="Maximum hit points.")
    temp: int = Field(default=0, description="Temporary hit points.")


class Attributes(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    hp: HitPointsData = Field(
        default_factory=HitPointsData,
        description="Hit points of the actor.",
    )


class Details(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    original_class: str = Field(
        default="",
        description="Id of the class item the character started with.",
    )


class ActorSystem(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="allow")

    abilities: dict[str, int] = Field(
        default_factory=lambda: {ability: 10 for ability in ABILITIES},
        description="Ability scores, keyed by ability abbreviation.",
    )
    attributes: Attributes = Field(
        default_factory=Attributes,
        description="Derived attributes such as hit points.",
    )
    details: Details = Field(
        default_factory=Details,
        description="Biographical details.",
    )


class Actor(BaseModel):
    """A character and the items it owns."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        default_factory=random_id,
        description="Unique identifier of the actor.",
    )
    name: str = Field(
        description="Display name of the actor.",
    )
    type: Literal["character", "npc"] = Field(
        default="character",
        description="Kind of actor.",
    )
    system: ActorSystem = Field(
        default_factory=ActorSystem,
        description="System data of the actor.",
    )
    items: dict[str, Item] = Field(
        default_factory=dict,
        description="Embedded items, keyed by their id.",
    )

    _changes: ChangeBuffer | None = PrivateAttr(default=None)

    @field_validator("items", mode="before")
    @classmethod
    def _items_by_id(cls, value: Any) -> Any:
        """Accepts items as a list and keys them by id."""
        if not isinstance(value, list):
            return value
        keyed: dict[str, Any] = {}
        for entry in value:
            if isinstance(entry, dict):
                entry = dict(entry)
                entry.setdefault("id", random_id())
                keyed[entry["id"]] = entry
            else:
                keyed[entry.id] = entry
        return keyed

    def model_post_init(self, _: Any) -> None:
        self._link_items()

    def _link_items(self) -> None:
        for item in self.items.values():
            item._actor = self
            item.link_advancements()

    # ---- Derived data ----

    @property
    def class_items(self) -> list[Item]:
        return [item for item in self.items.values() if item.type is ItemType.CLASS]

    @property
    def classes(self) -> dict[str, Item]:
        """Class items keyed by their identifier."""
        return {item.identifier: item for item in self.class_items}

    @property
    def level(self) -> int:
        """Character level, the sum of all class levels."""
        return sum(item.system.levels for item in self.class_items)

    @property
    def original_class(self) -> Item | None:
        """The class the character started with."""
        original = self.items.get(self.system.details.original_class)
        if original is not None and original.type is ItemType.CLASS:
            return original
        classes = self.class_items
        return classes[0] if classes else None

    @property
    def proficiency_bonus(self) -> int:
        return 2 + (max(self.level, 1) - 1) // 4

    def ability_mod(self, ability: str) -> int:
        """The modifier of an ability score."""
        return (self.system.abilities.get(ability, 10) - 10) // 2

    def archetypes_for(self, class_item: Item) -> list[Item]:
        """Archetype items belonging to a class."""
        return [
            item
            for item in self.items.values()
            if item.type is ItemType.ARCHETYPE
            and item.system.class_identifier == class_item.identifier
        ]

    @property
    def scale_values(self) -> dict[str, dict[str, str]]:
        """
        Scale values of every class and archetype at their current class level.

        Returns:
            dict[str, dict[str, str]]:
                Class (or archetype) identifier to a mapping of scale value
                identifiers to their formula.

        """
        scales: dict[str, dict[str, str]] = {}
        for class_item in self.class_items:
            level = class_item.system.levels
            for item in [class_item, *self.archetypes_for(class_item)]:
                for advancement in item.advancement.values():
                    if advancement.type != "ScaleValue":
                        continue
                    values = scales.setdefault(item.identifier, {})
                    values[advancement.identifier] = advancement.formula_for_level(level)
        return scales

    def roll_variables(self) -> list[VarInfo]:
        """Variables available to roll formulas."""
        variables = [
            VarInfo(name="LEVEL", value=self.level),
            VarInfo(name="PROF", value=self.proficiency_bonus),
        ]
        variables.extend(
            VarInfo(name=ability, value=self.ability_mod(ability)) for ability in ABILITIES
        )
        return variables

    # ---- Embedded documents ----

    def get_embedded(self, item_id: str) -> Item | None:
        return self.items.get(item_id)

    def create_embedded(
        self, data: list[dict[str, Any]], keep_id: bool = False
    ) -> list[Item]:
        """
        Creates embedded items.

        Args:
            data (list[dict[str, Any]]):
                The data of the items to create.
            keep_id (bool):
                Keep the ids found in the data instead of generating new ones.

        Returns:
            list[Item]: The created items.

        """
        created = []
        for entry in data:
            entry = copy.deepcopy(entry)
            if not keep_id or not entry.get("id"):
                entry["id"] = random_id()
            if entry["id"] in self.items:
                log_warning(
                    f"Replacing existing item '{entry['id']}' on actor '{self.name}'",
                    {"actor": self.id, "item": entry["id"]},
                )
            item = Item.model_validate(entry)
            created.append(item)
        self.items = {**self.items, **{item.id: item for item in created}}
        self._link_items()
        if self._changes is not None and created:
            self._changes.record(ItemsCreated(items=[item.snapshot() for item in created]))
        return created

    def update_embedded(self, updates: list[dict[str, Any]]) -> list[Item]:
        """
        Applies dotted-path changes to embedded items.

        Args:
            updates (list[dict[str, Any]]):
                One mapping per item, holding the item id under "_id" and the
                dotted paths to change.

        Returns:
            list[Item]: The updated items.

        """
        updated = []
        for update in updates:
            changes = dict(update)
            item_id = changes.pop("_id")
            item = self.items.get(item_id)
            if item is None:
                log_warning(
                    f"Cannot update missing item '{item_id}' on actor '{self.name}'",
                    {"actor": self.id, "item": item_id},
                )
                continue
            apply_changes(item, changes)
            updated.append(item)
            if self._changes is not None:
                self._changes.record(
                    ItemUpdated(item_id=item_id, changes=copy.deepcopy(changes))
                )
        return updated

    def delete_embedded(self, ids: list[str]) -> list[dict[str, Any]]:
        """
        Deletes embedded items.

        Args:
            ids (list[str]):
                Ids of the items to delete. Unknown ids are ignored.

        Returns:
            list[dict[str, Any]]: The full data of the deleted items.

        """
        deleted = [self.items[i].snapshot() for i in ids if i in self.items]
        if not deleted:
            return []
        removed = {entry["id"] for entry in deleted}
        for item_id in removed:
            self.items[item_id]._actor = None
        self.items = {k: v for k, v in self.items.items() if k not in removed}
        if self._changes is not None:
            self._changes.record(ItemsDeleted(ids=[entry["id"] for entry in deleted]))
        return deleted

    def update(self, changes: dict[str, Any]) -> None:
        """Applies dotted-path changes to the actor itself."""
        apply_changes(self, changes)
        if self._changes is not None:
            self._changes.record(ActorUpdated(changes=copy.deepcopy(changes)))

    # ---- Staging ----

    @property
    def changes(self) -> ChangeBuffer | None:
        """The changes recorded since this actor was cloned, if staged."""
        return self._changes

    def clone(self, staged: bool = True) -> Actor:
        """
        Creates a detached deep copy of the actor.

        Args:
            staged (bool):
                Record every change made to the copy in a new ChangeBuffer.

        Returns:
            Actor: The copy.

        """
        clone = Actor.model_validate(self.snapshot())
        if staged:
            clone._changes = ChangeBuffer()
        return clone

    def adopt(self, other: Actor) -> None:
        """Takes over the data of another actor, keeping this object's identity."""
        self.system = ActorSystem.model_validate(other.system.model_dump(mode="json"))
        self.items = {k: Item.model_validate(v.snapshot()) for k, v in other.items.items()}
        self._link_items()
        log_debug(f"Actor '{self.name}' updated", {"actor": self.id, "items": len(self.items)})

    def snapshot(self) -> dict[str, Any]:
        """Returns the actor's data as plain JSON types."""
        return self.model_dump(mode="json")
