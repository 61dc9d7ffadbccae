"""
Item documents.

Items are the things an actor owns: classes, archetypes, features, powers and
equipment. Any item can carry advancements, keyed by their id.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from ..advancement import Advancement, AdvancementVariant
from ..core.constants import FLAG_SCOPE, ItemType
from ..core.utils import random_id, slugify


class FeatureType(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    value: str = Field(
        default="",
        description="Feature category, e.g. 'class' or 'species'.",
    )
    subtype: str = Field(
        default="",
        description="Feature subtype within the category, e.g. 'fightingStyle'.",
    )


class ItemSystem(BaseModel):
    """
    System data of an item. Only the fields the advancement engine reads are
    declared, anything else is kept as-is.
    """

    model_config = ConfigDict(validate_assignment=True, extra="allow")

    identifier: str = Field(
        default="",
        description="Identifier used to link archetypes and scale values to a class.",
    )
    description: str = Field(default="", description="Rules text of the item.")
    source: str = Field(default="", description="Book the item comes from.")
    levels: int = Field(
        default=1,
        ge=0,
        description="Number of levels in a class item.",
    )
    hit_dice: str = Field(
        default="d8",
        description="Hit die of a class item.",
    )
    hit_dice_used: int = Field(
        default=0,
        ge=0,
        description="Hit dice of a class item already spent.",
    )
    class_identifier: str = Field(
        default="",
        description="Identifier of the class an archetype belongs to.",
    )
    type: FeatureType = Field(
        default_factory=FeatureType,
        description="Feature type and subtype of a feat item.",
    )
    level: int = Field(
        default=0,
        ge=0,
        description="Level of a power item.",
    )
    quantity: int = Field(default=1, ge=0, description="Number of items in a stack.")


class Item(BaseModel):
    """An item, either standalone or embedded in an actor."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        default_factory=random_id,
        description="Unique identifier of the item.",
    )
    name: str = Field(
        description="Display name of the item.",
    )
    type: ItemType = Field(
        description="Kind of item.",
    )
    img: str = Field(
        default="",
        description="Path to the item image.",
    )
    system: ItemSystem = Field(
        default_factory=ItemSystem,
        description="System data of the item.",
    )
    advancement: dict[str, AdvancementVariant] = Field(
        default_factory=dict,
        description="Advancements stored on the item, keyed by their id.",
    )
    flags: dict[str, Any] = Field(
        default_factory=dict,
        description="Module flags, grouped by scope.",
    )

    _actor: Any = PrivateAttr(default=None)

    @field_validator("advancement", mode="before")
    @classmethod
    def _advancement_by_id(cls, value: Any) -> Any:
        """Accepts advancements as a list and keys them by id."""
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
        self.link_advancements()

    def link_advancements(self) -> None:
        """Points every advancement back to this item."""
        for advancement in self.advancement.values():
            advancement._item = self

    # ---- Ownership ----

    @property
    def actor(self) -> Any:
        """The actor this item is embedded in, if any."""
        return self._actor

    @property
    def uuid(self) -> str:
        if self._actor is not None:
            return f"Actor.{self._actor.id}.Item.{self.id}"
        return f"Item.{self.id}"

    # ---- Identity ----

    @property
    def identifier(self) -> str:
        return self.system.identifier or slugify(self.name)

    @property
    def source_id(self) -> str | None:
        """UUID of the document this item was created from."""
        return self.flags.get(FLAG_SCOPE, {}).get("sourceId")

    @property
    def advancement_origin(self) -> str | None:
        """The "itemId.advancementId" of the advancement that granted this item."""
        return self.flags.get(FLAG_SCOPE, {}).get("advancementOrigin")

    # ---- Advancements ----

    def get_advancement(self, advancement_id: str) -> Advancement | None:
        return self.advancement.get(advancement_id)

    def advancement_for_level(self, level: int) -> list[Advancement]:
        """
        The advancements that apply at a level, in processing order.

        Args:
            level (int):
                The level to look up.

        Returns:
            list[Advancement]:
                Advancements sorted by type order, then by id.

        """
        found = [a for a in self.advancement.values() if level in a.levels]
        return sorted(found, key=lambda a: (a.ORDER, a.id))

    def add_advancement(self, advancement: Advancement) -> Advancement:
        """Stores a new advancement on the item."""
        self.advancement = {**self.advancement, advancement.id: advancement}
        self.link_advancements()
        return self.advancement[advancement.id]

    def remove_advancement(self, advancement_id: str) -> Advancement | None:
        """Removes an advancement, which is no longer usable afterwards."""
        removed = self.advancement.get(advancement_id)
        if removed is None:
            return None
        self.advancement = {
            k: v for k, v in self.advancement.items() if k != advancement_id
        }
        removed._item = None
        self.link_advancements()
        return removed

    # ---- Serialization ----

    def snapshot(self) -> dict[str, Any]:
        """Returns the item's data as plain JSON types."""
        return self.model_dump(mode="json")

    def colored_name(self) -> str:
        return self.type.colorize(self.name)
