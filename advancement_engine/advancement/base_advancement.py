"""
Base class of every advancement.

An advancement is a unit of level-dependent character configuration stored on
an item (a class, an archetype, a feature granted by a class, ...). Each one
knows the levels at which it applies, how to apply itself for a level, and how
to undo that application while producing the data needed to redo it.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..core.error_handling import AdvancementError
from ..core.localization import localize
from ..core.utils import apply_changes, random_id
from .validation import GRANTABLE_TYPES, ItemRestriction, validate_item_type

if TYPE_CHECKING:
    from ..documents.actor import Actor
    from ..documents.item import Item


def level_keys_to_string(value: Any) -> Any:
    """
    Normalizes the keys of a mapping keyed by level to strings, as they are
    stored in JSON.

    Raises:
        ValueError: If a key is not a whole number.

    """
    if not isinstance(value, dict):
        return value
    keyed = {}
    for key, entry in value.items():
        text = str(key).strip()
        if not text.isdigit():
            raise ValueError(f"Level keys must be whole numbers, got '{key}'")
        keyed[str(int(text))] = entry
    return keyed


class Advancement(BaseModel):
    """
    Abstract base class for all advancements.

    Subclasses declare a literal `type` discriminator together with their own
    `configuration` and `value` models, and implement the level queries and
    the apply / reverse / restore triple.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Position of this advancement among the others of the same level.
    ORDER: ClassVar[int] = 100
    # Localization keys of the default title and of the hint.
    TITLE_KEY: ClassVar[str] = "SW5E.Advancement"
    HINT_KEY: ClassVar[str] = ""
    # Whether configured_for_level reflects data stored by apply.
    TRACKS_VALUE: ClassVar[bool] = True

    type: str = Field(
        description="Type discriminator of the advancement.",
    )
    id: str = Field(
        default_factory=random_id,
        description="Unique identifier of the advancement within its item.",
    )
    title: str = Field(
        default="",
        description="Custom title, the type's default title is used when blank.",
    )
    icon: str = Field(
        default="",
        description="Path to the icon shown for this advancement.",
    )
    class_restriction: Literal["", "primary", "secondary"] = Field(
        default="",
        description="Apply only to the original class (primary), only to "
        "multiclasses (secondary), or to both when blank.",
    )

    _item: Any = PrivateAttr(default=None)

    # ---- Ownership ----

    @property
    def item(self) -> Item | None:
        """The item on which this advancement is stored."""
        return self._item

    @property
    def actor(self) -> Actor | None:
        """The actor owning the item, if the item is embedded."""
        return self._item.actor if self._item is not None else None

    def require_actor(self) -> Actor:
        """Returns the owning actor, raising if the item is not embedded."""
        actor = self.actor
        if actor is None:
            raise AdvancementError(
                f"Advancement '{self.id}' is not owned by an actor",
                {"advancement": self.id, "type": self.type},
            )
        return actor

    # ---- Display ----

    @property
    def display_title(self) -> str:
        """The custom title, or the default title of this type."""
        return self.title or localize(self.TITLE_KEY)

    @property
    def hint(self) -> str:
        return localize(self.HINT_KEY) if self.HINT_KEY else ""

    def title_for_level(self, level: int, config_mode: bool = False) -> str:
        """
        The title to display for this advancement at a given level.

        Args:
            level (int):
                Level for which to generate the title.
            config_mode (bool):
                Is the advancement's item sheet in configuration mode?

        Returns:
            str: HTML-free title text.

        """
        return self.display_title

    def summary_for_level(self, level: int, config_mode: bool = False) -> str:
        """
        Summary text displayed in the class's levels list.

        Args:
            level (int):
                Level for which to generate the summary.
            config_mode (bool):
                Is the advancement's item sheet in configuration mode?

        Returns:
            str: Summary text, empty when nothing was applied yet.

        """
        return ""

    # ---- Levels ----

    @property
    @abstractmethod
    def levels(self) -> list[int]:
        """The levels at which this advancement applies, in ascending order."""

    @abstractmethod
    def configured_for_level(self, level: int) -> bool:
        """Has the player made any choices for this advancement at the level?"""

    def applies_to_class(self, is_original_class: bool) -> bool:
        """Checks the class restriction against the class being levelled."""
        if self.class_restriction == "primary":
            return is_original_class
        if self.class_restriction == "secondary":
            return not is_original_class
        return True

    def granted_items(self, level: int) -> list[str]:
        """Ids of the embedded items this advancement added at a level."""
        return []

    # ---- Validation ----

    def _validate_item_type(
        self,
        item: Any,
        type: str | None = None,
        restriction: ItemRestriction | None = None,
        strict: bool = True,
    ) -> bool:
        """
        Verify that the provided item can be granted by this advancement.

        Args:
            item (Any):
                The item document, or its raw data, to test.
            type (str | None):
                Type restriction on this advancement.
            restriction (ItemRestriction | None):
                Additional restrictions to apply.
            strict (bool):
                Raise an error if the item is invalid.

        Returns:
            bool: Is this item valid?

        Raises:
            ValidationError: If strict is True and the item is invalid.

        """
        return validate_item_type(
            item,
            valid_types=GRANTABLE_TYPES,
            item_type=type,
            restriction=restriction,
            strict=strict,
        )

    # ---- Application ----

    @abstractmethod
    def apply(self, level: int, data: dict[str, Any]) -> None:
        """
        Locally apply this advancement to the actor.

        Args:
            level (int):
                Level being advanced.
            data (dict[str, Any]):
                Data from the advancement form.

        """

    @abstractmethod
    def restore(self, level: int, data: Any) -> None:
        """
        Locally apply this advancement from stored data, the data returned by
        a previous call to reverse.

        Args:
            level (int):
                Level being advanced.
            data (Any):
                Data returned by reverse.

        """

    @abstractmethod
    def reverse(self, level: int) -> Any:
        """
        Locally remove this advancement's changes from the actor.

        Args:
            level (int):
                Level being removed.

        Returns:
            Any: Data that can be passed to restore to undo the reversal.

        """

    # ---- Updates ----

    def update_source(self, changes: dict[str, Any]) -> None:
        """
        Applies dotted-path changes relative to this advancement.

        When the item is embedded in an actor the changes go through the actor,
        so staged actors record them; otherwise they are applied in place.

        Args:
            changes (dict[str, Any]):
                Mapping of paths such as "value.added.3" to their new values.

        """
        if self._item is None:
            apply_changes(self, changes)
            return
        prefixed = {f"advancement.{self.id}.{path}": v for path, v in changes.items()}
        actor = self.actor
        if actor is None:
            apply_changes(self._item, prefixed)
        else:
            actor.update_embedded([{"_id": self._item.id, **prefixed}])
