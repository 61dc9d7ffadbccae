"""
Item choice advancement.

Presents a pool of items and lets the player pick a set number of them at
specific levels, optionally accepting items dropped from outside the pool.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from catchery import log_warning
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.constants import ItemType
from ..core.error_handling import ValidationError
from ..core.host import HostServices
from ..core.localization import format_message, localize
from .base_advancement import Advancement, level_keys_to_string
from .item_grant import (
    GrantedItemsValue,
    grant_items,
    level_key,
    remove_granted_items,
    resolve_items,
    restore_granted_items,
)
from .validation import ItemRestriction


class ItemChoiceConfiguration(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    choices: dict[str, int] = Field(
        default_factory=dict,
        description="Level (as a string) to the number of items chosen at that level.",
    )
    pool: list[str] = Field(
        default_factory=list,
        description="UUIDs of the items offered.",
    )
    allow_drops: bool = Field(
        default=True,
        description="Can items from outside the pool be chosen?",
    )
    type: ItemType | None = Field(
        default=None,
        description="Type every chosen item must have, any grantable type when unset.",
    )
    restriction: ItemRestriction = Field(
        default_factory=ItemRestriction,
        description="Feature type and power level restrictions.",
    )

    @field_validator("choices", mode="before")
    @classmethod
    def _level_keys_to_string(cls, value: Any) -> Any:
        return level_keys_to_string(value)


class ItemChoiceAdvancement(Advancement):
    """Advancement that presents the player with a choice of multiple items."""

    ORDER: ClassVar[int] = 50
    TITLE_KEY: ClassVar[str] = "SW5E.AdvancementItemChoiceTitle"
    HINT_KEY: ClassVar[str] = "SW5E.AdvancementItemChoiceHint"

    type: Literal["ItemChoice"] = "ItemChoice"
    configuration: ItemChoiceConfiguration = Field(
        default_factory=ItemChoiceConfiguration,
        description="How many items are chosen at each level, and from what.",
    )
    value: GrantedItemsValue = Field(
        default_factory=GrantedItemsValue,
        description="Items chosen, per level.",
    )

    # ---- Levels ----

    @property
    def levels(self) -> list[int]:
        return sorted(
            int(level) for level, count in self.configuration.choices.items() if count > 0
        )

    def configured_for_level(self, level: int) -> bool:
        return level_key(level) in self.value.added

    def granted_items(self, level: int) -> list[str]:
        return list(self.value.added.get(level_key(level), {}))

    def choice_count(self, level: int) -> int:
        """Number of items chosen at a level."""
        return self.configuration.choices.get(level_key(level), 0)

    def choices_remaining(self, level: int) -> int:
        return self.choice_count(level) - len(self.granted_items(level))

    # ---- Display ----

    def title_for_level(self, level: int, config_mode: bool = False) -> str:
        if config_mode:
            return self.display_title
        return format_message(
            "SW5E.AdvancementItemChoiceTitleCount",
            title=self.display_title,
            count=self.choice_count(level),
        )

    def summary_for_level(self, level: int, config_mode: bool = False) -> str:
        if config_mode:
            return ""
        content = HostServices().content
        uuids = self.value.added.get(level_key(level), {}).values()
        return ", ".join(link for uuid in uuids if (link := content.link_for_uuid(uuid)))

    # ---- Validation ----

    def _validate_item_type(
        self,
        item: Any,
        type: str | None = None,
        restriction: ItemRestriction | None = None,
        strict: bool = True,
    ) -> bool:
        """Checks an item against the configured type and restrictions by default."""
        return super()._validate_item_type(
            item,
            type=type or self.configuration.type,
            restriction=restriction or self.configuration.restriction,
            strict=strict,
        )

    def _validate_dropped_item(self, item: Any) -> bool:
        """
        Checks that an item can be added to the pool.

        Raises:
            ValidationError: If the item does not satisfy the restrictions.

        """
        return self._validate_item_type(item, strict=True)

    def selectable_pool(self) -> list[tuple[str, dict[str, Any]]]:
        """
        The pool items that satisfy the restrictions.

        Returns:
            list[tuple[str, dict[str, Any]]]:
                Pairs of UUID and resolved data. Items that cannot be resolved
                or do not satisfy the restrictions are left out.

        """
        return [
            (uuid, data)
            for uuid, data in resolve_items(self.configuration.pool)
            if self._validate_item_type(data, strict=False)
        ]

    # ---- Configuration ----

    def add_to_pool(self, uuid: str) -> None:
        """
        Adds an item to the pool.

        Raises:
            ValidationError: If the UUID cannot be resolved or the item does
                not satisfy the restrictions.

        """
        data = HostServices().resolve(uuid)
        if data is None:
            raise ValidationError(
                format_message("SW5E.AdvancementItemNotFound", uuid=uuid), {"uuid": uuid}
            )
        self._validate_dropped_item(data)
        if uuid not in self.configuration.pool:
            self.configuration.pool = [*self.configuration.pool, uuid]

    def remove_from_pool(self, uuid: str) -> None:
        self.configuration.pool = [u for u in self.configuration.pool if u != uuid]

    def set_choices(self, level: int, count: int) -> None:
        choices = dict(self.configuration.choices)
        if count > 0:
            choices[level_key(level)] = count
        else:
            choices.pop(level_key(level), None)
        self.configuration.choices = choices

    # ---- Application ----

    def _selected(self, level: int, data: dict[str, Any]) -> list[str]:
        selected = data.get("selected") or []
        if isinstance(selected, str):
            selected = [selected]
        selected = list(selected)
        if len(set(selected)) != len(selected):
            raise ValidationError(
                localize("SW5E.AdvancementItemChoiceDuplicate"),
                {"selected": selected, "level": level},
            )
        count = self.choice_count(level)
        if len(selected) > count:
            raise ValidationError(
                format_message("SW5E.AdvancementItemChoiceTooMany", count=count),
                {"selected": selected, "count": count, "level": level},
            )
        if not self.configuration.allow_drops:
            outside = [uuid for uuid in selected if uuid not in self.configuration.pool]
            if outside:
                raise ValidationError(
                    localize("SW5E.AdvancementItemChoiceNotInPool"),
                    {"selected": outside, "level": level},
                )
        return selected

    def apply(self, level: int, data: dict[str, Any]) -> None:
        if self.configured_for_level(level):
            log_warning(
                f"Items already chosen for level {level}, reverse them first",
                {"advancement": self.id, "level": level},
            )
            return
        selected = self._selected(level, data or {})
        resolved = resolve_items(selected)
        if len(resolved) != len(selected):
            missing = [uuid for uuid in selected if uuid not in dict(resolved)]
            raise ValidationError(
                format_message("SW5E.AdvancementItemNotFound", uuid=", ".join(missing)),
                {"uuids": missing, "level": level},
            )
        # Validate every selection before creating any item.
        for _, item_data in resolved:
            self._validate_item_type(item_data, strict=True)
        grant_items(self, level, resolved)

    def restore(self, level: int, data: Any) -> None:
        restore_granted_items(self, level, data)

    def reverse(self, level: int) -> dict[str, Any] | None:
        return remove_granted_items(self, level)
