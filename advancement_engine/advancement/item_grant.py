"""
Item grant advancement.

Grants a fixed list of items (features, powers, equipment) at one level. The
embedded copies remember where they came from through flags, and reversing
the advancement hands back their full data so they can be recreated with the
same ids.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Literal

from catchery import log_warning
from pydantic import BaseModel, ConfigDict, Field

from ..core.constants import FLAG_SCOPE
from ..core.error_handling import ValidationError
from ..core.host import HostServices
from ..core.localization import format_message
from ..core.utils import random_id
from .base_advancement import Advancement

if TYPE_CHECKING:
    from ..documents.actor import Actor


class GrantedItemsValue(BaseModel):
    """Items added by a granting advancement, per level."""

    model_config = ConfigDict(validate_assignment=True)

    added: dict[str, dict[str, str]] = Field(
        default_factory=dict,
        description="Level (as a string) to a mapping of embedded item ids to "
        "the UUID they were created from.",
    )


# ---- Granting helpers ----


def level_key(level: int) -> str:
    return str(level)


def prepare_granted_item(
    advancement: Advancement, uuid: str, data: dict[str, Any]
) -> dict[str, Any]:
    """
    Turns resolved source data into the data of a new embedded item.

    The copy gets a fresh id and the flags recording its source UUID and the
    advancement that created it.
    """
    data = dict(data)
    data["id"] = random_id()
    flags = dict(data.get("flags") or {})
    scope = dict(flags.get(FLAG_SCOPE) or {})
    scope["sourceId"] = uuid
    scope["advancementOrigin"] = f"{advancement.item.id}.{advancement.id}"
    flags[FLAG_SCOPE] = scope
    data["flags"] = flags
    return data


def resolve_items(uuids: list[str]) -> list[tuple[str, dict[str, Any]]]:
    """
    Resolves UUIDs to their source data, dropping those that cannot be found.

    Args:
        uuids (list[str]):
            The UUIDs to resolve.

    Returns:
        list[tuple[str, dict[str, Any]]]:
            Pairs of UUID and resolved data, in the given order.

    """
    resolved = []
    for uuid in uuids:
        data = HostServices().resolve(uuid)
        if data is None:
            log_warning(
                f"Could not resolve item '{uuid}', it will not be granted",
                {"uuid": uuid},
            )
            continue
        resolved.append((uuid, data))
    return resolved


def grant_items(
    advancement: Advancement,
    level: int,
    resolved: list[tuple[str, dict[str, Any]]],
) -> dict[str, str]:
    """
    Creates embedded copies of resolved items and records them on the
    advancement's value for the level.

    Returns:
        dict[str, str]: The new embedded ids mapped to their source UUIDs.

    """
    actor = advancement.require_actor()
    items = [prepare_granted_item(advancement, uuid, data) for uuid, data in resolved]
    added = {item["id"]: uuid for item, (uuid, _) in zip(items, resolved)}
    if items:
        actor.create_embedded(items, keep_id=True)
    advancement.update_source({f"value.added.{level_key(level)}": added})
    return added


def remove_granted_items(advancement: Advancement, level: int) -> dict[str, Any] | None:
    """
    Deletes the items an advancement added at a level.

    Returns:
        dict[str, Any] | None:
            The full data of the deleted items and the added mapping, or None
            when nothing was added at that level.

    """
    added = advancement.value.added.get(level_key(level))
    if added is None:
        return None
    actor: Actor = advancement.require_actor()
    items = [
        item.snapshot()
        for item_id in added
        if (item := actor.get_embedded(item_id)) is not None
    ]
    if items:
        actor.delete_embedded([item["id"] for item in items])
    advancement.update_source({f"value.added.-={level_key(level)}": None})
    return {"items": items, "added": dict(added)}


def restore_granted_items(advancement: Advancement, level: int, data: Any) -> None:
    """Recreates items removed by remove_granted_items, keeping their ids."""
    if not data:
        return
    actor = advancement.require_actor()
    if data["items"]:
        actor.create_embedded(data["items"], keep_id=True)
    advancement.update_source({f"value.added.{level_key(level)}": dict(data["added"])})


class ItemGrantConfiguration(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    items: list[str] = Field(
        default_factory=list,
        description="UUIDs of the items to grant.",
    )
    optional: bool = Field(
        default=False,
        description="Can the player decline some of the items?",
    )
    level: int = Field(
        default=1,
        ge=0,
        description="Level at which the items are granted.",
    )


class ItemGrantAdvancement(Advancement):
    """Advancement that automatically grants one or more items to the player."""

    ORDER: ClassVar[int] = 40
    TITLE_KEY: ClassVar[str] = "SW5E.AdvancementItemGrantTitle"
    HINT_KEY: ClassVar[str] = "SW5E.AdvancementItemGrantHint"

    type: Literal["ItemGrant"] = "ItemGrant"
    configuration: ItemGrantConfiguration = Field(
        default_factory=ItemGrantConfiguration,
        description="The items granted and the level at which they are granted.",
    )
    value: GrantedItemsValue = Field(
        default_factory=GrantedItemsValue,
        description="Items added to the actor, per level.",
    )

    # ---- Levels ----

    @property
    def levels(self) -> list[int]:
        return [self.configuration.level]

    def configured_for_level(self, level: int) -> bool:
        return level_key(level) in self.value.added

    def granted_items(self, level: int) -> list[str]:
        return list(self.value.added.get(level_key(level), {}))

    # ---- Display ----

    def summary_for_level(self, level: int, config_mode: bool = False) -> str:
        content = HostServices().content
        # Link the configured items in config mode, the granted ones otherwise.
        if config_mode:
            uuids = self.configuration.items
        else:
            uuids = list(self.value.added.get(level_key(level), {}).values())
        return ", ".join(link for uuid in uuids if (link := content.link_for_uuid(uuid)))

    # ---- Configuration ----

    def _validate_dropped_item(self, item: Any) -> bool:
        """
        Checks that an item can be added to the configuration.

        Raises:
            ValidationError: If the item type cannot be granted.

        """
        return self._validate_item_type(item, strict=True)

    def add_item(self, uuid: str) -> None:
        """
        Adds an item to the list of granted items.

        Raises:
            ValidationError: If the UUID cannot be resolved or the item type
                cannot be granted.

        """
        data = HostServices().resolve(uuid)
        if data is None:
            raise ValidationError(
                format_message("SW5E.AdvancementItemNotFound", uuid=uuid), {"uuid": uuid}
            )
        self._validate_dropped_item(data)
        if uuid in self.configuration.items:
            return
        self.configuration.items = [*self.configuration.items, uuid]

    def remove_item(self, uuid: str) -> None:
        self.configuration.items = [u for u in self.configuration.items if u != uuid]

    # ---- Application ----

    def selected_items(self, data: dict[str, Any]) -> list[str]:
        """
        The configured UUIDs selected in the form data.

        Every item is granted unless the grant is optional and the form data
        explicitly deselects some.
        """
        if not self.configuration.optional or not data:
            return list(self.configuration.items)
        return [uuid for uuid in self.configuration.items if data.get(uuid, False)]

    def apply(self, level: int, data: dict[str, Any]) -> None:
        if self.configured_for_level(level):
            log_warning(
                f"Items already granted for level {level}, reverse them first",
                {"advancement": self.id, "level": level},
            )
            return
        resolved = resolve_items(self.selected_items(data or {}))
        # Validate every item before creating any of them.
        for _, item_data in resolved:
            self._validate_item_type(item_data, strict=True)
        grant_items(self, level, resolved)

    def restore(self, level: int, data: Any) -> None:
        restore_granted_items(self, level, data)

    def reverse(self, level: int) -> dict[str, Any] | None:
        return remove_granted_items(self, level)
