"""
Item type validation shared by the item granting advancements.

Checks an item (a document or its raw data) against an advancement's type
restriction: base item type, feature type and subtype, and power level.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.config import get_config
from ..core.constants import ItemType
from ..core.error_handling import ValidationError
from ..core.localization import format_message, localize
from ..core.utils import get_property

# Item types that can be granted by an advancement.
GRANTABLE_TYPES: frozenset[str] = frozenset(
    t.value
    for t in (
        ItemType.FEAT,
        ItemType.POWER,
        ItemType.CONSUMABLE,
        ItemType.BACKPACK,
        ItemType.EQUIPMENT,
        ItemType.LOOT,
        ItemType.TOOL,
        ItemType.WEAPON,
    )
)


class ItemRestriction(BaseModel):
    """Additional restrictions on the items an advancement accepts."""

    model_config = ConfigDict(validate_assignment=True)

    type: str = Field(
        default="",
        description="Feature type required when the advancement is limited to features.",
    )
    subtype: str = Field(
        default="",
        description="Feature subtype required, only meaningful with a feature type.",
    )
    level: str = Field(
        default="",
        description="Power level required, blank or non-numeric for any level.",
    )

    @field_validator("level", mode="before")
    @classmethod
    def _level_to_string(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)

    @property
    def power_level(self) -> int | None:
        """The required power level, or None when any level is accepted."""
        try:
            return int(self.level)
        except ValueError:
            return None


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def item_type_label(item_type: str) -> str:
    """Returns the localized label of an item type."""
    key = get_config().item_type_labels.get(item_type)
    return localize(key) if key else item_type


def _fail(strict: bool, key: str, **data: Any) -> bool:
    if strict:
        raise ValidationError(format_message(key, **data), data)
    return False


def validate_item_type(
    item: Any,
    *,
    valid_types: frozenset[str] | None = None,
    item_type: str | None = None,
    restriction: ItemRestriction | None = None,
    strict: bool = True,
) -> bool:
    """
    Verify that the provided item can be used by an advancement.

    Args:
        item (Any):
            The item document, or its raw data, to test.
        valid_types (frozenset[str] | None):
            Item types the advancement can grant at all.
        item_type (str | None):
            Type restriction on the advancement.
        restriction (ItemRestriction | None):
            Additional feature and power level restrictions.
        strict (bool):
            Raise instead of returning False when the item is invalid.

    Returns:
        bool: Is this item valid?

    Raises:
        ValidationError: If the item is invalid and strict is True.

    """
    actual_type = _plain(get_property(item, "type", ""))
    item_type = _plain(item_type) or None
    restriction = restriction or ItemRestriction()

    if valid_types is not None and actual_type not in valid_types:
        return _fail(
            strict,
            "SW5E.AdvancementItemTypeInvalidWarning",
            type=item_type_label(actual_type),
        )

    # Type restriction is set and the item type does not match the selected type
    if item_type and item_type != actual_type:
        return _fail(
            strict,
            "SW5E.AdvancementItemChoiceTypeWarning",
            type=item_type_label(item_type),
        )

    # If additional feature restrictions are applied, make sure they are valid
    if item_type == ItemType.FEAT.value and restriction.type:
        type_config = get_config().feature_types.get(restriction.type)
        subtype_key = type_config.subtypes.get(restriction.subtype) if type_config else None
        error_label = None
        if restriction.type != get_property(item, "system.type.value", ""):
            error_label = localize(type_config.label) if type_config else restriction.type
        elif subtype_key and restriction.subtype != get_property(
            item, "system.type.subtype", ""
        ):
            error_label = localize(subtype_key)
        if error_label:
            return _fail(
                strict, "SW5E.AdvancementItemChoiceTypeWarning", type=error_label
            )

    # If power level is restricted, ensure the power is of the appropriate level
    power_level = restriction.power_level
    if (
        item_type == ItemType.POWER.value
        and power_level is not None
        and get_property(item, "system.level", 0) != power_level
    ):
        level_key = get_config().power_levels.get(power_level)
        return _fail(
            strict,
            "SW5E.AdvancementItemChoicePowerLevelSpecificWarning",
            level=localize(level_key) if level_key else power_level,
        )

    return True
