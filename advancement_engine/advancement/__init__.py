"""
Advancement types for the advancement engine.

Every advancement is a pydantic model discriminated by its `type` field, so an
item's advancement collection round-trips through JSON as a tagged union.
"""

from typing import Annotated, Union

from pydantic import Field

from .base_advancement import Advancement
from .hit_points import HitPointRoll, HitPointsAdvancement, HitPointsValue
from .item_choice import ItemChoiceAdvancement, ItemChoiceConfiguration
from .item_grant import (
    GrantedItemsValue,
    ItemGrantAdvancement,
    ItemGrantConfiguration,
)
from .scale_value import ScaleValueAdvancement, ScaleValueConfiguration
from .validation import GRANTABLE_TYPES, ItemRestriction, validate_item_type

AdvancementVariant = Annotated[
    Union[
        HitPointsAdvancement,
        ItemGrantAdvancement,
        ItemChoiceAdvancement,
        ScaleValueAdvancement,
    ],
    Field(discriminator="type"),
]

ADVANCEMENT_TYPES: dict[str, type[Advancement]] = {
    "HitPoints": HitPointsAdvancement,
    "ItemGrant": ItemGrantAdvancement,
    "ItemChoice": ItemChoiceAdvancement,
    "ScaleValue": ScaleValueAdvancement,
}

__all__ = [
    "ADVANCEMENT_TYPES",
    "GRANTABLE_TYPES",
    "Advancement",
    "AdvancementVariant",
    "GrantedItemsValue",
    "HitPointRoll",
    "HitPointsAdvancement",
    "HitPointsValue",
    "ItemChoiceAdvancement",
    "ItemChoiceConfiguration",
    "ItemGrantAdvancement",
    "ItemGrantConfiguration",
    "ItemRestriction",
    "ScaleValueAdvancement",
    "ScaleValueConfiguration",
    "validate_item_type",
]
