"""
System configuration for the advancement engine.

Holds the rules tables the advancements consult (item type labels, feature
types and subtypes, power levels, hit dice) and the user settings that change
how level changes are processed.

The configuration is process-wide state. It is created with its defaults on
first access through `get_config()`; hosts that need different values call
`configure(...)` once at startup, before any advancement is processed. Nothing
else in the package mutates it.
"""

from typing import Any

from catchery import log_debug
from pydantic import BaseModel, Field

from .constants import MAX_LEVEL, ItemType


class FeatureTypeConfig(BaseModel):
    """A category of feature items, with its optional subtypes."""

    label: str = Field(
        description="Localization key of the feature type label.",
    )
    subtypes: dict[str, str] = Field(
        default_factory=dict,
        description="Mapping of subtype identifiers to localization keys.",
    )


def _default_feature_types() -> dict[str, FeatureTypeConfig]:
    return {
        "background": FeatureTypeConfig(label="SW5E.Feature.Background"),
        "class": FeatureTypeConfig(
            label="SW5E.Feature.Class",
            subtypes={
                "fightingStyle": "SW5E.ClassFeature.FightingStyle",
                "fightingMastery": "SW5E.ClassFeature.FightingMastery",
                "lightsaberForm": "SW5E.ClassFeature.LightsaberForm",
                "maneuver": "SW5E.ClassFeature.Maneuver",
                "modification": "SW5E.ClassFeature.Modification",
            },
        ),
        "deployment": FeatureTypeConfig(label="SW5E.Feature.Deployment"),
        "feat": FeatureTypeConfig(label="SW5E.Feature.Feat"),
        "monster": FeatureTypeConfig(label="SW5E.Feature.Monster"),
        "species": FeatureTypeConfig(label="SW5E.Feature.Species"),
    }


def _default_power_levels() -> dict[int, str]:
    levels = {0: "SW5E.PowerLevel0"}
    levels.update({level: f"SW5E.PowerLevel{level}" for level in range(1, 10)})
    return levels


def _default_item_type_labels() -> dict[str, str]:
    return {
        item_type.value: f"SW5E.ItemType{item_type.value.capitalize()}"
        for item_type in ItemType
    }


class SystemConfig(BaseModel):
    """Rules tables and settings consulted by the advancement engine."""

    max_level: int = Field(
        default=MAX_LEVEL,
        description="Highest level a character can reach.",
    )
    hit_dice: list[str] = Field(
        default_factory=lambda: ["d4", "d6", "d8", "d10", "d12", "d20"],
        description="Hit die denominations a class may use.",
    )
    item_type_labels: dict[str, str] = Field(
        default_factory=_default_item_type_labels,
        description="Localization keys of the item type labels.",
    )
    feature_types: dict[str, FeatureTypeConfig] = Field(
        default_factory=_default_feature_types,
        description="Feature categories and their subtypes.",
    )
    power_levels: dict[int, str] = Field(
        default_factory=_default_power_levels,
        description="Localization keys of the power level labels.",
    )
    disable_advancements: bool = Field(
        default=False,
        description="Change class levels without running the advancement workflow.",
    )


_config: SystemConfig | None = None


def get_config() -> SystemConfig:
    """
    Returns the process-wide configuration, creating the defaults on first use.

    Returns:
        SystemConfig: The active configuration.

    """
    global _config
    if _config is None:
        _config = SystemConfig()
    return _config


def configure(**overrides: Any) -> SystemConfig:
    """
    Replaces the process-wide configuration, starting from the defaults.

    Args:
        **overrides: Field values that differ from the defaults.

    Returns:
        SystemConfig: The new active configuration.

    """
    global _config
    _config = SystemConfig(**overrides)
    log_debug("System configuration updated", {"overrides": sorted(overrides)})
    return _config


def reset_config() -> None:
    """Drops the active configuration, the defaults are rebuilt on next access."""
    global _config
    _config = None
