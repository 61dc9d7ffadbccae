"""
Scale value advancement.

Defines a value that changes as the class levels up, such as a die size or a
number of uses. It never changes the actor: the value for a level is read
from the scale whenever it is needed.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..core.constants import ScaleValueType
from ..core.dice_parser import parse_die
from ..core.utils import slugify
from .base_advancement import Advancement, level_keys_to_string

_IDENTIFIER = re.compile(r"^[a-z0-9_-]+$", re.IGNORECASE)


def is_valid_identifier(identifier: str) -> bool:
    """Identifiers may only contain letters, numbers, dashes and underscores."""
    return bool(_IDENTIFIER.match(identifier))


class ScaleValueConfiguration(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    identifier: str = Field(
        default="",
        description="Key under which the value is exposed, derived from the title when blank.",
    )
    type: ScaleValueType = Field(
        default=ScaleValueType.STRING,
        description="Kind of value held by the scale.",
    )
    distance_units: str = Field(
        default="",
        description="Units of distance values.",
    )
    scale: dict[str, str | int | float] = Field(
        default_factory=dict,
        description="Level (as a string) to the value starting at that level.",
    )

    @field_validator("identifier")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if value and not is_valid_identifier(value):
            raise ValueError(f"Invalid scale value identifier '{value}'")
        return value

    @field_validator("scale", mode="before")
    @classmethod
    def _level_keys_to_string(cls, value: Any) -> Any:
        return level_keys_to_string(value)


class ScaleValueAdvancement(Advancement):
    """Advancement that represents a value that scales with class level."""

    ORDER: ClassVar[int] = 60
    TITLE_KEY: ClassVar[str] = "SW5E.AdvancementScaleValueTitle"
    HINT_KEY: ClassVar[str] = "SW5E.AdvancementScaleValueHint"
    TRACKS_VALUE: ClassVar[bool] = False

    type: Literal["ScaleValue"] = "ScaleValue"
    configuration: ScaleValueConfiguration = Field(
        default_factory=ScaleValueConfiguration,
        description="The identifier, kind and per-level values of the scale.",
    )

    @property
    def identifier(self) -> str:
        return self.configuration.identifier or slugify(self.display_title)

    # ---- Levels ----

    @property
    def levels(self) -> list[int]:
        return sorted(int(level) for level in self.configuration.scale)

    def configured_for_level(self, level: int) -> bool:
        return any(lvl <= level for lvl in self.levels)

    def value_for_level(self, level: int) -> str | int | float | None:
        """The value in effect at a level, the last one defined at or below it."""
        value = None
        for lvl in self.levels:
            if lvl > level:
                break
            value = self.configuration.scale[str(lvl)]
        return value

    def formula_for_level(self, level: int) -> str:
        """The value at a level formatted for use in roll formulas."""
        value = self.value_for_level(level)
        if value is None:
            return ""
        if self.configuration.type is ScaleValueType.DICE:
            if isinstance(value, str):
                parsed = parse_die(value)
                return f"{parsed[0]}d{parsed[1]}" if parsed else value
            return f"1d{value}"
        return str(value)

    def display_for_level(self, level: int) -> str:
        formula = self.formula_for_level(level)
        if formula and self.configuration.type is ScaleValueType.DISTANCE:
            return f"{formula} {self.configuration.distance_units}".strip()
        return formula

    # ---- Display ----

    def title_for_level(self, level: int, config_mode: bool = False) -> str:
        value = self.display_for_level(level)
        if config_mode or not value:
            return self.display_title
        return f"{self.display_title}: {value}"

    def summary_for_level(self, level: int, config_mode: bool = False) -> str:
        if config_mode:
            return ""
        return self.display_for_level(level)

    # ---- Application ----

    def apply(self, level: int, data: dict[str, Any]) -> None:
        """Scale values are derived from the configuration, nothing is stored."""

    def restore(self, level: int, data: Any) -> None:
        pass

    def reverse(self, level: int) -> None:
        return None
