"""
Hit points advancement.

Present on every class. Records how the hit points of each class level were
obtained (maximum of the hit die, fixed average, or a roll) and keeps the
actor's hit point maximum in sync with those records.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from catchery import log_warning
from pydantic import BaseModel, ConfigDict, Field

from ..core.config import get_config
from ..core.constants import HitPointMode
from ..core.dice_parser import get_average_roll, get_max_roll, parse_die
from ..core.error_handling import ValidationError
from ..core.host import HostServices
from ..core.localization import format_message, localize
from .base_advancement import Advancement


class HitPointRoll(BaseModel):
    """How the hit points of one class level were determined."""

    level: int = Field(
        description="Class level the roll belongs to.",
    )
    mode: HitPointMode = Field(
        description="Whether the die was maxed, averaged or rolled.",
    )
    result: int = Field(
        description="The hit die result.",
    )
    bonus: int = Field(
        default=0,
        description="Constitution modifier added to the result when applied.",
    )

    @property
    def total(self) -> int:
        """Hit points gained, never less than one."""
        return max(self.result + self.bonus, 1)


class HitPointsValue(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    rolls: list[HitPointRoll] = Field(
        default_factory=list,
        description="Hit point records, oldest first.",
    )


class HitPointsAdvancement(Advancement):
    """Advancement that records hit points gained at every class level."""

    ORDER: ClassVar[int] = 10
    TITLE_KEY: ClassVar[str] = "SW5E.AdvancementHitPointsTitle"
    HINT_KEY: ClassVar[str] = "SW5E.AdvancementHitPointsHint"

    type: Literal["HitPoints"] = "HitPoints"
    value: HitPointsValue = Field(
        default_factory=HitPointsValue,
        description="Rolls recorded for each class level.",
    )

    # ---- Levels ----

    @property
    def levels(self) -> list[int]:
        return list(range(1, get_config().max_level + 1))

    def configured_for_level(self, level: int) -> bool:
        return self.roll_for_level(level) is not None

    def roll_for_level(self, level: int) -> HitPointRoll | None:
        """The most recent record for a level, if any."""
        for roll in reversed(self.value.rolls):
            if roll.level == level:
                return roll
        return None

    # ---- Hit die ----

    @property
    def hit_die(self) -> str:
        """The hit die of the class, e.g. "d8"."""
        if self.item is None:
            return "d8"
        return self.item.system.hit_dice

    @property
    def hit_die_faces(self) -> int:
        parsed = parse_die(self.hit_die)
        return parsed[1] if parsed else 0

    def is_first_level(self, level: int) -> bool:
        """Is this the first level of the actor's original class?"""
        if level != 1:
            return False
        actor = self.actor
        if actor is None:
            return True
        original = actor.original_class
        return original is None or original.id == self.item.id

    def average(self) -> int:
        return get_average_roll(f"1{self.hit_die}")

    # ---- Display ----

    def summary_for_level(self, level: int, config_mode: bool = False) -> str:
        if config_mode:
            return ""
        roll = self.roll_for_level(level)
        if roll is None:
            return ""
        return format_message(
            "SW5E.AdvancementHitPointsSummary",
            result=roll.result,
            mode=localize(f"SW5E.AdvancementHitPointsMode{roll.mode.display_name}"),
        )

    # ---- Application ----

    def _resolve_result(self, level: int, data: dict[str, Any]) -> HitPointRoll:
        actor = self.require_actor()
        bonus = actor.ability_mod("con")
        if self.is_first_level(level):
            return HitPointRoll(
                level=level,
                mode=HitPointMode.MAX,
                result=get_max_roll(f"1{self.hit_die}"),
                bonus=bonus,
            )

        try:
            mode = HitPointMode(data.get("mode", HitPointMode.AVG))
        except ValueError as e:
            raise ValidationError(
                format_message("SW5E.AdvancementHitPointsModeInvalid", mode=data.get("mode")),
                {"mode": data.get("mode"), "level": level},
            ) from e

        if mode is HitPointMode.MAX:
            raise ValidationError(
                localize("SW5E.AdvancementHitPointsMaxInvalid"),
                {"mode": mode.value, "level": level},
            )
        if mode is HitPointMode.AVG:
            result = self.average()
        elif data.get("value") is not None:
            # The die was already rolled by the form.
            try:
                result = int(data["value"])
            except (TypeError, ValueError) as e:
                raise ValidationError(
                    format_message(
                        "SW5E.AdvancementHitPointsRollInvalid",
                        value=data["value"],
                        die=self.hit_die,
                    ),
                    {"value": data["value"], "die": self.hit_die},
                ) from e
            if not 1 <= result <= self.hit_die_faces:
                raise ValidationError(
                    format_message(
                        "SW5E.AdvancementHitPointsRollInvalid",
                        value=result,
                        die=self.hit_die,
                    ),
                    {"value": result, "die": self.hit_die},
                )
        else:
            result = HostServices().evaluate_roll(
                f"1{self.hit_die}", actor.roll_variables()
            )
        return HitPointRoll(level=level, mode=mode, result=result, bonus=bonus)

    def _adjust_hit_points(self, amount: int, current: int | None = None) -> int:
        """
        Changes the maximum hit points by amount and the current ones by
        current (defaults to amount), never dropping below zero.

        Returns:
            int: The change actually made to the current hit points.

        """
        actor = self.require_actor()
        hp = actor.system.attributes.hp
        before = hp.value
        value = max(before + (amount if current is None else current), 0)
        actor.update(
            {
                "system.attributes.hp.max": hp.max + amount,
                "system.attributes.hp.value": value,
            }
        )
        return value - before

    def apply(self, level: int, data: dict[str, Any]) -> None:
        if self.configured_for_level(level):
            log_warning(
                f"Hit points already recorded for level {level}, reverse them first",
                {"advancement": self.id, "level": level},
            )
            return
        roll = self._resolve_result(level, data or {})
        rolls = [r.model_dump(mode="json") for r in self.value.rolls]
        rolls.append(roll.model_dump(mode="json"))
        self.update_source({"value.rolls": rolls})
        self._adjust_hit_points(roll.total)

    def restore(self, level: int, data: Any) -> None:
        if not data:
            return
        roll = HitPointRoll.model_validate(data)
        rolls = [r.model_dump(mode="json") for r in self.value.rolls]
        rolls.append(roll.model_dump(mode="json"))
        self.update_source({"value.rolls": rolls})
        # Current hit points come back by what the reverse actually removed.
        lost = data.get("value_change") if isinstance(data, dict) else None
        self._adjust_hit_points(roll.total, None if lost is None else -lost)

    def reverse(self, level: int) -> dict[str, Any] | None:
        index = next(
            (
                i
                for i in range(len(self.value.rolls) - 1, -1, -1)
                if self.value.rolls[i].level == level
            ),
            None,
        )
        if index is None:
            return None
        roll = self.value.rolls[index]
        removed = roll.model_dump(mode="json")
        rolls = [r.model_dump(mode="json") for i, r in enumerate(self.value.rolls) if i != index]
        self.update_source({"value.rolls": rolls})
        removed["value_change"] = self._adjust_hit_points(-roll.total)
        return removed
