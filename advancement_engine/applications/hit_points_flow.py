"""
Form for the hit points advancement.
"""

from typing import Any

from ..core.constants import HitPointMode
from .advancement_flow import AdvancementFlow


class HitPointsFlow(AdvancementFlow):
    """Lets the player take the average hit die result or roll it."""

    def get_data(self) -> dict[str, Any]:
        data = super().get_data()
        advancement = data["advancement"]
        first_level = advancement.is_first_level(self.level)
        data.update(
            {
                "hit_die": advancement.hit_die,
                "average": advancement.average(),
                "maximum": advancement.hit_die_faces,
                "is_first": first_level,
                "con_mod": self.actor.ability_mod("con"),
                "modes": [HitPointMode.MAX] if first_level else [HitPointMode.AVG, HitPointMode.ROLL],
            }
        )
        if self.retained_data:
            data["previous"] = self.retained_data
        return data

    def get_form_defaults(self) -> dict[str, Any]:
        if self.retained_data:
            return {
                "mode": self.retained_data["mode"],
                "value": self.retained_data["result"],
            }
        return {"mode": HitPointMode.AVG.value}
