"""
Form for the scale value advancement.
"""

from typing import Any

from .advancement_flow import AdvancementFlow


class ScaleValueFlow(AdvancementFlow):
    """Shows how the scale value changes at this level."""

    def get_data(self) -> dict[str, Any]:
        data = super().get_data()
        advancement = data["advancement"]
        data.update(
            {
                "identifier": advancement.identifier,
                "initial": advancement.display_for_level(self.level - 1),
                "final": advancement.display_for_level(self.level),
            }
        )
        return data
