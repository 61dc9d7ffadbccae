"""
Form for the item choice advancement.
"""

from typing import Any

from ..core.localization import format_message
from .advancement_flow import AdvancementFlow


class ItemChoiceFlow(AdvancementFlow):
    """Shows the selectable pool and collects the player's picks."""

    def get_data(self) -> dict[str, Any]:
        data = super().get_data()
        advancement = data["advancement"]
        selected = self.get_form_defaults()["selected"]
        pool = [
            {
                "uuid": uuid,
                "name": item.get("name", ""),
                "type": item.get("type", ""),
                "checked": uuid in selected,
            }
            for uuid, item in advancement.selectable_pool()
        ]
        count = advancement.choice_count(self.level)
        data.update(
            {
                "pool": pool,
                "count": count,
                "allow_drops": advancement.configuration.allow_drops,
                "item_type": advancement.configuration.type,
                "restriction": advancement.configuration.restriction,
                "choices_hint": format_message(
                    "SW5E.AdvancementItemChoiceChosen", chosen=len(selected), max=count
                ),
            }
        )
        return data

    def get_form_defaults(self) -> dict[str, Any]:
        if self.retained_data:
            return {"selected": list(self.retained_data["added"].values())}
        return {"selected": []}
