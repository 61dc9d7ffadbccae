"""
Form for the item grant advancement.
"""

from typing import Any

from ..advancement.item_grant import level_key
from ..core.host import HostServices
from .advancement_flow import AdvancementFlow


class ItemGrantFlow(AdvancementFlow):
    """Lists the granted items, letting the player decline optional ones."""

    def _checked(self) -> set[str] | None:
        if self.retained_data:
            return set(self.retained_data["added"].values())
        return None

    def get_data(self) -> dict[str, Any]:
        data = super().get_data()
        advancement = data["advancement"]
        content = HostServices().content
        checked = self._checked()
        items = []
        for uuid in advancement.configuration.items:
            index = content.index_from_uuid(uuid)
            if index is None:
                continue
            index["checked"] = checked is None or uuid in checked
            items.append(index)
        data.update({"optional": advancement.configuration.optional, "items": items})
        return data

    def get_form_defaults(self) -> dict[str, Any]:
        advancement = self.require_advancement()
        checked = self._checked()
        return {
            uuid: checked is None or uuid in checked
            for uuid in advancement.configuration.items
        }

    def granted(self) -> dict[str, str]:
        """Items added by this step, once submitted."""
        advancement = self.require_advancement()
        return dict(advancement.value.added.get(level_key(self.level), {}))
