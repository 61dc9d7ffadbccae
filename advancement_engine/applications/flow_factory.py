"""
Factory module creating the form matching an advancement type.
"""

from typing import TYPE_CHECKING, Any

from .advancement_flow import AdvancementFlow
from .hit_points_flow import HitPointsFlow
from .item_choice_flow import ItemChoiceFlow
from .item_grant_flow import ItemGrantFlow
from .scale_value_flow import ScaleValueFlow

if TYPE_CHECKING:
    from ..advancement.base_advancement import Advancement
    from ..documents.actor import Actor
    from ..documents.item import Item


class FlowFactory:
    """Factory class for creating AdvancementFlow instances."""

    FLOWS: dict[str, type[AdvancementFlow]] = {
        "HitPoints": HitPointsFlow,
        "ItemGrant": ItemGrantFlow,
        "ItemChoice": ItemChoiceFlow,
        "ScaleValue": ScaleValueFlow,
    }

    @staticmethod
    def create(
        actor: "Actor",
        item: "Item",
        advancement: "Advancement",
        level: int,
        retained_data: Any = None,
    ) -> AdvancementFlow:
        """
        Creates the flow configuring an advancement at a level.

        Args:
            actor (Actor): The staged actor owning the item.
            item (Item): The item owning the advancement.
            advancement (Advancement): The advancement to configure.
            level (int): The level to configure.
            retained_data (Any): Data from a previous reversal, if any.

        Returns:
            AdvancementFlow: The flow for the advancement type.

        Raises:
            ValueError: If the advancement type is unknown.

        """
        flow_class = FlowFactory.FLOWS.get(advancement.type)
        if flow_class is None:
            raise ValueError(f"Unknown advancement type: {advancement.type}")
        return flow_class(actor, item.id, advancement.id, level, retained_data)
