"""
Applications driving the advancement workflow: the per-step flows, the
confirmation dialog, the manager walking through a level change, and the
level change entry point.
"""

from .advancement_flow import AdvancementFlow
from .advancement_manager import AdvancementManager, AdvancementStep, ManagerState
from .confirmation_dialog import AdvancementConfirmationDialog
from .flow_factory import FlowFactory
from .hit_points_flow import HitPointsFlow
from .item_choice_flow import ItemChoiceFlow
from .item_grant_flow import ItemGrantFlow
from .level_change import change_class_level, update_class_level
from .scale_value_flow import ScaleValueFlow

__all__ = [
    "AdvancementConfirmationDialog",
    "AdvancementFlow",
    "AdvancementManager",
    "AdvancementStep",
    "FlowFactory",
    "HitPointsFlow",
    "ItemChoiceFlow",
    "ItemGrantFlow",
    "ManagerState",
    "ScaleValueFlow",
    "change_class_level",
    "update_class_level",
]
