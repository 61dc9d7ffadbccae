"""
Core module of the advancement engine.

Contains the fundamental components the advancements build on: constants,
errors, dice rolling, system configuration, localization, content lookup and
the host services.
"""

from .config import FeatureTypeConfig, SystemConfig, configure, get_config, reset_config
from .constants import (
    FLAG_SCOPE,
    MAX_LEVEL,
    HitPointMode,
    ItemType,
    ScaleValueType,
    StepType,
)
from .content import ContentRepository, compendium_uuid
from .dice_parser import (
    VarInfo,
    get_average_roll,
    get_max_roll,
    roll_expression,
)
from .error_handling import (
    AdvancementError,
    ConfirmationDeclined,
    ManagerStateError,
    PersistenceError,
    ValidationError,
)
from .host import HostServices, configure_host
from .localization import Localization, format_message, localize
from .utils import ccapture, cprint, crule

__all__ = [
    "FLAG_SCOPE",
    "MAX_LEVEL",
    "AdvancementError",
    "ConfirmationDeclined",
    "ContentRepository",
    "FeatureTypeConfig",
    "HitPointMode",
    "HostServices",
    "ItemType",
    "Localization",
    "ManagerStateError",
    "PersistenceError",
    "ScaleValueType",
    "StepType",
    "SystemConfig",
    "ValidationError",
    "VarInfo",
    "ccapture",
    "compendium_uuid",
    "configure",
    "configure_host",
    "cprint",
    "crule",
    "format_message",
    "get_average_roll",
    "get_config",
    "get_max_roll",
    "localize",
    "reset_config",
    "roll_expression",
]
