"""
Constants and enumerations for the advancement engine.

Defines the item types, step directions and hit point modes used throughout
the engine, together with a few global constants.
"""

from enum import Enum

# Highest level a character can reach.
MAX_LEVEL = 20

# Length of the random identifiers given to documents and advancements.
ID_LENGTH = 16

# Namespace used for the flags written on granted items.
FLAG_SCOPE = "sw5e"


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().capitalize()


class ItemType(str, NiceEnum):
    """Defines the types of items an actor can own."""

    CLASS = "class"
    ARCHETYPE = "archetype"
    BACKGROUND = "background"
    SPECIES = "species"
    FEAT = "feat"
    POWER = "power"
    EQUIPMENT = "equipment"
    WEAPON = "weapon"
    CONSUMABLE = "consumable"
    TOOL = "tool"
    LOOT = "loot"
    BACKPACK = "backpack"

    @property
    def color(self) -> str:
        """Returns the color string associated with this item type."""
        return {
            ItemType.CLASS: "bold magenta",
            ItemType.ARCHETYPE: "magenta",
            ItemType.FEAT: "bold yellow",
            ItemType.POWER: "bold blue",
        }.get(self, "white")

    def colorize(self, message: str) -> str:
        """Applies item type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class StepType(NiceEnum):
    """Direction in which an advancement step is executed."""

    FORWARD = "forward"
    REVERSE = "reverse"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this step direction."""
        return {
            StepType.FORWARD: "⬆️",
            StepType.REVERSE: "⬇️",
        }.get(self, "❔")


class HitPointMode(str, NiceEnum):
    """How the hit points for a level were determined."""

    MAX = "max"
    AVG = "avg"
    ROLL = "roll"


class ScaleValueType(str, NiceEnum):
    """Kinds of value a scale value advancement can hold."""

    STRING = "string"
    NUMBER = "number"
    DICE = "dice"
    DISTANCE = "distance"
