"""
Module for printing characters and their advancements in a formatted way.
"""

from typing import TYPE_CHECKING

from rich.padding import Padding
from rich.table import Table

from .constants import ItemType
from .localization import localize
from .utils import cprint, crule

if TYPE_CHECKING:
    from ..documents.actor import Actor
    from ..documents.item import Item


def build_advancement_table(item: "Item", config_mode: bool = False) -> Table:
    """
    Builds the levels list of an item: every advancement at every level.

    Args:
        item (Item): The item whose advancements are listed.
        config_mode (bool): Show the configuration instead of the choices made.

    Returns:
        Table: The levels table.

    """
    table = Table(title=f"{item.name} {localize('SW5E.AdvancementTitle')}", pad_edge=False)
    table.add_column(localize("SW5E.Level"), style="cyan", no_wrap=True)
    table.add_column("Advancement", style="bold")
    table.add_column("Summary")
    table.add_column("", style="green")
    levels = sorted({level for adv in item.advancement.values() for level in adv.levels})
    current = item.system.levels if item.actor is not None else None
    for level in levels:
        if current is not None and level > current and not config_mode:
            break
        for advancement in item.advancement_for_level(level):
            configured = advancement.TRACKS_VALUE and advancement.configured_for_level(level)
            table.add_row(
                str(level),
                advancement.title_for_level(level, config_mode),
                advancement.summary_for_level(level, config_mode),
                "✔" if configured and not config_mode else "",
            )
    return table


def print_advancement_sheet(item: "Item", config_mode: bool = False, padding: int = 2) -> None:
    """
    Prints the advancements of an item.

    Args:
        item (Item): The item to display.
        config_mode (bool): Show the configuration instead of the choices made.
        padding (int): Left padding for the output. Defaults to 2.

    """
    cprint(Padding(build_advancement_table(item, config_mode), (0, padding)))


def print_actor_sheet(actor: "Actor") -> None:
    """
    Prints the details of a character: level, hit points, classes, scale
    values and items.

    Args:
        actor (Actor): The character to display.

    """
    hp = actor.system.attributes.hp
    crule(f"{actor.name} ({localize('SW5E.Level')} {actor.level})", style="bold green")
    cprint(f"  HP: [green]{hp.value}[/]/[green]{hp.max}[/]")
    for class_item in actor.class_items:
        cprint(f"  {class_item.colored_name()} {class_item.system.levels} ({class_item.system.hit_dice})")
    for identifier, values in actor.scale_values.items():
        formatted = ", ".join(f"{key} [blue]{value}[/]" for key, value in values.items() if value)
        if formatted:
            cprint(f"  [bold]{identifier}[/]: {formatted}")
    others = sorted(
        (item for item in actor.items.values() if item.type is not ItemType.CLASS),
        key=lambda item: (item.type.value, item.name),
    )
    for item in others:
        cprint(f"    {item.colored_name()}")
