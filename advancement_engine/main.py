"""
Main entry point for the advancement engine demo.

Loads the sample compendium packs and character from the data folder, then
walks the character through a level change of its first class:

    python -m advancement_engine [--levels N] [--class IDENTIFIER] [--data DIR]

A negative number of levels removes levels, asking first whether their
advancements should be undone.
"""

import argparse
import json
import logging
from pathlib import Path

from .applications.advancement_manager import AdvancementManager
from .applications.confirmation_dialog import AdvancementConfirmationDialog
from .applications.level_change import change_class_level
from .core.content import ContentRepository
from .core.host import configure_host
from .core.logging import setup_logging
from .core.sheets import print_actor_sheet, print_advancement_sheet
from .core.utils import cprint, crule
from .documents.actor import Actor
from .documents.store import MemoryDocumentStore
from .ui.cli_interface import AdvancementInterface

# Get the path to the data folder.
DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def load_actor(path: Path) -> Actor:
    with open(path, encoding="utf-8") as f:
        return Actor.model_validate(json.load(f))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Level up a character.")
    parser.add_argument("--levels", type=int, default=1, help="levels to add or remove")
    parser.add_argument("--class", dest="class_identifier", help="class to level")
    parser.add_argument("--data", type=Path, default=DATA_DIR, help="data folder")
    parser.add_argument("--debug", action="store_true", help="show debug logs")
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.debug else logging.WARNING)

    crule("Advancement Engine", style="bold green")
    cprint("Loading compendium...", style="bold green")
    store = MemoryDocumentStore()
    repository = ContentRepository()
    repository.reload(args.data)
    configure_host(store=store, content=repository)

    cprint("Loading character...", style="bold green")
    actor = load_actor(args.data / "character.json")
    store.save(actor)
    print_actor_sheet(actor)

    classes = actor.classes
    if not classes:
        cprint("The character has no class to level.", style="bold red")
        return 1
    class_item = classes.get(args.class_identifier) if args.class_identifier else actor.class_items[0]
    if class_item is None:
        cprint(f"Unknown class '{args.class_identifier}'.", style="bold red")
        return 1

    interface = AdvancementInterface()
    manager = change_class_level(
        actor,
        class_item.id,
        args.levels,
        confirm=lambda item: AdvancementConfirmationDialog.for_level_down(item, interface.confirm),
        store=store,
    )
    if isinstance(manager, AdvancementManager):
        interface.run(manager)

    print_actor_sheet(actor)
    class_item = actor.get_embedded(class_item.id)
    if class_item is not None:
        print_advancement_sheet(class_item)
    return 0
