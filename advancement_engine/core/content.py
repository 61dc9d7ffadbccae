"""
Content repository for the advancement engine.

Resolves document UUIDs to item data. Compendium content is loaded from JSON
pack files, one file per pack, and world items can be registered directly.
"""

import copy
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

from catchery import log_warning

from .constants import FLAG_SCOPE
from .utils import Singleton

COMPENDIUM_PREFIX = "Compendium"
WORLD_PREFIX = "Item"


def compendium_uuid(pack: str, item_id: str, scope: str = FLAG_SCOPE) -> str:
    """Builds the UUID of an item stored in a compendium pack."""
    return f"{COMPENDIUM_PREFIX}.{scope}.{pack}.{item_id}"


class ContentRepository(metaclass=Singleton):
    """
    One-stop registry resolving item UUIDs to their source data.
    """

    documents: dict[str, dict[str, Any]]

    def __init__(self, data_dir: Path | None = None) -> None:
        """
        Initialize the ContentRepository.

        Args:
            data_dir (Path | None):
                The directory containing the "packs" folder to load.

        """
        self.documents = {}
        if data_dir:
            self.reload(data_dir)

    def reload(self, root: Path) -> None:
        """
        (Re)load all compendium packs from disk.

        Args:
            root (Path):
                The directory containing the "packs" folder.

        """
        self.documents = {}
        packs_dir = root / "packs"
        if not packs_dir.is_dir():
            log_warning(
                f"No compendium packs found in '{root}'",
                {"root": str(root)},
            )
            return
        for path in sorted(packs_dir.glob("*.json")):
            self.documents.update(
                _load_json_file(path, _pack_loader(path.stem), f"pack {path.stem}")
            )

    def register(self, uuid: str, data: dict[str, Any]) -> None:
        """Registers (or replaces) the data resolved by a UUID."""
        self.documents[uuid] = copy.deepcopy(data)

    def register_world_item(self, data: dict[str, Any]) -> str:
        """Registers a world item and returns its UUID."""
        uuid = f"{WORLD_PREFIX}.{data['id']}"
        self.register(uuid, data)
        return uuid

    def clear(self) -> None:
        """Forgets every registered document."""
        self.documents = {}

    def resolve(self, uuid: str) -> dict[str, Any] | None:
        """
        Resolves a UUID to a copy of the document data.

        Args:
            uuid (str):
                The UUID to resolve.

        Returns:
            dict[str, Any] | None:
                A deep copy of the data, or None if the UUID is unknown.

        """
        data = self.documents.get(uuid)
        if data is None:
            return None
        return copy.deepcopy(data)

    def index_from_uuid(self, uuid: str) -> dict[str, Any] | None:
        """Returns the lightweight index entry (name, type) for a UUID."""
        data = self.documents.get(uuid)
        if data is None:
            return None
        return {"uuid": uuid, "name": data.get("name", ""), "type": data.get("type", "")}

    def link_for_uuid(self, uuid: str) -> str:
        """
        Creates a content link for the provided UUID.

        Args:
            uuid (str):
                UUID for which to produce the link.

        Returns:
            str:
                Link in the "@UUID[uuid]{name}" form, or an empty string if the
                document could not be found.

        """
        index = self.index_from_uuid(uuid)
        if not index:
            return ""
        return f"@UUID[{uuid}]{{{index['name']}}}"


def _pack_loader(pack: str) -> Callable[[list[dict]], dict[str, dict[str, Any]]]:
    """Returns a loader keying the entries of a pack by their UUID."""

    def loader(data: list[dict]) -> dict[str, dict[str, Any]]:
        documents: dict[str, dict[str, Any]] = {}
        for entry in data:
            if "id" not in entry:
                log_warning(
                    f"Skipping entry without an id in pack '{pack}'",
                    {"pack": pack, "name": entry.get("name")},
                )
                continue
            documents[compendium_uuid(pack, entry["id"])] = entry
        return documents

    return loader


def _load_json_file(
    path: Path,
    loader: Callable[[Any], dict[str, Any]],
    description: str,
) -> dict[str, Any]:
    """
    Load a JSON file and hand its content to a loader.

    Args:
        path (Path):
            The file to load.
        loader (Callable[[Any], dict[str, Any]]):
            Turns the decoded JSON into the entries to register.
        description (str):
            What the file contains, used in log messages.

    Returns:
        dict[str, Any]:
            The loaded entries, or an empty dictionary on failure.

    """
    try:
        with open(path, encoding="utf-8") as f:
            return loader(json.load(f))
    except (OSError, json.JSONDecodeError) as e:
        log_warning(
            f"Failed to load {description} from '{path}': {e}",
            {"path": str(path), "description": description, "error": str(e)},
        )
        return {}
