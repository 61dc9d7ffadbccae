"""
Localization module for the advancement engine.

Human-facing text is looked up by key in a JSON translation file. Missing keys
fall back to the key itself, so a lookup never fails.

The translations are process-wide state: the `Localization` singleton loads
the bundled English file on first use, and hosts can call
`Localization().load(path)` at startup to switch language.
"""

import json
import re
from pathlib import Path
from typing import Any

from catchery import log_warning

from .utils import Singleton

DEFAULT_LANGUAGE_FILE = Path(__file__).resolve().parent.parent / "lang" / "en.json"

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class Localization(metaclass=Singleton):
    """Key based lookup of translated strings."""

    translations: dict[str, str]

    def __init__(self, path: Path | None = None) -> None:
        """
        Initialize the Localization, loading the given file or the bundled one.

        Args:
            path (Path | None):
                The translation file to load.

        """
        self.translations = {}
        self.load(path or DEFAULT_LANGUAGE_FILE)

    def load(self, path: Path) -> None:
        """
        (Re)load translations from a JSON file mapping keys to strings.

        Args:
            path (Path):
                The translation file to load.

        """
        try:
            with open(path, encoding="utf-8") as f:
                self.translations = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log_warning(
                f"Could not load translations from '{path}': {e}",
                {"path": str(path), "error": str(e)},
            )
            self.translations = {}

    def has(self, key: str) -> bool:
        """Checks whether a translation exists for the key."""
        return key in self.translations

    def localize(self, key: str) -> str:
        """Returns the translation of the key, or the key itself."""
        return self.translations.get(key, key)

    def format(self, key: str, **data: Any) -> str:
        """
        Returns the translation of the key with {placeholders} substituted.
        Placeholders without a matching value are left untouched.
        """
        text = self.localize(key)
        return _PLACEHOLDER.sub(
            lambda m: str(data[m.group(1)]) if m.group(1) in data else m.group(0),
            text,
        )


def localize(key: str) -> str:
    """Shortcut for Localization().localize(key)."""
    return Localization().localize(key)


def format_message(key: str, **data: Any) -> str:
    """Shortcut for Localization().format(key, **data)."""
    return Localization().format(key, **data)
