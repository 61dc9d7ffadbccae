"""
Utilities module for the advancement engine.

Provides common utility functions and helpers, including console printing
with rich formatting, the singleton metaclass, random identifiers and the
dotted-path helpers used to apply nested key-value deltas to documents.
"""

from __future__ import annotations

import random
import re
import string
from typing import Any, Generic

from pydantic import BaseModel
from rich.console import Console
from rich.rule import Rule
from typing_extensions import TypeVar

from .constants import ID_LENGTH

# Initialize the rich console.
_console = Console(markup=True, width=120, force_terminal=True, force_jupyter=False)

# Prefix marking a key deletion inside a delta, e.g. "value.added.-=3".
DELETION_PREFIX = "-="

_ID_CHARACTERS = string.ascii_letters + string.digits


def cprint(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output.

    Args:
        *args: Arguments to pass to the console print function.
        **kwargs: Keyword arguments to pass to the console print function.

    """
    _console.print(*args, **kwargs)


def crule(*args: Any, **kwargs: Any) -> None:
    """
    Custom print function to handle colored output with a rule.

    Args:
        *args: Arguments to pass to the Rule constructor.
        **kwargs: Keyword arguments to pass to the Rule constructor.

    """
    _console.print(Rule(*args, **kwargs))


def ccapture(content: Any) -> str:
    """
    Captures console output as a string.

    Args:
        content (Any): The content to capture.

    Returns:
        str: The captured output as a string.

    """
    with _console.capture() as capture:
        _console.print(content, markup=True, end="")
    return capture.get()


# ---- Singleton Metaclass ----


_T = TypeVar("_T")


class Singleton(type, Generic[_T]):
    """Metaclass that returns the same instance every time."""

    _instances: dict[Singleton[_T], _T] = {}

    def __call__(cls, *args: Any, **kwargs: Any) -> _T:
        if cls not in cls._instances:
            cls._instances[cls] = super().__call__(*args, **kwargs)
        return cls._instances[cls]

    def reset(cls) -> None:
        """Forget the cached instance, the next call builds a fresh one."""
        cls._instances.pop(cls, None)


# ---- Identifiers ----


def random_id(length: int = ID_LENGTH) -> str:
    """
    Generates a random alphanumeric identifier.

    Args:
        length (int): The length of the identifier. Defaults to ID_LENGTH.

    Returns:
        str: The generated identifier.

    """
    return "".join(random.choices(_ID_CHARACTERS, k=length))


def slugify(text: str) -> str:
    """Turns a display name into a lowercase, dash separated identifier."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return slug.strip("-")


# ---- Dotted paths ----


def _get_child(container: Any, key: str) -> Any:
    if isinstance(container, BaseModel):
        return getattr(container, key, None)
    if isinstance(container, dict):
        return container.get(key)
    return None


def get_property(target: Any, path: str, default: Any = None) -> Any:
    """
    Reads a value from a nested structure using a dotted path.

    Args:
        target (Any): A pydantic model or dictionary.
        path (str): The dotted path, e.g. "system.attributes.hp.max".
        default (Any): Value returned when the path does not exist.

    Returns:
        Any: The value found at the path, or the default.

    """
    current = target
    for key in path.split("."):
        current = _get_child(current, key)
        if current is None:
            return default
    return current


def set_property(target: Any, path: str, value: Any) -> None:
    """
    Writes a value into a nested structure using a dotted path.

    Missing intermediate dictionary entries are created. When the last segment
    starts with DELETION_PREFIX the key is removed instead. Pydantic models are
    assigned through setattr, so models that validate assignment coerce the
    value into the declared field type.

    Args:
        target (Any): A pydantic model or dictionary.
        path (str): The dotted path to write.
        value (Any): The value to write. Ignored for deletions.

    Raises:
        KeyError: If an intermediate segment cannot be traversed.

    """
    keys = path.split(".")
    current = target
    for key in keys[:-1]:
        child = _get_child(current, key)
        if child is None:
            if not isinstance(current, dict):
                raise KeyError(f"Cannot traverse '{key}' in path '{path}'")
            child = current[key] = {}
        current = child

    last = keys[-1]
    if last.startswith(DELETION_PREFIX):
        last = last[len(DELETION_PREFIX):]
        if isinstance(current, dict):
            current.pop(last, None)
        elif isinstance(current, BaseModel):
            setattr(current, last, None)
        return

    if isinstance(current, BaseModel):
        setattr(current, last, value)
    elif isinstance(current, dict):
        current[last] = value
    else:
        raise KeyError(f"Cannot assign '{last}' in path '{path}'")


def apply_changes(target: Any, changes: dict[str, Any]) -> None:
    """Applies every dotted-path entry of a delta to the target, in order."""
    for path, value in changes.items():
        set_property(target, path, value)
