"""
Host services used by the advancement engine.

Bundles the collaborators the engine needs from the platform it runs in: the
document store that persists committed changes, the content repository that
resolves UUIDs, and the roll evaluator used for hit dice.

`HostServices` is process-wide state. Hosts call `configure_host(...)` once at
startup to plug in their own implementations; anything left unset falls back
to the in-memory defaults shipped with the package.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .content import ContentRepository
from .dice_parser import VarInfo, roll_expression
from .utils import Singleton

if TYPE_CHECKING:
    from ..documents.store import DocumentStore

RollEvaluator = Callable[[str, list[VarInfo]], int]


class HostServices(metaclass=Singleton):
    """Registry of the host collaborators."""

    def __init__(self) -> None:
        self._store: DocumentStore | None = None
        self.content: ContentRepository = ContentRepository()
        self.evaluate_roll: RollEvaluator = roll_expression

    @property
    def store(self) -> DocumentStore:
        """The document store, an in-memory one unless configured otherwise."""
        if self._store is None:
            from ..documents.store import MemoryDocumentStore

            self._store = MemoryDocumentStore()
        return self._store

    @store.setter
    def store(self, store: DocumentStore) -> None:
        self._store = store

    def resolve(self, uuid: str) -> dict[str, Any] | None:
        """Resolves a UUID to a copy of its document data."""
        return self.content.resolve(uuid)


def configure_host(
    store: DocumentStore | None = None,
    content: ContentRepository | None = None,
    evaluate_roll: RollEvaluator | None = None,
) -> HostServices:
    """
    Plugs host implementations into the process-wide services.

    Args:
        store (DocumentStore | None):
            Where committed actor changes are persisted.
        content (ContentRepository | None):
            Resolves item UUIDs.
        evaluate_roll (RollEvaluator | None):
            Evaluates a dice formula with variables, returning its total.

    Returns:
        HostServices:
            The configured services.

    """
    services = HostServices()
    if store is not None:
        services.store = store
    if content is not None:
        services.content = content
    if evaluate_roll is not None:
        services.evaluate_roll = evaluate_roll
    return services
