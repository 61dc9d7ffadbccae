"""
Persistence of actor changes.

A document store receives the ChangeBuffer of a finished edit session and
writes it as one batch. `commit_changes` ties the pieces together: the
changes are replayed on a copy of the actor, persisted, and only then adopted
by the live actor, so a failed write leaves the actor untouched.
"""

from __future__ import annotations

from typing import Any, Protocol

from catchery import log_error, log_info

from ..core.error_handling import PersistenceError
from .actor import Actor
from .changes import ChangeBuffer


class DocumentStore(Protocol):
    """Persists batches of changes made to actors."""

    def commit(self, actor: Actor, changes: ChangeBuffer) -> None:
        """
        Persists the changes made to an actor as a single batch.

        Raises:
            PersistenceError: If the batch could not be written.

        """


class MemoryDocumentStore:
    """Document store keeping actor data in memory."""

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.history: list[tuple[str, ChangeBuffer]] = []
        self._failure: PersistenceError | None = None

    def save(self, actor: Actor) -> None:
        """Stores the current data of an actor."""
        self.documents[actor.id] = actor.snapshot()

    def load(self, actor_id: str) -> Actor | None:
        data = self.documents.get(actor_id)
        return Actor.model_validate(data) if data is not None else None

    def fail_next_commit(self, message: str = "Document store unavailable") -> None:
        """Makes the next commit raise a PersistenceError."""
        self._failure = PersistenceError(message)

    def commit(self, actor: Actor, changes: ChangeBuffer) -> None:
        if self._failure is not None:
            failure, self._failure = self._failure, None
            raise failure
        staged = self.load(actor.id) or actor.clone(staged=False)
        changes.apply_to(staged)
        self.documents[actor.id] = staged.snapshot()
        self.history.append((actor.id, changes.model_copy(deep=True)))


def commit_changes(actor: Actor, changes: ChangeBuffer, store: DocumentStore) -> None:
    """
    Persists a batch of changes and applies it to the live actor.

    Args:
        actor (Actor):
            The live actor the changes were staged for.
        changes (ChangeBuffer):
            The recorded changes.
        store (DocumentStore):
            Where the changes are persisted.

    Raises:
        PersistenceError: If the changes could not be applied or persisted.
            The actor is left unchanged.

    """
    if changes.is_empty():
        return
    result = actor.clone(staged=False)
    try:
        changes.apply_to(result)
    except (KeyError, ValueError) as e:
        raise PersistenceError(
            f"Could not replay changes on actor '{actor.name}': {e}",
            {"actor": actor.id, "changes": len(changes)},
        ) from e
    try:
        store.commit(actor, changes)
    except PersistenceError as e:
        log_error(
            f"Failed to persist changes to actor '{actor.name}': {e.message}",
            {"actor": actor.id, "changes": len(changes)},
            exception=e,
        )
        raise
    actor.adopt(result)
    log_info(
        f"Committed {len(changes)} change(s) to actor '{actor.name}'",
        {"actor": actor.id},
    )
