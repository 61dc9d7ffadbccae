"""
Staged changes for actor documents.

Every mutation made to a staged actor clone is recorded as a typed delta in a
`ChangeBuffer`. The buffer is an ordered, replayable description of the edit
session: committing it replays the deltas, in order, on the real actor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from .actor import Actor


class ItemsCreated(BaseModel):
    """Embedded items added to the actor."""

    kind: Literal["create"] = "create"
    items: list[dict[str, Any]] = Field(
        description="Full data of the created items, including their ids.",
    )

    def apply_to(self, actor: Actor) -> None:
        actor.create_embedded(self.items, keep_id=True)


class ItemsDeleted(BaseModel):
    """Embedded items removed from the actor."""

    kind: Literal["delete"] = "delete"
    ids: list[str] = Field(
        description="Ids of the deleted items.",
    )

    def apply_to(self, actor: Actor) -> None:
        actor.delete_embedded(self.ids)


class ItemUpdated(BaseModel):
    """Dotted-path changes made to one embedded item."""

    kind: Literal["update_item"] = "update_item"
    item_id: str = Field(
        description="Id of the updated item.",
    )
    changes: dict[str, Any] = Field(
        description="Mapping of dotted paths to their new values.",
    )

    def apply_to(self, actor: Actor) -> None:
        actor.update_embedded([{"_id": self.item_id, **self.changes}])


class ActorUpdated(BaseModel):
    """Dotted-path changes made to the actor itself."""

    kind: Literal["update"] = "update"
    changes: dict[str, Any] = Field(
        description="Mapping of dotted paths to their new values.",
    )

    def apply_to(self, actor: Actor) -> None:
        actor.update(self.changes)


Delta = Annotated[
    Union[ItemsCreated, ItemsDeleted, ItemUpdated, ActorUpdated],
    Field(discriminator="kind"),
]


class ChangeBuffer(BaseModel):
    """Ordered list of the deltas recorded on a staged document."""

    deltas: list[Delta] = Field(
        default_factory=list,
        description="The recorded deltas, oldest first.",
    )

    def record(self, delta: Delta) -> None:
        """Appends a delta to the buffer."""
        self.deltas.append(delta)

    def apply_to(self, actor: Actor) -> None:
        """
        Replays every delta, in order, on the given actor.

        Args:
            actor (Actor):
                The actor receiving the changes. It should not record changes
                of its own.

        """
        for delta in self.deltas:
            delta.apply_to(actor)

    def clear(self) -> None:
        self.deltas.clear()

    def is_empty(self) -> bool:
        return not self.deltas

    def __len__(self) -> int:
        return len(self.deltas)
