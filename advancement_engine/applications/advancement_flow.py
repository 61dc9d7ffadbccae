"""
Base class of the per-step advancement forms.

A flow presents one advancement at one level: it builds the context shown to
the player, collects the submitted form data, and forwards it to the
advancement. Flows never change the actor themselves.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..core.error_handling import AdvancementError

if TYPE_CHECKING:
    from ..advancement.base_advancement import Advancement
    from ..documents.actor import Actor
    from ..documents.item import Item


class AdvancementFlow:
    """
    Form used to configure one advancement at one level.

    Attributes:
        actor (Actor):
            The staged actor the advancement is applied to.
        item_id (str):
            Id of the item owning the advancement.
        advancement_id (str):
            Id of the advancement within that item.
        level (int):
            Level for which to configure the advancement.
        retained_data (Any):
            Data returned by the advancement's reverse method, replayed through
            restore instead of asking the player again.

    """

    def __init__(
        self,
        actor: Actor,
        item_id: str,
        advancement_id: str,
        level: int,
        retained_data: Any = None,
    ) -> None:
        self.actor = actor
        self.item_id = item_id
        self.advancement_id = advancement_id
        self.level = level
        self.retained_data = retained_data

    @property
    def id(self) -> str:
        return f"actor-{self.item_id}-advancement-{self.advancement_id}-{self.level}"

    @property
    def item(self) -> Item | None:
        """The item owning the advancement, looked up on the actor."""
        return self.actor.get_embedded(self.item_id)

    @property
    def advancement(self) -> Advancement | None:
        """The advancement this flow configures."""
        item = self.item
        if item is None:
            return None
        return item.get_advancement(self.advancement_id)

    def require_advancement(self) -> Advancement:
        advancement = self.advancement
        if advancement is None:
            raise AdvancementError(
                f"Advancement '{self.advancement_id}' no longer exists on item '{self.item_id}'",
                {"item": self.item_id, "advancement": self.advancement_id},
            )
        return advancement

    @property
    def title(self) -> str:
        advancement = self.advancement
        return advancement.title_for_level(self.level) if advancement else ""

    # ---- Form ----

    def get_data(self) -> dict[str, Any]:
        """
        Builds the context displayed to the player.

        Returns:
            dict[str, Any]:
                The flow id, advancement, level, title, hint and summary, plus
                the variant specific entries.

        """
        advancement = self.require_advancement()
        return {
            "app_id": self.id,
            "advancement": advancement,
            "type": advancement.type,
            "level": self.level,
            "title": advancement.title_for_level(self.level),
            "hint": advancement.hint,
            "summary": advancement.summary_for_level(self.level),
            "retained": self.retained_data is not None,
        }

    def get_form_defaults(self) -> dict[str, Any]:
        """The form data submitted when the player accepts the defaults."""
        return {}

    def submit(self, form_data: dict[str, Any] | None = None) -> None:
        """
        Forwards the form data to the advancement.

        When retained data is available the advancement is restored from it and
        the form data is ignored.

        Args:
            form_data (dict[str, Any] | None):
                Data from the advancement form, the defaults when None.

        Raises:
            ValidationError: If the advancement rejects the form data.

        """
        advancement = self.require_advancement()
        if self.retained_data is not None:
            advancement.restore(self.level, self.retained_data)
            return
        if form_data is None:
            form_data = self.get_form_defaults()
        advancement.apply(self.level, form_data)

    def reverse(self) -> Any:
        """Reverses the advancement for this level, keeping the retained data."""
        self.retained_data = self.require_advancement().reverse(self.level)
        return self.retained_data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.id})"
