"""
Confirmation asked before advancements are removed.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from catchery import log_debug
from rich.panel import Panel

from ..core.error_handling import ConfirmationDeclined
from ..core.localization import format_message, localize

if TYPE_CHECKING:
    from ..documents.item import Item

# Asks a question, returning True or False, or None if the prompt was closed.
ConfirmPrompt = Callable[[str, str], "bool | None"]


def _default_prompt(title: str, content: str) -> bool | None:
    from ..ui.cli_interface import AdvancementInterface

    return AdvancementInterface().confirm(title, content)


class AdvancementConfirmationDialog:
    """
    Dialog asking whether advancements should be undone when the levels that
    granted them are removed.

    Answering yes removes the advancements, answering no changes the level
    while leaving them in place, and closing the prompt raises
    ConfirmationDeclined so the caller can abort.
    """

    def __init__(self, title: str, content: str, prompt: ConfirmPrompt | None = None) -> None:
        self.title = title
        self.content = content
        self.prompt = prompt or _default_prompt

    def render(self) -> Panel:
        return Panel(self.content, title=self.title, border_style="yellow")

    def ask(self) -> bool:
        """
        Shows the dialog and waits for the answer.

        Returns:
            bool: Whether the advancements should be removed.

        Raises:
            ConfirmationDeclined: If the prompt was closed without an answer.

        """
        answer = self.prompt(self.title, self.content)
        log_debug(f"Confirmation '{self.title}' answered {answer}", {"answer": answer})
        if answer is None:
            raise ConfirmationDeclined(
                localize("SW5E.AdvancementConfirmationDeclined"), {"title": self.title}
            )
        return bool(answer)

    @classmethod
    def for_level_down(cls, item: Item, prompt: ConfirmPrompt | None = None) -> bool:
        """
        Asks whether advancements should be removed when a class loses levels.

        Args:
            item (Item):
                The class item losing levels.
            prompt (ConfirmPrompt | None):
                Prompt used to ask the question, the console one when None.

        Returns:
            bool: Whether the advancements should be removed.

        Raises:
            ConfirmationDeclined: If the prompt was closed without an answer.

        """
        dialog = cls(
            localize("SW5E.AdvancementLevelDownConfirmTitle"),
            format_message("SW5E.AdvancementLevelDownConfirmMessage", name=item.name),
            prompt,
        )
        return dialog.ask()
