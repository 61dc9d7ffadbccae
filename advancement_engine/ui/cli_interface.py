"""
User interface module for the advancement engine.

Provides console-based components to walk a player through an advancement
workflow: rich tables and panels to show each step, prompt_toolkit prompts to
collect the answers.
"""

from collections.abc import Callable
from typing import Any

from prompt_toolkit import ANSI, PromptSession
from rich.console import Group
from rich.panel import Panel
from rich.table import Table

from ..applications.advancement_flow import AdvancementFlow
from ..applications.advancement_manager import AdvancementManager, ManagerState
from ..applications.hit_points_flow import HitPointsFlow
from ..applications.item_choice_flow import ItemChoiceFlow
from ..applications.item_grant_flow import ItemGrantFlow
from ..applications.scale_value_flow import ScaleValueFlow
from ..core.constants import HitPointMode, StepType
from ..core.error_handling import PersistenceError, ValidationError
from ..core.localization import format_message, localize
from ..core.utils import ccapture, cprint

# one session keeps history, created on first prompt
_session: PromptSession | None = None

# Commands accepted at every step.
BACK = "b"
QUIT = "q"


def _session_prompt(message: Any) -> str:
    global _session
    if _session is None:
        _session = PromptSession(erase_when_done=True)
    return _session.prompt(message)


class AdvancementInterface:
    """
    Command-line interface for the advancement workflow.

    Renders the current step of a manager as a rich panel, asks the player for
    the step's form data, and moves the manager forward or back.
    """

    def __init__(self, ask: Callable[[Any], str] | None = None) -> None:
        """
        Initialize the AdvancementInterface.

        Args:
            ask (Callable[[Any], str] | None):
                Reads one answer for a prompt, a prompt_toolkit session when None.

        """
        self.ask = ask or _session_prompt

    def _prompt(self, renderable: Any, question: str) -> str:
        text = "\n" + ccapture(renderable) + f"\n{question} > " if renderable else f"{question} > "
        answer = self.ask(ANSI(text))
        return answer.strip() if isinstance(answer, str) else ""

    # ---- Confirmation ----

    def confirm(self, title: str, content: str) -> bool | None:
        """
        Asks a yes or no question.

        Returns:
            bool | None: The answer, None if the player quit the prompt.

        """
        panel = Panel(content, title=title, border_style="yellow")
        while True:
            answer = self._prompt(panel, "[y]es / [n]o / [q]uit").lower()
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            if answer == QUIT:
                return None

    # ---- Rendering ----

    def render_flow(self, flow: AdvancementFlow, step_type: StepType = StepType.FORWARD) -> Panel:
        """
        Builds the panel showing one step.

        Args:
            flow (AdvancementFlow): The flow of the step.
            step_type (StepType): Whether the step applies or removes the advancement.

        Returns:
            Panel: The renderable panel.

        """
        data = flow.get_data()
        body: list[Any] = []
        if data["hint"] and step_type is StepType.FORWARD:
            body.append(f"[dim]{data['hint']}[/]")
        if step_type is StepType.REVERSE:
            body.append(localize("SW5E.AdvancementReverseStep"))
            if data["summary"]:
                body.append(data["summary"])
        elif isinstance(flow, HitPointsFlow):
            body.append(
                format_message(
                    "SW5E.AdvancementHitPointsPrompt",
                    die=data["hit_die"],
                    average=data["average"],
                    con=data["con_mod"],
                )
            )
        elif isinstance(flow, ItemGrantFlow):
            body.append(self._item_table(data["items"], localize("SW5E.AdvancementItemGrantTitle")))
        elif isinstance(flow, ItemChoiceFlow):
            body.append(data["choices_hint"])
            body.append(self._item_table(data["pool"], localize("SW5E.AdvancementItemChoicePool")))
        elif isinstance(flow, ScaleValueFlow):
            body.append(
                format_message(
                    "SW5E.AdvancementScaleValueChange",
                    initial=data["initial"] or "-",
                    final=data["final"] or "-",
                )
            )
        title = f"{step_type.emoji} {data['title']} ({localize('SW5E.Level')} {data['level']})"
        return Panel(Group(*body), title=title, border_style="cyan")

    @staticmethod
    def _item_table(items: list[dict[str, Any]], title: str) -> Table:
        table = Table(title=title, pad_edge=False)
        table.add_column("#", style="cyan", no_wrap=True)
        table.add_column("Name", style="bold")
        table.add_column("Type", style="magenta")
        table.add_column("", style="green")
        for i, item in enumerate(items, 1):
            table.add_row(str(i), item["name"], str(item["type"]), "✔" if item.get("checked") else "")
        return table

    def render_steps(self, manager: AdvancementManager) -> Table:
        """Builds the table listing every step of a manager."""
        table = Table(title=localize("SW5E.AdvancementSteps"), pad_edge=False)
        table.add_column("#", style="cyan", no_wrap=True)
        table.add_column("Level", style="bold")
        table.add_column("Advancement")
        table.add_column("Item", style="magenta")
        for i, step in enumerate(manager.steps):
            marker = "▶" if i == manager.step_index else ("✔" if i < manager.step_index else "")
            item = step.flow.item
            table.add_row(
                f"{marker}{i + 1}",
                str(step.level),
                f"{step.type.emoji} {step.flow.title}",
                item.name if item else "",
            )
        return table

    # ---- Form data ----

    def collect_form_data(self, flow: AdvancementFlow) -> dict[str, Any] | str:
        """
        Asks the player for the form data of a forward step.

        Returns:
            dict[str, Any] | str:
                The form data, or BACK or QUIT when the player asked for it.

        """
        panel = self.render_flow(flow)
        if flow.retained_data is not None or isinstance(flow, ScaleValueFlow):
            answer = self._prompt(panel, localize("SW5E.AdvancementContinue"))
            return answer.lower() if answer.lower() in (BACK, QUIT) else flow.get_form_defaults()
        if isinstance(flow, HitPointsFlow):
            return self._collect_hit_points(panel, flow)
        if isinstance(flow, ItemGrantFlow):
            return self._collect_item_grant(panel, flow)
        if isinstance(flow, ItemChoiceFlow):
            return self._collect_item_choice(panel, flow)
        return flow.get_form_defaults()

    def _collect_hit_points(self, panel: Panel, flow: HitPointsFlow) -> dict[str, Any] | str:
        data = flow.get_data()
        if data["is_first"]:
            answer = self._prompt(panel, localize("SW5E.AdvancementContinue")).lower()
            return answer if answer in (BACK, QUIT) else {"mode": HitPointMode.MAX.value}
        while True:
            answer = self._prompt(panel, "[a]verage / [r]oll").lower()
            if answer in (BACK, QUIT):
                return answer
            if answer in ("a", "avg", "average", ""):
                return {"mode": HitPointMode.AVG.value}
            if answer in ("r", "roll"):
                return {"mode": HitPointMode.ROLL.value}

    def _collect_item_grant(self, panel: Panel, flow: ItemGrantFlow) -> dict[str, Any] | str:
        data = flow.get_data()
        defaults = flow.get_form_defaults()
        if not data["optional"]:
            answer = self._prompt(panel, localize("SW5E.AdvancementContinue")).lower()
            return answer if answer in (BACK, QUIT) else defaults
        answer = self._prompt(panel, localize("SW5E.AdvancementItemGrantDecline")).lower()
        if answer in (BACK, QUIT):
            return answer
        declined = self.parse_indices(answer, len(data["items"]))
        uuids = [item["uuid"] for item in data["items"]]
        return {uuid: i not in declined for i, uuid in enumerate(uuids)}

    def _collect_item_choice(self, panel: Panel, flow: ItemChoiceFlow) -> dict[str, Any] | str:
        data = flow.get_data()
        answer = self._prompt(
            panel, format_message("SW5E.AdvancementItemChoiceSelect", count=data["count"])
        ).lower()
        if answer in (BACK, QUIT):
            return answer
        indices = self.parse_indices(answer, len(data["pool"]))
        return {"selected": [data["pool"][i]["uuid"] for i in sorted(indices)]}

    @staticmethod
    def parse_indices(answer: str, count: int) -> set[int]:
        """
        Convert a comma or space separated list of 1-based numbers to indices.

        Args:
            answer (str): User input string to parse.
            count (int): Number of entries the numbers refer to.

        Returns:
            set[int]: The valid 0-based indices, out of range numbers are ignored.

        """
        indices = set()
        for token in answer.replace(",", " ").split():
            if token.isdigit() and 1 <= int(token) <= count:
                indices.add(int(token) - 1)
        return indices

    # ---- Workflow ----

    def run(self, manager: AdvancementManager) -> ManagerState:
        """
        Walks the player through every step of a manager.

        Args:
            manager (AdvancementManager): The manager to run.

        Returns:
            ManagerState: The state the manager ended in.

        """
        with manager:
            while not manager.state.is_finished:
                step = manager.current_step
                if step is None:
                    manager.advance()
                    break
                cprint(self.render_steps(manager))
                if step.type is StepType.REVERSE:
                    answer = self._prompt(
                        self.render_flow(step.flow, StepType.REVERSE),
                        localize("SW5E.AdvancementContinue"),
                    ).lower()
                    form_data: dict[str, Any] | str | None = answer if answer in (BACK, QUIT) else None
                else:
                    form_data = self.collect_form_data(step.flow)
                if form_data == QUIT:
                    manager.cancel()
                    break
                if form_data == BACK:
                    if manager.previous_step is not None:
                        manager.retreat()
                    continue
                try:
                    manager.advance(form_data)
                except ValidationError as e:
                    cprint(f"[bold red]{e.message}[/]")
                except PersistenceError as e:
                    cprint(f"[bold red]{e.message}[/]")
        return manager.state
