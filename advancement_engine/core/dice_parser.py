"""
Dice module for the advancement engine.

Evaluates the small dice formulas used by advancements: hit dice ("1d10"),
scale value dice ("2d6") and formulas referring to actor values written as
[NAME], e.g. "1d10 + [CON]". Every dice term can be rolled, maximized or
replaced by its fixed average.
"""

import math
import random
import re
from collections.abc import Callable
from typing import Any

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

DICE_PATTERN = re.compile(r"^(\d*)[dD](\d+)$")
DICE_TERM = re.compile(r"\b\d*D\d+\b")

# Upper bounds of a single dice term.
MAX_DICE = 100
MAX_FACES = 1000

# Turns (number, faces) into the value of a dice term.
DieResolver = Callable[[int, int], int]


class VarInfo(BaseModel):
    """A named value that can be referenced in a formula as [NAME]."""

    name: str = Field(description="Variable name, case insensitive.")
    value: int = Field(description="Variable value.")

    def model_post_init(self, _: Any) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name must be a non-empty string")
        self.name = self.name.upper().strip()

    def replace_in_expr(self, expr: str) -> str:
        return expr.replace(f"[{self.name}]", str(self.value))


def parse_die(term: str) -> tuple[int, int] | None:
    """
    Splits a single dice term into its number of dice and number of faces.

    Args:
        term (str): A dice term such as 'd8' or '2d6'.

    Returns:
        tuple[int, int] | None: (number, faces), or None if the term is invalid.

    """
    match = DICE_PATTERN.match(term.strip())
    if not match:
        return None
    num_str, faces_str = match.groups()
    return (int(num_str) if num_str else 1), int(faces_str)


def _normalize(expr: str, variables: list[VarInfo] | None) -> str:
    expr = expr.upper().strip()
    for variable in variables or []:
        expr = variable.replace_in_expr(expr)
    return expr


def _resolve_term(term: str, resolver: DieResolver) -> int:
    parsed = parse_die(term)
    if parsed is None:
        log_warning(f"Invalid dice term '{term}'", {"term": term})
        return 0
    num, faces = parsed
    if not (0 < num <= MAX_DICE and 0 < faces <= MAX_FACES):
        log_warning(
            f"Dice term out of bounds: {term} (limits: {MAX_DICE} dice, {MAX_FACES} faces)",
            {"term": term, "num": num, "faces": faces},
        )
        return 0
    return resolver(num, faces)


def _evaluate(expr: str, variables: list[VarInfo] | None, resolver: DieResolver) -> int:
    """
    Substitutes the variables, resolves every dice term, and evaluates the
    remaining arithmetic.

    Args:
        expr (str): The formula.
        variables (list[VarInfo] | None): Values for the [NAME] references.
        resolver (DieResolver): Gives the value of each dice term.

    Returns:
        int: The result, 0 if the formula cannot be evaluated.

    """
    if not expr or not expr.strip():
        return 0
    expr = _normalize(expr, variables)
    if expr.isdigit():
        return int(expr)
    # Each occurrence is resolved on its own, "1D6 + 1D6" rolls twice.
    resolved = DICE_TERM.sub(lambda m: str(_resolve_term(m.group(0), resolver)), expr)
    log_debug(f"Evaluating '{expr}' as '{resolved}'", {"expression": expr})
    try:
        return int(eval(resolved, {"__builtins__": None}, math.__dict__))
    except Exception as e:
        log_warning(
            f"Failed to evaluate '{resolved}': {e}",
            {"expression": expr, "resolved": resolved, "error": str(e)},
        )
        return 0


def roll_expression(expr: str, variables: list[VarInfo] | None = None) -> int:
    """
    Rolls a formula, each die giving a random result.

    Args:
        expr (str): The formula to roll.
        variables (list[VarInfo] | None): Values for the [NAME] references.

    Returns:
        int: The total of the roll.

    """
    return _evaluate(
        expr, variables, lambda num, faces: sum(random.randint(1, faces) for _ in range(num))
    )


def get_max_roll(expr: str, variables: list[VarInfo] | None = None) -> int:
    """The highest possible result of a formula."""
    return _evaluate(expr, variables, lambda num, faces: num * faces)


def get_average_roll(expr: str, variables: list[VarInfo] | None = None) -> int:
    """
    The fixed average of a formula, rounding each die up
    (d6 → 4, d8 → 5, d10 → 6, d12 → 7).
    """
    return _evaluate(expr, variables, lambda num, faces: num * (faces // 2 + 1))
