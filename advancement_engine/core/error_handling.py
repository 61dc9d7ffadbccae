"""
Exception hierarchy for the advancement engine.

Validation problems are recovered where the user supplied the offending data,
persistence problems abort the whole advancement commit, and a declined
confirmation is a control-flow signal rather than a failure.
"""

from typing import Any


class AdvancementError(Exception):
    """Base class for all errors raised by the advancement engine."""

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}


class ValidationError(AdvancementError):
    """
    Raised when an item or user input does not satisfy an advancement's
    configuration (wrong item type, feature subtype or power level, too many
    choices, ...).
    """


class PersistenceError(AdvancementError):
    """Raised when the document store fails to write a batch of changes."""


class ConfirmationDeclined(AdvancementError):
    """Raised when the user closes a confirmation prompt without answering."""


class ManagerStateError(AdvancementError):
    """Raised when a manager operation is not allowed in its current state."""
