"""Rejected-action errors and action results.

Rule violations never escape the engine as exceptions. Resolvers raise
ActionError before mutating anything; apply_action catches it and returns
a failed ActionResult so the caller can retry with a corrected action.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .events import Event


class ErrorKind(Enum):
    """Why an action was rejected."""

    NOT_YOUR_TURN = "not_your_turn"
    INVALID_PHASE = "invalid_phase"
    INVALID_LOCATION = "invalid_location"
    CANNOT_AFFORD = "cannot_afford"
    NO_PIECES_REMAINING = "no_pieces_remaining"
    EMPTY_DECK = "empty_deck"
    NO_SUCH_CARD = "no_such_card"
    INVALID_TRADE = "invalid_trade"
    NO_ACTIVE_TRADE = "no_active_trade"
    INVALID_DISCARD = "invalid_discard"
    GAME_OVER = "game_over"


_DEFAULT_MESSAGES = {
    ErrorKind.NOT_YOUR_TURN: "Not your turn",
    ErrorKind.INVALID_PHASE: "Invalid action for current phase",
    ErrorKind.INVALID_LOCATION: "Invalid placement location",
    ErrorKind.CANNOT_AFFORD: "Cannot afford this",
    ErrorKind.NO_PIECES_REMAINING: "No pieces remaining",
    ErrorKind.EMPTY_DECK: "No development cards left in deck",
    ErrorKind.NO_SUCH_CARD: "Don't have that card",
    ErrorKind.INVALID_TRADE: "Invalid trade",
    ErrorKind.NO_ACTIVE_TRADE: "No active trade",
    ErrorKind.INVALID_DISCARD: "Invalid discard",
    ErrorKind.GAME_OVER: "Game is over",
}


class ActionError(Exception):
    """Raised by resolvers when an action breaks a rule."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        self.message = message or _DEFAULT_MESSAGES[kind]
        super().__init__(self.message)


@dataclass
class ActionResult:
    """Outcome of applying an action.

    Attributes:
        success: Whether the action was applied.
        events: Events produced, in order (empty on failure).
        error: Why the action was rejected, if it was.
        message: Human-readable detail for a rejection.
    """

    success: bool
    events: list[Event] = field(default_factory=list)
    error: Optional[ErrorKind] = None
    message: Optional[str] = None

    @classmethod
    def ok(cls, events: list[Event]) -> ActionResult:
        return cls(success=True, events=events)

    @classmethod
    def rejected(cls, error: ActionError) -> ActionResult:
        return cls(success=False, error=error.kind, message=error.message)
