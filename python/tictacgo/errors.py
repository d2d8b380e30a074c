"""Exceptions raised by the tic-tac-go engine."""

from __future__ import annotations


class TicTacGoError(Exception):
    """Base class for engine errors."""


class InvalidGeometry(TicTacGoError, ValueError):
    """The board can never host a winning line (too small or disconnected)."""


class LegalityError(TicTacGoError):
    """A move was applied to a state in which it is not legal."""

    def __init__(self, message: str, move: object | None = None) -> None:
        super().__init__(message)
        self.move = move


class DefinitelyUnsolvable(TicTacGoError):
    """The deadlock detector proved a state cannot reach a win."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"State is definitely unsolvable ({reason}).")
        self.reason = reason


class SolverBudgetExceeded(TicTacGoError):
    """The solver ran out of budget before deciding a state."""


class GenerationExhausted(TicTacGoError):
    """Every generation attempt failed, including the fallback puzzle."""
