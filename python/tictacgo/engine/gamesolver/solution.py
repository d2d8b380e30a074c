"""Solver results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from tictacgo.engine.gamemoves.movegen import Move
from tictacgo.engine.gamestate.state import State


class SolveStatus(StrEnum):
    FOUND = "found"
    UNKNOWN = "unknown"
    UNSOLVABLE = "unsolvable"


@dataclass
class SolverMetrics:
    """
    Statistics gathered during a search.

    Attributes:
        push_count: Pushes in the solution (None unless one was found)
        step_count: Total moves in the solution, pushes included
        states_expanded: States taken off the frontier and expanded
        states_generated: Successors added to the frontier
        pruned_states: Successors dropped as losses or deadlocks
        mean_branching_factor: Average number of legal moves per expanded state
        dependency_count: Mutually constraining piece pairs in the start state
        computation_time_ms: Wall-clock time of the search
    """

    push_count: int | None = None
    step_count: int | None = None
    states_expanded: int = 0
    states_generated: int = 0
    pruned_states: int = 0
    mean_branching_factor: float = 0.0
    dependency_count: int = 0
    computation_time_ms: float = 0.0


@dataclass
class Solution:
    """
    Outcome of a search.

    ``states`` holds the state after each move, with the start state first,
    so ``states[i + 1]`` follows ``moves[i]``.
    """

    status: SolveStatus
    moves: list[Move] = field(default_factory=list)
    states: list[State] = field(default_factory=list)
    metrics: SolverMetrics = field(default_factory=SolverMetrics)
    reason: str | None = None

    @property
    def is_found(self) -> bool:
        return self.status is SolveStatus.FOUND

    @property
    def push_count(self) -> int | None:
        return self.metrics.push_count

    @property
    def move_count(self) -> int:
        return len(self.moves)

    @property
    def has_moves(self) -> bool:
        return bool(self.moves)

    @property
    def final_state(self) -> State | None:
        return self.states[-1] if self.states else None
