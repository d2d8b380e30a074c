"""Deadlock detection — cheap, one-sided unsolvability checks.

Every check here is sound: a state reported ``DEFINITELY_UNSOLVABLE``
has no solution.  The converse does not hold; states that slip through
are left for the solver.

Frozen pieces are the core idea.  A piece that can never be pushed
again stays on its cell forever, so a frozen cross rules out every line
through its cell, and a frozen circle rules out every line that misses
it once there are no spare circles left.  When no winning line survives,
the state is dead.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from tictacgo.engine.gamemoves.movegen import reachable
from tictacgo.engine.gamerules.rules import DEFAULT_RULES, LineRules, winning_lines
from tictacgo.engine.gamestate.state import State, iter_bits
from tictacgo.errors import DefinitelyUnsolvable
from tictacgo.models.geometry import BoardGeometry

logger = logging.getLogger(__name__)

# Neighbour-table slots, see ``DIRECTIONS``.
_UP, _DOWN, _LEFT, _RIGHT = 0, 1, 2, 3


class Verdict(StrEnum):
    POSSIBLY_SOLVABLE = "possibly_solvable"
    DEFINITELY_UNSOLVABLE = "definitely_unsolvable"


class DeadlockReason(StrEnum):
    TOO_FEW_CIRCLES = "too_few_circles"
    LOSS = "loss"
    CORNER_LOCK = "corner_lock"
    BLOCK_2X2 = "block_2x2"
    FREEZE = "freeze"
    CORRAL = "corral"


@dataclass(frozen=True)
class DeadlockReport:
    verdict: Verdict
    reason: DeadlockReason | None = None
    frozen: int = 0

    @property
    def is_deadlocked(self) -> bool:
        return self.verdict is Verdict.DEFINITELY_UNSOLVABLE


_POSSIBLY_SOLVABLE = DeadlockReport(Verdict.POSSIBLY_SOLVABLE)


class DeadlockDetector:
    """Deadlock checks for states on one geometry."""

    def __init__(
        self, geometry: BoardGeometry, rules: LineRules = DEFAULT_RULES
    ) -> None:
        self.geometry = geometry
        self.rules = rules
        self.lines = winning_lines(geometry, rules)
        self._table = geometry.neighbor_table()

        # Cells with a wall on both axes: any piece there is stuck for good.
        locked = 0
        for i, nb in enumerate(self._table):
            if (nb[_UP] < 0 or nb[_DOWN] < 0) and (nb[_LEFT] < 0 or nb[_RIGHT] < 0):
                locked |= 1 << i
        self.wall_locked = locked

        squares: list[int] = []
        for r, c in geometry.cells:
            quad = ((r, c), (r, c + 1), (r + 1, c), (r + 1, c + 1))
            if all(cell in geometry for cell in quad):
                mask = 0
                for cell in quad:
                    mask |= 1 << geometry.index(cell)
                squares.append(mask)
        self.squares = tuple(squares)

    # -- public API -----------------------------------------------------------

    def check(self, state: State) -> DeadlockReport:
        """Run every check; the first one that fires decides the report."""
        circles = state.circle_mask
        if self._aligned(circles):
            return _POSSIBLY_SOLVABLE
        if circles.bit_count() < self.rules.length:
            return self._dead(DeadlockReason.TOO_FEW_CIRCLES)
        if self._aligned(state.crosses):
            return self._dead(DeadlockReason.LOSS)

        pieces = state.pieces
        locked = pieces & self.wall_locked
        if locked and not self.has_feasible_line(state, locked):
            return self._dead(DeadlockReason.CORNER_LOCK, locked)

        blocked = 0
        for square in self.squares:
            if pieces & square == square:
                blocked |= square
        if blocked and not self.has_feasible_line(state, blocked):
            return self._dead(DeadlockReason.BLOCK_2X2, blocked)

        frozen = self.frozen_pieces(state)
        if frozen and not self.has_feasible_line(state, frozen):
            return self._dead(DeadlockReason.FREEZE, frozen)

        if self._is_corralled(state):
            return self._dead(DeadlockReason.CORRAL)
        return _POSSIBLY_SOLVABLE

    def is_deadlocked(self, state: State) -> bool:
        return self.check(state).is_deadlocked

    def require_possibly_solvable(self, state: State) -> None:
        """Raise ``DefinitelyUnsolvable`` when a check fires."""
        report = self.check(state)
        if report.is_deadlocked:
            raise DefinitelyUnsolvable(str(report.reason))

    # -- frozen pieces --------------------------------------------------------

    def frozen_pieces(self, state: State) -> int:
        """Bitmask of pieces that can never be pushed again.

        A piece is blocked along an axis when either neighbour on that axis
        is off the board or a frozen piece; it is frozen when both axes are
        blocked.  Pieces already under examination count as walls, which
        settles mutual blocking (two pieces side by side against a wall,
        2×2 squares and the like).
        """
        pieces = state.pieces
        frozen = 0
        for i in iter_bits(pieces):
            if self._is_frozen(i, pieces, 0):
                frozen |= 1 << i
        return frozen

    def _is_frozen(self, index: int, pieces: int, visiting: int) -> bool:
        visiting |= 1 << index
        nb = self._table[index]
        return self._axis_blocked(
            nb[_LEFT], nb[_RIGHT], pieces, visiting
        ) and self._axis_blocked(nb[_UP], nb[_DOWN], pieces, visiting)

    def _axis_blocked(self, a: int, b: int, pieces: int, visiting: int) -> bool:
        for n in (a, b):
            if n < 0 or (visiting >> n) & 1:
                return True
        for n in (a, b):
            if (pieces >> n) & 1 and self._is_frozen(n, pieces, visiting):
                return True
        return False

    # -- line feasibility -----------------------------------------------------

    def has_feasible_line(self, state: State, frozen: int) -> bool:
        """Whether some line could still be filled with ``frozen`` pieces fixed."""
        frozen_crosses = frozen & state.crosses
        frozen_circles = frozen & state.circles
        movable = (state.circle_mask & ~frozen).bit_count()
        need = self.rules.length
        for line in self.lines:
            if line & frozen_crosses:
                continue
            if movable + (frozen_circles & line).bit_count() >= need:
                return True
        return False

    # -- corral ---------------------------------------------------------------

    def _is_corralled(self, state: State) -> bool:
        """No push is possible anywhere the player can walk, and walking alone
        never completes a line."""
        region = reachable(state)
        pieces = state.pieces
        table = self._table
        for i in iter_bits(region):
            for slot, n in enumerate(table[i]):
                if n < 0 or not (pieces >> n) & 1:
                    continue
                beyond = table[n][slot]
                if beyond >= 0 and not (pieces >> beyond) & 1:
                    return False
        for i in iter_bits(region):
            if self._aligned(state.circles | (1 << i)):
                return False
        return True

    # -- helpers --------------------------------------------------------------

    def _aligned(self, mask: int) -> bool:
        for line in self.lines:
            if mask & line == line:
                return True
        return False

    def _dead(self, reason: DeadlockReason, frozen: int = 0) -> DeadlockReport:
        logger.debug(f"Deadlock detected: {reason}")
        return DeadlockReport(Verdict.DEFINITELY_UNSOLVABLE, reason, frozen)
