"""Steps, pushes and pulls.

Forward play uses steps and pushes; the generator scrambles with steps
and pulls.  Push and pull are built separately on top of the same
``_is_open`` check, and a pull in direction ``d`` undoes a push in
direction ``d.opposite``.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import StrEnum

from tictacgo.engine.gamestate.state import State, iter_bits
from tictacgo.errors import LegalityError
from tictacgo.models.geometry import DIRECTIONS, Direction


class MoveKind(StrEnum):
    STEP = "step"
    PUSH = "push"
    PULL = "pull"


class MoveMode(StrEnum):
    FORWARD = "forward"
    REVERSE = "reverse"


@dataclass(frozen=True)
class Move:
    """A single player move and the cells it touches.

    ``direction`` is the way the player moves.  For pushes and pulls
    ``piece_origin``/``piece_destination`` give the displaced occupant's
    cells; they are -1 for steps.
    """

    kind: MoveKind
    direction: Direction
    origin: int
    destination: int
    piece_origin: int = -1
    piece_destination: int = -1

    @property
    def moves_piece(self) -> bool:
        return self.kind is not MoveKind.STEP

    @property
    def affected(self) -> tuple[int, ...]:
        if self.kind is MoveKind.STEP:
            return (self.origin, self.destination)
        return tuple(
            dict.fromkeys(
                (self.origin, self.destination, self.piece_origin, self.piece_destination)
            )
        )

    def describe(self, state: State) -> str:
        g = state.geometry
        text = f"{self.kind} {self.direction} {g.cell(self.origin)}->{g.cell(self.destination)}"
        if self.moves_piece:
            text += f" ({g.cell(self.piece_origin)}->{g.cell(self.piece_destination)})"
        return text


# -- geometric checks -----------------------------------------------------------


def _is_open(state: State, index: int) -> bool:
    """A cell a piece or the player may enter: on the board and empty."""
    return index >= 0 and not (state.occupied >> index) & 1


def _is_piece(state: State, index: int) -> bool:
    return index >= 0 and bool((state.pieces >> index) & 1)


# -- single moves ---------------------------------------------------------------


def step_move(state: State, direction: Direction) -> Move | None:
    dest = state.geometry.neighbor(state.player, direction)
    if not _is_open(state, dest):
        return None
    return Move(MoveKind.STEP, direction, state.player, dest)


def push_move(state: State, direction: Direction) -> Move | None:
    """Walk into an adjacent piece and shove it one cell further."""
    g = state.geometry
    dest = g.neighbor(state.player, direction)
    if not _is_piece(state, dest):
        return None
    beyond = g.neighbor(dest, direction)
    if not _is_open(state, beyond):
        return None
    return Move(MoveKind.PUSH, direction, state.player, dest, dest, beyond)


def pull_move(state: State, direction: Direction) -> Move | None:
    """Step away from the piece behind the player, dragging it along."""
    g = state.geometry
    dest = g.neighbor(state.player, direction)
    if not _is_open(state, dest):
        return None
    source = g.neighbor(state.player, direction.opposite)
    if not _is_piece(state, source):
        return None
    return Move(MoveKind.PULL, direction, state.player, dest, source, state.player)


def forward_move(state: State, direction: Direction) -> Move | None:
    """The step or push the player makes when moving in ``direction``."""
    return step_move(state, direction) or push_move(state, direction)


_BUILDERS = {
    MoveKind.STEP: step_move,
    MoveKind.PUSH: push_move,
    MoveKind.PULL: pull_move,
}


# -- enumeration ----------------------------------------------------------------


def moves(state: State, mode: MoveMode = MoveMode.FORWARD) -> list[Move]:
    """All legal moves of ``mode`` in a fixed direction order.

    An empty list is an ordinary answer (the player is boxed in), not an
    error.
    """
    found: list[Move] = []
    for direction in DIRECTIONS:
        step = step_move(state, direction)
        if step is not None:
            found.append(step)
        if mode is MoveMode.FORWARD:
            if step is None:
                push = push_move(state, direction)
                if push is not None:
                    found.append(push)
        else:
            pull = pull_move(state, direction)
            if pull is not None:
                found.append(pull)
    return found


def legal_moves(state: State) -> list[Move]:
    return moves(state, MoveMode.FORWARD)


def reverse_moves(state: State) -> list[Move]:
    return moves(state, MoveMode.REVERSE)


# -- application ----------------------------------------------------------------


def transition(state: State, move: Move) -> State:
    """Apply ``move`` without checking it; callers pass generated moves only."""
    if move.kind is MoveKind.STEP:
        return State(state.geometry, move.destination, state.circles, state.crosses)

    src = 1 << move.piece_origin
    dst = 1 << move.piece_destination
    circles = state.circles
    crosses = state.crosses
    if circles & src:
        circles = (circles & ~src) | dst
    else:
        crosses = (crosses & ~src) | dst
    return State(state.geometry, move.destination, circles, crosses)


def apply(state: State, move: Move) -> State:
    """Return the state after ``move``.

    Raises ``LegalityError`` if ``move`` is not legal in ``state``; the
    given state is never modified.
    """
    expected = _BUILDERS[move.kind](state, move.direction)
    if expected != move:
        raise LegalityError(
            f"Illegal {move.kind} {move.direction} from {state.geometry.cell(state.player)}.",
            move,
        )
    return transition(state, move)


# -- reachability ---------------------------------------------------------------


def reachable(state: State, blocked: int | None = None) -> int:
    """Bitmask of cells the player can walk to without pushing.

    ``blocked`` overrides the obstacle mask (default: every piece).
    """
    table = state.geometry.neighbor_table()
    walls = state.pieces if blocked is None else blocked
    seen = 1 << state.player
    queue: deque[int] = deque([state.player])
    while queue:
        i = queue.popleft()
        for n in table[i]:
            if n < 0:
                continue
            bit = 1 << n
            if seen & bit or walls & bit:
                continue
            seen |= bit
            queue.append(n)
    return seen


def reachable_pulls(state: State) -> list[Move]:
    """Every pull the player can make after walking within its region.

    Each pull is built as if the player stood on its ``origin``;
    ``transition(state, move)`` gives the position after the walk and the
    pull.  Cells are visited lowest index first.
    """
    found: list[Move] = []
    for cell in iter_bits(reachable(state)):
        here = State(state.geometry, cell, state.circles, state.crosses)
        for direction in DIRECTIONS:
            pull = pull_move(here, direction)
            if pull is not None:
                found.append(pull)
    return found


def normalized(state: State) -> State:
    """``state`` with the player on the lowest cell of its walkable region."""
    region = reachable(state)
    lowest = (region & -region).bit_length() - 1
    return State(state.geometry, lowest, state.circles, state.crosses)
