"""Board configurations as immutable values, and the state of a game in progress."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from tictacgo.models.board import Board, Occupant
from tictacgo.models.geometry import BoardGeometry


def iter_bits(mask: int) -> Iterator[int]:
    """Yield the indices of the set bits of ``mask``, lowest first."""
    while mask:
        low = mask & -mask
        yield low.bit_length() - 1
        mask ^= low


@dataclass(frozen=True, slots=True)
class State:
    """A snapshot of occupancy plus player position.

    Occupancy is kept as two bitmasks over cell indices of ``geometry``:
    ``circles`` holds the non-player circles, ``crosses`` the crosses.
    The player is a circle too; ``circle_mask`` includes it.  Equality and
    hashing ignore the geometry, so states are only comparable within one
    board.
    """

    geometry: BoardGeometry = field(compare=False, repr=False)
    player: int
    circles: int = 0
    crosses: int = 0

    # -- construction helpers -------------------------------------------------

    @classmethod
    def create(
        cls,
        geometry: BoardGeometry,
        player: int,
        circles: Iterable[int] = (),
        crosses: Iterable[int] = (),
    ) -> State:
        """Build a state from cell indices, checking the occupancy invariants."""
        if not 0 <= player < geometry.size:
            raise ValueError(f"Player index {player} is off the board.")
        seen = {player}
        circle_mask = 0
        cross_mask = 0
        for kind, indices in (("circle", circles), ("cross", crosses)):
            for i in indices:
                if not 0 <= i < geometry.size:
                    raise ValueError(f"{kind} index {i} is off the board.")
                if i in seen:
                    raise ValueError(f"Cell {geometry.cell(i)} is occupied twice.")
                seen.add(i)
                if kind == "circle":
                    circle_mask |= 1 << i
                else:
                    cross_mask |= 1 << i
        return cls(geometry, player, circle_mask, cross_mask)

    @classmethod
    def from_board(cls, board: Board) -> State:
        board.validate()
        g = board.geometry
        return cls.create(
            g,
            player=g.index(board.player_cell),
            circles=[g.index(c) for c in board.cells_with(Occupant.CIRCLE)],
            crosses=[g.index(c) for c in board.cells_with(Occupant.CROSS)],
        )

    @classmethod
    def from_ascii(cls, text: str) -> State:
        return cls.from_board(Board.from_ascii(text))

    def to_board(self) -> Board:
        board = Board(geometry=self.geometry)
        for i in iter_bits(self.circles):
            board.place(self.geometry.cell(i), Occupant.CIRCLE)
        for i in iter_bits(self.crosses):
            board.place(self.geometry.cell(i), Occupant.CROSS)
        board.place(self.geometry.cell(self.player), Occupant.PLAYER)
        return board

    def to_ascii(self) -> str:
        return self.to_board().to_ascii()

    # -- queries --------------------------------------------------------------

    @property
    def player_bit(self) -> int:
        return 1 << self.player

    @property
    def circle_mask(self) -> int:
        """All circles, the player included."""
        return self.circles | (1 << self.player)

    @property
    def pieces(self) -> int:
        """Occupants that can be pushed (everything but the player)."""
        return self.circles | self.crosses

    @property
    def occupied(self) -> int:
        return self.circles | self.crosses | (1 << self.player)

    def is_empty(self, index: int) -> bool:
        return not (self.occupied >> index) & 1

    def occupant(self, index: int) -> Occupant:
        bit = 1 << index
        if index == self.player:
            return Occupant.PLAYER
        if self.circles & bit:
            return Occupant.CIRCLE
        if self.crosses & bit:
            return Occupant.CROSS
        return Occupant.EMPTY

    def circle_indices(self) -> list[int]:
        return list(iter_bits(self.circles))

    def cross_indices(self) -> list[int]:
        return list(iter_bits(self.crosses))


class GameState:
    """Holds the current state, move counters, undo history and elapsed time."""

    def __init__(self, state: State) -> None:
        self.initial = state
        self.state = state
        self.moves: int = 0
        self.pushes: int = 0
        self._history: list[tuple[State, bool]] = []
        self._start_time: float = time.time()
        self._elapsed_banked: float = 0.0
        self._running: bool = True

    # -- time tracking --------------------------------------------------------

    @property
    def elapsed_time(self) -> float:
        if self._running:
            return self._elapsed_banked + (time.time() - self._start_time)
        return self._elapsed_banked

    def pause(self) -> None:
        if self._running:
            self._elapsed_banked += time.time() - self._start_time
            self._running = False

    def resume(self) -> None:
        if not self._running:
            self._start_time = time.time()
            self._running = True

    # -- moves ----------------------------------------------------------------

    def advance(self, new_state: State, pushed: bool) -> None:
        self._history.append((self.state, pushed))
        self.state = new_state
        self.moves += 1
        if pushed:
            self.pushes += 1

    def undo(self) -> bool:
        if not self._history:
            return False
        self.state, pushed = self._history.pop()
        self.moves -= 1
        if pushed:
            self.pushes -= 1
        return True

    def reset(self) -> None:
        self.state = self.initial
        self.moves = 0
        self.pushes = 0
        self._history.clear()

    @property
    def can_undo(self) -> bool:
        return bool(self._history)
