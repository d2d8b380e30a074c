"""Board model: a geometry plus a mutable occupancy mapping."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from enum import StrEnum

from tictacgo.models.geometry import BoardGeometry, Cell


class Occupant(StrEnum):
    EMPTY = "empty"
    CROSS = "cross"
    CIRCLE = "circle"
    PLAYER = "player"

    @property
    def is_circle(self) -> bool:
        """The player piece is a circle too and counts toward a line."""
        return self in (Occupant.CIRCLE, Occupant.PLAYER)


# Text symbols used by ``Board.from_ascii`` / ``Board.to_ascii``.
SYMBOLS: dict[Occupant, str] = {
    Occupant.EMPTY: ".",
    Occupant.CROSS: "x",
    Occupant.CIRCLE: "o",
    Occupant.PLAYER: "@",
}
HOLE = "#"
_FROM_SYMBOL = {v: k for k, v in SYMBOLS.items()}


@dataclass
class Board:
    """A geometry together with the pieces standing on it.

    ``occupancy`` only stores non-empty cells.  The mapping never puts two
    occupants on one cell, never uses a non-playable cell, and holds at
    most one player; ``place`` enforces all three.
    """

    geometry: BoardGeometry
    occupancy: dict[Cell, Occupant] = field(default_factory=dict)

    # -- construction helpers -------------------------------------------------

    @classmethod
    def from_ascii(cls, text: str) -> Board:
        """Create a board from a text picture.

        ``.`` empty, ``x`` cross, ``o`` circle, ``@`` player, ``#`` hole::

            Board.from_ascii('''
            .o.
            @o.
            x#.
            ''')
        """
        lines = textwrap.dedent(text).strip("\n").split("\n")
        cells: list[Cell] = []
        pieces: list[tuple[Cell, Occupant]] = []
        for r, line in enumerate(lines):
            for c, ch in enumerate(line):
                if ch in (HOLE, " "):
                    continue
                if ch not in _FROM_SYMBOL:
                    raise ValueError(f"Unknown board symbol {ch!r} at {(r, c)}.")
                cells.append((r, c))
                occupant = _FROM_SYMBOL[ch]
                if occupant is not Occupant.EMPTY:
                    pieces.append(((r, c), occupant))

        board = cls(geometry=BoardGeometry.from_cells(cells))
        for cell, occupant in pieces:
            board.place(cell, occupant)
        board.validate()
        return board

    # -- mutation -------------------------------------------------------------

    def place(self, cell: Cell, occupant: Occupant) -> None:
        if not self.geometry.is_playable(cell):
            raise ValueError(f"Cannot place {occupant} on non-playable cell {cell}.")
        if occupant is Occupant.EMPTY:
            self.occupancy.pop(cell, None)
            return
        current = self.occupancy.get(cell, Occupant.EMPTY)
        if current is not Occupant.EMPTY:
            raise ValueError(f"Cell {cell} already holds a {current}.")
        if occupant is Occupant.PLAYER and self.player_cell is not None:
            raise ValueError("Board already has a player.")
        self.occupancy[cell] = occupant

    def clear(self, cell: Cell) -> None:
        self.occupancy.pop(cell, None)

    # -- queries --------------------------------------------------------------

    def get(self, cell: Cell) -> Occupant:
        return self.occupancy.get(cell, Occupant.EMPTY)

    @property
    def player_cell(self) -> Cell | None:
        for cell, occupant in self.occupancy.items():
            if occupant is Occupant.PLAYER:
                return cell
        return None

    def cells_with(self, occupant: Occupant) -> list[Cell]:
        return sorted(c for c, o in self.occupancy.items() if o is occupant)

    def validate(self) -> None:
        """Raise ``ValueError`` unless exactly one player is on the board."""
        players = self.cells_with(Occupant.PLAYER)
        if len(players) != 1:
            raise ValueError(f"Board needs exactly one player, found {len(players)}.")

    def copy(self) -> Board:
        return Board(geometry=self.geometry, occupancy=dict(self.occupancy))

    def to_ascii(self) -> str:
        rows: list[str] = []
        for r in range(self.geometry.rows):
            row: list[str] = []
            for c in range(self.geometry.cols):
                if not self.geometry.is_playable((r, c)):
                    row.append(HOLE)
                else:
                    row.append(SYMBOLS[self.get((r, c))])
            rows.append("".join(row))
        return "\n".join(rows)
