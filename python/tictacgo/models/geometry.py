"""Irregular grids of playable cells."""

from __future__ import annotations

import random
import textwrap
from collections import deque
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterable

Cell = tuple[int, int]

# Board shape limits used by ``random_geometry``.
MIN_ROWS = 3
MAX_ROWS = 8
MIN_CELLS = 20
EXTRA_COLS = 8


class Direction(StrEnum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> tuple[int, int]:
        return _DELTAS[self]

    @property
    def opposite(self) -> Direction:
        return _OPPOSITES[self]

    @property
    def is_horizontal(self) -> bool:
        return self in (Direction.LEFT, Direction.RIGHT)


_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}

_OPPOSITES: dict[Direction, Direction] = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# Fixed iteration order; move enumeration and the neighbour table follow it.
DIRECTIONS: tuple[Direction, ...] = (
    Direction.UP,
    Direction.DOWN,
    Direction.LEFT,
    Direction.RIGHT,
)
DIRECTION_SLOTS: dict[Direction, int] = {d: i for i, d in enumerate(DIRECTIONS)}


@dataclass(frozen=True)
class BoardGeometry:
    """The set of playable cells of a board.

    Cells are stored in row-major order; a cell's position in ``cells`` is
    its *index*, which is what states and moves refer to.  Anything not in
    ``cells`` (holes, the area outside the board) is never a valid move
    target.
    """

    cells: tuple[Cell, ...]
    _index: dict[Cell, int] = field(init=False, repr=False, compare=False)
    _neighbors: tuple[tuple[int, ...], ...] = field(
        init=False, repr=False, compare=False
    )
    _hash: int = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(set(self.cells)))
        object.__setattr__(self, "cells", ordered)
        index = {cell: i for i, cell in enumerate(ordered)}
        object.__setattr__(self, "_index", index)

        table: list[tuple[int, ...]] = []
        for r, c in ordered:
            row: list[int] = []
            for d in DIRECTIONS:
                dr, dc = d.delta
                row.append(index.get((r + dr, c + dc), -1))
            table.append(tuple(row))
        object.__setattr__(self, "_neighbors", tuple(table))
        object.__setattr__(self, "_hash", hash(ordered))

    def __hash__(self) -> int:
        # Cached; geometries key the per-board line and motif caches.
        return self._hash

    # -- construction helpers -------------------------------------------------

    @classmethod
    def from_cells(cls, cells: Iterable[Cell]) -> BoardGeometry:
        return cls(cells=tuple(cells))

    @classmethod
    def rectangle(
        cls, rows: int, cols: int, holes: Iterable[Cell] = ()
    ) -> BoardGeometry:
        """Create a ``rows``×``cols`` board, optionally with ``holes`` removed."""
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Board must have positive size, got {rows}×{cols}.")
        removed = set(holes)
        return cls(
            cells=tuple(
                (r, c)
                for r in range(rows)
                for c in range(cols)
                if (r, c) not in removed
            )
        )

    @classmethod
    def from_ascii(cls, text: str) -> BoardGeometry:
        """Create a geometry from a text picture.

        Any character other than ``#`` or a space marks a playable cell::

            BoardGeometry.from_ascii('''
            ...
            .#.
            ...
            ''')
        """
        lines = textwrap.dedent(text).strip("\n").split("\n")
        return cls(
            cells=tuple(
                (r, c)
                for r, line in enumerate(lines)
                for c, ch in enumerate(line)
                if ch not in "# "
            )
        )

    # -- queries --------------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self.cells)

    @property
    def rows(self) -> int:
        """Height of the bounding box (rows are counted from 0)."""
        return max((r for r, _ in self.cells), default=-1) + 1

    @property
    def cols(self) -> int:
        """Width of the bounding box."""
        return max((c for _, c in self.cells), default=-1) + 1

    def __contains__(self, cell: object) -> bool:
        return cell in self._index

    def is_playable(self, cell: Cell) -> bool:
        return cell in self._index

    def index(self, cell: Cell) -> int:
        try:
            return self._index[cell]
        except KeyError:
            raise ValueError(f"Cell {cell} is not playable.") from None

    def cell(self, index: int) -> Cell:
        return self.cells[index]

    def neighbor(self, index: int, direction: Direction) -> int:
        """Index of the cell next to ``index`` in ``direction``, or -1."""
        return self._neighbors[index][DIRECTION_SLOTS[direction]]

    def neighbor_table(self) -> tuple[tuple[int, ...], ...]:
        """Per-cell neighbour indices in ``DIRECTIONS`` order (-1 = none)."""
        return self._neighbors

    def neighbors(self, index: int) -> list[int]:
        return [n for n in self._neighbors[index] if n >= 0]

    def is_connected(self) -> bool:
        if not self.cells:
            return False
        seen = {0}
        queue: deque[int] = deque([0])
        while queue:
            i = queue.popleft()
            for n in self.neighbors(i):
                if n not in seen:
                    seen.add(n)
                    queue.append(n)
        return len(seen) == len(self.cells)

    def distance(self, a: int, b: int) -> int:
        """Manhattan distance between two cell indices."""
        (ra, ca), (rb, cb) = self.cells[a], self.cells[b]
        return abs(ra - rb) + abs(ca - cb)

    def to_ascii(self) -> str:
        rows: list[str] = []
        for r in range(self.rows):
            rows.append(
                "".join(
                    "." if (r, c) in self._index else "#"
                    for c in range(self.cols)
                )
            )
        return "\n".join(rows)


# -- random shapes --------------------------------------------------------------


def random_geometry(rng: random.Random, holes: int = 0) -> BoardGeometry:
    """Return a random board shape.

    The board has 3–8 rows and enough columns for at least 20 cells.  Up
    to ``holes`` cells are removed at random; a removal is skipped when it
    would disconnect the board or leave it without a horizontal or vertical
    run of three cells.
    """
    rows = rng.randint(MIN_ROWS, MAX_ROWS)
    min_cols = -(-MIN_CELLS // rows)
    cols = rng.randint(min_cols, min_cols + EXTRA_COLS)
    geometry = BoardGeometry.rectangle(rows, cols)

    candidates = list(geometry.cells)
    rng.shuffle(candidates)
    removed: set[Cell] = set()
    for cell in candidates:
        if len(removed) >= holes:
            break
        trial = BoardGeometry.rectangle(rows, cols, removed | {cell})
        if trial.is_connected() and _has_run_of_three(trial):
            removed.add(cell)
            geometry = trial
    return geometry


def _has_run_of_three(geometry: BoardGeometry) -> bool:
    for r, c in geometry.cells:
        if (r, c + 1) in geometry and (r, c + 2) in geometry:
            return True
        if (r + 1, c) in geometry and (r + 2, c) in geometry:
            return True
    return False
