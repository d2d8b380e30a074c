"""Win and loss conditions, as pure functions of occupancy."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from tictacgo.engine.gamestate.state import State
from tictacgo.models.geometry import BoardGeometry


@dataclass(frozen=True)
class LineRules:
    """Which straight runs of cells count as a line.

    Horizontal and vertical runs always count; ``diagonal`` adds both
    diagonals.  ``length`` is the number of pieces needed in a row.
    """

    length: int = 3
    diagonal: bool = False

    @property
    def steps(self) -> tuple[tuple[int, int], ...]:
        if self.diagonal:
            return ((0, 1), (1, 0), (1, 1), (1, -1))
        return ((0, 1), (1, 0))


DEFAULT_RULES = LineRules()


@lru_cache(maxsize=256)
def winning_lines(
    geometry: BoardGeometry, rules: LineRules = DEFAULT_RULES
) -> tuple[int, ...]:
    """Bitmasks of every run of ``rules.length`` consecutive playable cells."""
    lines: list[int] = []
    for r, c in geometry.cells:
        for dr, dc in rules.steps:
            mask = 0
            for k in range(rules.length):
                cell = (r + k * dr, c + k * dc)
                if cell not in geometry:
                    break
                mask |= 1 << geometry.index(cell)
            else:
                lines.append(mask)
    return tuple(lines)


def _aligned(mask: int, lines: tuple[int, ...]) -> bool:
    for line in lines:
        if mask & line == line:
            return True
    return False


def is_win(state: State, rules: LineRules = DEFAULT_RULES) -> bool:
    """True when circles (the player included) fill a winning line."""
    return _aligned(state.circle_mask, winning_lines(state.geometry, rules))


def crosses_aligned(state: State, rules: LineRules = DEFAULT_RULES) -> bool:
    return _aligned(state.crosses, winning_lines(state.geometry, rules))


def is_loss(state: State, rules: LineRules = DEFAULT_RULES) -> bool:
    """True when crosses fill a line and the circles do not.

    A move that completes both lines at once counts as a win.
    """
    return crosses_aligned(state, rules) and not is_win(state, rules)


def is_terminal(state: State, rules: LineRules = DEFAULT_RULES) -> bool:
    return is_win(state, rules) or crosses_aligned(state, rules)
