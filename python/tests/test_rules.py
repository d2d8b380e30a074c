"""Win and loss conditions."""

from __future__ import annotations

from itertools import combinations

import pytest

from conftest import board
from tictacgo.engine.gamerules import (
    LineRules,
    crosses_aligned,
    is_loss,
    is_terminal,
    is_win,
    winning_lines,
)
from tictacgo.engine.gamestate import State
from tictacgo.models import BoardGeometry


@pytest.mark.parametrize(
    "rows,cols,diagonal,expected",
    [
        (3, 3, False, 6),
        (3, 3, True, 8),
        (3, 4, False, 10),
        (2, 2, False, 0),
    ],
)
def test_winning_line_count(rows: int, cols: int, diagonal: bool, expected: int) -> None:
    g = BoardGeometry.rectangle(rows, cols)
    assert len(winning_lines(g, LineRules(diagonal=diagonal))) == expected


def test_lines_skip_holes() -> None:
    g = BoardGeometry.rectangle(1, 5, holes=[(0, 2)])
    assert winning_lines(g) == ()


def test_longer_lines() -> None:
    g = BoardGeometry.rectangle(1, 5)
    assert len(winning_lines(g, LineRules(length=4))) == 2


def test_horizontal_win_counts_the_player() -> None:
    assert is_win(board("@oo"))
    assert not is_loss(board("@oo"))


def test_vertical_win() -> None:
    assert is_win(board(".@.\n.o.\n.o."))


def test_diagonal_win_only_when_enabled() -> None:
    s = board("@..\n.o.\n..o")
    assert not is_win(s)
    assert is_win(s, LineRules(diagonal=True))


def test_gap_is_not_a_win() -> None:
    assert not is_win(board("@o.o"))


def test_cross_line_loses() -> None:
    s = board("xxx\n@o.")
    assert crosses_aligned(s)
    assert is_loss(s)
    assert not is_win(s)
    assert is_terminal(s)


def test_win_takes_precedence() -> None:
    s = board("xxx\n@oo")
    assert is_win(s)
    assert not is_loss(s)
    assert is_terminal(s)


def test_nothing_aligned_is_not_terminal() -> None:
    assert not is_terminal(board("x.x\n@.o\no.."))


def test_win_and_loss_never_both_hold() -> None:
    g = BoardGeometry.rectangle(2, 3)
    cells = range(g.size)
    for player in cells:
        rest = [c for c in cells if c != player]
        for circles in combinations(rest, 2):
            free = [c for c in rest if c not in circles]
            for crosses in combinations(free, 3):
                s = State.create(g, player, circles, crosses)
                assert not (is_win(s) and is_loss(s))
