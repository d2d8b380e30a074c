"""Move engine: steps, pushes, pulls and their legality."""

from __future__ import annotations

import pytest

from conftest import board
from tictacgo.engine.gamemoves import (
    Move,
    MoveKind,
    MoveMode,
    apply,
    legal_moves,
    moves,
    normalized,
    pull_move,
    push_move,
    reachable,
    reachable_pulls,
    reverse_moves,
    step_move,
    transition,
)
from tictacgo.errors import LegalityError
from tictacgo.models import Direction


def _kinds(found: list[Move]) -> list[tuple[MoveKind, Direction]]:
    return [(m.kind, m.direction) for m in found]


# -- forward moves --------------------------------------------------------------


def test_forward_moves_in_direction_order() -> None:
    s = board("@o.\n...")
    assert _kinds(legal_moves(s)) == [
        (MoveKind.STEP, Direction.DOWN),
        (MoveKind.PUSH, Direction.RIGHT),
    ]


def test_push_moves_piece_and_player() -> None:
    s = board("@o.\n...")
    move = push_move(s, Direction.RIGHT)
    assert move is not None
    assert (move.origin, move.destination) == (0, 1)
    assert (move.piece_origin, move.piece_destination) == (1, 2)
    assert apply(s, move) == board(".@o\n...")


def test_push_moves_crosses_too() -> None:
    s = board("@x.")
    assert apply(s, push_move(s, Direction.RIGHT)) == board(".@x")


def test_cannot_push_two_pieces() -> None:
    s = board("@ox.")
    assert push_move(s, Direction.RIGHT) is None
    assert legal_moves(s) == []


def test_cannot_push_into_hole() -> None:
    s = board("@o#.")
    assert push_move(s, Direction.RIGHT) is None


def test_boxed_in_player_has_no_moves() -> None:
    s = board("@x\nxx")
    assert legal_moves(s) == []
    assert reverse_moves(s) == []


def test_step_into_empty_cell_only() -> None:
    s = board("@o\n..")
    assert step_move(s, Direction.RIGHT) is None
    step = step_move(s, Direction.DOWN)
    assert step is not None
    assert apply(s, step) == board(".o\n@.")
    assert step.affected == (0, 2)


# -- reverse moves --------------------------------------------------------------


def test_pull_drags_piece_behind_player() -> None:
    s = board(".@o")
    move = pull_move(s, Direction.LEFT)
    assert move is not None
    assert move.kind is MoveKind.PULL
    assert (move.piece_origin, move.piece_destination) == (2, 1)
    assert apply(s, move) == board("@o.")


def test_pull_needs_room_and_a_piece() -> None:
    assert pull_move(board("@o."), Direction.LEFT) is None
    assert pull_move(board(".@."), Direction.LEFT) is None
    assert pull_move(board("#@o"), Direction.LEFT) is None


def test_reverse_mode_offers_steps_and_pulls() -> None:
    s = board(".@o\n...")
    assert _kinds(moves(s, MoveMode.REVERSE)) == [
        (MoveKind.STEP, Direction.DOWN),
        (MoveKind.STEP, Direction.LEFT),
        (MoveKind.PULL, Direction.LEFT),
    ]


@pytest.mark.parametrize(
    "text",
    [
        "@o.\n...",
        ".x.\n.@.\n.o.\n...",
        "..o.\n.x@.\n....",
        "#.o\n...\n.x@",
    ],
)
def test_pull_undoes_push(text: str) -> None:
    start = board(text)
    pushes = [m for m in legal_moves(start) if m.kind is MoveKind.PUSH]
    assert pushes
    for push in pushes:
        after = apply(start, push)
        pull = pull_move(after, push.direction.opposite)
        assert pull is not None
        assert pull in reverse_moves(after)
        assert apply(after, pull) == start


def test_step_undoes_step() -> None:
    start = board("@.\n..")
    for step in legal_moves(start):
        after = apply(start, step)
        back = step_move(after, step.direction.opposite)
        assert back is not None
        assert apply(after, back) == start


# -- legality -------------------------------------------------------------------


def test_apply_rejects_push_off_geometry() -> None:
    s = board("@o#.")
    forged = Move(MoveKind.PUSH, Direction.RIGHT, 0, 1, 1, -1)
    with pytest.raises(LegalityError) as info:
        apply(s, forged)
    assert info.value.move == forged
    assert s == board("@o#.")


def test_apply_rejects_stale_moves() -> None:
    s = board("@o.\n...")
    push = push_move(s, Direction.RIGHT)
    moved = apply(s, push)
    with pytest.raises(LegalityError):
        apply(moved, push)


def test_transition_returns_new_state() -> None:
    s = board("@o.")
    after = transition(s, push_move(s, Direction.RIGHT))
    assert after is not s
    assert s == board("@o.")


# -- reachability ---------------------------------------------------------------


def test_reachable_stops_at_pieces() -> None:
    s = board("@x.\n.x.")
    assert reachable(s) == (1 << 0) | (1 << 3)


def test_reachable_with_custom_obstacles() -> None:
    s = board("@x.\n.x.")
    assert reachable(s, blocked=0) == 0b111111


def test_pulls_from_anywhere_in_the_region() -> None:
    s = board("o.@")
    pulls = reachable_pulls(s)
    assert pulls == [Move(MoveKind.PULL, Direction.RIGHT, 1, 2, 0, 1)]
    assert transition(s, pulls[0]) == board(".o@")


def test_region_pulls_include_walks() -> None:
    s = board("x@.\n...\n...")
    assert reachable_pulls(s) == [
        Move(MoveKind.PULL, Direction.RIGHT, 1, 2, 0, 1),
        Move(MoveKind.PULL, Direction.DOWN, 3, 6, 0, 3),
    ]
    # Without walking only the first one is open.
    own = [m for m in reverse_moves(s) if m.kind is MoveKind.PULL]
    assert own == reachable_pulls(s)[:1]


def test_normalized_moves_player_to_lowest_cell() -> None:
    assert normalized(board("o.@")) == board("o@.")
    assert normalized(board("o@.")) == board("o@.")
    assert normalized(board(".x\n.@")) == board("@x\n..")


def test_describe_mentions_cells() -> None:
    s = board("@o.")
    text = push_move(s, Direction.RIGHT).describe(s)
    assert "push" in text
    assert "(0, 1)->(0, 2)" in text
