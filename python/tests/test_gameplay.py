"""Play sessions: moving, winning, losing and undo."""

from __future__ import annotations

from conftest import board
from tictacgo.engine.gamemoves import Move, MoveKind
from tictacgo.engine.gameplay import GamePlay
from tictacgo.engine.gamesolver import Solver
from tictacgo.models import BoardGeometry, Direction


def test_push_into_line_wins() -> None:
    game = GamePlay.from_state(board("@o.o"))
    assert not game.is_over
    assert game.move(Direction.RIGHT)
    assert game.is_won
    assert game.current == board(".@oo")
    # Nothing moves once the game is over.
    assert not game.move(Direction.LEFT)
    assert game.legal_moves() == []


def test_aligning_crosses_loses() -> None:
    game = GamePlay.from_state(board("x.x\n.x.\no@."))
    assert game.move(Direction.UP)
    assert game.is_lost
    assert not game.is_won
    assert game.is_over
    assert game.legal_moves() == []


def test_blocked_move_changes_nothing() -> None:
    game = GamePlay.from_state(board("@o.o"))
    assert not game.move(Direction.UP)
    assert not game.move(Direction.LEFT)
    assert game.state.moves == 0
    assert game.current == board("@o.o")


def test_illegal_prepared_move_is_refused() -> None:
    start = board("@o#.")
    game = GamePlay.from_state(start)
    assert not game.play(Move(MoveKind.PUSH, Direction.RIGHT, 0, 1, 1, -1))
    assert game.current == start


def test_undo_and_restart() -> None:
    game = GamePlay.from_state(board("o...\n.@..\n..o."))
    assert game.move(Direction.DOWN)
    assert game.move(Direction.RIGHT)
    assert (game.state.moves, game.state.pushes) == (2, 1)

    assert game.undo()
    assert (game.state.moves, game.state.pushes) == (1, 0)
    assert game.current == board("o...\n....\n.@o.")

    game.restart()
    assert game.state.moves == 0
    assert game.current == game.puzzle.initial_state
    assert not game.undo()


def test_new_game_from_generator() -> None:
    game = GamePlay(BoardGeometry.rectangle(3, 3), "easy", seed=1)
    assert game.current == game.puzzle.initial_state
    assert not game.is_over
    assert game.legal_moves()


def test_solution_plays_through() -> None:
    game = GamePlay(BoardGeometry.rectangle(3, 3), "easy", seed=2)
    solution = Solver(game.rules).solve(game.current)
    assert solution.is_found
    for move in solution.moves:
        assert game.play(move)
    assert game.is_won
    assert game.state.pushes == solution.push_count
