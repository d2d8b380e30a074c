"""Shared helpers for the tic-tac-go test suite."""

from __future__ import annotations

from collections import deque

import pytest

from tictacgo.engine.gamemoves import MoveKind, legal_moves, transition
from tictacgo.engine.gamerules import is_loss, is_win
from tictacgo.engine.gamestate import State, StateEncoder
from tictacgo.models import BoardGeometry


def board(text: str) -> State:
    """Parse an ASCII board ('.' empty, 'x' cross, 'o' circle, '@' player, '#' hole)."""
    return State.from_ascii(text)


def min_pushes(state: State) -> int | None:
    """Fewest pushes to a win by plain 0-1 BFS, or None if there is no win.

    Independent of the solver: no heuristic, no deadlock pruning.
    """
    encoder = StateEncoder(state.geometry)
    best = {encoder.encode(state): 0}
    queue: deque[tuple[int, State]] = deque([(0, state)])
    while queue:
        pushes, current = queue.popleft()
        if best[encoder.encode(current)] < pushes:
            continue
        if is_win(current):
            return pushes
        if is_loss(current):
            continue
        for move in legal_moves(current):
            child = transition(current, move)
            cost = pushes + (move.kind is MoveKind.PUSH)
            key = encoder.encode(child)
            if key in best and best[key] <= cost:
                continue
            best[key] = cost
            if cost == pushes:
                queue.appendleft((cost, child))
            else:
                queue.append((cost, child))
    return None


@pytest.fixture
def square3() -> BoardGeometry:
    return BoardGeometry.rectangle(3, 3)


@pytest.fixture
def square4() -> BoardGeometry:
    return BoardGeometry.rectangle(4, 4)
