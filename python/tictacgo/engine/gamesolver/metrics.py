"""Structural metrics of a position."""

from __future__ import annotations

from itertools import combinations

from tictacgo.engine.gamemoves.movegen import reachable
from tictacgo.engine.gamestate.state import State, iter_bits


def push_options(state: State, piece: int, obstacles: int = 0) -> int:
    """Directions ``piece`` could be pushed in, as a bitmask over neighbour slots.

    Only ``obstacles`` and ``piece`` itself block the board: a direction
    counts when the target cell is playable and free of obstacles, and the
    player can walk to the cell behind the piece.
    """
    blocked = obstacles | (1 << piece)
    region = reachable(state, blocked)
    nb = state.geometry.neighbor_table()[piece]
    options = 0
    # Slots come in opposite pairs: (UP, DOWN), (LEFT, RIGHT).
    for slot, target in enumerate(nb):
        behind = nb[slot ^ 1]
        if target < 0 or behind < 0 or (blocked >> target) & 1:
            continue
        if (region >> behind) & 1:
            options |= 1 << slot
    return options


def dependency_count(state: State) -> int:
    """Number of piece pairs that restrict each other's pushes.

    A pair (a, b) counts when fixing b in place removes a push option of
    a and fixing a removes one of b.  Extra obstacles only ever remove
    options, so comparing for inequality is enough.
    """
    pieces = list(iter_bits(state.pieces))
    alone = {p: push_options(state, p) for p in pieces}
    count = 0
    for a, b in combinations(pieces, 2):
        if push_options(state, a, 1 << b) == alone[a]:
            continue
        if push_options(state, b, 1 << a) != alone[b]:
            count += 1
    return count
