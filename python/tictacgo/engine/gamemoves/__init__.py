from tictacgo.engine.gamemoves.movegen import (
    Move,
    MoveKind,
    MoveMode,
    apply,
    forward_move,
    legal_moves,
    moves,
    pull_move,
    push_move,
    normalized,
    reachable,
    reachable_pulls,
    reverse_moves,
    step_move,
    transition,
)

__all__ = [
    "Move",
    "MoveKind",
    "MoveMode",
    "apply",
    "forward_move",
    "legal_moves",
    "moves",
    "pull_move",
    "push_move",
    "normalized",
    "reachable",
    "reachable_pulls",
    "reverse_moves",
    "step_move",
    "transition",
]
