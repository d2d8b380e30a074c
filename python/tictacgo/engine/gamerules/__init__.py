from tictacgo.engine.gamerules.rules import (
    DEFAULT_RULES,
    LineRules,
    crosses_aligned,
    is_loss,
    is_terminal,
    is_win,
    winning_lines,
)

__all__ = [
    "DEFAULT_RULES",
    "LineRules",
    "crosses_aligned",
    "is_loss",
    "is_terminal",
    "is_win",
    "winning_lines",
]
