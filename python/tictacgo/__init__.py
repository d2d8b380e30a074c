"""tic-tac-go: a push-the-pieces puzzle where three circles in a row win."""

from tictacgo.engine.gamegenerator import Difficulty, GameGenerator, Puzzle, generate
from tictacgo.engine.gamemoves import apply, legal_moves
from tictacgo.engine.gamerules import is_loss, is_win
from tictacgo.engine.gamestate import State
from tictacgo.models import BoardGeometry

__version__ = "0.1.0"

__all__ = [
    "BoardGeometry",
    "Difficulty",
    "GameGenerator",
    "Puzzle",
    "State",
    "apply",
    "generate",
    "is_loss",
    "is_win",
    "legal_moves",
]
