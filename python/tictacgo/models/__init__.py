from tictacgo.models.board import Board, Occupant
from tictacgo.models.geometry import (
    DIRECTIONS,
    BoardGeometry,
    Cell,
    Direction,
    random_geometry,
)

__all__ = [
    "Board",
    "BoardGeometry",
    "Cell",
    "DIRECTIONS",
    "Direction",
    "Occupant",
    "random_geometry",
]
