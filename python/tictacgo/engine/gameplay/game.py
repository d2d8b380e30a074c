"""Core gameplay logic — processes moves and checks win and loss."""

from __future__ import annotations

from tictacgo.engine.gamegenerator import Difficulty, GameGenerator, Puzzle
from tictacgo.engine.gamemoves import Move, MoveKind, apply, forward_move, legal_moves
from tictacgo.engine.gamerules import DEFAULT_RULES, LineRules, is_loss, is_win
from tictacgo.engine.gamestate import GameState, State
from tictacgo.errors import LegalityError
from tictacgo.models.geometry import BoardGeometry, Direction


class GamePlay:
    """Orchestrates a single game session."""

    def __init__(
        self,
        geometry: BoardGeometry,
        difficulty: Difficulty | str = Difficulty.EASY,
        seed: int = 0,
        generator: GameGenerator | None = None,
    ) -> None:
        generator = generator or GameGenerator()
        self.puzzle = generator.generate(geometry, difficulty, seed)
        self.rules = generator.rules
        self.state = GameState(self.puzzle.initial_state)

    @classmethod
    def from_puzzle(cls, puzzle: Puzzle, rules: LineRules = DEFAULT_RULES) -> GamePlay:
        """Create a game session from an existing puzzle."""
        obj = object.__new__(cls)
        obj.puzzle = puzzle
        obj.rules = rules
        obj.state = GameState(puzzle.initial_state)
        return obj

    @classmethod
    def from_state(cls, state: State, rules: LineRules = DEFAULT_RULES) -> GamePlay:
        """Create a game session from a position (e.g. loaded from a file)."""
        puzzle = Puzzle(state.geometry, state, Difficulty.EASY, None, 0)
        return cls.from_puzzle(puzzle, rules)

    # -- movement -------------------------------------------------------------

    def move(self, direction: Direction) -> bool:
        """Move the player in ``direction``, pushing a piece if one is in the way.

        Returns False, leaving the position unchanged, when the move is not
        possible or the game is already over.
        """
        if self.is_over:
            return False
        move = forward_move(self.state.state, direction)
        if move is None:
            return False
        return self.play(move)

    def play(self, move: Move) -> bool:
        """Apply a prepared move; False if it is illegal here."""
        if self.is_over:
            return False
        try:
            new_state = apply(self.state.state, move)
        except LegalityError:
            return False
        self.state.advance(new_state, move.kind is MoveKind.PUSH)
        return True

    def undo(self) -> bool:
        return self.state.undo()

    def restart(self) -> None:
        self.state.reset()

    # -- queries --------------------------------------------------------------

    @property
    def current(self) -> State:
        return self.state.state

    def legal_moves(self) -> list[Move]:
        if self.is_over:
            return []
        return legal_moves(self.state.state)

    @property
    def is_won(self) -> bool:
        return is_win(self.state.state, self.rules)

    @property
    def is_lost(self) -> bool:
        return is_loss(self.state.state, self.rules)

    @property
    def is_over(self) -> bool:
        return self.is_won or self.is_lost
