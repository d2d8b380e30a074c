from tictacgo.engine.gamestate.encoder import StateEncoder
from tictacgo.engine.gamestate.state import GameState, State, iter_bits

__all__ = ["GameState", "State", "StateEncoder", "iter_bits"]
