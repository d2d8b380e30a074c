"""Packs states into compact keys for visited sets and storage."""

from __future__ import annotations

from tictacgo.engine.gamestate.state import State
from tictacgo.models.geometry import BoardGeometry

# Two bits per cell in the packed byte form.
_EMPTY, _CIRCLE, _CROSS, _PLAYER = 0, 1, 2, 3


class StateEncoder:
    """Encodes states of one geometry.

    ``encode`` gives a single int (cross mask, circle mask and player
    index laid side by side) that is equal for two states exactly when
    their occupancy and player position are equal.  ``pack`` gives a byte
    string with two bits per cell followed by the player index.
    """

    def __init__(self, geometry: BoardGeometry) -> None:
        self.geometry = geometry
        self.cells = geometry.size
        self._player_bits = max(1, geometry.size.bit_length())
        self._player_mask = (1 << self._player_bits) - 1
        self._cell_mask = (1 << self.cells) - 1

    # -- int keys -------------------------------------------------------------

    def encode(self, state: State) -> int:
        return (
            ((state.crosses << self.cells) | state.circles) << self._player_bits
        ) | state.player

    def decode(self, key: int) -> State:
        player = key & self._player_mask
        rest = key >> self._player_bits
        circles = rest & self._cell_mask
        crosses = rest >> self.cells
        if crosses >> self.cells:
            raise ValueError(f"Key {key} does not belong to this geometry.")
        if circles & crosses or (circles | crosses) >> player & 1:
            raise ValueError(f"Key {key} places two occupants on one cell.")
        if player >= self.cells:
            raise ValueError(f"Key {key} has the player off the board.")
        return State(self.geometry, player, circles, crosses)

    # -- byte form ------------------------------------------------------------

    def pack(self, state: State) -> bytes:
        codes = bytearray((self.cells + 3) // 4)
        for i in range(self.cells):
            bit = 1 << i
            if i == state.player:
                code = _PLAYER
            elif state.circles & bit:
                code = _CIRCLE
            elif state.crosses & bit:
                code = _CROSS
            else:
                continue
            codes[i // 4] |= code << (2 * (i % 4))
        return bytes(codes) + state.player.to_bytes(2, "big")

    def unpack(self, data: bytes) -> State:
        expected = (self.cells + 3) // 4 + 2
        if len(data) != expected:
            raise ValueError(f"Expected {expected} bytes, got {len(data)}.")
        player = int.from_bytes(data[-2:], "big")
        circles = 0
        crosses = 0
        players = 0
        for i in range(self.cells):
            code = (data[i // 4] >> (2 * (i % 4))) & 0b11
            if code == _CIRCLE:
                circles |= 1 << i
            elif code == _CROSS:
                crosses |= 1 << i
            elif code == _PLAYER:
                players += 1
                if i != player:
                    raise ValueError("Player cell does not match the player index.")
        if players != 1:
            raise ValueError(f"Packed state holds {players} players.")
        return State(self.geometry, player, circles, crosses)
