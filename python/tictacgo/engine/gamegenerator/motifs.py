"""
Trap motifs - named board patterns that make a position harder.

Each motif is a matcher that maps a geometry to the bitmask of cells it
covers.  The library is filled once at import time through
``register_motif`` and exposed read-only as ``MOTIFS``; per-geometry match
masks are cached, so concurrent generators share them without locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Callable

from tictacgo.engine.gamestate.state import State
from tictacgo.models.geometry import BoardGeometry

Matcher = Callable[[BoardGeometry], int]

# Neighbour-table slots, see ``DIRECTIONS``.
_UP, _DOWN, _LEFT, _RIGHT = 0, 1, 2, 3


@dataclass(frozen=True)
class TrapMotif:
    """
    A registered motif.

    Attributes:
        name: Registry key
        description: One-line summary for listings
        matcher: Function returning the mask of cells that match on a geometry
    """

    name: str
    description: str
    matcher: Matcher

    def cells(self, geometry: BoardGeometry) -> int:
        return _motif_masks(geometry)[self.name]


_REGISTRY: dict[str, TrapMotif] = {}


def register_motif(name: str, description: str) -> Callable[[Matcher], Matcher]:
    """
    Decorator factory registering a matcher under ``name``.

    Usage:
        @register_motif("narrow_passage", "Cells squeezed between two walls")
        def _narrow(geometry):
            ...
    """

    def decorator(matcher: Matcher) -> Matcher:
        if name in _REGISTRY:
            raise ValueError(f"Motif already registered: {name}")
        _REGISTRY[name] = TrapMotif(name, description, matcher)
        return matcher

    return decorator


# -- built-in motifs --------------------------------------------------------------


@register_motif("dead_end_corridor", "Cells on a one-wide corridor that ends in a wall")
def _dead_end_corridor(geometry: BoardGeometry) -> int:
    table = geometry.neighbor_table()
    degree = [sum(1 for n in nb if n >= 0) for nb in table]
    mask = 0
    for start, d in enumerate(degree):
        if d != 1:
            continue
        # Walk back from the dead end while the corridor stays one wide.
        prev, cell = -1, start
        while True:
            mask |= 1 << cell
            onward = [n for n in table[cell] if n >= 0 and n != prev]
            if len(onward) != 1 or degree[onward[0]] != 2:
                break
            prev, cell = cell, onward[0]
            if (mask >> cell) & 1:
                break
    return mask


@register_motif("corner_stash", "Wall cells next to a convex corner")
def _corner_stash(geometry: BoardGeometry) -> int:
    table = geometry.neighbor_table()
    corners = 0
    for i, nb in enumerate(table):
        if (nb[_UP] < 0 or nb[_DOWN] < 0) and (nb[_LEFT] < 0 or nb[_RIGHT] < 0):
            corners |= 1 << i
    mask = 0
    for i, nb in enumerate(table):
        if (corners >> i) & 1 or all(n >= 0 for n in nb):
            continue
        if any(n >= 0 and (corners >> n) & 1 for n in nb):
            mask |= 1 << i
    return mask


@register_motif("narrow_passage", "Cells squeezed between two walls")
def _narrow_passage(geometry: BoardGeometry) -> int:
    mask = 0
    for i, nb in enumerate(geometry.neighbor_table()):
        vertical = nb[_UP] >= 0 and nb[_DOWN] >= 0
        horizontal = nb[_LEFT] >= 0 and nb[_RIGHT] >= 0
        if vertical != horizontal and sum(1 for n in nb if n >= 0) == 2:
            mask |= 1 << i
    return mask


@register_motif("wall_run", "Cells along a straight wall")
def _wall_run(geometry: BoardGeometry) -> int:
    mask = 0
    for i, nb in enumerate(geometry.neighbor_table()):
        if sum(1 for n in nb if n < 0) == 1:
            mask |= 1 << i
    return mask


MOTIFS: MappingProxyType[str, TrapMotif] = MappingProxyType(_REGISTRY)


# -- queries ----------------------------------------------------------------------


@lru_cache(maxsize=128)
def _motif_masks(geometry: BoardGeometry) -> MappingProxyType[str, int]:
    return MappingProxyType(
        {name: motif.matcher(geometry) for name, motif in MOTIFS.items()}
    )


@lru_cache(maxsize=128)
def cell_matches(geometry: BoardGeometry) -> tuple[int, ...]:
    """How many motifs cover each cell, indexed by cell."""
    masks = _motif_masks(geometry).values()
    return tuple(
        sum(1 for mask in masks if (mask >> i) & 1) for i in range(geometry.size)
    )


def get_motif(name: str) -> TrapMotif:
    if name not in MOTIFS:
        available = ", ".join(MOTIFS)
        raise ValueError(f"Unknown motif: {name}. Available: {available}")
    return MOTIFS[name]


def get_motif_names() -> list[str]:
    return list(MOTIFS)


def get_motif_info() -> list[dict[str, str]]:
    """Name and description of every registered motif."""
    return [
        {"name": motif.name, "description": motif.description}
        for motif in MOTIFS.values()
    ]


def motif_count(state: State) -> int:
    """Number of (piece, motif) pairs where the piece sits on a motif cell."""
    pieces = state.pieces
    return sum((pieces & mask).bit_count() for mask in _motif_masks(state.geometry).values())
