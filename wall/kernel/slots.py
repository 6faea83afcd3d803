"""
Wall Kernel — Slot Assignment

Pick the tile a new submission lands on: a random empty tile while any
remain, otherwise the tile that has gone longest without an update.
Reads tiles only; the caller applies the mutation after persistence.
"""

from __future__ import annotations

import random
from collections.abc import Sequence

from wall.kernel.types import Tile


def empty_indices(tiles: Sequence[Tile]) -> list[int]:
    return [i for i, tile in enumerate(tiles) if tile.is_empty]


def oldest_index(tiles: Sequence[Tile]) -> int:
    """Index with the smallest updated_at. Ties go to the lowest index."""
    oldest_idx = 0
    oldest_time = tiles[0].updated_at
    for i in range(1, len(tiles)):
        if tiles[i].updated_at < oldest_time:
            oldest_time = tiles[i].updated_at
            oldest_idx = i
    return oldest_idx


def assign_slot(tiles: Sequence[Tile], rng: random.Random | None = None) -> int:
    """
    Choose the index for the next submission.

    Args:
        tiles: Current wall tiles, in index order (must be non-empty)
        rng: Random source for choosing among empty tiles

    Returns:
        0-based tile index
    """
    if not tiles:
        raise ValueError("wall has no tiles")

    empty = empty_indices(tiles)
    if empty:
        return (rng or random).choice(empty)
    return oldest_index(tiles)
