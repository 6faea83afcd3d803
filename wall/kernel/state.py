"""
Wall Kernel — Wall State

The in-memory projection of "latest submission per tile". Holds no history.

Mutated only through apply_submission() and reset_all(). Callers that share
one WallState between connections must serialize those calls (see
server/services/wall_service.py).
"""

from __future__ import annotations

import logging
from typing import Any

from wall.kernel.slots import empty_indices
from wall.kernel.types import DEFAULT_QUESTION, DEFAULT_TILE_COUNT, Tile

logger = logging.getLogger(__name__)


class WallState:
    """Fixed-size grid of tiles."""

    def __init__(self, tile_count: int = DEFAULT_TILE_COUNT, question: str = DEFAULT_QUESTION) -> None:
        if tile_count < 1:
            raise ValueError(f"tile_count must be positive, got {tile_count}")
        self.question = question
        self._tiles: list[Tile] = [Tile.empty(question) for _ in range(tile_count)]

    def __len__(self) -> int:
        return len(self._tiles)

    @property
    def tiles(self) -> tuple[Tile, ...]:
        """Read-only view for the slot policy."""
        return tuple(self._tiles)

    def tile(self, index: int) -> Tile:
        return self._tiles[index]

    def snapshot(self) -> list[dict[str, Any]]:
        """Ordered wire views of every tile."""
        return [t.to_dict() for t in self._tiles]

    def empty_indices(self) -> list[int]:
        return empty_indices(self._tiles)

    def is_full(self) -> bool:
        return not self.empty_indices()

    def apply_submission(self, index: int, tile: Tile) -> bool:
        """
        Overwrite the tile at index. No merge: the new tile replaces the old one.

        An update older than the current occupant is refused, so a stale
        assignment can never roll a tile backwards.

        Returns:
            True if applied, False if refused as stale
        """
        if not 0 <= index < len(self._tiles):
            raise IndexError(f"tile index {index} out of range 0..{len(self._tiles) - 1}")

        current = self._tiles[index]
        if tile.updated_at < current.updated_at:
            logger.warning(
                "wall: refused stale update index=%d incoming=%d current=%d",
                index,
                tile.updated_at,
                current.updated_at,
            )
            return False

        self._tiles[index] = tile
        return True

    def reset_all(self) -> None:
        """Clear every tile. History in the store is untouched."""
        self._tiles = [Tile.empty(self.question) for _ in range(len(self._tiles))]
