"""
Wall Kernel — Recovery

Rebuild WallState from the latest history row per tile index. Older rows for
the same index stay in history and are never shown.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from wall.kernel.state import WallState
from wall.kernel.types import HistoryRow, Tile, to_epoch_ms, wall_image_url

logger = logging.getLogger(__name__)


def tile_from_row(row: HistoryRow, default_question: str) -> Tile:
    return Tile(
        name=row.name,
        region=row.region,
        question=row.question or default_question,
        answer_image_url=wall_image_url(row.image_key),
        updated_at=to_epoch_ms(row.created_at),
    )


def restore(state: WallState, rows: Iterable[HistoryRow]) -> int:
    """
    Reset state, then fill each tile from its history row.

    Rows whose tile_index no longer fits the wall are skipped. If more than
    one row arrives for an index, the newest wins.

    Returns:
        Number of tiles populated
    """
    state.reset_all()
    restored: set[int] = set()

    for row in rows:
        idx = row.tile_index
        if not 0 <= idx < len(state):
            logger.info("recovery: skipping row for tile_index=%s outside wall of %d", idx, len(state))
            continue
        if state.apply_submission(idx, tile_from_row(row, state.question)):
            restored.add(idx)

    return len(restored)
