"""
Wall Kernel — the pure wall state machine.

Four components:
  validator  — sanitizes and bounds-checks a raw submission
  slots      — picks the tile a submission lands on
  state      — the N-tile projection of latest submission per slot
  recovery   — rebuilds state from history rows at startup

No I/O here. The server layer owns persistence, locking and broadcast.
"""

from wall.kernel.errors import (
    AuthorizationFailure,
    PersistenceFailure,
    ServiceUnavailable,
    ValidationError,
    WallError,
)
from wall.kernel.recovery import restore
from wall.kernel.slots import assign_slot
from wall.kernel.state import WallState
from wall.kernel.types import AcceptedSubmission, HistoryRow, Tile
from wall.kernel.validator import validate_submission

__all__ = [
    "validate_submission",
    "assign_slot",
    "restore",
    "WallState",
    "Tile",
    "AcceptedSubmission",
    "HistoryRow",
    "WallError",
    "ValidationError",
    "ServiceUnavailable",
    "PersistenceFailure",
    "AuthorizationFailure",
]
