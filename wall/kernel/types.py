"""
Wall Kernel — Shared Types

Data classes passed between the validator, slot policy, wall state and the
server layer. Wire views use the camelCase keys the wall frontend reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_TILE_COUNT = 18
DEFAULT_QUESTION = "What is the 'Why' that drives you?"
MAX_FIELD_LENGTH = 40
MAX_IMAGE_BYTES = 900_000
PNG_DATA_URL_PREFIX = "data:image/png;base64,"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class Tile:
    """
    One slot on the wall.

    An empty tile has no answer image and updated_at == 0. The question is
    kept on empty tiles so the frontend can still render the prompt.
    """

    name: str = ""
    region: str = ""
    question: str = DEFAULT_QUESTION
    answer_image_url: str = ""
    updated_at: int = 0

    @classmethod
    def empty(cls, question: str = DEFAULT_QUESTION) -> Tile:
        return cls(question=question)

    @property
    def is_empty(self) -> bool:
        return not self.answer_image_url

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "region": self.region,
            "question": self.question,
            "answerImageUrl": self.answer_image_url,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class AcceptedSubmission:
    """A sanitized submission that passed validation, ready for slot assignment."""

    name: str
    region: str
    image_bytes: bytes


@dataclass(frozen=True)
class HistoryRow:
    """The latest persisted submission for one tile index, as read back at startup."""

    tile_index: int
    name: str
    region: str
    question: str | None
    image_key: str
    image_url: str
    created_at: datetime


def to_epoch_ms(value: datetime) -> int:
    """Convert a store timestamp to the epoch-millisecond form tiles carry."""
    return int(value.timestamp() * 1000)


def wall_image_url(image_key: str) -> str:
    """Same-origin proxy URL for an image object key."""
    return f"/img/{image_key}"
