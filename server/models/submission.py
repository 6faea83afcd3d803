"""Submission models for the append-only wall history."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

# Column order for both exports
EXPORT_COLUMNS: tuple[str, ...] = ("id", "name", "region", "question", "tile_index", "image_url", "created_at")


class NewSubmission(BaseModel):
    """What the wall service hands the repo to insert. created_at is assigned by Postgres."""

    model_config = {"extra": "forbid"}

    id: UUID
    name: str = Field(min_length=1, max_length=200)
    region: str = Field(min_length=1, max_length=200)
    question: str
    tile_index: int = Field(ge=0)
    image_key: str
    image_url: str


class Submission(BaseModel):
    """Core submission model. Represents a row in the submissions table."""

    id: UUID
    name: str
    region: str
    question: str
    tile_index: int
    image_key: str
    image_url: str
    created_at: datetime

    def export_row(self) -> dict[str, object]:
        """The subset of columns the admin exports carry, in EXPORT_COLUMNS order."""
        return {col: getattr(self, col) for col in EXPORT_COLUMNS}
