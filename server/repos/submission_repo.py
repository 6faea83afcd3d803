"""Repository for the append-only submissions history."""

from __future__ import annotations

from datetime import datetime

import asyncpg

from server.db import system_conn
from server.models.submission import NewSubmission, Submission
from wall.kernel.types import HistoryRow


def _row_to_submission(row: asyncpg.Record) -> Submission:
    """Convert a database row to a Submission model."""
    return Submission(
        id=row["id"],
        name=row["name"],
        region=row["region"],
        question=row["question"],
        tile_index=row["tile_index"],
        image_key=row["image_key"],
        image_url=row["image_url"],
        created_at=row["created_at"],
    )


def _row_to_history(row: asyncpg.Record) -> HistoryRow:
    """Convert a latest-per-tile row to the kernel's recovery input."""
    return HistoryRow(
        tile_index=row["tile_index"],
        name=row["name"],
        region=row["region"],
        question=row["question"],
        image_key=row["image_key"],
        image_url=row["image_url"],
        created_at=row["created_at"],
    )


class SubmissionRepo:
    """All submission-related database operations. Rows are never updated or deleted."""

    async def insert(self, req: NewSubmission) -> datetime:
        """
        Append a submission to history.

        Args:
            req: NewSubmission with the assigned tile and image reference

        Returns:
            created_at assigned by the database
        """
        async with system_conn() as conn:
            return await conn.fetchval(
                """
                INSERT INTO submissions (id, name, region, question, tile_index, image_key, image_url)
                VALUES ($1, $2, $3, $4, $5, $6, $7)
                RETURNING created_at
                """,
                req.id,
                req.name,
                req.region,
                req.question,
                req.tile_index,
                req.image_key,
                req.image_url,
            )

    async def latest_per_tile(self) -> list[HistoryRow]:
        """
        Newest submission for every tile_index that has one.

        Returns:
            One HistoryRow per tile_index, ordered by tile_index
        """
        async with system_conn() as conn:
            rows = await conn.fetch(
                """
                SELECT DISTINCT ON (tile_index)
                    tile_index, name, region, question, image_key, image_url, created_at
                FROM submissions
                ORDER BY tile_index, created_at DESC
                """
            )
            return [_row_to_history(row) for row in rows]

    async def list_all(self) -> list[Submission]:
        """
        Full history for export.

        Returns:
            Every Submission ordered by created_at ASC
        """
        async with system_conn() as conn:
            rows = await conn.fetch("SELECT * FROM submissions ORDER BY created_at ASC")
            return [_row_to_submission(row) for row in rows]
