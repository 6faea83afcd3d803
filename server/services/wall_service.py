"""
Wall service — the one owner of the shared wall.

Every mutation of the wall goes through this class, and every mutation runs
under a single asyncio.Lock. A submission holds the lock from slot
assignment through image upload, history insert, state update and the
tile:update broadcast, so two submissions can never both pick a slot from
the same view of the wall, and a reset can never land between a
submission's persistence and its state update.

Viewer registration takes the same lock, so a new viewer's state:init and
its first tile:update can never cross.
"""

from __future__ import annotations

import asyncio
import logging
import random
import uuid
from typing import Any

from server.auth import is_valid_admin_key
from server.config import settings
from server.models.submission import NewSubmission
from server.repos.submission_repo import SubmissionRepo
from server.services.broadcaster import Broadcaster, Viewer
from server.services.r2 import R2Service, image_key_for, r2_service
from wall.kernel.errors import AuthorizationFailure, PersistenceFailure
from wall.kernel.recovery import restore
from wall.kernel.slots import assign_slot
from wall.kernel.state import WallState
from wall.kernel.types import Tile, to_epoch_ms, wall_image_url
from wall.kernel.validator import validate_submission

logger = logging.getLogger(__name__)

SERVER_ERROR = "Server error. Try again."
INVALID_ADMIN_KEY = "Invalid admin key."

# Event types on the wire
STATE_INIT = "state:init"
TILE_UPDATE = "tile:update"


class WallService:
    """Serializes assignment, persistence, mutation and broadcast for one wall."""

    def __init__(
        self,
        state: WallState | None = None,
        repo: SubmissionRepo | None = None,
        storage: R2Service | None = None,
        broadcaster: Broadcaster | None = None,
        *,
        admin_key: str | None = None,
        rng: random.Random | None = None,
        max_field_length: int | None = None,
        max_image_bytes: int | None = None,
    ) -> None:
        self.state = state if state is not None else WallState(settings.TILE_COUNT, settings.QUESTION_TEXT)
        self.repo = repo if repo is not None else SubmissionRepo()
        self.storage = storage if storage is not None else r2_service
        self.broadcaster = broadcaster if broadcaster is not None else Broadcaster()
        self._admin_key = admin_key
        self._rng = rng
        self._max_field_length = max_field_length or settings.MAX_NAME_LENGTH
        self._max_image_bytes = max_image_bytes or settings.MAX_IMAGE_BYTES
        self._lock = asyncio.Lock()

    @property
    def admin_key(self) -> str:
        return settings.ADMIN_KEY if self._admin_key is None else self._admin_key

    def init_payload(self) -> dict[str, Any]:
        return {"question": self.state.question, "tiles": self.state.snapshot()}

    # ── startup ──────────────────────────────────────────────────────────

    async def recover(self) -> int:
        """
        Rebuild the wall from history. Any failure propagates: the server
        must not start serving an unknown wall.

        Returns:
            Number of tiles restored
        """
        async with self._lock:
            rows = await self.repo.latest_per_tile()
            restored = restore(self.state, rows)
        logger.info("wall: restored %d/%d tiles from history", restored, len(self.state))
        return restored

    # ── viewers ──────────────────────────────────────────────────────────

    async def connect(self, viewer: Viewer) -> None:
        """Register a viewer and send it (only it) the full wall."""
        async with self._lock:
            self.broadcaster.add(viewer)
            await self.broadcaster.send(viewer, STATE_INIT, self.init_payload())

    def disconnect(self, viewer: Viewer) -> None:
        self.broadcaster.discard(viewer)

    # ── mutations ────────────────────────────────────────────────────────

    async def submit(self, payload: Any) -> int:
        """
        Validate, place, persist and broadcast one submission.

        Args:
            payload: Raw submission:new frame

        Returns:
            0-based index the submission was placed at

        Raises:
            ValidationError: bad input (nothing happened)
            ServiceUnavailable: image storage not configured (nothing happened)
            PersistenceFailure: upload or insert failed, or the wall refused
                the update as older than the tile's occupant (wall unchanged)
        """
        accepted = validate_submission(
            payload,
            storage_configured=self.storage.configured,
            max_field_length=self._max_field_length,
            max_image_bytes=self._max_image_bytes,
        )

        async with self._lock:
            index = assign_slot(self.state.tiles, rng=self._rng)
            submission_id = uuid.uuid4()
            image_key = image_key_for(str(submission_id))

            try:
                image_url = await self.storage.upload_image(image_key, accepted.image_bytes)
                created_at = await self.repo.insert(
                    NewSubmission(
                        id=submission_id,
                        name=accepted.name,
                        region=accepted.region,
                        question=self.state.question,
                        tile_index=index,
                        image_key=image_key,
                        image_url=image_url,
                    )
                )
            except Exception as e:
                logger.exception("wall: persisting submission %s for tile %d failed", submission_id, index)
                raise PersistenceFailure(SERVER_ERROR) from e

            tile = Tile(
                name=accepted.name,
                region=accepted.region,
                question=self.state.question,
                answer_image_url=wall_image_url(image_key),
                updated_at=to_epoch_ms(created_at),
            )
            if not self.state.apply_submission(index, tile):
                logger.error("wall: submission %s persisted but refused as stale at tile %d", submission_id, index)
                raise PersistenceFailure(SERVER_ERROR)
            await self.broadcaster.broadcast(TILE_UPDATE, {"index": index, "tile": tile.to_dict()})

        logger.info("wall: placed submission %s at tile %d", submission_id, index)
        return index

    async def reset(self, key: Any) -> None:
        """
        Clear every tile and push the empty wall to all viewers. History stays.

        Raises:
            AuthorizationFailure: key missing or wrong (nothing happened)
        """
        if not is_valid_admin_key(key, self.admin_key):
            raise AuthorizationFailure(INVALID_ADMIN_KEY)

        async with self._lock:
            self.state.reset_all()
            await self.broadcaster.broadcast(STATE_INIT, self.init_payload())

        logger.info("wall: reset by admin, %d viewers notified", len(self.broadcaster))


# Singleton instance
wall_service = WallService()
