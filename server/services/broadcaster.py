"""
Broadcaster — the set of connected wall viewers.

A viewer is any object with an async send_text(str) (a FastAPI WebSocket in
production). Viewers have no identity beyond their connection lifetime.

Every send is bounded by send_timeout. A viewer that errors or stops
draining its socket is dropped, so one slow client cannot hold up the wall.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

# Seconds one viewer gets to accept a frame before it is dropped
SEND_TIMEOUT = 5.0


class Viewer(Protocol):
    async def send_text(self, data: str) -> None: ...


def encode_event(event_type: str, payload: dict[str, Any] | None = None) -> str:
    """Frame an event as one JSON text message: {"type": ..., **payload}."""
    frame: dict[str, Any] = {"type": event_type}
    if payload:
        frame.update(payload)
    return json.dumps(frame)


class Broadcaster:
    """Tracks connected viewers and fans events out to them."""

    def __init__(self, send_timeout: float = SEND_TIMEOUT) -> None:
        self._viewers: set[Viewer] = set()
        self.send_timeout = send_timeout

    def __len__(self) -> int:
        return len(self._viewers)

    def __contains__(self, viewer: object) -> bool:
        return viewer in self._viewers

    def add(self, viewer: Viewer) -> None:
        self._viewers.add(viewer)

    def discard(self, viewer: Viewer) -> None:
        self._viewers.discard(viewer)

    async def _deliver(self, viewer: Viewer, message: str, event_type: str) -> bool:
        try:
            await asyncio.wait_for(viewer.send_text(message), timeout=self.send_timeout)
            return True
        except TimeoutError:
            logger.warning("broadcast: dropping viewer stalled on %s for %.1fs", event_type, self.send_timeout)
        except Exception as e:
            logger.info("broadcast: dropping viewer after failed %s send: %s", event_type, e)
        self._viewers.discard(viewer)
        return False

    async def send(self, viewer: Viewer, event_type: str, payload: dict[str, Any] | None = None) -> bool:
        """
        Send one event to one viewer.

        A viewer whose socket has gone away or stalled is dropped from the set.

        Returns:
            True if delivered
        """
        return await self._deliver(viewer, encode_event(event_type, payload), event_type)

    async def broadcast(self, event_type: str, payload: dict[str, Any] | None = None) -> int:
        """
        Send one event to every connected viewer, concurrently.

        Returns:
            Number of viewers that received it
        """
        message = encode_event(event_type, payload)
        results = await asyncio.gather(
            *(self._deliver(viewer, message, event_type) for viewer in list(self._viewers))
        )
        return sum(results)
