"""Same-origin image proxy — GET /img/{key} serves submission images from R2."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, Response

from server.services.r2 import IMMUTABLE_CACHE_CONTROL, r2_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["images"])


@router.get("/img/{key:path}")
async def proxy_image(key: str) -> Response:
    """
    Serve an image object through this origin so the wall can draw it
    without cross-origin restrictions.

    Any fetch failure (missing key, R2 error) is a 404.
    """
    if not key:
        return PlainTextResponse("Missing key", status_code=400)
    if not r2_service.bucket:
        return PlainTextResponse("Bucket not configured", status_code=500)

    try:
        image = await r2_service.get_image(key)
    except Exception:
        logger.exception("img proxy: fetch failed for key=%s", key)
        image = None

    if image is None:
        return PlainTextResponse("Not found", status_code=404)

    return Response(
        content=image.body,
        media_type=image.content_type,
        headers={"Cache-Control": IMMUTABLE_CACHE_CONTROL},
    )
