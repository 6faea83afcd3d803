"""
Admin authorization for the wall server.

One shared admin key gates the export routes and the wall reset.
No admin key configured means every admin request is refused.
"""

from __future__ import annotations

import hmac
from typing import Annotated

from fastapi import HTTPException, Query, status

from server.config import settings


def is_valid_admin_key(candidate: object, expected: str) -> bool:
    """
    Constant-time comparison of a client-supplied key against the configured one.

    Args:
        candidate: Key from the request (query param or socket payload)
        expected: Configured ADMIN_KEY; empty disables admin access

    Returns:
        True only if a key is configured and the candidate matches it
    """
    if not expected or not isinstance(candidate, str) or not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8"))


async def require_admin(key: Annotated[str, Query()] = "") -> None:
    """
    FastAPI dependency for admin routes: ?key=<ADMIN_KEY>.

    Raises:
        HTTPException: 401 if the key is missing or wrong
    """
    if not is_valid_admin_key(key, settings.ADMIN_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
