"""
Wall Kernel — Errors

Every failure that can reach a submitter or an admin is one of these.
The message is what the client sees.
"""

from __future__ import annotations


class WallError(Exception):
    """Base class for wall failures reported back to a client."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(WallError):
    """Bad or missing submission input."""


class ServiceUnavailable(WallError):
    """A backing service the submission needs is not configured."""


class PersistenceFailure(WallError):
    """Image upload or history insert failed after validation."""


class AuthorizationFailure(WallError):
    """Admin operation attempted without a valid key."""
