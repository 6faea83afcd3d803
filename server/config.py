"""
Wall server configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os

from wall.kernel.types import DEFAULT_QUESTION, DEFAULT_TILE_COUNT, MAX_FIELD_LENGTH, MAX_IMAGE_BYTES


class Settings:
    """Application settings from environment variables."""

    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")

    # Cloudflare R2 (S3 compatible)
    R2_ENDPOINT: str = os.environ.get("R2_ENDPOINT", "")
    R2_ACCESS_KEY_ID: str = os.environ.get("R2_ACCESS_KEY_ID", "")
    R2_SECRET_ACCESS_KEY: str = os.environ.get("R2_SECRET_ACCESS_KEY", "")
    R2_BUCKET: str = os.environ.get("R2_BUCKET", "")
    R2_PUBLIC_BASE_URL: str = os.environ.get("R2_PUBLIC_BASE_URL", "").rstrip("/")

    # Admin (export routes + wall reset)
    ADMIN_KEY: str = os.environ.get("ADMIN_KEY", "")

    # Wall
    TILE_COUNT: int = int(os.environ.get("TILE_COUNT", str(DEFAULT_TILE_COUNT)))
    QUESTION_TEXT: str = os.environ.get("QUESTION_TEXT", DEFAULT_QUESTION)
    MAX_NAME_LENGTH: int = int(os.environ.get("MAX_NAME_LENGTH", str(MAX_FIELD_LENGTH)))
    MAX_IMAGE_BYTES: int = int(os.environ.get("MAX_IMAGE_BYTES", str(MAX_IMAGE_BYTES)))

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")
    TESTING: bool = os.environ.get("TESTING", "").lower() == "true"

    @property
    def DATABASE_SSL(self) -> str | None:
        # Hosted Render Postgres needs TLS; local Postgres usually does not
        return "require" if "render.com" in self.DATABASE_URL else None


# Singleton instance
settings = Settings()

if not settings.DATABASE_URL and not settings.TESTING:
    raise RuntimeError("DATABASE_URL environment variable is required")
if settings.TILE_COUNT < 1:
    raise RuntimeError("TILE_COUNT must be a positive integer")
