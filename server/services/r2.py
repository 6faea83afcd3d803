"""Cloudflare R2 image storage service."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import aioboto3
from botocore.exceptions import ClientError

from server.config import settings

logger = logging.getLogger(__name__)

# Retryable S3 error codes
_RETRYABLE_CODES = {"RequestTimeout", "ServiceUnavailable", "ThrottlingException", "Throttling"}

# Submission images never change once written
IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


@dataclass(frozen=True)
class StoredImage:
    """An image object fetched back from R2."""

    body: bytes
    content_type: str


def image_key_for(submission_id: str) -> str:
    """Object key for a submission's PNG."""
    return f"submissions/{submission_id}.png"


class R2Service:
    """Cloudflare R2 storage service using S3-compatible API."""

    def __init__(self) -> None:
        """Initialize R2 service with credentials from settings."""
        self.session = aioboto3.Session()
        self.endpoint = settings.R2_ENDPOINT
        self.access_key = settings.R2_ACCESS_KEY_ID
        self.secret_key = settings.R2_SECRET_ACCESS_KEY
        self.bucket = settings.R2_BUCKET
        self.public_base_url = settings.R2_PUBLIC_BASE_URL

    @property
    def configured(self) -> bool:
        """True when uploads can go through and be addressed publicly."""
        return bool(self.bucket and self.public_base_url and self.endpoint)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def _client(self):
        return self.session.client(
            "s3",
            endpoint_url=self.endpoint,
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            region_name="auto",
        )

    async def upload_image(self, key: str, data: bytes, max_retries: int = 1) -> str:
        """
        Upload a PNG to R2 with retry on transient failures.

        Args:
            key: Object key, see image_key_for()
            data: Raw PNG bytes
            max_retries: Number of retries on transient failures (default 1)

        Returns:
            Public URL of the uploaded object
        """
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                async with self._client() as s3:
                    await s3.put_object(
                        Bucket=self.bucket,
                        Key=key,
                        Body=data,
                        ContentType="image/png",
                        CacheControl=IMMUTABLE_CACHE_CONTROL,
                    )
                return self.public_url(key)
            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "")
                if error_code in _RETRYABLE_CODES and attempt < max_retries:
                    wait_time = 2**attempt
                    logger.warning("r2: upload error (attempt %d), retrying in %ds: %s", attempt + 1, wait_time, e)
                    await asyncio.sleep(wait_time)
                    last_error = e
                else:
                    raise
            except Exception as e:
                # Network errors, timeouts, etc.
                if attempt < max_retries:
                    wait_time = 2**attempt
                    logger.warning("r2: upload error (attempt %d), retrying in %ds: %s", attempt + 1, wait_time, e)
                    await asyncio.sleep(wait_time)
                    last_error = e
                else:
                    raise

        raise last_error  # type: ignore[misc]

    async def get_image(self, key: str) -> StoredImage | None:
        """
        Fetch an image object from R2.

        Args:
            key: Object key

        Returns:
            StoredImage if found, None if the key does not exist
        """
        async with self._client() as s3:
            try:
                response = await s3.get_object(Bucket=self.bucket, Key=key)
                body = await response["Body"].read()
                return StoredImage(body=body, content_type=response.get("ContentType") or "image/png")
            except ClientError as e:
                if e.response["Error"]["Code"] in ("NoSuchKey", "404"):
                    return None
                raise


# Singleton instance
r2_service = R2Service()
