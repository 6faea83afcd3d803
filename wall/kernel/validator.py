"""
Wall Kernel — Submission Validator

Pure function: (raw payload, limits) → AcceptedSubmission, or raise.

Rules run in order and the first failure wins:
  1. name / region present after trimming
  2. answer is a base64 PNG data URL
  3. decoded image fits under the byte cap
  4. image storage is configured
"""

from __future__ import annotations

import base64
import binascii
from typing import Any

from wall.kernel.errors import ServiceUnavailable, ValidationError
from wall.kernel.types import MAX_FIELD_LENGTH, MAX_IMAGE_BYTES, PNG_DATA_URL_PREFIX, AcceptedSubmission

NAME_REQUIRED = "Name is required."
REGION_REQUIRED = "Region is required."
NOT_A_PNG = "Answer must be a PNG drawing."
TOO_LARGE = "Drawing too large. Please write smaller or clear and try again."
STORAGE_NOT_CONFIGURED = "R2 is not configured on server."


def safe_trim(value: Any, max_len: int = MAX_FIELD_LENGTH) -> str:
    """Coerce to trimmed text capped at max_len. Anything that isn't a str becomes ""."""
    if not isinstance(value, str):
        return ""
    return value.strip()[:max_len]


def is_png_data_url(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(PNG_DATA_URL_PREFIX)


def decode_data_url(data_url: str) -> bytes:
    """
    Decode the base64 part of a data URL (everything after the first comma).

    Missing "=" padding is tolerated.
    """
    _, sep, payload = data_url.partition(",")
    b64 = (payload if sep else data_url).strip()
    b64 += "=" * (-len(b64) % 4)
    return base64.b64decode(b64)


def validate_submission(
    payload: Any,
    *,
    storage_configured: bool,
    max_field_length: int = MAX_FIELD_LENGTH,
    max_image_bytes: int = MAX_IMAGE_BYTES,
) -> AcceptedSubmission:
    """
    Validate a raw submission:new payload.

    Args:
        payload: Decoded client frame. Non-dict payloads are treated as empty.
        storage_configured: Whether image storage can accept an upload
        max_field_length: Cap for name and region
        max_image_bytes: Cap for the decoded PNG

    Returns:
        AcceptedSubmission with sanitized fields and decoded image bytes

    Raises:
        ValidationError: bad or missing input
        ServiceUnavailable: storage is not configured
    """
    if not isinstance(payload, dict):
        payload = {}

    name = safe_trim(payload.get("name"), max_field_length)
    region = safe_trim(payload.get("region"), max_field_length)
    answer = payload.get("answerDataUrl")

    if not name:
        raise ValidationError(NAME_REQUIRED)
    if not region:
        raise ValidationError(REGION_REQUIRED)
    if not is_png_data_url(answer):
        raise ValidationError(NOT_A_PNG)

    try:
        image_bytes = decode_data_url(answer)
    except (binascii.Error, ValueError) as e:
        raise ValidationError(NOT_A_PNG) from e

    if len(image_bytes) > max_image_bytes:
        raise ValidationError(TOO_LARGE)
    if not storage_configured:
        raise ServiceUnavailable(STORAGE_NOT_CONFIGURED)

    return AcceptedSubmission(name=name, region=region, image_bytes=image_bytes)
