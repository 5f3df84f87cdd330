"""Helpers for turning upstream image bytes into responses and log hashes."""

from __future__ import annotations

import base64
import hashlib

DEFAULT_MEDIA_TYPE = "image/png"


def to_data_uri(data: bytes, media_type: str = DEFAULT_MEDIA_TYPE) -> str:
    """Encode binary image content as a base64 data URI.

    Args:
        data: Raw image bytes as returned by the inference API.
        media_type: Media type embedded in the URI prefix.

    Returns:
        String of the form ``data:<media_type>;base64,<payload>``.
    """
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{payload}"


def image_digest(data: bytes) -> str:
    """Return the hex SHA-256 digest of binary image content.

    The digest is what the audit log stores in place of the image itself.
    """
    return hashlib.sha256(data).hexdigest()
