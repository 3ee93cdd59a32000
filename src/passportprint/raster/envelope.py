"""
Helpers for the ``data:image/jpeg;base64,<payload>`` envelope used to pass
encoded images around. Raw base64 text (no prefix) and raw bytes are accepted
everywhere an envelope is.
"""

from __future__ import annotations

import base64
import binascii
from typing import Union

from passportprint.core.errors import DecodeError

JPEG_DATA_URL_PREFIX = "data:image/jpeg;base64,"

ImageData = Union[str, bytes, bytearray]


def _payload_text(data: str) -> str:
    data = data.strip()
    if data.startswith("data:"):
        _, _, data = data.partition(",")
    # Wrapped or pasted base64 may carry line breaks.
    return "".join(data.split())


def is_empty(data: ImageData | None) -> bool:
    """True when there is no image payload at all (None, "", b"", or a bare prefix)."""
    if data is None:
        return True
    if isinstance(data, (bytes, bytearray)):
        return len(data) == 0
    return _payload_text(data) == ""


def to_base64(data: ImageData) -> str:
    """Return the raw base64 payload, without any ``data:`` prefix."""
    if isinstance(data, (bytes, bytearray)):
        return base64.b64encode(bytes(data)).decode("ascii")
    return _payload_text(data)


def to_data_url(data: ImageData) -> str:
    """Wrap data in the JPEG envelope. Data URLs pass through unchanged."""
    if isinstance(data, str) and data.strip().startswith("data:"):
        return data.strip()
    return JPEG_DATA_URL_PREFIX + to_base64(data)


def to_bytes(data: ImageData) -> bytes:
    """Return the encoded image bytes carried by data."""
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    try:
        return base64.b64decode(_payload_text(data), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Image data is not valid base64: {e}") from e


def encode_data_url(jpeg_bytes: bytes) -> str:
    return JPEG_DATA_URL_PREFIX + base64.b64encode(jpeg_bytes).decode("ascii")
