from __future__ import annotations

import asyncio
import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from passportprint.core.errors import DecodeError, DecodeTimeout
from passportprint.raster.envelope import ImageData, to_bytes

logger = logging.getLogger(__name__)

# Same bound the browser flow used for its image-load safety timer.
DECODE_TIMEOUT_S = 5.0


def _decode_image(payload: bytes) -> Image.Image:
    """Decode bytes, apply EXIF orientation, return an RGB or RGBA PIL Image."""
    try:
        img = Image.open(io.BytesIO(payload))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DecodeError(f"Failed to load image: {e}") from e

    img = ImageOps.exif_transpose(img)
    if img.mode in ("RGBA", "LA", "PA") or (img.mode == "P" and "transparency" in img.info):
        return img.convert("RGBA")
    if img.mode != "RGB":
        return img.convert("RGB")
    return img


async def load_raster(data: ImageData, timeout: float = DECODE_TIMEOUT_S) -> Image.Image:
    """
    Decode an encoded image off the event loop.

    Raises DecodeError for bad input and DecodeTimeout when decoding takes
    longer than ``timeout`` seconds. This is the only point where export
    operations suspend.
    """
    payload = to_bytes(data)
    if not payload:
        raise DecodeError("Failed to load image: no data")
    try:
        img = await asyncio.wait_for(asyncio.to_thread(_decode_image, payload), timeout)
    except asyncio.TimeoutError as e:
        raise DecodeTimeout(f"Image load timed out after {timeout:g}s") from e
    logger.debug("Decoded %d bytes -> %dx%d %s", len(payload), img.width, img.height, img.mode)
    return img
