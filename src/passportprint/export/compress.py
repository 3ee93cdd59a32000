"""
compress.py

Re-encode a photo as a JPEG that fits within a byte budget.

Binary-searches a continuous quality in [0.1, 1.0] for a fixed number of steps
and keeps the highest-quality encoding that fit. The search is bounded, so the
result is best-effort: if nothing fits, the q=0.95 reference encoding comes
back instead of an error.
"""

from __future__ import annotations

import logging
from typing import Optional

from passportprint.raster.decode import DECODE_TIMEOUT_S, load_raster
from passportprint.raster.envelope import ImageData, encode_data_url, to_bytes, to_data_url
from passportprint.raster.surface import RasterSurfaceProvider, acquire_surface

logger = logging.getLogger(__name__)

MIN_QUALITY = 0.1
MAX_QUALITY = 1.0
REFERENCE_QUALITY = 0.95
MAX_ITERATIONS = 6

_JPEG_SOI = b"\xff\xd8\xff"
# Transparent areas of re-encoded input end up white, like a passport background.
_REENCODE_BACKGROUND = (255, 255, 255)


async def ensure_jpeg(
    image_data: ImageData,
    *,
    provider: Optional[RasterSurfaceProvider] = None,
    decode_timeout: float = DECODE_TIMEOUT_S,
) -> str:
    """
    Return image_data as a JPEG data URL.

    JPEG payloads pass through untouched; anything else (PNG from the transform
    service, say) is decoded and encoded once at the reference quality.
    """
    payload = to_bytes(image_data)
    if payload.startswith(_JPEG_SOI):
        return encode_data_url(payload)

    img = await load_raster(payload, timeout=decode_timeout)
    surface = acquire_surface(provider, img.width, img.height)
    surface.fill(_REENCODE_BACKGROUND)
    surface.draw_image(img, 0, 0)
    out = surface.encode_jpeg(REFERENCE_QUALITY)
    logger.info("Re-encoded %d-byte non-JPEG input as %d-byte JPEG", len(payload), len(out))
    return encode_data_url(out)


async def compress_to_target_size(
    image_data: ImageData,
    target_bytes: Optional[int],
    *,
    provider: Optional[RasterSurfaceProvider] = None,
    decode_timeout: float = DECODE_TIMEOUT_S,
) -> str:
    """
    Return ``image_data`` re-encoded to fit ``target_bytes``, as a JPEG data URL.

    Args:
      image_data: data URL, raw base64, or encoded bytes
      target_bytes: byte budget; None or <= 0 returns the input unchanged (in envelope form)
      provider: where the offscreen surface comes from (Pillow by default)
      decode_timeout: seconds to wait for the input to decode

    The output keeps the input's pixel dimensions. It is never larger than the
    reference encoding, but may exceed ``target_bytes`` when no searched quality fits.
    """
    if not target_bytes or target_bytes <= 0:
        return to_data_url(image_data)

    img = await load_raster(image_data, timeout=decode_timeout)

    surface = acquire_surface(provider, img.width, img.height)
    surface.draw_image(img, 0, 0)

    best = surface.encode_jpeg(REFERENCE_QUALITY)
    reference_size = len(best)
    best_q = REFERENCE_QUALITY
    fitted = False

    lo, hi = MIN_QUALITY, MAX_QUALITY
    for step in range(MAX_ITERATIONS):
        mid_q = (lo + hi) / 2
        candidate = surface.encode_jpeg(mid_q)
        size = len(candidate)
        fits = size <= target_bytes and size <= reference_size
        logger.debug(
            "step %d: q=%.3f -> %d bytes (target %d) %s",
            step + 1, mid_q, size, target_bytes, "fits" if fits else "too big",
        )
        if fits:
            best, best_q, fitted = candidate, mid_q, True
            lo = mid_q
        else:
            hi = mid_q

    if fitted:
        logger.info("Compressed to %d bytes at q=%.3f (target %d)", len(best), best_q, target_bytes)
    else:
        logger.warning(
            "No quality within %d steps fit %d bytes; returning %d-byte reference encode",
            MAX_ITERATIONS, target_bytes, len(best),
        )
    return encode_data_url(best)
