from __future__ import annotations

import io
import logging
import math
from typing import Optional, Protocol, Tuple

import cv2
import numpy as np
from PIL import Image, ImageDraw

from passportprint.core.errors import SurfaceUnavailable

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]

# An unpainted surface encodes as black, the same as a cleared canvas would.
_BLANK: Color = (0, 0, 0)


def _px(v: float) -> int:
    """Round a layout coordinate to the nearest pixel edge (halves round up)."""
    return int(math.floor(v + 0.5))


def jpeg_quality(q: float) -> int:
    """Map a 0..1 quality onto Pillow's integer JPEG quality."""
    return max(1, min(100, int(round(q * 100))))


def _resize(img: Image.Image, width: int, height: int) -> Image.Image:
    """Resize a PIL image with OpenCV (Lanczos), keeping its mode."""
    arr = np.asarray(img)
    out = cv2.resize(arr, (width, height), interpolation=cv2.INTER_LANCZOS4)
    return Image.fromarray(out)


class RasterSurface:
    """
    An offscreen RGB drawing surface backed by a PIL image.

    Coordinates are floats; they are rounded to pixel edges only when drawing,
    and anything falling outside the surface is clipped.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self._img = Image.new("RGB", (width, height), _BLANK)
        self._draw = ImageDraw.Draw(self._img)
        self.encode_count = 0

    @property
    def width(self) -> int:
        return self._img.width

    @property
    def height(self) -> int:
        return self._img.height

    def fill(self, color: Color) -> None:
        self._draw.rectangle((0, 0, self.width - 1, self.height - 1), fill=color)

    def _box(self, x: float, y: float, w: float, h: float) -> Tuple[int, int, int, int]:
        left, top = _px(x), _px(y)
        return left, top, _px(x + w), _px(y + h)

    def draw_image(
        self,
        src: Image.Image,
        x: float = 0.0,
        y: float = 0.0,
        w: Optional[float] = None,
        h: Optional[float] = None,
    ) -> None:
        """Draw src with its top-left at (x, y), scaled to w x h when given."""
        left, top, right, bottom = self._box(
            x, y, src.width if w is None else w, src.height if h is None else h
        )
        tw, th = right - left, bottom - top
        if tw <= 0 or th <= 0:
            return

        scaled = src if (tw, th) == src.size else _resize(src, tw, th)
        if scaled.mode == "RGBA":
            self._img.paste(scaled.convert("RGB"), (left, top), scaled.getchannel("A"))
        else:
            self._img.paste(scaled.convert("RGB"), (left, top))

    def stroke_rect(self, x: float, y: float, w: float, h: float, color: Color, line_width: int = 1) -> None:
        left, top, right, bottom = self._box(x, y, w, h)
        if right <= left or bottom <= top:
            return
        self._draw.rectangle((left, top, right - 1, bottom - 1), outline=color, width=line_width)

    def encode_jpeg(self, quality: float, dpi: Optional[int] = None) -> bytes:
        """Encode the surface as JPEG at a 0..1 quality."""
        buf = io.BytesIO()
        kwargs = {"dpi": (dpi, dpi)} if dpi else {}
        self._img.save(buf, format="JPEG", quality=jpeg_quality(quality), optimize=True, **kwargs)
        self.encode_count += 1
        return buf.getvalue()

    def to_image(self) -> Image.Image:
        return self._img.copy()


class RasterSurfaceProvider(Protocol):
    """Anything that can hand out drawable surfaces. Returns None when it cannot."""

    def create_surface(self, width: int, height: int) -> Optional[RasterSurface]:
        ...


class PillowSurfaceProvider:
    """Default provider: a fresh in-memory surface per request."""

    def create_surface(self, width: int, height: int) -> Optional[RasterSurface]:
        try:
            return RasterSurface(width, height)
        except (ValueError, MemoryError) as e:
            logger.warning("Could not allocate %dx%d surface: %s", width, height, e)
            return None


def acquire_surface(provider: Optional[RasterSurfaceProvider], width: int, height: int) -> RasterSurface:
    provider = provider if provider is not None else PillowSurfaceProvider()
    surface = provider.create_surface(width, height)
    if surface is None:
        raise SurfaceUnavailable("Drawing surface unavailable")
    return surface
