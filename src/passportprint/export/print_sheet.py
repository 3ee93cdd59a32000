"""
print_sheet.py

Lay out six copies of a passport photo on 4x6" photo paper:
- 6 x 4 inch landscape sheet rendered at 300 DPI (1800 x 1200 px)
- fixed 3 columns x 2 rows, each tile at the photo's true printed size
- grid centred on the sheet; if it is larger than the sheet it overflows
  evenly on both sides instead of being shrunk
- light gray 1 px outline around each tile as a cutting guide

Notes:
- 51 mm x 3 = 153 mm, a little wider than the 152.4 mm sheet, so the outer
  columns of a 51x51 mm passport sheet lose about 3.5 px each. Photos keep
  their physical size; the loss is split evenly between both edges.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from passportprint.core.errors import EmptyInput
from passportprint.raster.decode import DECODE_TIMEOUT_S, load_raster
from passportprint.raster.envelope import ImageData, encode_data_url, is_empty
from passportprint.raster.surface import RasterSurfaceProvider, acquire_surface

logger = logging.getLogger(__name__)

PRINT_DPI = 300
MM_TO_INCH = 0.0393701
SHEET_WIDTH_IN = 6
SHEET_HEIGHT_IN = 4
GRID_COLS = 3
GRID_ROWS = 2
SHEET_QUALITY = 0.95
SHEET_BACKGROUND = (255, 255, 255)
CUT_GUIDE_COLOR = (0xD1, 0xD5, 0xDB)


def mm_to_px(mm: float, dpi: int = PRINT_DPI) -> float:
    """Millimeters -> pixels at dpi. Not rounded."""
    return mm * MM_TO_INCH * dpi


@dataclass(frozen=True)
class SheetLayout:
    """Pixel geometry of a print sheet. Tile coordinates are unrounded floats."""
    sheet_width_px: int
    sheet_height_px: int
    photo_width_px: float
    photo_height_px: float
    start_x: float
    start_y: float
    tiles: Tuple[Tuple[float, float, float, float], ...]

    @property
    def grid_width_px(self) -> float:
        return GRID_COLS * self.photo_width_px

    @property
    def grid_height_px(self) -> float:
        return GRID_ROWS * self.photo_height_px


def compute_sheet_layout(width_mm: float, height_mm: float) -> SheetLayout:
    """Return the centred 3x2 grid for photos of width_mm x height_mm."""
    if width_mm <= 0 or height_mm <= 0:
        raise ValueError("Photo width and height must be > 0 mm")

    sheet_w = SHEET_WIDTH_IN * PRINT_DPI
    sheet_h = SHEET_HEIGHT_IN * PRINT_DPI
    photo_w = mm_to_px(width_mm)
    photo_h = mm_to_px(height_mm)

    # Negative when the grid is larger than the sheet.
    start_x = (sheet_w - GRID_COLS * photo_w) / 2
    start_y = (sheet_h - GRID_ROWS * photo_h) / 2

    tiles: List[Tuple[float, float, float, float]] = []
    for row in range(GRID_ROWS):
        for col in range(GRID_COLS):
            tiles.append((start_x + col * photo_w, start_y + row * photo_h, photo_w, photo_h))

    return SheetLayout(
        sheet_width_px=sheet_w,
        sheet_height_px=sheet_h,
        photo_width_px=photo_w,
        photo_height_px=photo_h,
        start_x=start_x,
        start_y=start_y,
        tiles=tuple(tiles),
    )


async def create_print_sheet(
    photo_data: Optional[ImageData],
    width_mm: float,
    height_mm: float,
    *,
    provider: Optional[RasterSurfaceProvider] = None,
    decode_timeout: float = DECODE_TIMEOUT_S,
) -> str:
    """
    Render a 4x6" sheet with six copies of the photo and return it as a JPEG data URL.

    Args:
      photo_data: data URL, raw base64, or encoded bytes of one photo
      width_mm, height_mm: printed size of each copy
      provider: where the sheet surface comes from (Pillow by default)
      decode_timeout: seconds to wait for the photo to decode
    """
    if is_empty(photo_data):
        raise EmptyInput("No image data provided for sheet generation")

    layout = compute_sheet_layout(width_mm, height_mm)
    logger.debug(
        "Sheet %dx%d px, tile %.2fx%.2f px, grid origin (%.2f, %.2f)",
        layout.sheet_width_px, layout.sheet_height_px,
        layout.photo_width_px, layout.photo_height_px,
        layout.start_x, layout.start_y,
    )

    surface = acquire_surface(provider, layout.sheet_width_px, layout.sheet_height_px)
    surface.fill(SHEET_BACKGROUND)

    img = await load_raster(photo_data, timeout=decode_timeout)

    for x, y, w, h in layout.tiles:
        surface.draw_image(img, x, y, w, h)
        surface.stroke_rect(x, y, w, h, CUT_GUIDE_COLOR, line_width=1)

    out = surface.encode_jpeg(SHEET_QUALITY, dpi=PRINT_DPI)
    logger.info("Print sheet encoded: %d bytes", len(out))
    return encode_data_url(out)
