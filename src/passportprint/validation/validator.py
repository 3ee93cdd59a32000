from __future__ import annotations

import io
from typing import List

import numpy as np
from PIL import Image

from passportprint.core.errors import DecodeError
from passportprint.core.models import FileSizeLimit, OutputFormat, PhotoSpec
from passportprint.export.print_sheet import PRINT_DPI, SHEET_HEIGHT_IN, SHEET_WIDTH_IN, mm_to_px
from passportprint.raster.envelope import ImageData, to_bytes
from passportprint.validation.report import RuleResult, ValidationReport

ASPECT_TOLERANCE = 0.02
WHITE_THRESHOLD = 245
WHITE_BORDER_MIN_RATIO = 0.95


def _pil_to_np_rgb(img: Image.Image) -> np.ndarray:
    return np.asarray(img.convert("RGB"), dtype=np.uint8)


def _near_white_ratio_border(img_rgb: np.ndarray, margin: int, thr: int = WHITE_THRESHOLD) -> float:
    """Share of pixels in a ``margin``-wide frame around the image that are near white."""
    h, w, _ = img_rgb.shape
    m = max(1, min(margin, h // 2, w // 2))
    frame = np.ones((h, w), dtype=bool)
    frame[m : h - m, m : w - m] = False
    border = img_rgb[frame]
    if not border.size:
        return 0.0
    return float((border >= thr).all(axis=1).mean())


def _check_file_size(size_bytes: int, size_limit: FileSizeLimit) -> RuleResult:
    limit = size_limit.limit_bytes
    kb = size_bytes / 1024
    if limit <= 0:
        return RuleResult(
            rule_id="File size",
            passed=True,
            message=f"{kb:.1f} KB (no limit).",
            metrics={"bytes": size_bytes, "limit_bytes": None},
        )
    ok = size_bytes <= limit
    msg = f"{kb:.1f} KB (limit {limit // 1024} KB)."
    if not ok:
        msg += " Compression could not reach the limit; a plainer background usually helps."
    return RuleResult(
        rule_id="File size",
        passed=ok,
        message=msg,
        metrics={"bytes": size_bytes, "limit_bytes": limit},
    )


def _check_photo_dimensions(w: int, h: int, spec: PhotoSpec) -> RuleResult:
    min_w = mm_to_px(spec.width_mm, spec.min_dpi)
    min_h = mm_to_px(spec.height_mm, spec.min_dpi)
    # Rounded down so a 602x602 file passes for 51 mm at 300 dpi (602.36 px).
    res_ok = w >= int(min_w) and h >= int(min_h)

    expected_aspect = spec.width_mm / spec.height_mm
    aspect = w / h if h else 0.0
    aspect_ok = abs(aspect - expected_aspect) <= ASPECT_TOLERANCE * expected_aspect

    msg = f"{w}x{h} pixels (minimum {int(min_w)}x{int(min_h)} for {spec.width_mm:g}x{spec.height_mm:g} mm at {spec.min_dpi} dpi)."
    if not res_ok:
        msg += " Resolution too low for print."
    if not aspect_ok:
        msg += f" Aspect ratio {aspect:.3f} does not match {expected_aspect:.3f}."
    return RuleResult(
        rule_id="Dimensions",
        passed=res_ok and aspect_ok,
        message=msg,
        metrics={"width": w, "height": h, "min_width": min_w, "min_height": min_h, "aspect": aspect},
    )


def _check_sheet_dimensions(w: int, h: int) -> RuleResult:
    ew, eh = SHEET_WIDTH_IN * PRINT_DPI, SHEET_HEIGHT_IN * PRINT_DPI
    ok = (w, h) == (ew, eh)
    return RuleResult(
        rule_id="Dimensions",
        passed=ok,
        message=f"{w}x{h} pixels (expected {ew}x{eh} for a {SHEET_WIDTH_IN}x{SHEET_HEIGHT_IN}\" sheet).",
        metrics={"width": w, "height": h, "expected": [ew, eh]},
    )


def validate_export(
    data: ImageData,
    photo_spec: PhotoSpec,
    output_format: OutputFormat = OutputFormat.SINGLE_DIGITAL,
    size_limit: FileSizeLimit = FileSizeLimit.UNLIMITED,
) -> ValidationReport:
    """
    Check an exported file against the document requirements.

    These are best-effort checks for user guidance, not an official acceptance test.
    Raises DecodeError if the export cannot be read back.
    """
    payload = to_bytes(data)
    try:
        img = Image.open(io.BytesIO(payload))
        img.load()
    except (OSError, ValueError) as e:
        raise DecodeError(f"Export is not a readable image: {e}") from e

    results: List[RuleResult] = []
    is_sheet = output_format is OutputFormat.PRINT_SHEET

    # Sheets are printed at full quality; the upload limit does not apply.
    results.append(_check_file_size(len(payload), FileSizeLimit.UNLIMITED if is_sheet else size_limit))

    w, h = img.size
    results.append(_check_sheet_dimensions(w, h) if is_sheet else _check_photo_dimensions(w, h, photo_spec))

    if is_sheet:
        results.append(
            RuleResult(
                rule_id="Background whiteness",
                passed=True,
                message="Not checked for print sheets.",
                skipped=True,
            )
        )
    else:
        img_rgb = _pil_to_np_rgb(img)
        margin = max(10, int(0.05 * min(w, h)))
        white_ratio = _near_white_ratio_border(img_rgb, margin=margin)
        ok = white_ratio >= WHITE_BORDER_MIN_RATIO
        msg = f"Near-white border pixels: {white_ratio*100:.1f}% (target ≥ {WHITE_BORDER_MIN_RATIO*100:.0f}%)."
        if not ok:
            msg += " Background may not be white enough."
        results.append(
            RuleResult(
                rule_id="Background whiteness",
                passed=ok,
                message=msg,
                metrics={"white_ratio": white_ratio, "margin_px": margin, "threshold": WHITE_THRESHOLD},
            )
        )

    passed = all(r.passed for r in results)
    return ValidationReport(passed=passed, results=results)


def format_report_text(report: ValidationReport) -> str:
    lines: List[str] = []
    lines.append("PassportPrint Export Report")
    lines.append("-" * 27)
    lines.append(f"Overall: {'PASS' if report.passed else 'FAIL'}")
    lines.append("")
    for r in report.results:
        mark = "–" if r.skipped else ("✅" if r.passed else "❌")
        lines.append(f"{mark} {r.rule_id}: {r.message}")
    return "\n".join(lines)
