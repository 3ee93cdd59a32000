#!/usr/bin/env python3
"""
cli.py

Export an already-transformed passport photo:
- single digital JPEG, optionally re-encoded under a portal's size limit
- printable 4x6" sheet with six 51x51 mm copies and cut guides

Usage:
  passportprint --input photo.jpg --output passport.jpg --limit 50kb
  passportprint -i photo.jpg -o sheet.jpg --format sheet
  passportprint -i photo.jpg -o passport.jpg --limit 100kb --report

Notes:
- The generative transform step is not run here; pass the photo returned by it.
- Sheets are always written at full quality; --limit applies to single files only.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from passportprint.app.controller import ExportController
from passportprint.app.state import AppState
from passportprint.core.errors import PhotoExportError
from passportprint.core.models import ExportParams, FileSizeLimit, OutputFormat
from passportprint.raster.envelope import to_bytes
from passportprint.validation.validator import format_report_text, validate_export

_FORMATS = {"single": OutputFormat.SINGLE_DIGITAL, "sheet": OutputFormat.PRINT_SHEET}


async def export_photo(input_path: str, output_path: str, params: ExportParams) -> tuple[str, bytes]:
    """
    Run the export pipeline on a file and write the result.

    Returns (suggested download filename, written JPEG bytes).
    """
    controller = ExportController(AppState(params=params))
    controller.load_upload(Path(input_path).read_bytes())
    await controller.process()
    artifact = await controller.prepare_download()

    out = to_bytes(artifact.data_url)
    Path(output_path).write_bytes(out)
    return artifact.filename, out


def _build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Export a passport photo as a size-limited JPEG or a 4x6\" print sheet.")
    p.add_argument("--input", "-i", required=True, help="Path to the transformed photo (jpg/png)")
    p.add_argument("--output", "-o", required=True, help="Path to output JPEG")
    p.add_argument("--format", choices=sorted(_FORMATS), default="single", help="single file or 4x6 print sheet (default: single)")
    p.add_argument(
        "--limit",
        default=FileSizeLimit.UNLIMITED.value,
        choices=[m.value for m in FileSizeLimit],
        help="File size limit for single files (default: unlimited)",
    )
    p.add_argument("--report", action="store_true", help="Print an export compliance report")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    params = ExportParams(output_format=_FORMATS[args.format], size_limit=FileSizeLimit.parse(args.limit))

    try:
        _, out = asyncio.run(export_photo(args.input, args.output, params))
        report = validate_export(out, params.photo_spec, params.output_format, params.size_limit) if args.report else None
    except (PhotoExportError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    if report is not None:
        print(format_report_text(report))
    print(f"Saved: {args.output} ({len(out) / 1024:.1f} KB)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
