import unittest
from dataclasses import FrozenInstanceError, replace

from tests._test_path import SRC  # noqa: F401  (ensures src on path)

from passportprint.core.models import (
    DOC_CONFIGS,
    BgColorOption,
    DocType,
    ExportParams,
    FileSizeLimit,
    OutfitOption,
    OutputFormat,
    PhotoSpec,
)


class TestPhotoSpec(unittest.TestCase):
    def test_passport_config(self):
        spec = DOC_CONFIGS[DocType.PASSPORT]
        self.assertEqual((spec.width_mm, spec.height_mm), (51, 51))
        self.assertEqual(spec.min_dpi, 300)
        self.assertEqual(spec.face_size_percent, 65)

    def test_rejects_non_positive_values(self):
        with self.assertRaises(ValueError):
            PhotoSpec(width_mm=0, height_mm=45, min_dpi=300)
        with self.assertRaises(ValueError):
            PhotoSpec(width_mm=35, height_mm=-1, min_dpi=300)
        with self.assertRaises(ValueError):
            PhotoSpec(width_mm=35, height_mm=45, min_dpi=0)

    def test_frozen(self):
        spec = PhotoSpec(width_mm=35, height_mm=45, min_dpi=300)
        with self.assertRaises(FrozenInstanceError):
            spec.width_mm = 40  # type: ignore[misc]


class TestFileSizeLimit(unittest.TestCase):
    def test_limit_bytes(self):
        self.assertEqual(FileSizeLimit.UNLIMITED.limit_bytes, 0)
        self.assertEqual(FileSizeLimit.KB_50.limit_bytes, 50 * 1024)
        self.assertEqual(FileSizeLimit.KB_100.limit_bytes, 100 * 1024)
        self.assertEqual(FileSizeLimit.KB_200.limit_bytes, 200 * 1024)

    def test_parse(self):
        self.assertIs(FileSizeLimit.parse("100KB"), FileSizeLimit.KB_100)
        self.assertIs(FileSizeLimit.parse(" unlimited "), FileSizeLimit.UNLIMITED)
        with self.assertRaises(ValueError):
            FileSizeLimit.parse("75kb")


class TestExportParams(unittest.TestCase):
    def test_defaults(self):
        p = ExportParams()
        self.assertIs(p.doc_type, DocType.PASSPORT)
        self.assertIs(p.output_format, OutputFormat.SINGLE_DIGITAL)
        self.assertIs(p.size_limit, FileSizeLimit.UNLIMITED)
        self.assertIs(p.outfit, OutfitOption.ORIGINAL)
        self.assertIs(p.bg_color, BgColorOption.WHITE)
        self.assertEqual(p.photo_spec, DOC_CONFIGS[DocType.PASSPORT])

    def test_frozen(self):
        p = ExportParams()
        with self.assertRaises(FrozenInstanceError):
            p.size_limit = FileSizeLimit.KB_50  # type: ignore[misc]

    def test_replace(self):
        p = ExportParams()
        p2 = replace(p, output_format=OutputFormat.PRINT_SHEET, outfit=OutfitOption.SUIT_MALE)
        self.assertIs(p2.output_format, OutputFormat.PRINT_SHEET)
        self.assertIs(p2.outfit, OutfitOption.SUIT_MALE)
        # original unchanged
        self.assertIs(p.output_format, OutputFormat.SINGLE_DIGITAL)
