from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class DocType(str, Enum):
    PASSPORT = "Passport"


class OutputFormat(str, Enum):
    SINGLE_DIGITAL = "Single Digital File"
    PRINT_SHEET = "Printable 4x6 Sheet"


class ProcessingStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    GENERATING_SHEET = "generating_sheet"
    COMPRESSING = "compressing"
    SUCCESS = "success"
    ERROR = "error"


class OutfitOption(str, Enum):
    ORIGINAL = "original"
    SUIT_MALE = "suit_male"
    SUIT_FEMALE = "suit_female"
    SHIRT_WHITE = "shirt_white"


class BgColorOption(str, Enum):
    WHITE = "white"
    LIGHT_BLUE = "light_blue"
    LIGHT_GRAY = "light_gray"


class FileSizeLimit(str, Enum):
    """Upload ceilings used by common passport/exam portals."""
    UNLIMITED = "unlimited"
    KB_50 = "50kb"
    KB_100 = "100kb"
    KB_200 = "200kb"

    @property
    def limit_bytes(self) -> int:
        """Byte budget for this limit; 0 means no re-encoding."""
        if self is FileSizeLimit.UNLIMITED:
            return 0
        return int(self.value[:-2]) * 1024

    @classmethod
    def parse(cls, text: str) -> "FileSizeLimit":
        key = text.strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown file size limit: {text!r} (expected one of {[m.value for m in cls]})")


@dataclass(frozen=True)
class PhotoSpec:
    """
    Physical description of a document photo.

    width_mm, height_mm:
        Printed size of one photo in millimeters.
    min_dpi:
        Resolution the digital file must reach at that printed size.
    face_size_percent:
        Approximate head height as a share of the photo height (guidance only).
    bg_color:
        Required background, as a human-readable name.
    """
    width_mm: float
    height_mm: float
    min_dpi: int
    face_size_percent: int = 65
    bg_color: str = "White"

    def __post_init__(self) -> None:
        if self.width_mm <= 0 or self.height_mm <= 0:
            raise ValueError("Photo width and height must be > 0 mm")
        if self.min_dpi <= 0:
            raise ValueError("min_dpi must be > 0")


DOC_CONFIGS: dict[DocType, PhotoSpec] = {
    DocType.PASSPORT: PhotoSpec(
        width_mm=51,
        height_mm=51,
        min_dpi=300,
        face_size_percent=65,
        bg_color="White",
    ),
}


@dataclass(frozen=True)
class ExportParams:
    """
    User choices that control how the transformed photo is exported.

    output_format:
        Single digital file, or a printable 4x6" sheet of copies.
    size_limit:
        Byte ceiling for single digital files (ignored for sheets).
    outfit, bg_color:
        Style tags forwarded to the image transform service.
    """
    doc_type: DocType = DocType.PASSPORT
    output_format: OutputFormat = OutputFormat.SINGLE_DIGITAL
    size_limit: FileSizeLimit = FileSizeLimit.UNLIMITED
    outfit: OutfitOption = OutfitOption.ORIGINAL
    bg_color: BgColorOption = BgColorOption.WHITE

    @property
    def photo_spec(self) -> PhotoSpec:
        return DOC_CONFIGS[self.doc_type]
