from __future__ import annotations


class PhotoExportError(RuntimeError):
    """Base class for failures of a single export call. Never retried internally."""


class DecodeError(PhotoExportError):
    """Input bytes are not a decodable image."""


class DecodeTimeout(PhotoExportError):
    """Decoding did not finish within the allowed wait."""


class SurfaceUnavailable(PhotoExportError):
    """No drawable surface could be obtained."""


class EmptyInput(PhotoExportError):
    """Required photo bytes were not supplied."""
