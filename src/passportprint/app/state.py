from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional

from passportprint.core.models import BgColorOption, ExportParams, OutfitOption, ProcessingStatus


@dataclass
class AppState:
    """
    Mutable state for a single export session.

    Images are held as base64 text: ``original_image`` and ``transformed_image`` as
    raw payloads, ``processed_image`` as a displayable data URL. The controller is
    responsible for transitions (upload -> transform -> generate -> download).
    """
    # Input
    original_image: Optional[str] = None

    # Cached result of the transform service for the current style choices
    transformed_image: Optional[str] = None

    # Output (preview / download source)
    processed_image: Optional[str] = None

    # User params
    params: ExportParams = field(default_factory=ExportParams)

    status: ProcessingStatus = ProcessingStatus.IDLE
    error_message: Optional[str] = None

    def _invalidate_outputs(self) -> None:
        self.transformed_image = None
        self.processed_image = None

    def set_outfit(self, outfit: OutfitOption) -> None:
        """Change outfit; a new outfit needs a fresh transform."""
        if outfit != self.params.outfit:
            self.params = replace(self.params, outfit=outfit)
            self._invalidate_outputs()

    def set_bg_color(self, bg_color: BgColorOption) -> None:
        if bg_color != self.params.bg_color:
            self.params = replace(self.params, bg_color=bg_color)
            self._invalidate_outputs()

    def fail(self, message: str) -> None:
        self.status = ProcessingStatus.ERROR
        self.error_message = message

    def reset(self) -> None:
        """Clear all session state, keeping nothing from the previous photo."""
        self.original_image = None
        self._invalidate_outputs()
        self.status = ProcessingStatus.IDLE
        self.error_message = None
        self.params = ExportParams()  # restore defaults
