from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional

from passportprint.app.state import AppState
from passportprint.core.errors import EmptyInput
from passportprint.core.models import (
    BgColorOption,
    FileSizeLimit,
    OutfitOption,
    OutputFormat,
    PhotoSpec,
    ProcessingStatus,
)
from passportprint.export.compress import compress_to_target_size, ensure_jpeg
from passportprint.export.print_sheet import create_print_sheet
from passportprint.raster.envelope import ImageData, is_empty, to_base64
from passportprint.raster.surface import RasterSurfaceProvider

logger = logging.getLogger(__name__)

# (source base64, photo spec, outfit, background) -> transformed image (base64 or data URL).
# Implemented by the generative image service; raises on failure.
ImageTransformer = Callable[[str, PhotoSpec, OutfitOption, BgColorOption], Awaitable[str]]


@dataclass(frozen=True)
class DownloadArtifact:
    filename: str
    data_url: str


def download_filename(outfit: OutfitOption, size_limit: FileSizeLimit) -> str:
    tag = "HQ" if size_limit is FileSizeLimit.UNLIMITED else size_limit.value
    return f"passport_photo_{outfit.value}_{tag}.jpg"


class ExportController:
    """
    Drives one AppState through upload -> transform -> output -> download.

    Without a transformer the uploaded photo is treated as already transformed,
    which is how the command line uses it.
    """

    def __init__(
        self,
        state: AppState,
        transformer: Optional[ImageTransformer] = None,
        provider: Optional[RasterSurfaceProvider] = None,
    ):
        self.state = state
        self.transformer = transformer
        self.provider = provider

    def load_upload(self, data: Optional[ImageData]) -> None:
        """Store a newly uploaded photo and drop everything derived from the previous one."""
        self.state.status = ProcessingStatus.UPLOADING
        self.state.error_message = None
        if is_empty(data):
            self.state.fail("Failed to read image file.")
            raise EmptyInput("Uploaded file is empty")
        self.state.original_image = to_base64(data)
        self.state.transformed_image = None
        self.state.processed_image = None
        self.state.status = ProcessingStatus.IDLE

    def set_size_limit(self, size_limit: FileSizeLimit) -> None:
        self.state.params = replace(self.state.params, size_limit=size_limit)

    async def set_output_format(self, output_format: OutputFormat) -> None:
        """Switch format; regenerate at once when a transformed photo is cached."""
        if output_format == self.state.params.output_format:
            return
        self.state.params = replace(self.state.params, output_format=output_format)
        if self.state.transformed_image:
            await self.generate_output(self.state.transformed_image, output_format)

    async def generate_output(self, raw: str, output_format: OutputFormat) -> str:
        """Build the displayable output for a transformed photo."""
        s = self.state
        s.status = (
            ProcessingStatus.GENERATING_SHEET
            if output_format is OutputFormat.PRINT_SHEET
            else ProcessingStatus.PROCESSING
        )
        try:
            if output_format is OutputFormat.PRINT_SHEET:
                spec = s.params.photo_spec
                result = await create_print_sheet(raw, spec.width_mm, spec.height_mm, provider=self.provider)
            else:
                result = await ensure_jpeg(raw, provider=self.provider)
        except Exception as e:
            logger.error("Output generation failed: %s", e)
            s.fail("Failed to generate output format.")
            raise

        s.processed_image = result
        s.status = ProcessingStatus.SUCCESS
        return result

    async def process(self) -> str:
        """Transform the uploaded photo (or reuse the cached transform) and generate output."""
        s = self.state
        if not s.original_image:
            raise EmptyInput("Upload a photo first")

        s.error_message = None
        if s.transformed_image:
            return await self.generate_output(s.transformed_image, s.params.output_format)

        s.status = ProcessingStatus.PROCESSING
        if self.transformer is None:
            raw = s.original_image
        else:
            try:
                result = await self.transformer(
                    s.original_image, s.params.photo_spec, s.params.outfit, s.params.bg_color
                )
            except Exception as e:
                logger.error("Image transform failed: %s", e)
                s.fail(str(e) or "An unexpected error occurred during processing.")
                raise
            if is_empty(result):
                s.fail("The transform service returned no image.")
                raise EmptyInput("Transform service returned no image")
            raw = to_base64(result)

        s.transformed_image = raw
        return await self.generate_output(raw, s.params.output_format)

    async def prepare_download(self) -> DownloadArtifact:
        """
        Return the file to save. Single digital files are compressed to the chosen
        size limit; print sheets are always full quality.
        """
        s = self.state
        if not s.processed_image:
            raise EmptyInput("Nothing to download yet")

        data_url = s.processed_image
        limit = s.params.size_limit
        if limit is not FileSizeLimit.UNLIMITED and s.params.output_format is OutputFormat.SINGLE_DIGITAL:
            s.status = ProcessingStatus.COMPRESSING
            try:
                data_url = await compress_to_target_size(data_url, limit.limit_bytes, provider=self.provider)
            except Exception as e:
                logger.error("Compression for download failed: %s", e)
                # The preview is still valid, so the session stays usable.
                s.error_message = "Failed to process download"
                s.status = ProcessingStatus.SUCCESS
                raise
            s.status = ProcessingStatus.SUCCESS

        return DownloadArtifact(filename=download_filename(s.params.outfit, limit), data_url=data_url)
