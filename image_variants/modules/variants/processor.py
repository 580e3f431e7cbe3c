"""Image variant generation.

Decodes an original with Pillow and encodes the variants it is large enough
for. Upload of the produced buffers is left to the caller.
"""

import asyncio
import io
import logging
import time
from functools import partial
from typing import Any, Mapping, Optional, Union

from PIL import Image, ImageOps, UnidentifiedImageError
from pydantic import ValidationError

from image_variants.core.config import StorageConfig, get_storage_config, settings
from image_variants.core.logging import log_error, log_info, log_warning
from image_variants.core.metrics import record_image_processed, record_variant
from image_variants.modules.variants.exceptions import (
    ImageDecodeError,
    ImageProcessingError,
    ImageValidationError,
)
from image_variants.modules.variants.models import (
    IMAGE_VARIANTS,
    PIL_SAVE_FORMATS,
    OutputFormat,
    VariantSpec,
)
from image_variants.modules.variants.schemas import (
    ImageMetadata,
    ProcessOptions,
    ProcessResult,
    VariantResult,
)
from image_variants.modules.variants.utils import get_s3_url, get_variant_key

logger = logging.getLogger(__name__)

OptionsLike = Union[ProcessOptions, Mapping[str, Any], None]

# What Pillow raises for truncated, corrupt or unsupported input
_DECODE_ERRORS = (
    UnidentifiedImageError,
    OSError,
    SyntaxError,
    EOFError,
    ValueError,
)

# JPEG has no alpha channel; transparent pixels are flattened onto this
JPEG_BACKGROUND = (255, 255, 255)


def _open_image(data: bytes) -> Image.Image:
    if not data:
        raise ImageDecodeError("Image data is empty")
    try:
        return Image.open(io.BytesIO(data))
    except Image.DecompressionBombError as e:
        raise ImageValidationError(f"Image exceeds the decompression limit: {e}") from e
    except _DECODE_ERRORS as e:
        raise ImageDecodeError(f"Cannot decode image: {e}") from e


def _has_alpha(image: Image.Image) -> bool:
    if "transparency" in image.info:
        return True
    return any(band in ("A", "a") for band in image.getbands())


def _read_metadata(image: Image.Image, size: int) -> ImageMetadata:
    width, height = image.size or (0, 0)
    return ImageMetadata(
        width=width or 0,
        height=height or 0,
        format=image.format.lower() if image.format else None,
        size=size,
        has_alpha=_has_alpha(image),
    )


def fit_inside(width: int, height: int, max_width: int, max_height: int) -> tuple[int, int]:
    """Scale dimensions to fit a box, keeping aspect ratio and never enlarging.

    Args:
        width: Source width (> 0)
        height: Source height (> 0)
        max_width: Box width
        max_height: Box height

    Returns:
        Tuple[int, int]: Fitted (width, height), each at least 1
    """
    scale = min(max_width / width, max_height / height, 1.0)
    return (
        max(1, min(max_width, round(width * scale))),
        max(1, min(max_height, round(height * scale))),
    )


def extract_image_metadata(data: bytes) -> ImageMetadata:
    """Read dimensions, format and alpha presence without decoding pixels.

    Args:
        data: Raw image data

    Returns:
        ImageMetadata

    Raises:
        ImageDecodeError: If the data is not a recognizable image
        ImageValidationError: If the header declares more pixels than Pillow's
            decompression bomb guard allows
    """
    image = _open_image(data)
    try:
        return _read_metadata(image, len(data))
    finally:
        image.close()


class ImageProcessor:
    """Produces the size-bounded variants of an original image."""

    def __init__(
        self,
        storage_config: Optional[StorageConfig] = None,
        max_original_dimension: Optional[int] = None,
        max_image_pixels: Optional[int] = None,
    ):
        """Initialize processor.

        Args:
            storage_config: Storage config for variant URLs (loaded from the
                environment if not provided)
            max_original_dimension: Originals larger than this on either axis
                are downscaled before variants are derived (MAX_ORIGINAL_DIMENSION
                setting if not provided)
            max_image_pixels: Originals with more pixels than this are rejected
                before decoding (MAX_IMAGE_PIXELS setting if not provided)

        Raises:
            ConfigurationError: If storage region or bucket is missing
        """
        self.storage_config = storage_config or get_storage_config()
        self.max_original_dimension = max_original_dimension or settings.MAX_ORIGINAL_DIMENSION
        self.max_image_pixels = max_image_pixels or settings.MAX_IMAGE_PIXELS

    def process(
        self,
        data: bytes,
        key: str,
        options: OptionsLike = None,
    ) -> ProcessResult:
        """Extract metadata and generate variants for an original.

        Args:
            data: Raw image data
            key: Storage key of the original, variant keys are derived from it
            options: Variants and formats to restrict output to

        Returns:
            ProcessResult: Metadata and the variants that were produced

        Raises:
            ImageDecodeError: If the data cannot be decoded
            ImageValidationError: If the options are invalid or the image has too many pixels
            ImageProcessingError: If an encoder fails or is unavailable
        """
        started = time.perf_counter()
        try:
            result = self._process(data, key, options)
        except ImageProcessingError as e:
            if isinstance(e, ImageDecodeError):
                status = "decode_error"
            elif isinstance(e, ImageValidationError):
                status = "validation_error"
            else:
                status = "error"
            record_image_processed(status, time.perf_counter() - started)
            log_error(logger, "Image processing failed", exception=e, key=key, status=status)
            raise

        duration = time.perf_counter() - started
        record_image_processed("success", duration)
        for variant in result.variants:
            record_variant(variant.variant.value, variant.format.value, variant.size)

        log_info(
            logger,
            "Image variants generated",
            key=key,
            source_width=result.metadata.width,
            source_height=result.metadata.height,
            source_format=result.metadata.format,
            variant_count=len(result.variants),
            duration_ms=round(duration * 1000, 2),
        )
        return result

    def _process(self, data: bytes, key: str, options: OptionsLike) -> ProcessResult:
        resolved = self._resolve_options(options)

        image = _open_image(data)
        try:
            metadata = _read_metadata(image, len(data))
            pixels = metadata.width * metadata.height
            if pixels > self.max_image_pixels:
                raise ImageValidationError(
                    f"Image is {pixels} pixels, limit is {self.max_image_pixels} pixels"
                )
            source = self._prepare_source(image, key)

            wanted = set(resolved.requested_variants())
            formats = resolved.requested_formats()
            width, height = source.size

            variants: list[VariantResult] = []
            for spec in IMAGE_VARIANTS:
                # Only variants whose box the source exceeds on some axis
                if width <= spec.max_width and height <= spec.max_height:
                    continue
                if spec.name not in wanted:
                    continue

                resized = self._resize(source, spec)
                for output_format in formats:
                    buffer = self._encode(resized, output_format, spec.quality)
                    variant_key = get_variant_key(key, spec.name, output_format)
                    variants.append(VariantResult(
                        variant=spec.name,
                        format=output_format,
                        key=variant_key,
                        url=get_s3_url(variant_key, self.storage_config),
                        width=resized.width,
                        height=resized.height,
                        buffer=buffer,
                        size=len(buffer),
                    ))

            return ProcessResult(metadata=metadata, variants=variants)
        finally:
            image.close()

    def _resolve_options(self, options: OptionsLike) -> ProcessOptions:
        if options is None:
            return ProcessOptions()
        if isinstance(options, ProcessOptions):
            return options
        try:
            return ProcessOptions.model_validate(dict(options))
        except (ValidationError, TypeError, ValueError) as e:
            raise ImageValidationError(f"Invalid processing options: {e}") from e

    def _prepare_source(self, image: Image.Image, key: str) -> Image.Image:
        """Decode pixels, apply EXIF orientation and bound the working size."""
        try:
            image.load()
            source = ImageOps.exif_transpose(image)
        except _DECODE_ERRORS as e:
            raise ImageDecodeError(f"Cannot decode image: {e}") from e

        target_mode = "RGBA" if _has_alpha(source) else "RGB"
        if source.mode != target_mode:
            source = source.convert(target_mode)

        limit = self.max_original_dimension
        if source.width > limit or source.height > limit:
            size = fit_inside(source.width, source.height, limit, limit)
            log_warning(
                logger,
                "Downscaling oversized original",
                key=key,
                source_width=source.width,
                source_height=source.height,
                target_width=size[0],
                target_height=size[1],
            )
            source = source.resize(size, Image.Resampling.LANCZOS)

        return source

    def _resize(self, image: Image.Image, spec: VariantSpec) -> Image.Image:
        size = fit_inside(image.width, image.height, spec.max_width, spec.max_height)
        if size == image.size:
            return image
        return image.resize(size, Image.Resampling.LANCZOS)

    def _encode(self, image: Image.Image, output_format: OutputFormat, quality: int) -> bytes:
        """Encode a frame at the given quality.

        Raises:
            ImageProcessingError: If the encoder is missing or fails
        """
        save_format = PIL_SAVE_FORMATS[output_format]
        Image.init()
        if save_format not in Image.SAVE:
            raise ImageProcessingError(
                f"No {output_format.value} encoder available in this Pillow build"
            )

        frame = image
        save_kwargs: dict[str, Any] = {"quality": quality}
        if output_format is OutputFormat.JPEG:
            save_kwargs["optimize"] = True
            if image.mode == "RGBA":
                frame = Image.new("RGB", image.size, JPEG_BACKGROUND)
                frame.paste(image, mask=image.getchannel("A"))

        output = io.BytesIO()
        try:
            frame.save(output, format=save_format, **save_kwargs)
        except (OSError, ValueError) as e:
            raise ImageProcessingError(f"Encoding to {output_format.value} failed: {e}") from e

        buffer = output.getvalue()
        if not buffer:
            raise ImageProcessingError(f"Encoder produced no {output_format.value} data")
        return buffer


def process_image(
    data: bytes,
    key: str,
    options: OptionsLike = None,
    storage_config: Optional[StorageConfig] = None,
) -> ProcessResult:
    """Convenience function to generate the variants of an original.

    Args:
        data: Raw image data
        key: Storage key of the original
        options: Variants and formats to restrict output to
        storage_config: Storage config (loaded from the environment if not provided)

    Returns:
        ProcessResult: Metadata and produced variants
    """
    processor = ImageProcessor(storage_config)
    return processor.process(data, key, options)


async def process_image_async(
    data: bytes,
    key: str,
    options: OptionsLike = None,
    storage_config: Optional[StorageConfig] = None,
) -> ProcessResult:
    """Run process_image in a worker thread so the event loop is not blocked."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        partial(process_image, data, key, options, storage_config),
    )
