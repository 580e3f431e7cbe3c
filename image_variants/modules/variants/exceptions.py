"""Errors raised by the variant pipeline."""


class ImageProcessingError(Exception):
    """Base exception for image variant processing errors."""
    pass


class ImageDecodeError(ImageProcessingError):
    """Bytes are not a valid or supported image."""
    pass


class ImageValidationError(ImageProcessingError):
    """Input rejected before or during processing.

    Unknown variant or format, MIME type or extension outside the allow-list,
    byte size over the limit, or malformed processing options.
    """
    pass
