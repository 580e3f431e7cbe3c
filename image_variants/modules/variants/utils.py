"""Key and URL utilities for image variants.

Pure functions: no I/O and no shared state. Renderers call the URL helpers
on every image they draw, so derivation has to stay cheap.
"""

import time
import uuid
from typing import Optional, Union
from urllib.parse import urlsplit

from image_variants.core.config import StorageConfig, get_storage_config
from image_variants.modules.variants.exceptions import ImageValidationError
from image_variants.modules.variants.models import (
    DEFAULT_OUTPUT_FORMAT,
    FORMAT_CONTENT_TYPES,
    FORMAT_EXTENSIONS,
    IMAGE_VARIANTS,
    MAX_IMAGE_SIZE,
    PROCESSABLE_EXTENSIONS,
    PROCESSABLE_IMAGE_TYPES,
    OutputFormat,
    VariantName,
    VariantSpec,
    get_variant_spec,
)

FormatLike = Union[OutputFormat, str]
VariantLike = Union[VariantName, str]


def is_processable_image(mime_type: str) -> bool:
    """Check a MIME type against the processable allow-list (case-sensitive)."""
    return mime_type in PROCESSABLE_IMAGE_TYPES


def is_processable_extension(ext: str) -> bool:
    """Check a file extension against the allow-list (case-insensitive)."""
    if not ext:
        return False
    return ext.lower() in PROCESSABLE_EXTENSIONS


def get_file_extension(filename: str) -> str:
    """Get the lower-cased extension after the last dot of a filename.

    Dotfiles without a further dot (".gitignore"), names ending in a dot and
    names without any dot have no extension.

    Args:
        filename: File name

    Returns:
        Extension without the dot, or "" if there is none
    """
    dot_index = filename.rfind(".")
    if dot_index <= 0 or dot_index == len(filename) - 1:
        return ""
    return filename[dot_index + 1:].lower()


def _resolve_format(output_format: FormatLike) -> OutputFormat:
    try:
        return OutputFormat(output_format)
    except ValueError:
        raise ImageValidationError(f"Unsupported output format: {output_format}") from None


def _extension_dot(path: str) -> int:
    """Index of the dot starting the path's extension, or -1.

    The dot must come after the last "/" so directory names like
    "path.v2/" are not taken for an extension.
    """
    dot_index = path.rfind(".")
    if dot_index > path.rfind("/"):
        return dot_index
    return -1


def _variant_filename(path: str, spec: VariantSpec, output_format: OutputFormat) -> str:
    dot_index = _extension_dot(path)
    base = path[:dot_index] if dot_index != -1 else path
    return f"{base}{spec.suffix}.{FORMAT_EXTENSIONS[output_format]}"


def get_variant_key(
    original_key: str,
    variant_name: VariantLike,
    output_format: FormatLike = DEFAULT_OUTPUT_FORMAT,
) -> str:
    """Derive the storage key of a variant from the original's key.

    Example: ("equipment/photo/123/img.jpg", "thumbnail", "webp")
    -> "equipment/photo/123/img_thumb.webp"

    Args:
        original_key: Storage key of the original
        variant_name: Variant to derive
        output_format: Encoded format of the variant

    Returns:
        Variant storage key

    Raises:
        ImageValidationError: If the variant or format is unknown
    """
    spec = get_variant_spec(variant_name)
    if spec is None:
        name = getattr(variant_name, "value", variant_name)
        raise ImageValidationError(f"Unknown variant: {name}")
    return _variant_filename(original_key, spec, _resolve_format(output_format))


def get_s3_url(key: str, config: Optional[StorageConfig] = None) -> str:
    """Build the public URL of an object.

    Args:
        key: Object key, used verbatim
        config: Storage config (loaded from the environment if not provided)

    Returns:
        https://<bucket>.s3.<region>.amazonaws.com/<key>, or the CDN URL

    Raises:
        ConfigurationError: If region or bucket is not configured
    """
    if config is None:
        config = get_storage_config()
    return f"{config.base_url}/{key}"


def derive_variant_url(
    original_url: str,
    variant_name: VariantLike,
    output_format: FormatLike = DEFAULT_OUTPUT_FORMAT,
) -> str:
    """Derive a variant URL from the original's URL.

    Query string and fragment are carried over verbatim. URLs whose path has
    no extension, and unknown variant names, give back the original URL.

    Raises:
        ImageValidationError: If the format is unknown
    """
    spec = get_variant_spec(variant_name)
    if spec is None:
        return original_url
    resolved_format = _resolve_format(output_format)

    rest, hash_sep, fragment = original_url.partition("#")
    rest, query_sep, query = rest.partition("?")

    # Only the path may carry the extension, never the host
    try:
        path = urlsplit(rest).path
    except ValueError:
        return original_url
    if not path or not rest.endswith(path):
        return original_url
    prefix = rest[:len(rest) - len(path)]

    if _extension_dot(path) == -1:
        return original_url

    url = prefix + _variant_filename(path, spec, resolved_format)
    if query_sep:
        url += query_sep + query
    if hash_sep:
        url += hash_sep + fragment
    return url


def get_all_variant_urls(
    original_url: str,
    output_format: FormatLike = DEFAULT_OUTPUT_FORMAT,
) -> dict[str, str]:
    """Get the original URL plus the derived URL of every variant.

    Returns:
        Dict with exactly the keys original, thumbnail, medium and large
    """
    urls = {"original": original_url}
    for spec in IMAGE_VARIANTS:
        urls[spec.name.value] = derive_variant_url(original_url, spec.name, output_format)
    return urls


def get_fallback_chain(
    original_url: str,
    variant_name: VariantLike,
    placeholder: Optional[str] = None,
    output_format: FormatLike = DEFAULT_OUTPUT_FORMAT,
) -> list[str]:
    """URLs a renderer should try in order: variant, original, placeholder.

    A variant may not exist for small originals, so a renderer falls back
    to the original when the variant 404s, then to the placeholder.
    """
    candidates = [
        derive_variant_url(original_url, variant_name, output_format),
        original_url,
        placeholder,
    ]
    chain: list[str] = []
    for url in candidates:
        if url and url not in chain:
            chain.append(url)
    return chain


def validate_image_size(byte_length: int, max_bytes: int = MAX_IMAGE_SIZE) -> bool:
    """Check a byte length against a limit (inclusive)."""
    return byte_length <= max_bytes


def get_content_type(output_format: FormatLike) -> str:
    """Get the content type to store an encoded variant with."""
    return FORMAT_CONTENT_TYPES[_resolve_format(output_format)]


def validate_upload(
    filename: str,
    mime_type: str,
    byte_length: int,
    max_bytes: int = MAX_IMAGE_SIZE,
) -> str:
    """Reject an upload before it reaches the engine.

    Args:
        filename: Client supplied file name
        mime_type: Client supplied MIME type
        byte_length: Upload size in bytes
        max_bytes: Size limit

    Returns:
        Normalized file extension

    Raises:
        ImageValidationError: If the type, extension or size is not accepted
    """
    if not is_processable_image(mime_type):
        raise ImageValidationError(f"Unsupported image type: {mime_type or '<empty>'}")

    extension = get_file_extension(filename)
    if not is_processable_extension(extension):
        raise ImageValidationError(f"Unsupported file extension: {filename}")

    if not validate_image_size(byte_length, max_bytes):
        raise ImageValidationError(
            f"Image is {byte_length} bytes, limit is {max_bytes} bytes"
        )

    return extension


def generate_original_key(
    prefix: str,
    filename: str,
    timestamp: Optional[int] = None,
) -> str:
    """Generate a unique storage key for an uploaded original.

    Args:
        prefix: Key namespace, e.g. "equipment/photo/123"
        filename: Client supplied file name (only its extension is kept)
        timestamp: Unix seconds (defaults to now)

    Returns:
        "<prefix>/<timestamp>-<uuid4>.<ext>"
    """
    if timestamp is None:
        timestamp = int(time.time())
    extension = get_file_extension(filename)
    name = f"{timestamp}-{uuid.uuid4()}"
    if extension:
        name = f"{name}.{extension}"
    return f"{prefix.strip('/')}/{name}" if prefix.strip("/") else name
