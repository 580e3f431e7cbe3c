"""Variant definitions and format tables.

Single source of truth for variant geometry, encode quality and the
format -> content-type / extension mappings. Everything here is immutable.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Union


class VariantName(str, Enum):
    """Named derivatives produced from an original."""
    THUMBNAIL = "thumbnail"
    MEDIUM = "medium"
    LARGE = "large"


class OutputFormat(str, Enum):
    """Formats variants can be encoded to."""
    WEBP = "webp"
    AVIF = "avif"
    JPEG = "jpeg"


@dataclass(frozen=True)
class VariantSpec:
    """Bounding box, encode quality and filename suffix of one variant."""
    name: VariantName
    max_width: int
    max_height: int
    quality: int
    suffix: str


# Ordered by size ascending; the skip rule relies on this order
IMAGE_VARIANTS: tuple[VariantSpec, ...] = (
    VariantSpec(VariantName.THUMBNAIL, max_width=150, max_height=150, quality=70, suffix="_thumb"),
    VariantSpec(VariantName.MEDIUM, max_width=600, max_height=600, quality=80, suffix="_medium"),
    VariantSpec(VariantName.LARGE, max_width=1200, max_height=1200, quality=85, suffix="_large"),
)

VARIANTS_BY_NAME: Mapping[VariantName, VariantSpec] = MappingProxyType(
    {spec.name: spec for spec in IMAGE_VARIANTS}
)

DEFAULT_OUTPUT_FORMAT = OutputFormat.WEBP

OUTPUT_FORMATS: tuple[OutputFormat, ...] = tuple(OutputFormat)

FORMAT_CONTENT_TYPES: Mapping[OutputFormat, str] = MappingProxyType({
    OutputFormat.WEBP: "image/webp",
    OutputFormat.AVIF: "image/avif",
    OutputFormat.JPEG: "image/jpeg",
})

FORMAT_EXTENSIONS: Mapping[OutputFormat, str] = MappingProxyType({
    OutputFormat.WEBP: "webp",
    OutputFormat.AVIF: "avif",
    OutputFormat.JPEG: "jpg",
})

# Pillow encoder names
PIL_SAVE_FORMATS: Mapping[OutputFormat, str] = MappingProxyType({
    OutputFormat.WEBP: "WEBP",
    OutputFormat.AVIF: "AVIF",
    OutputFormat.JPEG: "JPEG",
})

# MIME types are lowercase on the wire, so matching is exact
PROCESSABLE_IMAGE_TYPES: frozenset[str] = frozenset({
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/avif",
    "image/tiff",
})

PROCESSABLE_EXTENSIONS: frozenset[str] = frozenset({
    "jpg",
    "jpeg",
    "png",
    "webp",
    "gif",
    "avif",
    "tiff",
    "tif",
})

MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB
MAX_ORIGINAL_DIMENSION = 4096


def get_variant_spec(name: Union[VariantName, str]) -> Optional[VariantSpec]:
    """Look up a variant spec by name.

    Args:
        name: Variant name (enum member or plain string)

    Returns:
        VariantSpec or None if the name is not a defined variant
    """
    try:
        return VARIANTS_BY_NAME[VariantName(name)]
    except ValueError:
        return None
