"""Image variants module.

Exports the variant schema, result types, errors and the pure key/URL
utilities. The Pillow-backed engine is imported explicitly from
image_variants.modules.variants.processor so URL derivation can be used
without loading an image codec.
"""

from image_variants.modules.variants.exceptions import (
    ImageDecodeError,
    ImageProcessingError,
    ImageValidationError,
)
from image_variants.modules.variants.models import (
    DEFAULT_OUTPUT_FORMAT,
    FORMAT_CONTENT_TYPES,
    FORMAT_EXTENSIONS,
    IMAGE_VARIANTS,
    MAX_IMAGE_SIZE,
    MAX_ORIGINAL_DIMENSION,
    OUTPUT_FORMATS,
    PROCESSABLE_EXTENSIONS,
    PROCESSABLE_IMAGE_TYPES,
    VARIANTS_BY_NAME,
    OutputFormat,
    VariantName,
    VariantSpec,
    get_variant_spec,
)
from image_variants.modules.variants.schemas import (
    ImageMetadata,
    ProcessOptions,
    ProcessResult,
    VariantResult,
)
from image_variants.modules.variants.utils import (
    derive_variant_url,
    generate_original_key,
    get_all_variant_urls,
    get_content_type,
    get_fallback_chain,
    get_file_extension,
    get_s3_url,
    get_variant_key,
    is_processable_extension,
    is_processable_image,
    validate_image_size,
    validate_upload,
)

__all__ = [
    "ImageDecodeError",
    "ImageProcessingError",
    "ImageValidationError",
    "DEFAULT_OUTPUT_FORMAT",
    "FORMAT_CONTENT_TYPES",
    "FORMAT_EXTENSIONS",
    "IMAGE_VARIANTS",
    "MAX_IMAGE_SIZE",
    "MAX_ORIGINAL_DIMENSION",
    "OUTPUT_FORMATS",
    "PROCESSABLE_EXTENSIONS",
    "PROCESSABLE_IMAGE_TYPES",
    "VARIANTS_BY_NAME",
    "OutputFormat",
    "VariantName",
    "VariantSpec",
    "get_variant_spec",
    "ImageMetadata",
    "ProcessOptions",
    "ProcessResult",
    "VariantResult",
    "derive_variant_url",
    "generate_original_key",
    "get_all_variant_urls",
    "get_content_type",
    "get_fallback_chain",
    "get_file_extension",
    "get_s3_url",
    "get_variant_key",
    "is_processable_extension",
    "is_processable_image",
    "validate_image_size",
    "validate_upload",
]
