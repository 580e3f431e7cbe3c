"""Schemas for the variant pipeline.

ProcessOptions is the validated per-call request; the dataclasses are the
read-only values the engine hands back to the upload collaborator.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from image_variants.modules.variants.models import (
    DEFAULT_OUTPUT_FORMAT,
    FORMAT_CONTENT_TYPES,
    IMAGE_VARIANTS,
    OutputFormat,
    VariantName,
)


class ProcessOptions(BaseModel):
    """Restricts which variants and formats a call produces.

    None means every defined variant, and the default output format.
    """
    variants: Optional[list[VariantName]] = Field(
        None, min_length=1, description="Variant names to produce"
    )
    formats: Optional[list[OutputFormat]] = Field(
        None, min_length=1, description="Output formats to encode each variant to"
    )

    class Config:
        frozen = True
        extra = "forbid"

    @field_validator("variants", "formats")
    @classmethod
    def drop_duplicates(cls, v: Optional[list]) -> Optional[list]:
        if v is None:
            return v
        return list(dict.fromkeys(v))

    def requested_variants(self) -> tuple[VariantName, ...]:
        """Variant names in schema order."""
        if self.variants is None:
            return tuple(spec.name for spec in IMAGE_VARIANTS)
        wanted = set(self.variants)
        return tuple(spec.name for spec in IMAGE_VARIANTS if spec.name in wanted)

    def requested_formats(self) -> tuple[OutputFormat, ...]:
        """Output formats in request order."""
        if self.formats is None:
            return (DEFAULT_OUTPUT_FORMAT,)
        return tuple(self.formats)


@dataclass(frozen=True)
class ImageMetadata:
    """Snapshot of the decoded original."""
    width: int
    height: int
    format: Optional[str]
    size: int
    has_alpha: bool


@dataclass(frozen=True)
class VariantResult:
    """One encoded derivative, ready to be uploaded at `key`."""
    variant: VariantName
    format: OutputFormat
    key: str
    url: str
    width: int
    height: int
    buffer: bytes = field(repr=False)
    size: int

    @property
    def content_type(self) -> str:
        return FORMAT_CONTENT_TYPES[self.format]


@dataclass(frozen=True)
class ProcessResult:
    """Metadata of the original plus the variants that were produced.

    Only variants the original was large enough for are present.
    """
    metadata: ImageMetadata
    variants: list[VariantResult] = field(default_factory=list)

    @property
    def variant_names(self) -> list[VariantName]:
        """Produced variant names, without repeats, in schema order."""
        return list(dict.fromkeys(result.variant for result in self.variants))

    def find(
        self,
        variant: Union[VariantName, str],
        output_format: Optional[Union[OutputFormat, str]] = None,
    ) -> Optional[VariantResult]:
        """Get a produced variant, optionally in a given format."""
        for result in self.variants:
            if result.variant != variant:
                continue
            if output_format is None or result.format == output_format:
                return result
        return None
