"""Property-based tests for the variant schema.

**Feature: image-variants, Property 1: Variant Schema Consistency**

Tests that the variant table is ordered and the format tables agree.
"""

from dataclasses import FrozenInstanceError

import pytest
from hypothesis import given, settings, strategies as st

from image_variants.modules.variants.models import (
    DEFAULT_OUTPUT_FORMAT,
    FORMAT_CONTENT_TYPES,
    FORMAT_EXTENSIONS,
    IMAGE_VARIANTS,
    MAX_IMAGE_SIZE,
    MAX_ORIGINAL_DIMENSION,
    OUTPUT_FORMATS,
    PIL_SAVE_FORMATS,
    PROCESSABLE_EXTENSIONS,
    PROCESSABLE_IMAGE_TYPES,
    VARIANTS_BY_NAME,
    OutputFormat,
    VariantName,
    get_variant_spec,
)

format_strategy = st.sampled_from(list(OutputFormat))
variant_strategy = st.sampled_from(list(VariantName))


class TestVariantTable:
    """Tests for the ordered variant definitions."""

    def test_three_variants_in_order(self):
        names = [spec.name for spec in IMAGE_VARIANTS]
        assert names == [VariantName.THUMBNAIL, VariantName.MEDIUM, VariantName.LARGE]
        assert [name.value for name in names] == ["thumbnail", "medium", "large"]

    def test_thumbnail_definition(self):
        thumb = VARIANTS_BY_NAME[VariantName.THUMBNAIL]
        assert (thumb.max_width, thumb.max_height) == (150, 150)
        assert thumb.quality == 70
        assert thumb.suffix == "_thumb"

    def test_medium_definition(self):
        medium = VARIANTS_BY_NAME[VariantName.MEDIUM]
        assert (medium.max_width, medium.max_height) == (600, 600)
        assert medium.quality == 80
        assert medium.suffix == "_medium"

    def test_large_definition(self):
        large = VARIANTS_BY_NAME[VariantName.LARGE]
        assert (large.max_width, large.max_height) == (1200, 1200)
        assert large.quality == 85
        assert large.suffix == "_large"

    def test_variants_strictly_increase_in_size_and_quality(self):
        for previous, current in zip(IMAGE_VARIANTS, IMAGE_VARIANTS[1:]):
            assert current.max_width > previous.max_width
            assert current.max_height > previous.max_height
            assert current.quality > previous.quality

    def test_qualities_in_range(self):
        for spec in IMAGE_VARIANTS:
            assert 0 <= spec.quality <= 100

    def test_specs_are_immutable(self):
        with pytest.raises(FrozenInstanceError):
            IMAGE_VARIANTS[0].max_width = 10

    def test_lookup_table_is_read_only(self):
        with pytest.raises(TypeError):
            VARIANTS_BY_NAME[VariantName.LARGE] = IMAGE_VARIANTS[0]

    @given(name=variant_strategy)
    @settings(max_examples=20)
    def test_get_variant_spec_accepts_enum_and_string(self, name: VariantName):
        """**Feature: image-variants, Property 1: Variant Schema Consistency**

        For any defined variant, lookup by enum member and by plain string
        SHALL return the same spec.
        """
        assert get_variant_spec(name) is get_variant_spec(name.value)
        assert get_variant_spec(name).name == name

    @pytest.mark.parametrize("name", ["original", "huge", "", "THUMBNAIL"])
    def test_get_variant_spec_unknown_name(self, name: str):
        assert get_variant_spec(name) is None


class TestFormatTables:
    """Tests for the format -> content-type / extension tables."""

    def test_default_format_is_webp(self):
        assert DEFAULT_OUTPUT_FORMAT == OutputFormat.WEBP
        assert DEFAULT_OUTPUT_FORMAT in OUTPUT_FORMATS

    def test_tables_cover_same_formats(self):
        assert set(FORMAT_CONTENT_TYPES) == set(FORMAT_EXTENSIONS) == set(OUTPUT_FORMATS)
        assert set(PIL_SAVE_FORMATS) == set(OUTPUT_FORMATS)

    def test_content_types(self):
        assert FORMAT_CONTENT_TYPES[OutputFormat.WEBP] == "image/webp"
        assert FORMAT_CONTENT_TYPES[OutputFormat.AVIF] == "image/avif"
        assert FORMAT_CONTENT_TYPES[OutputFormat.JPEG] == "image/jpeg"

    def test_extensions(self):
        assert FORMAT_EXTENSIONS[OutputFormat.WEBP] == "webp"
        assert FORMAT_EXTENSIONS[OutputFormat.AVIF] == "avif"
        assert FORMAT_EXTENSIONS[OutputFormat.JPEG] == "jpg"

    @given(output_format=format_strategy)
    @settings(max_examples=20)
    def test_every_format_maps_to_an_image_content_type(self, output_format: OutputFormat):
        """**Feature: image-variants, Property 1: Variant Schema Consistency**

        For any output format, its content type SHALL be an image MIME type
        the pipeline itself accepts as input.
        """
        content_type = FORMAT_CONTENT_TYPES[output_format]
        assert content_type.startswith("image/")
        assert content_type in PROCESSABLE_IMAGE_TYPES
        assert FORMAT_EXTENSIONS[output_format] in PROCESSABLE_EXTENSIONS


class TestLimitsAndAllowLists:
    """Tests for global limits and input allow-lists."""

    def test_max_image_size_is_10mb(self):
        assert MAX_IMAGE_SIZE == 10 * 1024 * 1024

    def test_max_original_dimension(self):
        assert MAX_ORIGINAL_DIMENSION == 4096

    def test_mime_allow_list(self):
        for mime_type in (
            "image/jpeg", "image/jpg", "image/png", "image/webp",
            "image/gif", "image/avif", "image/tiff",
        ):
            assert mime_type in PROCESSABLE_IMAGE_TYPES
        assert "application/pdf" not in PROCESSABLE_IMAGE_TYPES
        assert "text/plain" not in PROCESSABLE_IMAGE_TYPES

    def test_extension_allow_list_matches_mime_types(self):
        pairs = {
            "jpg": "image/jpeg",
            "jpeg": "image/jpeg",
            "png": "image/png",
            "webp": "image/webp",
            "gif": "image/gif",
            "avif": "image/avif",
            "tiff": "image/tiff",
        }
        for extension, mime_type in pairs.items():
            assert extension in PROCESSABLE_EXTENSIONS
            assert mime_type in PROCESSABLE_IMAGE_TYPES
