"""Tests for pipeline metrics."""

from image_variants.core.metrics import (
    REGISTRY,
    get_content_type,
    get_metrics,
    record_image_processed,
    record_variant,
)


def sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestMetrics:
    """Tests for metric recording and exposition."""

    def test_record_image_processed(self):
        before = sample("image_processing_total", {"status": "validation_error"})
        observed = sample("image_processing_duration_seconds_count", {})

        record_image_processed("validation_error", 0.02)

        assert sample("image_processing_total", {"status": "validation_error"}) == before + 1
        assert sample("image_processing_duration_seconds_count", {}) == observed + 1

    def test_record_variant(self):
        labels = {"variant": "medium", "format": "jpeg"}
        before = sample("image_variants_generated_total", labels)
        bytes_before = sample("image_variant_bytes_sum", {"variant": "medium"})

        record_variant("medium", "jpeg", 2048)

        assert sample("image_variants_generated_total", labels) == before + 1
        assert sample("image_variant_bytes_sum", {"variant": "medium"}) == bytes_before + 2048

    def test_exposition(self):
        record_variant("thumbnail", "webp", 100)
        output = get_metrics().decode()

        assert "image_variants_generated_total" in output
        assert "image_processing_duration_seconds" in output
        assert get_content_type().startswith("text/plain")
