"""Prometheus metrics for the image variant pipeline.

Metrics live on a private registry so embedding services can expose them
next to their own without name clashes.
"""

import os

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
    multiprocess,
)

REGISTRY = CollectorRegistry()

# Check if running in multiprocess mode (e.g., with gunicorn)
if "PROMETHEUS_MULTIPROC_DIR" in os.environ or "prometheus_multiproc_dir" in os.environ:
    multiprocess.MultiProcessCollector(REGISTRY)


# ============================================
# Processing Metrics
# ============================================
IMAGES_PROCESSED_TOTAL = Counter(
    "image_processing_total",
    "Total images run through the variant pipeline",
    ["status"],
    registry=REGISTRY,
)

IMAGE_PROCESSING_DURATION_SECONDS = Histogram(
    "image_processing_duration_seconds",
    "Time spent producing all variants of one image",
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
    registry=REGISTRY,
)


# ============================================
# Variant Metrics
# ============================================
VARIANTS_GENERATED_TOTAL = Counter(
    "image_variants_generated_total",
    "Total variants encoded",
    ["variant", "format"],
    registry=REGISTRY,
)

VARIANT_BYTES = Histogram(
    "image_variant_bytes",
    "Encoded size of generated variants",
    ["variant"],
    buckets=[1024, 4096, 16384, 65536, 262144, 1048576, 4194304],
    registry=REGISTRY,
)


def record_image_processed(status: str, duration_seconds: float) -> None:
    """Record the outcome of one pipeline run.

    Args:
        status: "success", "decode_error", "validation_error" or "error"
        duration_seconds: Wall time of the run
    """
    IMAGES_PROCESSED_TOTAL.labels(status=status).inc()
    IMAGE_PROCESSING_DURATION_SECONDS.observe(duration_seconds)


def record_variant(variant: str, output_format: str, size: int) -> None:
    """Record one encoded variant."""
    VARIANTS_GENERATED_TOTAL.labels(variant=variant, format=output_format).inc()
    VARIANT_BYTES.labels(variant=variant).observe(size)


def get_metrics() -> bytes:
    """Generate latest metrics in Prometheus format.

    Returns:
        bytes: Prometheus-formatted metrics
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
