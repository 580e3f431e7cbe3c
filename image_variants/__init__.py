"""Image variant derivation pipeline.

Turns an uploaded original into a fixed family of resized, re-encoded
variants plus metadata, and derives the keys and URLs those variants live at.

Modules:
    - core: Configuration, structured logging, Prometheus metrics
    - modules.variants: Variant schema, key/URL utilities, transcoding engine
"""

__version__ = "0.1.0"
