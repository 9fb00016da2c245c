"""Batch S3 image optimizer: resize to a bounded width and re-encode as JPEG."""

__version__ = "0.1.0"
