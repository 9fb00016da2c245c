"""Testing utilities and fakes for the image optimizer."""

from .fakes import (
    FakeS3Client,
    FakeLogger,
    RecordingTransform,
    S3Object,
    S3Bucket,
    create_test_image,
    make_client_error,
    setup_test_s3_environment,
)

__all__ = [
    "FakeS3Client",
    "FakeLogger",
    "RecordingTransform",
    "S3Object",
    "S3Bucket",
    "create_test_image",
    "make_client_error",
    "setup_test_s3_environment",
]
