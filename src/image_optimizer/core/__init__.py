"""Core utilities and shared components for the image optimizer."""

from .image_utils import (
    derive_dest_key,
    prepare_for_jpeg,
    resize_to_width,
    scaled_size,
)
from .logging_config import (
    enable_debug_logging,
    get_logger,
    setup_logger,
)
from .exceptions import (
    ImageOptimizerError,
    ConfigurationError,
    EnumerationError,
    InvalidTransitionError,
    S3Error,
    StoreUnavailableError,
    AuthError,
    NotFoundError,
    TransferError,
    QuotaExceededError,
    ImageProcessingError,
    DecodeError,
    EncodeError,
    ItemError,
    DownloadError,
    TransformError,
    UploadError,
)
from .models import (
    FailureReason,
    ItemResult,
    ItemStage,
    OptimizerConfig,
    RunResult,
    WorkItem,
)

__all__ = [
    "OptimizerConfig",
    "WorkItem",
    "ItemStage",
    "FailureReason",
    "ItemResult",
    "RunResult",
    "derive_dest_key",
    "prepare_for_jpeg",
    "resize_to_width",
    "scaled_size",
    "setup_logger",
    "get_logger",
    "enable_debug_logging",
    "ImageOptimizerError",
    "ConfigurationError",
    "EnumerationError",
    "InvalidTransitionError",
    "S3Error",
    "StoreUnavailableError",
    "AuthError",
    "NotFoundError",
    "TransferError",
    "QuotaExceededError",
    "ImageProcessingError",
    "DecodeError",
    "EncodeError",
    "ItemError",
    "DownloadError",
    "TransformError",
    "UploadError",
]
