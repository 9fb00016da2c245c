"""Custom exceptions for the image optimizer."""

from __future__ import annotations

from typing import Optional


class ImageOptimizerError(Exception):
    """Base exception for all image optimizer errors."""


class ConfigurationError(ImageOptimizerError):
    """Error raised for missing or invalid configuration."""


class EnumerationError(ImageOptimizerError):
    """Error raised when the source objects cannot be listed."""


class InvalidTransitionError(ImageOptimizerError):
    """Error raised when a work item is moved to a stage it cannot reach."""


class S3Error(ImageOptimizerError):
    """Error raised for S3 related failures."""


class StoreUnavailableError(S3Error):
    """The object store could not be reached or is refusing requests."""


class AuthError(S3Error):
    """Credentials are missing, invalid or not allowed to perform the call."""


class NotFoundError(S3Error):
    """The requested bucket or key does not exist."""


class TransferError(S3Error):
    """An object body could not be transferred completely."""


class QuotaExceededError(S3Error):
    """The store rejected a write because of a size or quota limit."""


class ImageProcessingError(ImageOptimizerError):
    """Error raised when an image cannot be transformed."""


class DecodeError(ImageProcessingError):
    """Input bytes are not a decodable image."""


class EncodeError(ImageProcessingError):
    """The resized image could not be encoded."""


class ItemError(ImageOptimizerError):
    """Failure of a single work item at one pipeline stage.

    Item errors are recorded on the item's result and never abort the run.
    """

    stage = "unknown"

    def __init__(self, key: str, cause: Optional[BaseException] = None):
        self.key = key
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause is not None else "unknown error"
        super().__init__(f"{self.stage} failed for {key}: {reason}")

    @property
    def reason(self) -> str:
        """Underlying error message without the key/stage prefix."""
        return str(self.cause) if self.cause is not None else "unknown error"


class DownloadError(ItemError):
    stage = "download"


class TransformError(ItemError):
    stage = "transform"


class UploadError(ItemError):
    stage = "upload"
