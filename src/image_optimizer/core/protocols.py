"""Protocol definitions for dependency injection and testability."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Protocol

from .models import ItemResult, WorkItem


class S3ClientProtocol(Protocol):
    """Protocol for the subset of boto3 S3 client operations in use."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(
        self, Bucket: str, Key: str, Body: bytes, ContentType: str
    ) -> Dict[str, Any]:
        """Put object to S3."""
        ...

    def get_paginator(self, operation_name: str) -> Any:
        """Get paginator for S3 operations."""
        ...


class ObjectStoreProtocol(Protocol):
    """Protocol for the object store gateway."""

    def list_keys(self, prefix: str) -> List[str]:
        """List every non-empty object key under prefix."""
        ...

    def read(self, key: str) -> bytes:
        """Read the full body of a source object."""
        ...

    def write(self, key: str, data: bytes, content_type: str = "image/jpeg") -> None:
        """Write bytes to a destination key, replacing any existing object."""
        ...


class ImageTransformProtocol(Protocol):
    """Protocol for the image transform."""

    content_type: str

    def transform(self, image_bytes: bytes) -> bytes:
        """Resize and re-encode image bytes."""
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Optional[Any] = None, **kwargs: Any) -> None:
        """Log error message."""
        ...


class ProcessingService(ABC):
    """Abstract service for processing a single work item."""

    @abstractmethod
    def process(self, item: WorkItem) -> ItemResult:
        """Drive one item to a terminal stage and report the outcome."""
        ...
