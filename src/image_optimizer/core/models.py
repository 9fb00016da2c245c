"""Shared data models for the image optimizer."""

import os
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError, InvalidTransitionError


class OptimizerConfig(BaseModel):
    """Configuration for one optimization run."""

    source_bucket: str = Field(min_length=1)
    dest_bucket: str = Field(min_length=1)
    source_prefix: str = "uuid/"
    dest_prefix: str = "optimized/"
    worker_count: int = Field(default=3, ge=1)
    target_width: int = Field(default=800, gt=0)
    quality: int = Field(default=80, ge=1, le=100)
    debug: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "OptimizerConfig":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Validated configuration

        Raises:
            ConfigurationError: If a required variable is missing or a value is invalid

        Environment Variables:
            SOURCE_LOCATION: Source bucket (required)
            DESTINATION_LOCATION: Destination bucket (required)
            WORKER_COUNT: Number of worker threads (default 3)
            DEBUG: Enable debug logging ("1", "true", "yes")
        """
        env = os.environ if environ is None else environ

        missing = [
            name
            for name in ("SOURCE_LOCATION", "DESTINATION_LOCATION")
            if not env.get(name, "").strip()
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variable(s): {', '.join(missing)}"
            )

        values: Dict[str, Any] = {
            "source_bucket": env["SOURCE_LOCATION"].strip(),
            "dest_bucket": env["DESTINATION_LOCATION"].strip(),
            "debug": env.get("DEBUG", "").strip().lower() in ("1", "true", "yes"),
        }
        if env.get("WORKER_COUNT", "").strip():
            values["worker_count"] = env["WORKER_COUNT"].strip()

        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc


class ItemStage(str, Enum):
    """Pipeline stage of a work item."""

    PENDING = "pending"
    DOWNLOADING = "downloading"
    TRANSFORMING = "transforming"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"


class FailureReason(str, Enum):
    """Stage at which a work item failed."""

    DOWNLOAD = "download"
    TRANSFORM = "transform"
    UPLOAD = "upload"


_TRANSITIONS = {
    ItemStage.PENDING: {ItemStage.DOWNLOADING},
    ItemStage.DOWNLOADING: {ItemStage.TRANSFORMING, ItemStage.FAILED},
    ItemStage.TRANSFORMING: {ItemStage.UPLOADING, ItemStage.FAILED},
    ItemStage.UPLOADING: {ItemStage.DONE, ItemStage.FAILED},
    ItemStage.DONE: set(),
    ItemStage.FAILED: set(),
}


class WorkItem(BaseModel):
    """An image to be optimized, owned by one worker at a time."""

    source_key: str
    dest_key: str
    stage: ItemStage = ItemStage.PENDING

    @property
    def is_terminal(self) -> bool:
        return self.stage in (ItemStage.DONE, ItemStage.FAILED)

    def advance(self, stage: ItemStage) -> None:
        """Move to ``stage``, rejecting moves the state machine does not allow."""
        if stage not in _TRANSITIONS[self.stage]:
            raise InvalidTransitionError(
                f"{self.source_key}: cannot move from {self.stage.value} to {stage.value}"
            )
        self.stage = stage


class ItemResult(BaseModel):
    """Terminal outcome of a single work item."""

    source_key: str
    dest_key: str = ""
    success: bool = False
    failure_reason: Optional[FailureReason] = None
    error: str = ""
    processing_time: float = 0.0


class RunResult(BaseModel):
    """Aggregate outcome of one run."""

    enumerated: int = 0
    results: List[ItemResult] = Field(default_factory=list)
    cancelled: bool = False
    processing_time: float = 0.0

    @property
    def succeeded(self) -> List[ItemResult]:
        return [result for result in self.results if result.success]

    @property
    def failed(self) -> List[ItemResult]:
        return [result for result in self.results if not result.success]

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def unprocessed_count(self) -> int:
        """Items that never reached a terminal stage (only after cancellation)."""
        return self.enumerated - len(self.results)

    def summary(self) -> Dict[str, Any]:
        """JSON-safe summary of the run."""
        return {
            "total_items": self.enumerated,
            "processed_count": self.succeeded_count,
            "error_count": self.failed_count,
            "unprocessed_count": self.unprocessed_count,
            "cancelled": self.cancelled,
            "processing_time": self.processing_time,
            "failures": [
                {
                    "key": result.source_key,
                    "reason": result.failure_reason.value if result.failure_reason else "",
                    "error": result.error,
                }
                for result in self.failed
            ],
        }
