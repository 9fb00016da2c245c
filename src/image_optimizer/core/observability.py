"""Structured logging helpers: correlation ids and per-item context."""

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

from .logging_config import get_logger


@dataclass(frozen=True)
class LogContext:
    """
    Immutable context attached to the log lines of one unit of work.

    Every line logged for the same image shares a correlation id, so the
    interleaved output of several worker threads can be regrouped per image.
    """

    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        """Same context, different stage name."""
        return replace(self, operation=operation, metadata=dict(self.metadata))

    def with_metadata(self, **kwargs: Any) -> "LogContext":
        """Same context with extra key/value pairs merged in."""
        return replace(self, metadata={**self.metadata, **kwargs})

    def render(self, message: str, extra: Optional[Dict[str, Any]] = None) -> str:
        """Format ``message`` as ``[operation] [id] message (k=v, ...)``."""
        prefix = f"[{self.operation}] " if self.operation else ""
        fields = {**self.metadata, **(extra or {})}
        return _with_fields(f"{prefix}[{self.correlation_id}] {message}", fields)


def _with_fields(message: str, fields: Dict[str, Any]) -> str:
    if not fields:
        return message
    rendered = ", ".join(f"{key}={value}" for key, value in fields.items())
    return f"{message} ({rendered})"


class StructuredLogger:
    """LoggerProtocol implementation over a configured stdlib logger."""

    def __init__(self, name: str, level: Optional[int] = None):
        self._logger = get_logger(name)
        if level is not None:
            self._logger.setLevel(level)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def log(
        self,
        level: int,
        message: str,
        context: Optional[LogContext] = None,
        **kwargs: Any,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        if context is not None:
            message = context.render(message, kwargs)
        else:
            message = _with_fields(message, kwargs)
        # stacklevel points filename/lineno at the caller, not this wrapper
        self._logger.log(level, message, stacklevel=3)

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self.log(logging.DEBUG, message, context, **kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self.log(logging.INFO, message, context, **kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self.log(logging.WARNING, message, context, **kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self.log(logging.ERROR, message, context, **kwargs)

    def critical(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self.log(logging.CRITICAL, message, context, **kwargs)
