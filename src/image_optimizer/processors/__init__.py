"""Concurrent processing strategies."""

from .worker_pool import WorkerPool

__all__ = [
    "WorkerPool",
]
