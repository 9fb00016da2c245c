"""Factory classes for creating configured service instances."""

from typing import Any, Optional

import boto3
from botocore.config import Config

from ..coordinator import PipelineCoordinator
from .models import OptimizerConfig
from .observability import StructuredLogger
from .protocols import LoggerProtocol, S3ClientProtocol
from .services import ImageTransformService, S3ObjectStore


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: Optional[int] = None) -> LoggerProtocol:
        """Create a configured structured logger."""
        return StructuredLogger(name, level)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(max_pool_connections: int = 10, **kwargs: Any) -> S3ClientProtocol:
        """Create S3 client whose connection pool covers every worker thread."""
        session = boto3.Session()
        return session.client(  # type: ignore
            "s3",
            config=Config(max_pool_connections=max(10, max_pool_connections)),
            **kwargs,
        )


class PipelineFactory:
    """Factory for creating the complete optimization pipeline."""

    @staticmethod
    def create_coordinator(
        config: OptimizerConfig,
        s3_client: Optional[S3ClientProtocol] = None,
        logger: Optional[LoggerProtocol] = None,
    ) -> PipelineCoordinator:
        """Create a fully configured pipeline coordinator."""
        if s3_client is None:
            s3_client = S3ClientFactory.create_s3_client(
                max_pool_connections=config.worker_count
            )

        if logger is None:
            logger = LoggerFactory.create_logger("image-optimizer.pipeline")

        store = S3ObjectStore(
            s3_client,
            source_bucket=config.source_bucket,
            dest_bucket=config.dest_bucket,
            logger=logger,
        )
        transformer = ImageTransformService(
            target_width=config.target_width, quality=config.quality
        )

        return PipelineCoordinator(
            config=config,
            store=store,
            transformer=transformer,
            logger=logger,
        )
