"""Service implementations for the image optimization pipeline."""

import io
import time
from typing import Any, Callable, List, Optional, Type, TypeVar

from PIL import Image

from .exceptions import (
    DecodeError,
    DownloadError,
    EncodeError,
    ItemError,
    TransferError,
    TransformError,
    UploadError,
)
from .error_handling import translate_store_errors
from .image_utils import derive_dest_key, prepare_for_jpeg, resize_to_width
from .models import FailureReason, ItemResult, ItemStage, OptimizerConfig, WorkItem
from .observability import LogContext, StructuredLogger
from .protocols import (
    ImageTransformProtocol,
    LoggerProtocol,
    ObjectStoreProtocol,
    ProcessingService,
    S3ClientProtocol,
)

T = TypeVar("T")


class S3ObjectStore:
    """Gateway over a boto3 S3 client: list the source, read from it, write to the destination.

    The underlying client is shared by every worker thread; boto3 clients are
    safe for concurrent use, so no locking happens here. Failures are raised as
    S3Error subclasses and never retried.
    """

    def __init__(
        self,
        s3_client: S3ClientProtocol,
        source_bucket: str,
        dest_bucket: str,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._s3_client = s3_client
        self._source_bucket = source_bucket
        self._dest_bucket = dest_bucket
        self._logger = logger or StructuredLogger("image-optimizer.store")

    @translate_store_errors()
    def list_keys(self, prefix: str) -> List[str]:
        """List every non-empty object under prefix, following all pages."""
        keys: List[str] = []
        self._logger.debug(f"Listing objects in s3://{self._source_bucket}/{prefix}")

        paginator = self._s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self._source_bucket, Prefix=prefix):
            for obj in page.get("Contents", []):
                # Zero-size entries are folder markers, not images
                if obj.get("Size", 0) > 0:
                    keys.append(obj["Key"])

        self._logger.info(f"Found {len(keys)} objects in s3://{self._source_bucket}/{prefix}")
        return keys

    @translate_store_errors(default=TransferError)
    def read(self, key: str) -> bytes:
        """Download the full body of a source object."""
        response = self._s3_client.get_object(Bucket=self._source_bucket, Key=key)
        body = response["Body"]
        try:
            data = body.read()
        finally:
            body.close()

        expected = response.get("ContentLength")
        if expected is not None and len(data) != expected:
            raise TransferError(
                f"Short read for s3://{self._source_bucket}/{key}: "
                f"expected {expected} bytes, got {len(data)}"
            )
        return data

    @translate_store_errors()
    def write(self, key: str, data: bytes, content_type: str = "image/jpeg") -> None:
        """Upload bytes to the destination bucket, replacing any existing object."""
        self._s3_client.put_object(
            Bucket=self._dest_bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )


class ImageTransformService:
    """Pure image transform: decode, shrink to a target width, encode as JPEG."""

    content_type = "image/jpeg"

    def __init__(self, target_width: int = 800, quality: int = 80):
        self.target_width = target_width
        self.quality = quality

    def transform(self, image_bytes: bytes) -> bytes:
        """
        Resize and re-encode image bytes.

        Args:
            image_bytes: Encoded source image in any format Pillow can read

        Returns:
            JPEG bytes at most ``target_width`` pixels wide

        Raises:
            DecodeError: If the input is not a readable image
            EncodeError: If the resized image cannot be written
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            # UnidentifiedImageError and truncated-file errors are OSErrors
            raise DecodeError(f"Cannot decode image: {exc}") from exc

        try:
            resized = resize_to_width(prepare_for_jpeg(image), self.target_width)
            output_stream = io.BytesIO()
            resized.save(output_stream, format="JPEG", quality=self.quality)
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Cannot encode image: {exc}") from exc

        return output_stream.getvalue()


class ItemProcessor(ProcessingService):
    """Runs one work item through download, transform and upload."""

    def __init__(
        self,
        store: ObjectStoreProtocol,
        transformer: ImageTransformProtocol,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._store = store
        self._transformer = transformer
        self._logger = logger or StructuredLogger("image-optimizer.processor")

    def process(self, item: WorkItem) -> ItemResult:
        """Process a single item; failures are captured on the result, never raised."""
        start_time = time.time()
        log_context = LogContext(
            operation="process_image",
            component="item_processor",
        ).with_metadata(source_key=item.source_key, dest_key=item.dest_key)

        try:
            item.advance(ItemStage.DOWNLOADING)
            self._logger.debug("Downloading image", log_context.with_operation("download"))
            image_bytes = self._run_stage(DownloadError, item, self._store.read, item.source_key)

            item.advance(ItemStage.TRANSFORMING)
            self._logger.debug("Transforming image", log_context.with_operation("transform"))
            optimized = self._run_stage(
                TransformError, item, self._transformer.transform, image_bytes
            )

            item.advance(ItemStage.UPLOADING)
            self._logger.debug("Uploading image", log_context.with_operation("upload"))
            self._run_stage(
                UploadError,
                item,
                self._store.write,
                item.dest_key,
                optimized,
                self._transformer.content_type,
            )
        except ItemError as e:
            item.advance(ItemStage.FAILED)
            processing_time = time.time() - start_time
            self._logger.error(
                "Image processing failed",
                log_context.with_metadata(stage=e.stage, error=e.reason),
            )
            return ItemResult(
                source_key=item.source_key,
                dest_key=item.dest_key,
                success=False,
                failure_reason=FailureReason(e.stage),
                error=e.reason,
                processing_time=processing_time,
            )

        item.advance(ItemStage.DONE)
        processing_time = time.time() - start_time
        self._logger.info(
            "Successfully processed image",
            log_context,
            processing_time_ms=round(processing_time * 1000, 1),
        )
        return ItemResult(
            source_key=item.source_key,
            dest_key=item.dest_key,
            success=True,
            processing_time=processing_time,
        )

    @staticmethod
    def _run_stage(
        error_class: Type[ItemError],
        item: WorkItem,
        operation: Callable[..., T],
        *args: Any,
    ) -> T:
        try:
            return operation(*args)
        except Exception as exc:  # noqa: BLE001
            raise error_class(item.source_key, exc) from exc


class WorkItemFactory:
    """Factory for creating work items."""

    @staticmethod
    def create_work_items(
        source_keys: List[str],
        config: OptimizerConfig,
        logger: Optional[LoggerProtocol] = None,
    ) -> List[WorkItem]:
        """Create one pending work item per distinct source key."""
        unique_keys = list(dict.fromkeys(source_keys))
        if logger is not None and len(unique_keys) != len(source_keys):
            logger.warning(
                f"Dropped {len(source_keys) - len(unique_keys)} duplicate key(s) from enumeration"
            )

        return [
            WorkItem(source_key=key, dest_key=derive_dest_key(key, config.dest_prefix))
            for key in unique_keys
        ]
