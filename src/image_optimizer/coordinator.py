"""Pipeline coordinator: enumerate, dispatch to the worker pool, wait, report."""

import threading
import time
from typing import Optional

from .core.error_handling import BatchOperationContextManager
from .core.exceptions import EnumerationError
from .core.models import OptimizerConfig, RunResult
from .core.observability import StructuredLogger
from .core.protocols import ImageTransformProtocol, LoggerProtocol, ObjectStoreProtocol
from .core.services import ItemProcessor, WorkItemFactory
from .processors.worker_pool import WorkerPool


class PipelineCoordinator:
    """Main orchestrator for one optimization run."""

    def __init__(
        self,
        config: OptimizerConfig,
        store: ObjectStoreProtocol,
        transformer: ImageTransformProtocol,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._config = config
        self._store = store
        self._transformer = transformer
        self._logger = logger or StructuredLogger("image-optimizer.coordinator")

    @property
    def config(self) -> OptimizerConfig:
        return self._config

    def run(self, cancel_event: Optional[threading.Event] = None) -> RunResult:
        """
        Optimize every image under the configured source prefix.

        Per-item failures are recorded on the result and never abort the run.

        Args:
            cancel_event: Optional event; once set, workers stop taking new items

        Returns:
            RunResult with one entry per item that reached a terminal stage

        Raises:
            EnumerationError: If the source objects cannot be listed
        """
        start_time = time.time()
        self._log_configuration()

        try:
            source_keys = self._store.list_keys(self._config.source_prefix)
        except Exception as e:  # noqa: BLE001
            location = f"s3://{self._config.source_bucket}/{self._config.source_prefix}"
            self._logger.error(f"Listing {location} failed: {e}")
            raise EnumerationError(f"Cannot list {location}: {e}") from e

        if not source_keys:
            self._logger.info("No images found to process")
            return RunResult(enumerated=0, processing_time=time.time() - start_time)

        work_items = WorkItemFactory.create_work_items(source_keys, self._config, self._logger)
        pool = WorkerPool(
            ItemProcessor(self._store, self._transformer, self._logger),
            worker_count=self._config.worker_count,
            logger=self._logger,
        )

        with BatchOperationContextManager("Image optimization") as batch:
            results = pool.run(work_items, cancel_event)
            for result in results:
                if not result.success:
                    reason = result.failure_reason.value if result.failure_reason else "unknown"
                    batch.add_error(f"{reason}: {result.error}", result.source_key)

        run_result = RunResult(
            enumerated=len(work_items),
            results=results,
            # Only a run that left items unprocessed counts as cancelled
            cancelled=len(results) < len(work_items),
            processing_time=time.time() - start_time,
        )
        self._log_final_statistics(run_result)
        return run_result

    def _log_configuration(self) -> None:
        config = self._config
        self._logger.info("=" * 80)
        self._logger.info("S3 IMAGE OPTIMIZER")
        self._logger.info("=" * 80)
        self._logger.info(f"  Source:        s3://{config.source_bucket}/{config.source_prefix}")
        self._logger.info(f"  Destination:   s3://{config.dest_bucket}/{config.dest_prefix}")
        self._logger.info(f"  Target width:  {config.target_width}px (no upscaling)")
        self._logger.info(f"  JPEG quality:  {config.quality}")
        self._logger.info(f"  Workers:       {config.worker_count}")
        self._logger.info("=" * 80)

    def _log_final_statistics(self, run_result: RunResult) -> None:
        total_time = run_result.processing_time
        rate = len(run_result.results) / total_time if total_time > 0 else 0

        self._logger.info("=" * 80)
        headline = "PROCESSING CANCELLED" if run_result.cancelled else "PROCESSING COMPLETED"
        self._logger.info(headline)
        self._logger.info("=" * 80)
        self._logger.info(f"Total execution time: {total_time:.1f}s")
        self._logger.info(f"Overall processing rate: {rate:.1f} items/sec")
        self._logger.info(f"Images enumerated: {run_result.enumerated}")
        self._logger.info(f"Successfully processed: {run_result.succeeded_count}")
        self._logger.info(f"Errors encountered: {run_result.failed_count}")
        if run_result.unprocessed_count:
            self._logger.info(f"Not processed: {run_result.unprocessed_count}")
        self._logger.info("=" * 80)
