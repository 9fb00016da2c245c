"""Fixed-size thread worker pool draining a shared work queue."""

import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional

from ..core.models import ItemResult, WorkItem
from ..core.observability import StructuredLogger
from ..core.protocols import LoggerProtocol, ProcessingService

# Dequeued once by each worker; tells it no more work will arrive
_END_OF_WORK = None


class WorkerPool:
    """
    Processes work items with a static number of worker threads.

    The queue is filled with every item and one end-of-work marker per worker
    before any worker starts, so a worker never waits for an item that will
    not arrive. ``Queue.get`` is the only hand-off point; an item is owned by
    exactly one worker. Each worker collects its own results and the lists are
    merged once every worker has exited.
    """

    def __init__(
        self,
        processor: ProcessingService,
        worker_count: int = 3,
        logger: Optional[LoggerProtocol] = None,
    ):
        if worker_count < 1:
            raise ValueError(f"worker_count must be at least 1, got {worker_count}")
        self._processor = processor
        self._worker_count = worker_count
        self._logger = logger or StructuredLogger("image-optimizer.workers")

    @property
    def worker_count(self) -> int:
        return self._worker_count

    def run(
        self,
        items: List[WorkItem],
        cancel_event: Optional[threading.Event] = None,
    ) -> List[ItemResult]:
        """
        Process all items and block until every worker has exited.

        Args:
            items: Pending work items
            cancel_event: When set, workers stop taking new items; items already
                in progress finish and their results are returned

        Returns:
            One result per item that reached a terminal stage, in completion order
            per worker
        """
        if not items:
            return []

        work_queue: "queue.Queue[Optional[WorkItem]]" = queue.Queue(
            maxsize=len(items) + self._worker_count
        )
        for item in items:
            work_queue.put_nowait(item)
        for _ in range(self._worker_count):
            work_queue.put_nowait(_END_OF_WORK)

        self._logger.info(
            f"Dispatching {len(items)} items to {self._worker_count} workers"
        )

        with ThreadPoolExecutor(
            max_workers=self._worker_count, thread_name_prefix="optimizer-worker"
        ) as executor:
            futures = [
                executor.submit(self._drain, work_queue, cancel_event)
                for _ in range(self._worker_count)
            ]
            # Barrier: every worker has hit its end-of-work marker or stopped on cancel
            wait(futures)

        results: List[ItemResult] = []
        for future in futures:
            results.extend(future.result())
        return results

    def _drain(
        self,
        work_queue: "queue.Queue[Optional[WorkItem]]",
        cancel_event: Optional[threading.Event],
    ) -> List[ItemResult]:
        results: List[ItemResult] = []
        while True:
            if cancel_event is not None and cancel_event.is_set():
                self._logger.warning(
                    f"Cancellation requested, worker stopping after {len(results)} items"
                )
                break

            item = work_queue.get()
            if item is _END_OF_WORK:
                break
            results.append(self._process_isolated(item))

        self._logger.debug(f"Worker finished with {len(results)} items")
        return results

    def _process_isolated(self, item: WorkItem) -> ItemResult:
        try:
            return self._processor.process(item)
        except Exception as e:  # noqa: BLE001
            # One item's failure never takes the worker or its siblings down
            self._logger.error(
                f"Unexpected error processing {item.source_key}: {type(e).__name__}: {e}"
            )
            return ItemResult(
                source_key=item.source_key,
                dest_key=item.dest_key,
                success=False,
                error=f"{type(e).__name__}: {e}",
            )
