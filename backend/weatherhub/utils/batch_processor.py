import asyncio
import logging
from typing import Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

from weatherhub.core.logger import logs
from weatherhub.services.Metrics_service import MetricsService
from weatherhub.utils.batching import DEFAULT_BATCH_SIZE, partition, validate_batch_size

T = TypeVar("T")
R = TypeVar("R")

ItemOperation = Callable[[T], Awaitable[Optional[R]]]


class AsyncBatchProcessor(Generic[T, R]):
    """
    Runs an async per-item operation over a large sequence in chunks.

    Every chunk is started at once and its items run concurrently; the fixed
    chunk size is the only bound on fan-out. A failing item resolves to None
    and is dropped, siblings keep going. Results come back as a subset of the
    one-to-one transformations, in no guaranteed order.

    Metrics under ``async.batch.<operation>``: ``.duration`` timer, ``.size``
    gauge, ``.success`` / ``.failure`` counters (failure = total - survivors).
    """

    def __init__(self, metrics: MetricsService, operation_name: str, batch_size: int = DEFAULT_BATCH_SIZE):
        validate_batch_size(batch_size)
        self.metrics = metrics
        self.operation_name = operation_name
        self.batch_size = batch_size

        prefix = f"async.batch.{operation_name}"
        self.duration_metric = f"{prefix}.duration"
        self.size_metric = f"{prefix}.size"
        self.success_metric = f"{prefix}.success"
        self.failure_metric = f"{prefix}.failure"
        self.metrics.register_counter(self.success_metric)
        self.metrics.register_counter(self.failure_metric)

    async def process(self, items: Sequence[T], operation: ItemOperation) -> List[R]:
        if not items:
            self.metrics.set_gauge(self.size_metric, 0)
            return []

        with self.metrics.time(self.duration_metric):
            logs.log(logging.INFO, f"Starting async {self.operation_name} for {len(items)} items")
            self.metrics.set_gauge(self.size_metric, len(items))

            batches = partition(items, self.batch_size)
            if len(batches) > 1:
                logs.log(
                    logging.INFO,
                    f"Processing {len(items)} items in {len(batches)} batches of up to {self.batch_size} items",
                )

            # all batches start together; one join point for the whole run
            batch_results = await asyncio.gather(
                *(self._process_batch(batch, operation) for batch in batches)
            )
            results = [result for batch in batch_results for result in batch]

            success_count = len(results)
            failure_count = len(items) - success_count
            self.metrics.increment(self.success_metric, success_count)
            if failure_count > 0:
                self.metrics.increment(self.failure_metric, failure_count)

            logs.log(
                logging.INFO,
                f"Async {self.operation_name} completed: {success_count}/{len(items)} successful",
            )
            return results

    async def process_for_count(self, items: Sequence[T], operation: ItemOperation) -> int:
        return len(await self.process(items, operation))

    async def _process_batch(self, batch: List[T], operation: ItemOperation) -> List[R]:
        outcomes = await asyncio.gather(*(self._run_item(item, operation) for item in batch))
        return [outcome for outcome in outcomes if outcome is not None]

    async def _run_item(self, item: T, operation: ItemOperation) -> Optional[R]:
        try:
            return await operation(item)
        except Exception as e:
            message = str(e) or type(e).__name__
            logs.log(logging.WARNING, f"Async {self.operation_name} failed for {item!r}: {message}")
            return None
