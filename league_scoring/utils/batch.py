"""Batched execution of per-entity async work."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Sequence, Tuple, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BatchReport:
    """Outcome of a batch run."""

    processed: int = 0
    failed: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.processed + self.failed


async def batch_process(
    items: Sequence[T],
    batch_size: int,
    worker: Callable[[T], Awaitable[Any]],
    delay: float = 0.0,
    label: Callable[[T], str] = str,
) -> BatchReport:
    """Run ``worker`` over ``items`` in sequential fixed-size batches.

    Items inside a batch run concurrently. A failing item is logged with its
    label and counted, and never stops its siblings or later batches.

    Args:
        items: Entities to process
        batch_size: Items per batch
        worker: Coroutine function called once per item
        delay: Seconds to sleep between batches
        label: Describes an item in log messages, usually its id

    Returns:
        BatchReport with processed and failed counts
    """
    report = BatchReport()
    size = max(1, batch_size)

    for start in range(0, len(items), size):
        batch = items[start:start + size]
        results = await asyncio.gather(
            *(worker(item) for item in batch),
            return_exceptions=True,
        )
        for item, result in zip(batch, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                report.failed += 1
                report.errors.append((label(item), str(result)))
                logger.error(f"Failed to process {label(item)}: {result}")
            else:
                report.processed += 1

        if delay > 0 and start + size < len(items):
            await asyncio.sleep(delay)

    return report
