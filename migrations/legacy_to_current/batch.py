"""Chunked insert execution with progress and time-remaining logging."""

import logging
import time
from collections.abc import Awaitable, Callable, Iterator, Sequence
from typing import TypeVar

import humanize

from db.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of ``items`` with at most ``size`` elements."""
    if size <= 0:
        raise ValueError("Chunk size must be positive")
    for start in range(0, len(items), size):
        yield items[start : start + size]


def format_duration(seconds: float) -> str:
    return humanize.precisedelta(seconds, minimum_unit="milliseconds" if seconds < 1 else "seconds", format="%0.0f")


class BatchExecutor:
    """
    Applies an insert function to a record list in fixed-size chunks.

    Chunks run sequentially. An exception from ``insert_fn`` aborts the run
    immediately; callers rely on idempotent inserts to make a full re-run safe.
    """

    def __init__(self, batch_size: int | None = None, dry_run: bool = False):
        self.batch_size = batch_size or settings.batch_size
        self.dry_run = dry_run

    async def run(
        self,
        table_name: str,
        items: Sequence[T],
        insert_fn: Callable[[Sequence[T]], Awaitable[object]],
    ) -> int:
        """Insert ``items`` via ``insert_fn`` and return how many were handed over."""
        if not items:
            logger.info(f"Skip {table_name} - no records to migrate")
            return 0

        total = len(items)
        logger.info(f"Migrating {humanize.intcomma(total)} {table_name} records...")

        if self.dry_run:
            logger.info(f"   [DRY RUN] Would insert {humanize.intcomma(total)} records")
            return total

        start_time = time.monotonic()
        total_batches = -(-total // self.batch_size)

        for index, batch in enumerate(chunked(items, self.batch_size), start=1):
            await insert_fn(batch)

            progress = min(index * self.batch_size, total)
            elapsed = time.monotonic() - start_time
            estimated_remaining = self.estimate_remaining(elapsed, index, total_batches)

            if total_batches > 1:
                eta = f" (est. {format_duration(estimated_remaining)} remaining)" if estimated_remaining > 0 else ""
                logger.info(
                    f"   Batch {index}/{total_batches}: {humanize.intcomma(progress)}/{humanize.intcomma(total)}{eta}"
                )
            else:
                logger.info(f"   Progress: {humanize.intcomma(progress)}/{humanize.intcomma(total)}")

        logger.info(f"Completed {table_name} migration in {format_duration(time.monotonic() - start_time)}")
        return total

    @staticmethod
    def estimate_remaining(elapsed: float, completed_batches: int, total_batches: int) -> float:
        """``remaining_batches * average_time_per_batch_so_far``."""
        if completed_batches <= 0:
            return 0.0
        return (total_batches - completed_batches) * (elapsed / completed_batches)
