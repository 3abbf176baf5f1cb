"""
Sequential chunked processing.

Splits a list into fixed-size chunks and hands each chunk to an async
processor, one chunk at a time. Whatever happens inside a chunk (for example
concurrent sends) is the processor's business.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], Any]


def chunked(items: Sequence[T], size: int) -> List[List[T]]:
    """Split `items` into consecutive lists of at most `size` elements."""
    if size < 1:
        raise ValueError(f"batch_size must be at least 1, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


async def process_in_batches(
    items: Sequence[T],
    batch_size: int,
    processor: Callable[[List[T]], Awaitable[Any]],
    on_progress: Optional[ProgressCallback] = None,
) -> List[Any]:
    """
    Run `processor` over `items` in sequential chunks of `batch_size`.

    A list returned by the processor is flattened into the result in order;
    any other value is appended as a single element. An exception from any
    chunk aborts the run and propagates, so later chunks never start.

    Args:
        items: Items to process
        batch_size: Chunk size, at least 1
        processor: Async callable taking one chunk
        on_progress: Called as on_progress(processed_so_far, total) after each chunk

    Returns:
        Accumulated results in chunk order

    Raises:
        ValueError: If batch_size < 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    total = len(items)
    results: List[Any] = []
    if total == 0:
        return results

    processed = 0
    for chunk in chunked(items, batch_size):
        outcome = await processor(chunk)
        if isinstance(outcome, list):
            results.extend(outcome)
        else:
            results.append(outcome)

        processed += len(chunk)
        logger.debug(f"Processed batch: {processed}/{total}")
        if on_progress is not None:
            on_progress(processed, total)

    return results
