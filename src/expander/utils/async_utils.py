"""Structured concurrency helpers built on anyio.

Document processing fans out across independent files. Each file runs its
own pipeline, so the only coordination needed is waiting for a batch to
finish before starting the next one.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

import anyio

from expander.constants import BATCH_SIZE

__all__ = [
    "BatchProgressCallback",
    "ParallelExecutionError",
    "process_in_batches",
    "run_parallel",
]

T = TypeVar("T")
R = TypeVar("R")

#: Called after each batch with (processed, total)
BatchProgressCallback = Callable[[int, int], None]


class ParallelExecutionError(Exception):
    """Raised when one or more parallel tasks fail.

    Attributes:
        exceptions: Exceptions from failed tasks.
        results: Results and exceptions in task order.
    """

    def __init__(
        self,
        message: str,
        exceptions: tuple[BaseException, ...],
        results: tuple[Any | BaseException, ...],
    ) -> None:
        super().__init__(message)
        self.exceptions = exceptions
        self.results = results


async def run_parallel(
    tasks: Sequence[Callable[[], Awaitable[T]]],
    *,
    return_exceptions: bool = False,
) -> list[T | BaseException]:
    """Run zero-argument async callables concurrently in one task group.

    Args:
        tasks: Async callables to run.
        return_exceptions: If True, a failed task's exception is placed in
            its result slot instead of raising.

    Returns:
        Results in the same order as ``tasks``.

    Raises:
        ParallelExecutionError: If any task fails and ``return_exceptions``
            is False.
    """
    if not tasks:
        return []

    results: list[T | BaseException | None] = [None] * len(tasks)
    failures: list[BaseException] = []

    async def run_task(index: int, task_fn: Callable[[], Awaitable[T]]) -> None:
        try:
            results[index] = await task_fn()
        except Exception as exc:
            results[index] = exc
            failures.append(exc)

    async with anyio.create_task_group() as tg:
        for index, task_fn in enumerate(tasks):
            tg.start_soon(run_task, index, task_fn)

    if failures and not return_exceptions:
        raise ParallelExecutionError(
            f"{len(failures)} task(s) failed during parallel execution",
            exceptions=tuple(failures),
            results=tuple(results),
        )

    return results  # type: ignore[return-value]


async def process_in_batches(
    items: Sequence[T],
    processor: Callable[[T], Awaitable[R]],
    *,
    batch_size: int = BATCH_SIZE,
    on_progress: BatchProgressCallback | None = None,
) -> list[R]:
    """Process items concurrently, one batch at a time.

    Items within a batch run concurrently; the next batch starts only after
    the current one has finished.

    Args:
        items: Items to process.
        processor: Async function applied to each item.
        batch_size: Items per batch. Must be at least 1.
        on_progress: Optional callback receiving (processed, total) after
            each batch.

    Returns:
        Results in the same order as ``items``.

    Raises:
        ValueError: If ``batch_size`` is less than 1.
        ParallelExecutionError: If ``processor`` raises for any item.

    Example:
        ```python
        results = await process_in_batches(paths, processor.process_file)
        ```
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results: list[R] = []
    total = len(items)

    for start in range(0, total, batch_size):
        batch = items[start : start + batch_size]
        batch_results = await run_parallel(
            [lambda item=item: processor(item) for item in batch]
        )
        results.extend(batch_results)  # type: ignore[arg-type]
        if on_progress is not None:
            on_progress(min(start + batch_size, total), total)

    return results
