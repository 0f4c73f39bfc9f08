"""Shared utilities for file I/O and concurrency."""

from __future__ import annotations

from expander.utils.async_utils import (
    BatchProgressCallback,
    ParallelExecutionError,
    process_in_batches,
    run_parallel,
)
from expander.utils.atomic import atomic_write_text, read_text

__all__ = [
    "BatchProgressCallback",
    "ParallelExecutionError",
    "atomic_write_text",
    "process_in_batches",
    "read_text",
    "run_parallel",
]
