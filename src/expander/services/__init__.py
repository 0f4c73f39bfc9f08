"""Services that connect configuration, the marker engine, and the filesystem."""

from __future__ import annotations

from expander.services.expander import ExpanderService
from expander.services.processor import FileProcessor, ProcessingResult

__all__ = [
    "ExpanderService",
    "FileProcessor",
    "ProcessingResult",
]
