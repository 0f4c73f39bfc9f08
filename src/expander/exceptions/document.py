from __future__ import annotations

from pathlib import Path

from expander.exceptions.base import ExpanderError


class DocumentError(ExpanderError):
    """Exception for failures reading or writing a document.

    Attributes:
        message: Human-readable error message.
        path: Path of the document involved (if known).
    """

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize the DocumentError.

        Args:
            message: Human-readable error message.
            path: Path of the document involved.
        """
        self.path = Path(path) if path is not None else None
        super().__init__(message)
