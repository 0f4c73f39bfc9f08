"""Document read and atomic write helpers.

Documents are rewritten through atomicwrites so an interrupted run never
leaves a half-written note behind. Newlines are preserved exactly as read.
"""

from __future__ import annotations

from pathlib import Path

from atomicwrites import atomic_write  # type: ignore[import-untyped]

__all__ = [
    "atomic_write_text",
    "read_text",
]


def read_text(path: Path | str, *, encoding: str = "utf-8") -> str:
    """Read a document without newline translation.

    Args:
        path: File to read.
        encoding: Character encoding. Defaults to "utf-8".

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid in ``encoding``.
    """
    with open(path, encoding=encoding, newline="") as f:
        return f.read()


def atomic_write_text(
    path: Path | str,
    content: str,
    *,
    encoding: str = "utf-8",
) -> None:
    """Replace a document's content atomically.

    Writes to a temporary file in the same directory, then renames it over
    the target. If the write fails, the original file is left unchanged.

    Args:
        path: Destination file path.
        content: Full new document text.
        encoding: Character encoding. Defaults to "utf-8".

    Raises:
        OSError: If the write or rename fails.

    Example:
        >>> atomic_write_text("notes/today.md", "<!-- expand: today -->")
    """
    with atomic_write(
        str(Path(path)), mode="w", encoding=encoding, newline="", overwrite=True
    ) as f:
        f.write(content)
