"""Evaluation context: the file metadata visible to ``file.*`` references."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path, PurePosixPath

from expander.expressions.values import DateValue, StrValue, TypedValue

__all__ = ["EvaluationContext", "FILE_FIELDS"]

#: Field names accepted after ``file.``
FILE_FIELDS: tuple[str, ...] = ("name", "path", "folder", "ext", "ctime", "mtime")


@dataclass(frozen=True, slots=True)
class EvaluationContext:
    """Immutable snapshot of a document's identity.

    Attributes:
        name: File name without extension.
        path: Full path relative to the processing root (POSIX separators).
        folder: Parent folder path, or "/" for files at the root.
        ext: File extension without the dot.
        ctime: Creation instant.
        mtime: Modification instant.
    """

    name: str
    path: str
    folder: str
    ext: str
    ctime: datetime
    mtime: datetime

    @classmethod
    def for_path(
        cls,
        path: str,
        *,
        ctime: datetime,
        mtime: datetime,
    ) -> EvaluationContext:
        """Build a context from a relative POSIX path and timestamps.

        Examples:
            >>> ts = datetime(2024, 1, 15)
            >>> EvaluationContext.for_path("Daily/Log.md", ctime=ts, mtime=ts).folder
            'Daily'
            >>> EvaluationContext.for_path("Log.md", ctime=ts, mtime=ts).folder
            '/'
        """
        pure = PurePosixPath(path)
        parent = str(pure.parent)
        return cls(
            name=pure.stem,
            path=path,
            folder="/" if parent in ("", ".") else parent,
            ext=pure.suffix.removeprefix("."),
            ctime=ctime,
            mtime=mtime,
        )

    @classmethod
    def from_file(cls, file: Path, root: Path | None = None) -> EvaluationContext:
        """Build a context by reading a file's metadata from disk.

        Args:
            file: Path to the document.
            root: Directory that relative paths are computed against.
                Defaults to the file's own directory.

        Raises:
            OSError: If the file cannot be stat'ed.
        """
        stat = file.stat()
        base = root if root is not None else file.parent
        try:
            relative = file.resolve().relative_to(base.resolve()).as_posix()
        except ValueError:
            relative = file.name
        # st_birthtime only exists on some platforms
        created = getattr(stat, "st_birthtime", stat.st_ctime)
        return cls.for_path(
            relative,
            ctime=datetime.fromtimestamp(created),
            mtime=datetime.fromtimestamp(stat.st_mtime),
        )

    def get_field(self, field: str) -> TypedValue:
        """Resolve ``file.<field>``; unknown fields resolve to empty text."""
        if field in ("ctime", "mtime"):
            return DateValue(getattr(self, field))
        if field in FILE_FIELDS:
            return StrValue(getattr(self, field))
        return StrValue("")
