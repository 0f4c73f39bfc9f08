"""File processing: applies replacement passes to documents on disk.

The processor owns everything outside the pure marker engine: folder
filtering, reading and atomically writing files, frontmatter updates, and
fanning out over many documents in batches.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from expander.config import ExpanderConfig
from expander.constants import ProcessingScope
from expander.exceptions import DocumentError
from expander.expressions import EvaluationContext
from expander.logging import bind_context, clear_context, get_logger
from expander.markers import (
    apply_property_updates,
    replace_expansions,
    replace_single_expansion,
)
from expander.services.expander import ExpanderService
from expander.utils.async_utils import BatchProgressCallback, process_in_batches
from expander.utils.atomic import atomic_write_text, read_text

__all__ = ["FileProcessor", "ProcessingResult"]

logger = get_logger(__name__)


@dataclass(slots=True)
class ProcessingResult:
    """Outcome of processing one document.

    Attributes:
        path: Document path.
        replacements_count: Marker values written (0 if the file was not
            modified).
        unknown_keys: Keys found in the document with no enabled replacement.
        property_updates: Number of frontmatter properties written.
        errors: Error messages; a non-empty list means the file was skipped.
    """

    path: Path
    replacements_count: int = 0
    unknown_keys: list[str] = field(default_factory=list)
    property_updates: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def modified(self) -> bool:
        """Whether the file was rewritten."""
        return self.replacements_count > 0 or self.property_updates > 0

    @property
    def success(self) -> bool:
        """Whether processing completed without errors."""
        return not self.errors


class FileProcessor:
    """Applies replacement passes to files under a root directory.

    Args:
        config: Loaded configuration.
        root: Directory folder filters and ``file.path`` are relative to.
        expander: Key resolver service. Created from ``config`` if omitted.
    """

    def __init__(
        self,
        config: ExpanderConfig,
        root: Path | None = None,
        expander: ExpanderService | None = None,
    ) -> None:
        self._config = config
        self._root = (root or Path.cwd()).resolve()
        self._expander = expander or ExpanderService(config)

    @property
    def root(self) -> Path:
        """Processing root directory."""
        return self._root

    def _relative(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self._root).as_posix()
        except ValueError:
            return path.as_posix()

    def should_process_file(self, path: Path) -> bool:
        """Check folder filters for ``path``.

        Ignored folders always win. An empty ``folders_to_scan`` list means
        every non-ignored folder is scanned. Matching is a prefix match on
        the path relative to the root.
        """
        relative = self._relative(path)

        for folder in self._config.ignored_folders:
            if folder and relative.startswith(folder):
                return False

        if not self._config.folders_to_scan:
            return True

        return any(
            folder and relative.startswith(folder)
            for folder in self._config.folders_to_scan
        )

    def get_files_to_process(self, root: Path | None = None) -> list[Path]:
        """List documents under ``root`` that pass the extension and folder filters.

        Returns:
            Paths sorted for a stable processing order.
        """
        base = (root or self._root).resolve()
        extensions = {ext.lower() for ext in self._config.file_extensions}
        return sorted(
            path
            for path in base.rglob("*")
            if path.is_file()
            and path.suffix.removeprefix(".").lower() in extensions
            and self.should_process_file(path)
        )

    def _context_for(self, path: Path) -> EvaluationContext:
        return EvaluationContext.from_file(path, self._root)

    async def process_file(
        self, path: Path, scope: ProcessingScope = ProcessingScope.ALL
    ) -> ProcessingResult:
        """Run one replacement pass over a file and save it if it changed.

        Failures are recorded in ``ProcessingResult.errors``; they are never
        raised, so one bad file cannot abort a batch.

        Args:
            path: Document to process.
            scope: ``AUTO`` for incidental runs, ``ALL`` for explicit ones.

        Returns:
            ProcessingResult for the file.
        """
        result = ProcessingResult(path=path)

        if scope == ProcessingScope.AUTO and self._config.disable_automatic_updates:
            logger.debug("automatic_updates_disabled", path=str(path))
            return result

        bind_context(path=str(path), scope=scope.value)
        try:
            return await self._process_file(path, scope, result)
        finally:
            clear_context("path", "scope")

    async def _process_file(
        self, path: Path, scope: ProcessingScope, result: ProcessingResult
    ) -> ProcessingResult:
        try:
            content = await asyncio.to_thread(read_text, path)
            context = await asyncio.to_thread(self._context_for, path)
        except (OSError, UnicodeDecodeError) as e:
            error = DocumentError(f"Cannot read {path}: {e}", path=path)
            result.errors.append(error.message)
            logger.error("file_read_failed", error=str(e))
            return result

        replacement = replace_expansions(
            content, scope, self._expander.get_replacement_value, context
        )
        result.unknown_keys = list(replacement.unknown_keys)
        if result.unknown_keys:
            logger.info("unknown_keys_found", keys=result.unknown_keys)

        new_content = (
            replacement.new_text if replacement.new_text is not None else content
        )
        new_content = apply_property_updates(new_content, replacement.property_updates)

        if new_content == content:
            return result

        try:
            await asyncio.to_thread(atomic_write_text, path, new_content)
        except OSError as e:
            error = DocumentError(f"Cannot write {path}: {e}", path=path)
            result.errors.append(error.message)
            logger.error("file_write_failed", error=str(e))
            return result

        result.replacements_count = replacement.replacements_count
        result.property_updates = len(replacement.property_updates)
        logger.info(
            "file_processed",
            replacements=result.replacements_count,
            property_updates=result.property_updates,
        )
        return result

    async def process_expansion(self, path: Path, key: str) -> bool:
        """Refresh the first marker for ``key`` in a file, whatever its mode.

        Returns:
            True if the marker exists and now holds the current value;
            False if the marker is missing, the key is unknown, or the file
            could not be read or written.
        """
        try:
            content = await asyncio.to_thread(read_text, path)
            context = await asyncio.to_thread(self._context_for, path)
            new_content = replace_single_expansion(
                content, key, self._expander.get_replacement_value, context
            )
            if new_content is None:
                return False
            if new_content != content:
                await asyncio.to_thread(atomic_write_text, path, new_content)
        except (OSError, UnicodeDecodeError) as e:
            logger.error(
                "expansion_refresh_failed", path=str(path), key=key, error=str(e)
            )
            return False
        return True

    async def process_tree(
        self,
        root: Path | None = None,
        scope: ProcessingScope = ProcessingScope.ALL,
        *,
        on_progress: BatchProgressCallback | None = None,
    ) -> list[ProcessingResult]:
        """Process every eligible file under ``root`` in concurrent batches.

        Args:
            root: Directory to walk. Defaults to the processor root.
            scope: Processing scope applied to every file.
            on_progress: Optional (processed, total) callback after each batch.

        Returns:
            One ProcessingResult per file, in processing order.
        """
        files = self.get_files_to_process(root)
        logger.info("processing_files", count=len(files), scope=scope.value)

        async def process(path: Path) -> ProcessingResult:
            return await self.process_file(path, scope)

        return await process_in_batches(
            files,
            process,
            batch_size=self._config.batch_size,
            on_progress=on_progress,
        )
