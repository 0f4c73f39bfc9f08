from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator, Iterator
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from expander.expressions import EvaluationContext

if TYPE_CHECKING:
    from click.testing import CliRunner


@pytest.fixture(autouse=True)
def configure_test_logging() -> Generator[None, None, None]:
    """Configure structlog for the test run.

    Logs go to stderr at WARNING so they never mix with command output.
    """
    from expander.logging import configure_logging

    configure_logging(level=logging.WARNING)
    yield


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for test files.

    Also restores the working directory for tests that call os.chdir().
    """
    original_cwd = os.getcwd()
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)
    os.chdir(original_cwd)


@pytest.fixture
def clean_env(temp_dir: Path) -> Generator[None, None, None]:
    """Remove EXPANDER_ environment variables and isolate the user config."""
    original_env = os.environ.copy()
    for key in list(os.environ.keys()):
        if key.startswith("EXPANDER_"):
            del os.environ[key]
    home = temp_dir / "home"
    home.mkdir()
    os.environ["HOME"] = str(home)
    yield
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def sample_config_yaml() -> str:
    """Return sample expander.yaml content for testing."""
    return """
replacements:
  - key: greeting
    value: Hello world
  - key: shout
    value: upper("hey")
  - key: note-name
    value: file.name
  - key: prop.status
    value: done
  - key: retired
    value: old
    enabled: false
folders_to_scan: []
ignored_folders: [archive]
verbosity: info
"""


@pytest.fixture
def note_context() -> EvaluationContext:
    """Context for a note at journal/2024-01-15 Meeting Notes.md."""
    return EvaluationContext.for_path(
        "journal/2024-01-15 Meeting Notes.md",
        ctime=datetime(2024, 1, 15, 9, 30, 0),
        mtime=datetime(2024, 2, 1, 18, 45, 10),
    )


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
