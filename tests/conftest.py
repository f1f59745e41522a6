"""
Shared test fixtures for app-context-util tests.

Provides stub registries and loaders for the handle tests and helpers for
writing configuration sources, following the Given/When/Then structure.
"""

from pathlib import Path
from typing import Callable, Generator, List

import pytest

import sample_beans
from registry_stubs import CloseableRegistry, RecordingLoader


@pytest.fixture
def connection_pool() -> sample_beans.ConnectionPool:
    return sample_beans.ConnectionPool("sqlite:///:memory:")


@pytest.fixture
def closeable_registry(connection_pool) -> CloseableRegistry:
    """Provide a closeable registry holding a single ConnectionPool."""
    return CloseableRegistry({"dataSource": connection_pool})


@pytest.fixture
def recording_loader(closeable_registry) -> RecordingLoader:
    """Provide a loader that always returns the closeable registry fixture."""
    return RecordingLoader(lambda sources: closeable_registry)


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[str, str], str]:
    """
    Provide a helper writing a configuration source into a temporary directory.

    Returns:
        Function taking (file name, content) and returning the file path
    """

    def _write(name: str, content: str) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return str(path)

    return _write


@pytest.fixture
def lifecycle_events() -> Generator[List[str], None, None]:
    """Provide the shared lifecycle event list, cleared before and after the test."""
    sample_beans.LIFECYCLE_EVENTS.clear()
    try:
        yield sample_beans.LIFECYCLE_EVENTS
    finally:
        sample_beans.LIFECYCLE_EVENTS.clear()


@pytest.fixture
def exploding_module(tmp_path: Path, monkeypatch) -> str:
    """Provide the name of an importable module whose body raises RuntimeError."""
    module_dir = tmp_path / "exploding"
    module_dir.mkdir()
    (module_dir / "exploding_beans.py").write_text(
        "raise RuntimeError('boom at import')\n\n\nclass Bean:\n    pass\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(module_dir))
    return "exploding_beans"
