"""
Shared test fixtures and configuration.
"""

import logging
import subprocess
from pathlib import Path

import pytest

from docsite.core.data import DataRegistry


@pytest.fixture
def registry() -> DataRegistry:
    """A fresh registry over the packaged catalogs."""
    return DataRegistry()


@pytest.fixture
def write_tree():
    """Write ``{relative path: text}`` under a root directory."""

    def _write(root: Path, files: dict[str, str]) -> Path:
        for rel, text in files.items():
            path = root / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return root

    return _write


@pytest.fixture
def fake_tags(monkeypatch):
    """Make ``GitRepo.tags`` return a fixed list instead of calling git."""

    def _set(tags: list[str]) -> None:
        monkeypatch.setattr(
            "docsite.adapters.vcs.git.GitRepo.tags",
            lambda self: list(tags),
        )

    return _set


@pytest.fixture
def completed():
    """Factory for ``subprocess.CompletedProcess`` results."""

    def _make(returncode: int = 0, stdout: str = "", stderr: str = "") -> subprocess.CompletedProcess:
        return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)

    return _make


@pytest.fixture(autouse=True)
def restore_docsite_logger():
    """CLI invocations reconfigure the ``docsite`` logger; undo that after each test."""
    logger = logging.getLogger("docsite")
    handlers, level = list(logger.handlers), logger.level
    yield
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
