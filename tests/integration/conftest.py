"""
Auto-mark all tests in this directory as integration tests.

They drive a real ``git`` binary against throwaway repositories and are
skipped when git is not installed.

Run ONLY integration tests:
    pytest tests/integration/ -m integration

Run ONLY unit tests:
    pytest -m "not integration"
"""

import subprocess
from pathlib import Path

import pytest

from docsite.adapters.vcs.git import git_available


def pytest_collection_modifyitems(items):
    """Auto-apply the 'integration' marker to every test in this directory."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def git_repo(tmp_path: Path):
    """Factory: an initialised repository on ``main`` with a commit helper."""
    if not git_available():
        pytest.skip("git is not installed")

    repo = tmp_path / "core"
    repo.mkdir()

    def git(*args: str) -> str:
        result = subprocess.run(
            ["git", *args], cwd=repo, capture_output=True, text=True, check=True,
        )
        return result.stdout.strip()

    git("init", "-q", "-b", "main")
    git("config", "user.email", "docs@example.com")
    git("config", "user.name", "Docs Bot")
    git("config", "commit.gpgsign", "false")
    git("config", "tag.gpgsign", "false")

    def commit(files: dict[str, str], message: str, tag: str | None = None) -> None:
        for rel, text in files.items():
            path = repo / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        git("add", "-A")
        git("commit", "-q", "-m", message)
        if tag:
            git("tag", tag)

    return repo, git, commit
