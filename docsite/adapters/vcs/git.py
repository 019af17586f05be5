"""
Git adapter — the version-control operations the build needs.

Wraps the git CLI (never a library binding): tag listing, checkout and
describing what is currently checked out. Every call runs with
``cwd`` set to the repository; a non-zero exit raises ``GitError``.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when a git command exits non-zero."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.command = ["git", *args]
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"git {' '.join(args)} failed: {detail}")


def git_available() -> bool:
    return shutil.which("git") is not None


def run_git(
    *args: str,
    cwd: Path,
    timeout: int | None = None,
) -> str:
    """Run a git command and return its stripped stdout.

    Raises:
        GitError: If git exits non-zero.
    """
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        timeout=timeout,
    )
    if result.returncode != 0:
        raise GitError(list(args), result.returncode, result.stderr)
    return result.stdout.strip()


class GitRepo:
    """A local clone of the core repository."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def tags(self) -> list[str]:
        """All tag names, in git's order."""
        out = run_git("tag", "--list", cwd=self.path)
        return [line.strip() for line in out.splitlines() if line.strip()]

    def checkout(self, ref: str) -> None:
        logger.info("Checking out %s in %s", ref, self.path)
        run_git("checkout", ref, cwd=self.path)

    def current_branch(self) -> str:
        return run_git("branch", "--show-current", cwd=self.path)

    def describe_tags(self) -> str:
        return run_git("describe", "--tags", cwd=self.path)
