"""
Shell command adapter — runs the external static-site build.

Commands run as an argv list (no shell), with captured output.
There is no timeout: a hung builder blocks the build.
"""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when an external command exits non-zero or cannot start."""

    def __init__(self, command: list[str], message: str, stdout: str = "", stderr: str = "") -> None:
        self.command = command
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(f"{' '.join(command)}: {message}")


@dataclass
class CommandResult:
    """Output of a finished command."""

    command: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "command": self.command,
            "returncode": self.returncode,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration_ms": self.duration_ms,
        }


def run_command(command: list[str], cwd: Path) -> CommandResult:
    """Run ``command`` in ``cwd`` and return its captured output.

    Raises:
        CommandError: If the executable is missing or exits non-zero.
    """
    logger.debug("Executing: %s (cwd=%s)", " ".join(command), cwd)
    start = time.monotonic()

    try:
        proc = subprocess.run(
            command,
            cwd=str(cwd),
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise CommandError(command, f"executable not found ({e.filename})") from e

    duration_ms = int((time.monotonic() - start) * 1000)
    result = CommandResult(
        command=command,
        returncode=proc.returncode,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration_ms=duration_ms,
    )

    if proc.returncode != 0:
        logger.error("Command failed (exit %d): %s", proc.returncode, proc.stderr.strip())
        raise CommandError(
            command,
            f"exit code {proc.returncode}",
            stdout=proc.stdout,
            stderr=proc.stderr,
        )

    logger.info("Command finished in %dms: %s", duration_ms, " ".join(command))
    return result
