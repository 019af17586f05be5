"""
Stage runner — wraps each build step with timing and failure capture.

A stage is a callable taking a ``StageLog``. It appends
``(kind, message)`` entries as it works and returns a value for the
orchestrator. If it raises, the stage is recorded as ``error`` and a
``BuildAborted`` carrying a snapshot of the run state is raised in its
place. There is no partial-success continuation.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

from docsite.core.context import BuildState

logger = logging.getLogger(__name__)

StageLog = list[tuple[str, str]]
ProgressCallback = Callable[["StageResult"], None]


@dataclass
class StageResult:
    """Outcome of one executed stage."""

    label: str
    version: str | None = None
    status: str = "pending"             # "pending" | "running" | "done" | "error"
    duration_ms: int = 0
    log: StageLog = field(default_factory=list)
    error: str = ""

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "version": self.version,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "log": [list(entry) for entry in self.log],
            "error": self.error,
        }


@dataclass
class BuildReport:
    """All stages of a build run, in execution order."""

    stages: list[StageResult] = field(default_factory=list)
    ok: bool = False
    total_duration_ms: int = 0
    versions: list[str] = field(default_factory=list)
    retired: list[str] = field(default_factory=list)
    current_version: str | None = None
    redirects: dict = field(default_factory=dict)
    dist: str = ""

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "total_duration_ms": self.total_duration_ms,
            "versions": list(self.versions),
            "retired": list(self.retired),
            "current_version": self.current_version,
            "redirects": dict(self.redirects),
            "dist": self.dist,
            "stages": [s.to_dict() for s in self.stages],
        }


class BuildAborted(Exception):
    """A stage failed; the build stops here."""

    def __init__(self, stage: str, error: BaseException, state: dict) -> None:
        self.stage = stage
        self.error = error
        self.state = state
        super().__init__(f"{stage}: {error}")


def run_stage(
    label: str,
    state: BuildState,
    func: Callable[[StageLog], Any],
    report: BuildReport,
    on_progress: ProgressCallback | None = None,
) -> Any:
    """Execute one stage and record it on ``report``.

    Raises:
        BuildAborted: If ``func`` raises anything.
    """
    sr = StageResult(label=label, version=state.version, status="running")
    logger.info("▶ %s%s", label, f" ({state.version})" if state.version else "")
    start = time.monotonic()

    try:
        value = func(sr.log)
    except Exception as e:
        sr.status = "error"
        sr.error = str(e)
        sr.duration_ms = int((time.monotonic() - start) * 1000)
        report.stages.append(sr)
        logger.error("Stage '%s' failed: %s", label, e)
        if on_progress:
            on_progress(sr)
        raise BuildAborted(label, e, state.to_dict()) from e

    sr.status = "done"
    sr.duration_ms = int((time.monotonic() - start) * 1000)
    report.stages.append(sr)
    logger.debug("Stage '%s' done in %dms", label, sr.duration_ms)
    if on_progress:
        on_progress(sr)
    return value
