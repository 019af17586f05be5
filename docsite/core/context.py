"""
Build context — the paths and run state of one ``docsite build``.

Two objects, both created by the orchestrator and passed explicitly to
every stage:

    - BuildPaths:  where everything lives.  Frozen once arguments are
      validated.
    - BuildState:  what the run has learned so far (versions, retired
      lines, the version being built).  Mutated by the orchestrator only,
      never by fan-out tasks.

Nothing here is module-level; each invocation starts from a fresh state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class BuildPaths:
    """Input and output locations for a build."""

    core: Path                          # Core repo clone (tags, docs/)
    site: Path                          # Site source, may hold cached content/<version>
    examples: Path                      # Examples repo clone
    site_root: Path                     # Site generator project root
    work: Path                          # Scratch dir, rebuilt every run
    dist: Path | None = None            # Final output, None with --no-dist

    @property
    def core_docs(self) -> Path:
        return self.core / "docs"

    @property
    def work_content(self) -> Path:
        return self.work / "content"

    @property
    def work_static(self) -> Path:
        return self.work / "static"

    def version_dir(self, version: str) -> Path:
        return self.work_content / version

    @property
    def docs_dir(self) -> Path:
        return self.site_root / "src" / "content" / "docs"

    @property
    def versions_dir(self) -> Path:
        return self.site_root / "src" / "content" / "versions"

    @property
    def examples_sidebar_file(self) -> Path:
        return self.site_root / "src" / "content" / "examples-sidebar.json"

    @property
    def starlight_versions_file(self) -> Path:
        return self.site_root / "src" / "content" / "starlight-versions.json"

    @property
    def public_dir(self) -> Path:
        return self.site_root / "public"

    @property
    def assets_dir(self) -> Path:
        return self.public_dir / "assets"

    @property
    def redirects_file(self) -> Path:
        return self.public_dir / "_redirects"

    def to_dict(self) -> dict:
        return {
            "core": str(self.core),
            "site": str(self.site),
            "examples": str(self.examples),
            "site_root": str(self.site_root),
            "work": str(self.work),
            "dist": str(self.dist) if self.dist else None,
        }


@dataclass
class BuildState:
    """Accumulated state of one build run, dumped when a stage fails."""

    paths: BuildPaths
    cutoff: int = 2
    versions: list[str] = field(default_factory=list)
    retired: list[str] = field(default_factory=list)
    version: str | None = None          # Version currently being built
    sources: list[str] = field(default_factory=list)
    built: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    current_version: str | None = None

    @property
    def verdir(self) -> Path | None:
        return self.paths.version_dir(self.version) if self.version else None

    def to_dict(self) -> dict:
        return {
            "paths": self.paths.to_dict(),
            "cutoff": self.cutoff,
            "versions": list(self.versions),
            "retired": list(self.retired),
            "version": self.version,
            "verdir": str(self.verdir) if self.verdir else None,
            "sources": list(self.sources),
            "built": list(self.built),
            "skipped": list(self.skipped),
            "current_version": self.current_version,
        }
