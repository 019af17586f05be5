"""
Version discovery — which core releases get documentation.

Tags are grouped by major.minor. The newest ``cutoff`` groups are
"ongoing" and contribute their highest tag to the active set; every
older group is "retired". The ``latest`` pseudo-version (the main
branch) is always active.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from docsite.adapters.vcs.git import GitRepo
from docsite.core.services import semver

logger = logging.getLogger(__name__)

LATEST = "latest"


@dataclass
class VersionSet:
    """Active versions (highest tag per ongoing group, then ``latest``)
    and retired ``M.m`` groups, newest first."""

    versions: list[str] = field(default_factory=lambda: [LATEST])
    retired: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"versions": list(self.versions), "retired": list(self.retired)}


def discover_from_tags(tags: list[str], cutoff: int = 2) -> VersionSet:
    """Select active and retired versions from a list of tag names.

    Invalid tags are ignored. With no valid tags the result is
    ``versions=["latest"], retired=[]``.
    """
    ordered = semver.sort_desc(tags)
    if not ordered:
        return VersionSet()

    groups: list[str] = []
    for tag in ordered:
        mm = semver.majmin(tag)
        if mm not in groups:
            groups.append(mm)

    ongoing, retired = groups[:cutoff], groups[cutoff:]

    # ordered is descending, so the first tag seen per group is its highest
    versions = [next(t for t in ordered if semver.majmin(t) == mm) for mm in ongoing]
    versions.append(LATEST)

    logger.debug("Ongoing groups %s, retired %s", ongoing, retired)
    return VersionSet(versions=versions, retired=retired)


def discover_versions(core: Path, cutoff: int = 2) -> VersionSet:
    """List the core repo's tags and run :func:`discover_from_tags`."""
    tags = GitRepo(core).tags()
    logger.info("Found %d tags in %s", len(tags), core)
    return discover_from_tags(tags, cutoff)


def find_current_version(versions: list[str]) -> str | None:
    """Highest stable tag in ``versions``, or None when there is none.

    ``latest``, branch names such as ``main``, invalid tags and
    prereleases never qualify.
    """
    ordered = semver.sort_desc(get_stable_versions(versions))
    return ordered[0] if ordered else None


def get_stable_versions(versions) -> list[str]:
    """Valid, non-prerelease tags in their original order."""
    return [
        v for v in versions
        if v != LATEST and semver.is_valid(v) and not semver.is_prerelease(v)
    ]


def version_slug(version: str) -> str:
    """``v1.2.3`` → ``v1.2``; other strings are returned unchanged."""
    v = semver.parse(version)
    if v is None or v.is_prerelease or v.build or not version.startswith("v"):
        return version
    return f"v{v.majmin}"
