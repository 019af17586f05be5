"""
Redirect rules for the hosting platform's ``_redirects`` file.

Four sections, in this order:

  Retired   — retired ``M.m`` lines and all their tags → site root
  Manual    — hand-maintained legacy paths (catalogs/manual_redirects.json)
  Patch     — ``/vX.Y.Z`` → ``/vX.Y`` for every active stable tag
  Examples  — versioned ``examples/`` paths → the unversioned examples

Each rule is ``source  destination  301``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from docsite.adapters.vcs.git import GitRepo
from docsite.core.data import DataRegistry, get_registry
from docsite.core.services import semver
from docsite.core.services.versions import get_stable_versions

logger = logging.getLogger(__name__)

STATUS = 301
SPLAT = ":splat"

BANNER = (
    "# Auto-generated by docsite build. DO NOT EDIT MANUALLY.\n"
    "# Changes are overwritten on the next build; edit the redirect\n"
    "# catalogs or the version list instead."
)


@dataclass(frozen=True)
class RedirectRule:
    """One ``source destination status`` line."""

    source: str
    destination: str
    status: int = STATUS

    def render(self) -> str:
        return f"{self.source}  {self.destination}  {self.status}"


@dataclass
class RedirectSection:
    title: str
    rules: list[RedirectRule] = field(default_factory=list)

    def render(self) -> str:
        return "\n".join([f"# {self.title}", *(r.render() for r in self.rules)])


@dataclass
class RedirectResult:
    """Rule counts per section of a generated file."""

    retired_count: int = 0
    manual_count: int = 0
    patch_count: int = 0
    examples_count: int = 0
    output_path: str = ""

    @property
    def total_rules(self) -> int:
        return self.retired_count + self.manual_count + self.patch_count + self.examples_count

    def to_dict(self) -> dict:
        return {
            "total_rules": self.total_rules,
            "retired_count": self.retired_count,
            "manual_count": self.manual_count,
            "patch_count": self.patch_count,
            "examples_count": self.examples_count,
            "output_path": self.output_path,
        }


# ── Sections ────────────────────────────────────────────────────────


def retired_redirects(retired: list[str], tags: list[str]) -> list[RedirectRule]:
    """Send every page of a retired ``M.m`` line, and of each of its
    tags, to the same page on the current site."""
    rules: list[RedirectRule] = []
    for mm in retired:
        rules.append(RedirectRule(f"/v{mm}/*", f"/{SPLAT}"))
        for tag in tags:
            parsed = semver.parse(tag)
            if parsed is not None and parsed.majmin == mm:
                rules.append(RedirectRule(f"/v{parsed}/*", f"/{SPLAT}"))
    return rules


def normalize_manual_redirect(source: str, destination: str) -> RedirectRule:
    """Make ``source`` end in ``/*`` and ``destination`` in ``:splat``."""
    if not source.endswith("/*"):
        source = source.rstrip("/") + "/*"
    if not destination.endswith(SPLAT):
        destination = destination.rstrip("/") + "/" + SPLAT
    return RedirectRule(source, destination)


def manual_redirects(registry: DataRegistry | None = None) -> list[RedirectRule]:
    registry = registry or get_registry()
    return [normalize_manual_redirect(src, dst) for src, dst in registry.manual_redirects]


def patch_redirects(active_versions: list[str]) -> list[RedirectRule]:
    """Exact and wildcard rules from each stable patch tag to its minor."""
    rules: list[RedirectRule] = []
    for version in get_stable_versions(active_versions):
        parsed = semver.parse(version)
        patch_path, minor_path = f"/v{parsed}", f"/v{parsed.majmin}"
        rules.append(RedirectRule(patch_path, minor_path))
        rules.append(RedirectRule(f"{patch_path}/*", f"{minor_path}/{SPLAT}"))
    return rules


def examples_redirects(active_versions: list[str]) -> list[RedirectRule]:
    """Examples are unversioned; versioned example paths point at them."""
    seen: list[str] = []
    for version in get_stable_versions(active_versions):
        mm = semver.majmin(version)
        if mm not in seen:
            seen.append(mm)

    rules: list[RedirectRule] = []
    for mm in seen:
        rules.append(RedirectRule(f"/v{mm}/examples", "/examples"))
        rules.append(RedirectRule(f"/v{mm}/examples/*", f"/examples/{SPLAT}"))
    return rules


# ── File generation ─────────────────────────────────────────────────


def build_sections(
    retired: list[str],
    active_versions: list[str],
    tags: list[str],
    registry: DataRegistry | None = None,
) -> list[RedirectSection]:
    return [
        RedirectSection("Retired Version Redirects", retired_redirects(retired, tags)),
        RedirectSection("Manual Redirects", manual_redirects(registry)),
        RedirectSection("Automatic Patch-to-Minor Redirects", patch_redirects(active_versions)),
        RedirectSection("Example Redirects", examples_redirects(active_versions)),
    ]


def render_redirects(sections: list[RedirectSection]) -> str:
    body = "\n\n".join(section.render() for section in sections)
    return f"{BANNER}\n\n{body}\n"


def generate_redirects(
    core: Path,
    retired: list[str],
    active_versions: list[str],
    output_path: Path,
    registry: DataRegistry | None = None,
) -> RedirectResult:
    """Write the redirects file and return the rule counts.

    The core repo's tags are re-listed so that every patch of a retired
    line gets its own rule.
    """
    tags = GitRepo(core).tags() if retired else []
    sections = build_sections(retired, active_versions, tags, registry)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_redirects(sections), encoding="utf-8")

    retired_s, manual_s, patch_s, examples_s = sections
    result = RedirectResult(
        retired_count=len(retired_s.rules),
        manual_count=len(manual_s.rules),
        patch_count=len(patch_s.rules),
        examples_count=len(examples_s.rules),
        output_path=str(output_path),
    )
    logger.info("Wrote %d redirect rules to %s", result.total_rules, output_path)
    return result
