"""
Navigation config for the site generator's versioning plugin.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from docsite.core.data import DataRegistry, get_registry
from docsite.core.services.versions import get_stable_versions, version_slug

logger = logging.getLogger(__name__)


def has_markdown_content(directory: Path) -> bool:
    return directory.is_dir() and any(directory.rglob("*.md"))


def version_sidebar_config(registry: DataRegistry | None = None) -> dict:
    registry = registry or get_registry()
    return {"sidebar": registry.version_sidebar}


def write_version_navigation(
    version: str,
    content_dir: Path,
    versions_dir: Path,
    registry: DataRegistry | None = None,
) -> Path | None:
    """Write ``v<M.m>.json`` for a built version.

    Returns None, writing nothing, when ``content_dir`` has no pages.
    """
    if not has_markdown_content(content_dir):
        logger.info("Skipping navigation for %s: no content in %s", version, content_dir)
        return None

    versions_dir.mkdir(parents=True, exist_ok=True)
    path = versions_dir / f"{version_slug(version)}.json"
    path.write_text(json.dumps(version_sidebar_config(registry), indent=2), encoding="utf-8")
    return path


def get_starlight_versions(versions: list[str]) -> list[dict[str, str]]:
    """Stable versions as ``{"slug": "v1.2", "label": "v1.2.3"}`` entries."""
    return [{"slug": version_slug(v), "label": v} for v in get_stable_versions(versions)]


def _title_case(name: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def generate_examples_sidebar_items(examples_dir: Path) -> list[dict]:
    """Sidebar entries for the examples section.

    Sub-directories (sorted) become autogenerated groups, followed by
    ``.md`` pages (sorted) as direct links.
    """
    if not examples_dir.is_dir():
        logger.warning("Examples directory not found: %s", examples_dir)
        return []

    dirs = sorted(p.name for p in examples_dir.iterdir() if p.is_dir())
    pages = sorted(p.stem for p in examples_dir.iterdir() if p.is_file() and p.suffix == ".md")

    items: list[dict] = [
        {"label": _title_case(d), "autogenerate": {"directory": f"examples/{d}"}}
        for d in dirs
    ]
    items += [{"label": _title_case(p), "link": f"examples/{p}"} for p in pages]
    return items
