"""
Central registry for the static routing and redirect catalogs.

The JSON files under ``docsite/core/data/catalogs/`` are loaded on first
access and cached for the lifetime of the registry instance.

Usage::

    from docsite.core.data import get_registry

    registry = get_registry()
    registry.single_file_map    # {"faq": "reference/faq.md", ...}
    registry.manual_redirects   # [("/faq", "/reference/faq"), ...]
"""

from __future__ import annotations

import json
import logging
from functools import cached_property
from pathlib import Path

logger = logging.getLogger(__name__)

_DATA_DIR = Path(__file__).parent


def _load_json(relative_path: str) -> list | dict:
    """Load a JSON file relative to the data directory."""
    path = _DATA_DIR / relative_path
    if not path.exists():
        logger.warning("Data file not found: %s", path)
        return [] if relative_path.endswith("s.json") else {}
    with open(path, encoding="utf-8") as f:
        return json.load(f)


class DataRegistry:
    """Static tables that drive path mapping, link rewriting and redirects.

    Routing tables describe where content lives on the current site.
    The legacy compatibility table holds the special cases that only
    exist for old documentation tags; drop entries from
    ``catalogs/legacy_compat.json`` once those tags are retired.
    """

    # ── Routing ──────────────────────────────────────────────────

    @cached_property
    def _routing(self) -> dict:
        return _load_json("catalogs/routing.json")

    @cached_property
    def structure_map(self) -> dict[str, str]:
        """Legacy directory prefix → canonical section directory."""
        return dict(self._routing.get("structure", {}))

    @cached_property
    def single_file_map(self) -> dict[str, str]:
        """Legacy one-README directory → collapsed file path."""
        return dict(self._routing.get("single_file", {}))

    @cached_property
    def root_file_map(self) -> dict[str, str]:
        """Core repo root community file → destination docs path."""
        return dict(self._routing.get("root_files", {}))

    @cached_property
    def link_mappings(self) -> dict[str, str]:
        """Absolute link prefix rewrites applied after transformation."""
        return dict(self._routing.get("link_mappings", {}))

    # ── Legacy compatibility ─────────────────────────────────────

    @cached_property
    def _legacy(self) -> dict:
        return _load_json("catalogs/legacy_compat.json")

    @cached_property
    def root_file_links(self) -> dict[str, str]:
        """Lowercased ``../../<FILE>`` basename → relocated page name."""
        return dict(self._legacy.get("root_file_links", {}))

    @cached_property
    def numbered_root_links(self) -> frozenset[str]:
        """Root file names linked as ``../../<FILE>`` from numbered trees."""
        return frozenset(self._legacy.get("numbered_root_links", []))

    @cached_property
    def image_dir_alias(self) -> str:
        """Replacement for a leading ``_images`` link segment."""
        return self._legacy.get("image_dir_alias", "__images")

    # ── Redirects & navigation ───────────────────────────────────

    @cached_property
    def manual_redirects(self) -> list[tuple[str, str]]:
        """Hand-maintained legacy path → new path pairs."""
        data = _load_json("catalogs/manual_redirects.json")
        logger.debug("Loaded %d manual redirects", len(data))
        return [(src, dst) for src, dst in data]

    @cached_property
    def version_sidebar(self) -> list[dict]:
        """Sidebar groups written into each version's navigation JSON."""
        return _load_json("catalogs/version_sidebar.json")


_registry: DataRegistry | None = None


def get_registry() -> DataRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = DataRegistry()
    return _registry
