"""
Front matter generation for transformed pages.

The first ``#`` heading of a page becomes its title (and description);
versioned pages get a ``slug`` pinning them under ``v<major>.<minor>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from docsite.core.services.versions import LATEST, version_slug

_HEADING_RE = re.compile(r"#\s+(.*)")
_TITLE_STRIP_RE = re.compile(r"[`:]")

README_TITLE = "Overview"


class MissingHeadingError(ValueError):
    """Raised when a page has no ``#`` heading to derive its title from."""


@dataclass(frozen=True)
class FrontMatter:
    """Generated front matter plus the page body with its heading removed."""

    front: str
    content_without_heading: str
    title: str
    slug: str | None = None


def page_slug(newfile: str, version: str) -> str | None:
    """``v1.2`` plus the page path without ``.md`` or a trailing ``/index``.

    None for ``latest``, which is served unversioned.
    """
    if version == LATEST:
        return None
    path = newfile.removesuffix(".md")
    path = re.sub(r"(?:^|/)index$", "", path).strip("/")
    base = version_slug(version)
    return f"{base}/{path}" if path else base


def generate_front_matter(
    content: str,
    newfile: str,
    version: str,
    original_file: str = "",
) -> FrontMatter:
    """Build the ``---`` block for one page.

    README pages are titled ``Overview`` whatever their heading says and
    get a matching ``sidebar.label``.

    Raises:
        MissingHeadingError: If ``content`` has no heading.
    """
    heading = _HEADING_RE.search(content)
    if heading is None:
        raise MissingHeadingError(
            f"Missing heading in {newfile}. All markdown files must start with # Heading"
        )

    is_readme = (
        original_file.endswith("README.md")
        or newfile.endswith("/README.md")
        or newfile == "README.md"
    )
    title = README_TITLE if is_readme else _TITLE_STRIP_RE.sub("", heading.group(1))

    lines = ["---", f"title: {title}", f"description: {title}"]
    slug = page_slug(newfile, version)
    if slug:
        lines.append(f"slug: {slug}")
    if is_readme:
        lines += ["sidebar:", f"  label: {README_TITLE}"]
    lines.append("---")

    return FrontMatter(
        front="\n".join(lines),
        content_without_heading=content.replace(heading.group(0), "", 1),
        title=title,
        slug=slug,
    )
