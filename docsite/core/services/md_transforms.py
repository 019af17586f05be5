"""
Markdown transforms — text rewrites that make core docs site-ready.

Every transform is a pure ``str -> str`` function; documents are treated
as opaque text and rewritten with ordered regex substitutions, never
parsed into a tree.

``transform_content`` runs the core passes in this order:

  1. image paths   ``_images/x.png`` → ``/assets/x.png``
  2. video links   bare ``https://…/x.mp4`` → ``<video>`` tag
  3. link rewrite  README/docs/.md/case normalization of relative links
  4. comments      ``<!-- … -->`` removal
  5. MDX escaping  ``**@param``, ``<email>``, ``<…@…>``/``<…!…>``

Later passes assume the earlier ones already ran.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Callable

from docsite.core.data import DataRegistry, get_registry

logger = logging.getLogger(__name__)

Transform = Callable[[str], str]


# ── 1. Image paths ──────────────────────────────────────────────────

_RELATIVE_IMAGE_RE = re.compile(r"(?:\.\./)+_images/([\w-]+)\.(?:png|svg)")
_DIRECT_IMAGE_RE = re.compile(r"_images/([\w-]+)\.(?:png|svg)")

# Legacy tutorial screenshots, optionally under a numbered directory
_OPERATOR_RESOURCE_RE = re.compile(
    r"resources/(?:\d+_)?create-pepr-operator/(light|dark)\.png"
)


def fix_image_paths(content: str) -> str:
    """Point ``_images`` and tutorial resource references at ``/assets``.

    SVG references are retargeted to a PNG of the same basename.
    Content already using ``/assets/…`` is left untouched.
    """
    content = _RELATIVE_IMAGE_RE.sub(r"/assets/\1.png", content)
    content = _DIRECT_IMAGE_RE.sub(r"/assets/\1.png", content)
    return _OPERATOR_RESOURCE_RE.sub(r"/assets/\1.png", content)


# ── 2. Video links ──────────────────────────────────────────────────

# Skip URLs that already sit inside a src="..." attribute
_BARE_VIDEO_RE = re.compile(r'(?<!src=")https\S*\.mp4(?!")')


def wrap_video_links(content: str) -> str:
    """Embed bare ``.mp4`` URLs in a video tag."""
    return _BARE_VIDEO_RE.sub(
        lambda m: f'<video class="td-content" controls src="{m.group(0)}"></video>',
        content,
    )


# ── 3. Link rewriting ───────────────────────────────────────────────

_MD_LINK_TARGET_RE = re.compile(r"\]\(([^)]+)\)")


def rewrite_link_url(url: str, registry: DataRegistry | None = None) -> str:
    """Normalize one relative link target. External URLs pass through.

    Steps, in order, on the path part (the ``#fragment`` is split off
    first and re-attached unchanged):

      a. ``../../<ROOT FILE>`` → ``./<relocated name>``
      b. drop a trailing ``README.md`` segment
      c. leading ``_images…`` segment → ``__images``
      d. drop a ``docs/``, ``./docs/`` or ``/docs/`` prefix
      e. drop ``.md`` from the last segment
      f. lowercase
    """
    if url.startswith("http"):
        return url

    registry = registry or get_registry()
    path, hash_sign, fragment = url.partition("#")
    if not path:
        return url

    parts = path.split("/")

    if len(parts) > 2 and parts[0] == ".." and parts[1] == "..":
        relocated = registry.root_file_links.get(parts[2].lower())
        if relocated:
            parts = [".", relocated]

    if parts[-1] == "README.md":
        parts.pop()

    if parts and parts[0].startswith("_images"):
        parts[0] = registry.image_dir_alias

    if parts[:2] == [".", "docs"]:
        parts = parts[2:]
    elif parts[:2] == ["", "docs"]:
        parts = [""] + parts[2:]
    elif parts[:1] == ["docs"]:
        parts = parts[1:]

    if parts and parts[-1].endswith(".md"):
        parts[-1] = parts[-1][:-3]

    if parts == [""]:
        new_path = "/"
    else:
        # A docs root or bare README link becomes the current directory;
        # with a fragment it keeps the slash so the anchor resolves there
        new_path = "/".join(parts).lower() or ("./" if hash_sign else ".")
    return f"{new_path}{hash_sign}{fragment}"


def rewrite_markdown_links(content: str, registry: DataRegistry | None = None) -> str:
    """Apply :func:`rewrite_link_url` to every ``](target)`` in ``content``."""
    registry = registry or get_registry()
    return _MD_LINK_TARGET_RE.sub(
        lambda m: f"]({rewrite_link_url(m.group(1), registry)})",
        content,
    )


# ── 4. HTML comments ────────────────────────────────────────────────

_HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")


def remove_html_comments(content: str) -> str:
    """Strip ``<!-- … -->`` blocks until none are left.

    Repeats so that marker fragments joined by an earlier removal
    (``<!<!-- x -->-- y -->``) are removed as well.
    """
    while True:
        stripped = _HTML_COMMENT_RE.sub("", content)
        if stripped == content:
            return stripped
        content = stripped


# ── 5. MDX escaping ─────────────────────────────────────────────────

_PARAM_DIRECTIVE_RE = re.compile(r"\*\*@param\b")
_ANGLE_EMAIL_RE = re.compile(r"<([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})>")
_ANGLE_UNSAFE_RE = re.compile(r"<([^>]*[@!][^>]*)>")


def escape_mdx(content: str) -> str:
    """Escape text MDX would read as a directive or a broken JSX tag."""
    content = _PARAM_DIRECTIVE_RE.sub(r"**\\@param", content)
    content = _ANGLE_EMAIL_RE.sub(r"&lt;\1&gt;", content)
    return _ANGLE_UNSAFE_RE.sub(r"&lt;\1&gt;", content)


# ── Pipeline ────────────────────────────────────────────────────────

TRANSFORM_PASSES: tuple[Transform, ...] = (
    fix_image_paths,
    wrap_video_links,
    rewrite_markdown_links,
    remove_html_comments,
    escape_mdx,
)


def transform_content(content: str) -> str:
    """Run every pass of :data:`TRANSFORM_PASSES` in order."""
    for transform in TRANSFORM_PASSES:
        content = transform(content)
    return content


# ── Per-file link post-processing ───────────────────────────────────

_INTERNAL_MD_LINK_RE = re.compile(r"\]\((?!https?://)([^)]+)\.md(#[^)]+)?\)")


def process_content_links(
    content: str,
    file: str,
    registry: DataRegistry | None = None,
) -> str:
    """Transform a document and fix its links for its new location.

    Non-README pages are served one directory deeper than their source
    (``guide.md`` → ``guide/``), so their relative links gain one level.
    """
    registry = registry or get_registry()
    result = transform_content(content)

    if posixpath.basename(file) != "README.md":
        result = result.replace("](../", "](../../").replace("](./", "](../")

    for old, new in registry.link_mappings.items():
        result = result.replace(old, new)

    return _INTERNAL_MD_LINK_RE.sub(
        lambda m: f"]({m.group(1)}{m.group(2) or ''})",
        result,
    )


# ── Numbered link rewriting ─────────────────────────────────────────

_CANONICAL_INT_RE = re.compile(r"0|[1-9][0-9]*")


def _strip_int_prefix(segment: str) -> str:
    prefix, sep, rest = segment.partition("_")
    if sep and _CANONICAL_INT_RE.fullmatch(prefix):
        return rest
    return segment


def rewrite_numbered_file_links(content: str, registry: DataRegistry | None = None) -> str:
    """Drop ``<n>_`` ordering prefixes from every relative link segment.

    ``[Guide](2_folder/1_file.md)`` → ``[Guide](folder/file.md)``. A
    ``../../<ROOT FILE>`` link moves up one level less, matching where
    the community files are relocated.
    """
    registry = registry or get_registry()

    def _rewrite(m: re.Match) -> str:
        parts = m.group(1).split("/")
        if (
            len(parts) > 2
            and parts[0] == ".."
            and parts[1] == ".."
            and parts[2] in registry.numbered_root_links
        ):
            parts = parts[1:]
        if parts[0].startswith("http"):
            return m.group(0)
        return "](" + "/".join(_strip_int_prefix(p) for p in parts) + ")"

    return _MD_LINK_TARGET_RE.sub(_rewrite, content)


# ── Callouts ────────────────────────────────────────────────────────

_CALLOUT_RE = re.compile(
    r"^> \[!(TIP|NOTE|WARNING|IMPORTANT|CAUTION)\]\n((?:^>.*\n?)*)",
    re.MULTILINE,
)
_QUOTE_MARKER_RE = re.compile(r"^> ?")


def convert_callouts(content: str) -> str:
    """Turn GitHub alert blockquotes into ``:::type`` admonitions.

        > [!NOTE]
        > Some text

    becomes:

        :::note
        Some text
        :::
    """
    def _replace(m: re.Match) -> str:
        lines = (_QUOTE_MARKER_RE.sub("", line) for line in m.group(2).split("\n"))
        body = "\n".join(line for line in lines if line)
        trailing = "\n" if m.group(0).endswith("\n") else ""
        return f":::{m.group(1).lower()}\n{body}\n:::{trailing}"

    return _CALLOUT_RE.sub(_replace, content)


def postprocess_content(content: str) -> str:
    """Final per-file pass over generated pages: image paths, then callouts."""
    return convert_callouts(fix_image_paths(content))
