"""
Examples processing — turns the examples repository into site pages.

Each ``hello-pepr-<name>/README.md`` becomes one unversioned page,
``examples/<name>.md``, with a link back to its source directory.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from docsite.core.engine.fanout import run_parallel
from docsite.core.models.site import DEFAULT_EXAMPLES_URL
from docsite.core.services.md_transforms import transform_content

logger = logging.getLogger(__name__)

EXAMPLE_PREFIX = "hello-pepr-"

_HEADING_LINE_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_HELLO_PEPR_RE = re.compile(r"^hello\s+pepr\s+", re.IGNORECASE)


@dataclass(frozen=True)
class ExamplePage:
    name: str
    slug: str
    title: str
    output_path: Path


def extract_example_title(content: str, example_name: str) -> str:
    """First heading text, else the example name spelled out."""
    heading = _HEADING_LINE_RE.search(content)
    if heading:
        title = heading.group(1)
    else:
        title = example_slug(example_name).replace("-", " ")
    return _HELLO_PEPR_RE.sub("", title)


def remove_heading(content: str) -> str:
    """Drop the first heading line and trim; unchanged without one."""
    if not _HEADING_LINE_RE.search(content):
        return content
    return _HEADING_LINE_RE.sub("", content, count=1).strip()


def example_slug(example_name: str) -> str:
    return example_name.removeprefix(EXAMPLE_PREFIX)


def escape_yaml_string(value: str) -> str:
    """Escape for a double-quoted YAML scalar."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def example_source_url(example_name: str, base_url: str = DEFAULT_EXAMPLES_URL) -> str:
    return f"{base_url.rstrip('/')}/{example_name}"


def render_example_page(content: str, example_name: str, base_url: str = DEFAULT_EXAMPLES_URL) -> str:
    """Front matter + source link + transformed README body."""
    title = escape_yaml_string(extract_example_title(content, example_name))
    front = f'---\ntitle: "{title}"\ndescription: "{title}"\n---\n'
    source = f"\n\n> **Source:** [{example_name}]({example_source_url(example_name, base_url)})\n\n"
    return front + source + transform_content(remove_heading(content))


def find_examples(examples_repo: Path) -> list[Path]:
    """``hello-pepr-*`` directories that have a README.md, sorted by name."""
    return sorted(
        d for d in examples_repo.glob(f"{EXAMPLE_PREFIX}*")
        if d.is_dir() and (d / "README.md").is_file()
    )


def process_examples(
    examples_repo: Path,
    output_dir: Path,
    base_url: str = DEFAULT_EXAMPLES_URL,
    max_workers: int | None = None,
) -> list[ExamplePage]:
    """Write one page per example into ``output_dir``.

    Raises:
        FanOutError: If any example could not be read or written.
    """
    example_dirs = find_examples(examples_repo)
    if not example_dirs:
        logger.warning("No %s* examples found in %s", EXAMPLE_PREFIX, examples_repo)
        return []

    output_dir.mkdir(parents=True, exist_ok=True)

    def _process(example_dir: Path) -> ExamplePage:
        name = example_dir.name
        content = (example_dir / "README.md").read_text(encoding="utf-8")
        out = output_dir / f"{example_slug(name)}.md"
        out.write_text(render_example_page(content, name, base_url), encoding="utf-8")
        return ExamplePage(
            name=name,
            slug=example_slug(name),
            title=extract_example_title(content, name),
            output_path=out,
        )

    pages = run_parallel("Process examples", example_dirs, _process, max_workers)
    logger.info("Processed %d examples into %s", len(pages), output_dir)
    return sorted(pages, key=lambda p: p.slug)
