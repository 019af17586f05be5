"""
CLI commands for inspecting single-file transforms.

Useful when a page renders wrong: run the same metadata, front matter
and link passes the build uses on one file and look at the result.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click


@click.group()
def content() -> None:
    """Content — run page transforms on individual files."""


@content.command("metadata")
@click.argument("rel_path")
def metadata(rel_path: str) -> None:
    """Show where a docs-relative path lands on the site."""
    from docsite.core.services.file_metadata import generate_file_metadata

    click.echo(generate_file_metadata(rel_path).newfile)


@content.command("transform")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--as-path", "as_path", default=None, help="Docs-relative path (default: file name).")
@click.option("--version", "version", default="latest", show_default=True, help="Version being built.")
def transform(file: str, as_path: str | None, version: str) -> None:
    """Print FILE as the build would write it."""
    from docsite.core.services.file_metadata import generate_file_metadata
    from docsite.core.services.frontmatter import MissingHeadingError, generate_front_matter
    from docsite.core.services.md_transforms import postprocess_content, process_content_links

    rel = as_path or Path(file).name
    text = Path(file).read_text(encoding="utf-8")
    meta = generate_file_metadata(rel)

    try:
        fm = generate_front_matter(text, meta.newfile, version, rel)
    except MissingHeadingError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    page = process_content_links("\n".join([fm.front, fm.content_without_heading]), rel)
    click.secho(f"# → {meta.newfile}", fg="cyan", err=True)
    click.echo(postprocess_content(page))
