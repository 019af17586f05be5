"""
CLI commands for the hosting platform's redirect rules.

Thin wrapper over ``docsite.core.services.redirects``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from docsite.ui.cli import load_cli_config


@click.group()
def redirects() -> None:
    """Redirects — generate the _redirects rules file."""


@redirects.command("generate")
@click.option("--core", required=True, type=click.Path(exists=True, file_okay=False), help="Core repo clone.")
@click.option("--output", "-o", required=True, type=click.Path(dir_okay=False), help="Rules file to write.")
@click.option("--cutoff", type=click.IntRange(min=1), default=None, help="Minor lines to keep.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(ctx: click.Context, core: str, output: str, cutoff: int | None, as_json: bool) -> None:
    """Discover versions and write redirect rules for them."""
    from docsite.adapters.vcs.git import GitError
    from docsite.core.services.redirects import generate_redirects
    from docsite.core.services.versions import discover_versions

    config = load_cli_config(ctx, cutoff)
    core_path = Path(core)

    try:
        found = discover_versions(core_path, config.cutoff)
        result = generate_redirects(core_path, found.retired, found.versions, Path(output))
    except (GitError, OSError) as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.secho(f"✅ Wrote {result.total_rules} redirect rules → {output}", fg="green", bold=True)
    click.echo(f"   Retired:  {result.retired_count}")
    click.echo(f"   Manual:   {result.manual_count}")
    click.echo(f"   Patch:    {result.patch_count}")
    click.echo(f"   Examples: {result.examples_count}")
