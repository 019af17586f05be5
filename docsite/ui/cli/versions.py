"""
CLI commands for version discovery.

Thin wrappers over ``docsite.core.services.versions``.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from docsite.ui.cli import load_cli_config


@click.group()
def versions() -> None:
    """Versions — which core releases get documentation."""


@versions.command("discover")
@click.option("--core", required=True, type=click.Path(exists=True, file_okay=False), help="Core repo clone.")
@click.option("--cutoff", type=click.IntRange(min=1), default=None, help="Minor lines to keep.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def discover(ctx: click.Context, core: str, cutoff: int | None, as_json: bool) -> None:
    """List active and retired versions from the core repo's tags."""
    from docsite.adapters.vcs.git import GitError
    from docsite.core.services.navigation import get_starlight_versions
    from docsite.core.services.versions import discover_versions, find_current_version

    config = load_cli_config(ctx, cutoff)

    try:
        found = discover_versions(Path(core), config.cutoff)
    except GitError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    current = find_current_version(found.versions)

    if as_json:
        payload = {**found.to_dict(), "current": current, "starlight": get_starlight_versions(found.versions)}
        click.echo(json.dumps(payload, indent=2))
        return

    click.secho(f"🏷️  Active versions ({len(found.versions)}):", fg="cyan", bold=True)
    for version in found.versions:
        marker = " ← current" if version == current else ""
        click.echo(f"   • {version}{marker}")

    if found.retired:
        click.secho(f"\n🗄️  Retired ({len(found.retired)}):", fg="yellow", bold=True)
        for mm in found.retired:
            click.echo(f"   • {mm}")
    click.echo()


@versions.command("current")
@click.option("--core", required=True, type=click.Path(exists=True, file_okay=False), help="Core repo clone.")
@click.option("--cutoff", type=click.IntRange(min=1), default=None, help="Minor lines to keep.")
@click.pass_context
def current(ctx: click.Context, core: str, cutoff: int | None) -> None:
    """Print the newest stable version (exit 1 when there is none)."""
    from docsite.adapters.vcs.git import GitError
    from docsite.core.services.versions import discover_versions, find_current_version

    config = load_cli_config(ctx, cutoff)

    try:
        found = discover_versions(Path(core), config.cutoff)
    except GitError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    version = find_current_version(found.versions)
    if version is None:
        click.secho("No stable version found.", fg="yellow", err=True)
        sys.exit(1)
    click.echo(version)
