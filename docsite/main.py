"""
Docsite Builder — CLI entrypoint.

Usage:
    python -m docsite.main --help
    python -m docsite.main build --core ../pepr --site ./site --examples ../examples
    python -m docsite.main versions discover --core ../pepr
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from docsite import __version__
from docsite.core.observability.logging_config import LEVEL_NAMES, resolve_level, setup_logging

_STATUS_STYLE = {
    "done": ("✓", "green"),
    "error": ("✗", "red"),
}


@click.group()
@click.version_option(version=__version__, prog_name="docsite")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--log-level",
    type=click.Choice(LEVEL_NAMES, case_sensitive=False),
    envvar="DOCSITE_LOG_LEVEL",
    default=None,
    help="Console log level when no -v/-q/--debug flag is given.",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="DOCSITE_LOG_FILE",
    default=None,
    help="Also write a DEBUG-level log to this file.",
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to docsite.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    log_level: str | None,
    log_file: Path | None,
    config_path: str | None,
) -> None:
    """Docsite Builder — build the versioned documentation site."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(resolve_level(debug, verbose, quiet, log_level), log_file)


@cli.command()
@click.option("--core", "core", required=True, type=click.Path(), help="Path to the core project clone.")
@click.option("--site", "site", required=True, type=click.Path(), help="Path to the docs site source.")
@click.option("--examples", "examples", required=True, type=click.Path(), help="Path to the examples clone.")
@click.option("--no-dist", is_flag=True, help="Do not build the /dist output.")
@click.option("--cutoff", type=click.IntRange(min=1), default=None, help="Minor lines to keep (default: config).")
@click.option("--site-root", type=click.Path(), default=None, help="Site generator project root.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output the build report as JSON.")
@click.pass_context
def build(
    ctx: click.Context,
    core: str,
    site: str,
    examples: str,
    no_dist: bool,
    cutoff: int | None,
    site_root: str | None,
    as_json: bool,
) -> None:
    """Build versioned site content from the core and examples repos."""
    from docsite.core.engine.stages import BuildAborted, StageResult
    from docsite.core.services.site_build import build_site
    from docsite.ui.cli import load_cli_config

    config = load_cli_config(ctx, cutoff)
    if site_root:
        config = config.model_copy(update={"site_root": str(Path(site_root).resolve())})

    quiet = ctx.obj.get("quiet", False) or as_json
    verbose = ctx.obj.get("verbose", False)
    current = {"version": None}

    def _progress(sr: StageResult) -> None:
        if quiet:
            return
        if sr.version != current["version"]:
            current["version"] = sr.version
            if sr.version:
                click.secho(f"\n📦 {sr.version}", fg="cyan", bold=True)
        icon, color = _STATUS_STYLE.get(sr.status, ("•", "white"))
        indent = "     " if sr.version else "   "
        click.secho(f"{indent}{icon} {sr.label}", fg=color, nl=False)
        click.echo(f"  ({sr.duration_ms}ms)")
        if verbose:
            for kind, message in sr.log:
                click.echo(f"{indent}    {kind}: {message}")

    if not quiet:
        click.secho("🔨 Building documentation site...", fg="cyan", bold=True)

    try:
        report = build_site(
            Path(core),
            Path(site),
            Path(examples),
            config=config,
            dist=not no_dist,
            on_progress=_progress,
        )
    except BuildAborted as e:
        click.echo("", err=True)
        click.secho(f"❌ {e.stage}: {e.error}", fg="red", err=True)
        click.echo("", err=True)
        click.echo("State dump:", err=True)
        click.echo(json.dumps(e.state, indent=2), err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if not quiet:
        click.echo()
        click.secho(f"✅ Build complete in {report.total_duration_ms}ms", fg="green", bold=True)
        click.echo(f"   Versions: {', '.join(report.versions)}")
        if report.retired:
            click.echo(f"   Retired:  {', '.join(report.retired)}")
        if report.current_version:
            click.echo(f"   Current:  {report.current_version}")
        if report.redirects:
            click.echo(f"   Redirects: {report.redirects.get('total_rules', 0)} rules")
        if report.dist:
            click.echo(f"   📁 {report.dist}")
        click.echo()


# ── Sub-command groups ──────────────────────────────────────────────

from docsite.ui.cli.versions import versions
from docsite.ui.cli.redirects import redirects
from docsite.ui.cli.content import content

cli.add_command(versions)
cli.add_command(redirects)
cli.add_command(content)


if __name__ == "__main__":
    cli()
