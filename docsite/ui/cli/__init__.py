"""
CLI sub-command groups, registered on the root group in main.py.
"""

from __future__ import annotations

import sys

import click

from docsite.core.models.site import SiteConfig


def load_cli_config(ctx: click.Context, cutoff: int | None = None) -> SiteConfig:
    """Load docsite.yml (or defaults) for a command; exit 1 on a bad config."""
    from docsite.core.config.loader import ConfigError, load_config

    try:
        config = load_config(ctx.obj.get("config_path") if ctx.obj else None)
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if cutoff is not None:
        config = config.model_copy(update={"cutoff": cutoff})
    return config
