"""
Site configuration model — loaded from docsite.yml.

Every field has a default, so a missing config file is a valid
configuration. Paths stay as strings here; the build context resolves
them against the site root or the working directory.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_BUILD_COMMAND = ["node", "node_modules/.bin/astro", "build"]
DEFAULT_EXAMPLES_URL = "https://github.com/defenseunicorns/pepr-excellent-examples/tree/main"


class SiteConfig(BaseModel):
    """Build settings for one documentation site."""

    version: int = 1

    cutoff: int = Field(default=2, ge=1)
    site_root: str | None = None
    work_dir: str = "tmp"
    dist_dir: str = "dist"

    build_command: list[str] = Field(default_factory=lambda: list(DEFAULT_BUILD_COMMAND))
    build_output: str = "dist"

    examples_repo_url: str = DEFAULT_EXAMPLES_URL
    workers: int | None = Field(default=None, ge=1)
