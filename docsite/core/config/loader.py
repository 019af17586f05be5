"""
Configuration loader — reads docsite.yml into a SiteConfig.

The file is optional. When it is absent every setting takes its
default; when it is present it must be a YAML mapping that validates
against the SiteConfig schema.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from docsite.core.models.site import SiteConfig

logger = logging.getLogger(__name__)

SITE_CONFIG_FILE = "docsite.yml"


class ConfigError(Exception):
    """Raised when the site configuration is unreadable or invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Look for docsite.yml in ``start_dir`` (default: cwd) and its parents.

    Returns:
        Path to the config file, or None if none was found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):
        candidate = current / SITE_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_config(path: Path | None = None) -> SiteConfig:
    """Load and validate the site configuration.

    Args:
        path: Explicit config path. If None, searches upward from cwd
            and falls back to defaults when nothing is found.

    Raises:
        ConfigError: If an explicit path is missing, or the file is
            not valid YAML, or it fails validation.
    """
    explicit = path is not None
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found, using defaults", SITE_CONFIG_FILE)
        return SiteConfig()

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return SiteConfig()

    logger.debug("Loading site config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # Settings may sit at the top level or under a "site" key
    site_data = data.get("site", data) if isinstance(data.get("site"), dict) else data

    try:
        config = SiteConfig.model_validate(site_data)
    except Exception as e:
        raise ConfigError(f"Invalid site configuration: {e}") from e

    if config.site_root is None:
        config = config.model_copy(update={"site_root": str(path.parent.resolve())})

    logger.info("Loaded site config from %s (cutoff=%d)", path, config.cutoff)
    return config
