"""
Domain models — Pydantic types for the build configuration.

    from docsite.core.models import SiteConfig
"""

from docsite.core.models.site import SiteConfig

__all__ = [
    "SiteConfig",
]
