"""Load and validate site configuration YAML for docsite builds.

This subpackage parses the project's ``docsite.yaml`` file, applies defaults,
resolves paths against the file's directory, and produces strongly typed
dataclasses (:class:`SiteConfig`, :class:`MarkdownConfig`, etc.) that the
builder consumes. The primary entry point is :func:`load_site_config`.

Examples
--------
>>> from pathlib import Path
>>> from docsite.config import load_site_config
>>> site = load_site_config(Path("docsite.yaml"))  # doctest: +SKIP
>>> site.pipeline_settings().base_url  # doctest: +SKIP
'/'
"""

from .loader import build_site_config, load_site_config
from .models import (
    ExternalLinksConfig,
    HeadingsConfig,
    HighlightConfig,
    MarkdownConfig,
    SiteConfig,
    SiteConfigError,
)

__all__ = [
    "ExternalLinksConfig",
    "HeadingsConfig",
    "HighlightConfig",
    "MarkdownConfig",
    "SiteConfig",
    "SiteConfigError",
    "build_site_config",
    "load_site_config",
]
