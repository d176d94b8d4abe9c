"""Load site configuration YAML into typed dataclasses."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from docsite._constants import DEFAULT_INDEX_NAME

from .helpers import (
    _build_markdown_config,
    _mapping,
    _normalize_base_url,
    _optional_str,
    _positive_int,
    _pygments_style,
    _resolve_path,
    _string_list,
)
from .models import SiteConfig, SiteConfigError


def load_site_config(path: Path) -> SiteConfig:
    """Load the YAML configuration describing the documentation site.

    Parameters
    ----------
    path : Path
        Filesystem path to the YAML configuration file (for example,
        ``docsite.yaml``). Relative ``docs_path`` and ``output_dir`` values
        resolve against the file's directory.

    Returns
    -------
    SiteConfig
        Parsed site configuration with defaults applied.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist at ``path``.
    TypeError
        If the top-level YAML structure is not a mapping.
    ConfigurationError
        If a field holds an invalid value (for example, ``workers: 0``).
    YAMLError
        If the YAML content cannot be parsed by the underlying loader.

    Examples
    --------
    >>> from pathlib import Path
    >>> from docsite.config import load_site_config
    >>> config = load_site_config(Path("docsite.yaml"))  # doctest: +SKIP
    >>> config.docs_path.name  # doctest: +SKIP
    'docs'
    """
    if not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise TypeError(msg)
    return build_site_config(dict(loaded), base_dir=path.parent)


def build_site_config(
    raw: typ.Mapping[str, typ.Any], *, base_dir: Path | None = None
) -> SiteConfig:
    """Build a :class:`SiteConfig` from an already parsed mapping."""
    base_dir = base_dir or Path.cwd()
    defaults = SiteConfig()

    main = raw.get("main")
    if main is not None and not isinstance(main, dict):
        msg = "'main' must be a mapping."
        raise SiteConfigError(msg)

    index_name = _optional_str(raw.get("index_name")) or DEFAULT_INDEX_NAME
    if "/" in index_name or "." in index_name:
        msg = f"'index_name' must be a bare file stem, got '{index_name}'."
        raise SiteConfigError(msg)

    return SiteConfig(
        title=_optional_str(raw.get("title")) or defaults.title,
        docs_path=_resolve_path(raw.get("docs_path"), base_dir),
        output_dir=_resolve_path(raw.get("output_dir"), base_dir)
        or base_dir / defaults.output_dir,
        exclude=_string_list(raw.get("exclude"), key="exclude"),
        base_url=_normalize_base_url(raw.get("base_url")),
        site_url=_optional_str(raw.get("site_url")),
        latest_version=_optional_str(raw.get("latest_version")),
        index_name=index_name,
        workers=_positive_int(raw.get("workers", defaults.workers), key="workers"),
        pygments_style=_pygments_style(
            raw.get("pygments_style"), defaults.pygments_style
        ),
        main=dict(main) if main is not None else None,
        markdown=_build_markdown_config(_mapping(raw.get("markdown"), key="markdown")),
    )


__all__ = ["build_site_config", "load_site_config"]
