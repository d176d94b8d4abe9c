"""Utility helpers shared by the docsite configuration loader."""

from __future__ import annotations

import typing as typ
from pathlib import Path

from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .models import (
    ExternalLinksConfig,
    HeadingsConfig,
    HighlightConfig,
    MarkdownConfig,
    SiteConfigError,
)


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _string_list(value: object | None, *, key: str) -> list[str]:
    """Normalize a string or list of strings into a list of non-empty strings."""
    match value:
        case None:
            return []
        case str() as text:
            return [segment for segment in text.split() if segment]
        case list() | tuple():
            return [text for item in value if (text := str(item).strip())]
        case _:
            msg = f"'{key}' must be a string or a list of strings."
            raise SiteConfigError(msg)


def _mapping(value: object | None, *, key: str) -> typ.Mapping[str, typ.Any]:
    """Return ``value`` as a mapping, treating None as empty."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        msg = f"'{key}' must be a mapping."
        raise SiteConfigError(msg)
    return value


def _bool(value: object, *, key: str) -> bool:
    if not isinstance(value, bool):
        msg = f"'{key}' must be true or false."
        raise SiteConfigError(msg)
    return value


def _positive_int(value: object, *, key: str) -> int:
    """Return ``value`` as an int of at least 1."""
    if isinstance(value, bool):
        msg = f"'{key}' must be a positive integer."
        raise SiteConfigError(msg)
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError) as exc:
        msg = f"'{key}' must be a positive integer, got {value!r}."
        raise SiteConfigError(msg) from exc
    if number < 1:
        msg = f"'{key}' must be a positive integer, got {number}."
        raise SiteConfigError(msg)
    return number


def _resolve_path(value: object | None, base_dir: Path) -> Path | None:
    """Resolve ``value`` against ``base_dir`` unless it is already absolute."""
    text = _optional_str(value)
    if text is None:
        return None
    path = Path(text).expanduser()
    return path if path.is_absolute() else base_dir / path


def _normalize_base_url(value: object | None) -> str:
    """Return ``value`` as a base URL that starts and ends with ``/``."""
    text = _optional_str(value) or "/"
    if "://" in text:
        return text.rstrip("/") + "/"
    return "/" + text.strip("/") + "/" if text.strip("/") else "/"


def _pygments_style(value: object | None, default: str) -> str:
    """Return the named Pygments style after checking that Pygments knows it."""
    name = _optional_str(value) or default
    try:
        get_style_by_name(name)
    except ClassNotFound as exc:
        msg = f"'pygments_style' names no Pygments style: '{name}'."
        raise SiteConfigError(msg) from exc
    return name


def _build_markdown_config(payload: typ.Mapping[str, typ.Any]) -> MarkdownConfig:
    """Build the Markdown pipeline options from the ``markdown`` mapping."""
    base = MarkdownConfig()

    containers = _mapping(payload.get("containers"), key="markdown.containers")
    titles = _mapping(
        containers.get("default_titles"), key="markdown.containers.default_titles"
    )
    container_titles = dict(base.container_titles)
    for key, title in titles.items():
        kind = str(key).lower()
        if kind not in container_titles:
            known = ", ".join(sorted(container_titles))
            msg = f"Unknown container '{kind}'. Known containers: {known}"
            raise SiteConfigError(msg)
        container_titles[kind] = str(title)

    links = _mapping(payload.get("external_links"), key="markdown.external_links")
    link_base = ExternalLinksConfig()
    external_links = ExternalLinksConfig(
        open_in_new_window=_bool(
            links.get("open_in_new_window", link_base.open_in_new_window),
            key="markdown.external_links.open_in_new_window",
        ),
        html_class=str(links.get("html_class", link_base.html_class) or ""),
        rel=_string_list(
            links.get("rel", link_base.rel), key="markdown.external_links.rel"
        ),
        internal_hosts=_string_list(
            links.get("internal_hosts"), key="markdown.external_links.internal_hosts"
        ),
    )

    headings_raw = _mapping(payload.get("headings"), key="markdown.headings")
    heading_base = HeadingsConfig()
    headings = HeadingsConfig(
        permalink_symbol=_optional_str(
            headings_raw.get("permalink_symbol", heading_base.permalink_symbol)
        ),
        heading_class=" ".join(
            _string_list(
                headings_raw.get("heading_class"), key="markdown.headings.heading_class"
            )
        ),
        permalink_class=_optional_str(headings_raw.get("permalink_class"))
        or heading_base.permalink_class,
    )

    highlight_raw = _mapping(payload.get("highlight"), key="markdown.highlight")
    highlight_base = HighlightConfig()
    highlight = HighlightConfig(
        enabled=_bool(
            highlight_raw.get("enabled", highlight_base.enabled),
            key="markdown.highlight.enabled",
        ),
        default_language=_optional_str(highlight_raw.get("default_language"))
        or highlight_base.default_language,
    )

    return MarkdownConfig(
        container_titles=container_titles,
        external_links=external_links,
        headings=headings,
        highlight=highlight,
    )


__all__ = [
    "_build_markdown_config",
    "_mapping",
    "_normalize_base_url",
    "_optional_str",
    "_positive_int",
    "_pygments_style",
    "_resolve_path",
    "_string_list",
]
