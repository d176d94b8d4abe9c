"""Typed dataclasses describing docsite configuration structures."""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from pathlib import Path
from urllib.parse import urlsplit

from docsite._constants import DEFAULT_CONTAINER_TITLES, DEFAULT_INDEX_NAME
from docsite.errors import ConfigurationError
from docsite.extensions.base import ExternalLinkSettings, PipelineSettings

SiteConfigError = ConfigurationError


@dc.dataclass(slots=True)
class ExternalLinksConfig:
    """Presentation of links that leave the site."""

    open_in_new_window: bool = True
    html_class: str = "external-link"
    rel: list[str] = dc.field(default_factory=lambda: ["noopener", "noreferrer"])
    internal_hosts: list[str] = dc.field(default_factory=list)


@dc.dataclass(slots=True)
class HeadingsConfig:
    """Heading decoration options."""

    permalink_symbol: str | None = "#"
    heading_class: str = ""
    permalink_class: str = "heading-permalink"


@dc.dataclass(slots=True)
class HighlightConfig:
    """Code highlighting options."""

    enabled: bool = True
    default_language: str = "text"


@dc.dataclass(slots=True)
class MarkdownConfig:
    """Options forwarded to the Markdown extension pipeline."""

    container_titles: dict[str, str] = dc.field(
        default_factory=lambda: dict(DEFAULT_CONTAINER_TITLES)
    )
    external_links: ExternalLinksConfig = dc.field(default_factory=ExternalLinksConfig)
    headings: HeadingsConfig = dc.field(default_factory=HeadingsConfig)
    highlight: HighlightConfig = dc.field(default_factory=HighlightConfig)


@dc.dataclass(slots=True)
class SiteConfig:
    """A fully resolved site definition sourced from YAML config.

    Attributes
    ----------
    title : str
        Site title shown in every page header.
    docs_path : Path or None
        Folder holding the Markdown sources; required before a build starts.
    output_dir : Path
        Folder the rendered site is written to.
    exclude : list[str]
        Substring or glob patterns removing documents from discovery.
    base_url : str
        Prefix for every generated link.
    site_url : str or None
        Public URL of the site; its host counts as internal.
    latest_version : str or None
        Version segment placed after ``base_url`` in links and output paths.
    index_name : str
        Base name of documents that represent their directory.
    workers : int
        Number of documents converted concurrently.
    pygments_style : str
        Pygments style used for highlighted code.
    main : dict or None
        Landing page content; no landing page is built without it.
    markdown : MarkdownConfig
        Extension pipeline options.
    """

    title: str = "Documentation"
    docs_path: Path | None = None
    output_dir: Path = Path("site")
    exclude: list[str] = dc.field(default_factory=list)
    base_url: str = "/"
    site_url: str | None = None
    latest_version: str | None = None
    index_name: str = DEFAULT_INDEX_NAME
    workers: int = 1
    pygments_style: str = "monokai"
    main: dict[str, typ.Any] | None = None
    markdown: MarkdownConfig = dc.field(default_factory=MarkdownConfig)

    def internal_hosts(self) -> tuple[str, ...]:
        """Return the hosts treated as part of the site."""
        hosts = [host.lower() for host in self.markdown.external_links.internal_hosts]
        if self.site_url:
            site_host = urlsplit(self.site_url).hostname
            if site_host and site_host.lower() not in hosts:
                hosts.append(site_host.lower())
        return tuple(hosts)

    def pipeline_settings(self) -> PipelineSettings:
        """Return the :class:`PipelineSettings` matching this configuration."""
        links = self.markdown.external_links
        return PipelineSettings(
            base_url=self.base_url,
            version=self.latest_version,
            index_name=self.index_name,
            container_titles=dict(self.markdown.container_titles),
            external_links=ExternalLinkSettings(
                open_in_new_window=links.open_in_new_window,
                html_class=links.html_class,
                rel=tuple(links.rel),
                internal_hosts=self.internal_hosts(),
            ),
            permalink_symbol=self.markdown.headings.permalink_symbol,
            heading_class=self.markdown.headings.heading_class,
            permalink_class=self.markdown.headings.permalink_class,
            highlight=self.markdown.highlight.enabled,
            default_language=self.markdown.highlight.default_language,
            pygments_style=self.pygments_style,
        )


__all__ = [
    "ExternalLinksConfig",
    "HeadingsConfig",
    "HighlightConfig",
    "MarkdownConfig",
    "SiteConfig",
    "SiteConfigError",
]
