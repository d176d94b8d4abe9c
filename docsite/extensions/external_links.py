"""Presentation attributes for links that leave the site.

External links open in a new window, carry ``rel="noopener noreferrer"`` and
the ``external-link`` class. Their ``href`` is never modified.
"""

from __future__ import annotations

import typing as typ
from urllib.parse import urlsplit

from markdown.treeprocessors import Treeprocessor

from docsite.syntax_tree import NodeKind

from .base import Phase, PipelineExtension, guard

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from .base import ExternalLinkSettings


def is_external(href: str | None, internal_hosts: typ.Iterable[str] = ()) -> bool:
    """Return True when ``href`` points at a host outside ``internal_hosts``."""
    if not href or not href.lower().startswith(("http://", "https://", "//")):
        return False
    host = (urlsplit(href).hostname or "").lower()
    if not host:
        return False
    return host not in {name.lower() for name in internal_hosts}


def _merge_tokens(current: str | None, extra: typ.Iterable[str]) -> str:
    tokens = (current or "").split()
    for token in extra:
        if token and token not in tokens:
            tokens.append(token)
    return " ".join(tokens)


class ExternalLinkTreeprocessor(Treeprocessor):
    """Decorate external ``a`` elements with target, rel and class."""

    def __init__(self, md: Markdown, extension: ExternalLinkExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Update every external link below ``root``."""
        with guard(self.extension.name, self.extension.phase):
            options: ExternalLinkSettings = self.extension.settings.external_links
            for element in root.iter("a"):
                if not is_external(element.get("href"), options.internal_hosts):
                    continue
                if options.open_in_new_window:
                    element.set("target", "_blank")
                if options.rel:
                    element.set("rel", _merge_tokens(element.get("rel"), options.rel))
                if options.html_class:
                    element.set(
                        "class",
                        _merge_tokens(element.get("class"), options.html_class.split()),
                    )


class ExternalLinkExtension(PipelineExtension):
    """Mark links to other hosts as external."""

    name = "external_links"
    phase = Phase.PRESENTATION
    node_kinds = (NodeKind.LINK,)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the external link tree processor."""
        md.treeprocessors.register(
            ExternalLinkTreeprocessor(md, self), "docsite_external_links", priority
        )


__all__ = ["ExternalLinkExtension", "ExternalLinkTreeprocessor", "is_external"]
