"""Rewrite relative document and image references into canonical site links."""

from __future__ import annotations

import posixpath
import typing as typ
from urllib.parse import urlsplit

from markdown.treeprocessors import Treeprocessor

from docsite._constants import MARKDOWN_SUFFIX
from docsite.routes import asset_link, build_link, route_from_relative
from docsite.syntax_tree import NodeKind

from .anchors import iter_headings, slugify
from .base import Phase, PipelineExtension, conversion_state, guard

if typ.TYPE_CHECKING:
    from urllib.parse import SplitResult
    from xml.etree.ElementTree import Element

    from markdown import Markdown

    from .base import PipelineSettings

_EXTERNAL_PREFIXES = ("mailto:", "tel:", "data:", "javascript:")


def split_relative(target: str | None) -> SplitResult | None:
    """Return the parsed ``target`` when it is a relative, path-bearing reference.

    Absolute URLs, scheme-relative (``//host``) and site-rooted (``/x``)
    references, and fragment-only links return ``None``.
    """
    if not target:
        return None
    lower = target.lower()
    if target.startswith(("#", "//")) or "://" in target:
        return None
    if lower.startswith(_EXTERNAL_PREFIXES):
        return None
    parsed = urlsplit(target)
    if parsed.scheme or parsed.netloc or not parsed.path:
        return None
    if parsed.path.startswith("/"):
        return None
    return parsed


def resolve_relative(base_dir: str, path: str) -> str | None:
    """Join ``path`` onto ``base_dir``, clamping references above the root.

    Returns ``None`` when the result names the docs root itself.
    """
    joined = posixpath.normpath(posixpath.join(base_dir, path))
    while joined.startswith("../"):
        joined = joined[3:]
    if joined in (".", "..", ""):
        return None
    return joined


def _with_suffix(url: str, parsed: SplitResult) -> str:
    if parsed.query:
        url = f"{url}?{parsed.query}"
    if parsed.fragment:
        url = f"{url}#{parsed.fragment}"
    return url


def _base_dir(md: Markdown) -> str:
    route = conversion_state(md).route
    return "/".join(route.directory) if route is not None else ""


class InternalLinkTreeprocessor(Treeprocessor):
    """Point links to sibling Markdown files at their canonical site routes."""

    def __init__(self, md: Markdown, extension: InternalLinkExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Rewrite every eligible ``a[href]`` below ``root``."""
        with guard(self.extension.name, self.extension.phase):
            base_dir = _base_dir(self.md)
            anchors = {
                heading.get("id", "") for heading in iter_headings(root)
            } - {""}
            for element in root.iter("a"):
                href = element.get("href")
                rewritten = self.rewrite(href, base_dir)
                if rewritten is None and href and href.startswith("#"):
                    rewritten = self._rewrite_fragment(href[1:], anchors)
                if rewritten is not None:
                    element.set("href", rewritten)

    def rewrite(self, target: str | None, base_dir: str) -> str | None:
        """Return the site link for a relative Markdown ``target``, or None."""
        parsed = split_relative(target)
        if parsed is None:
            return None
        if not parsed.path.lower().endswith(MARKDOWN_SUFFIX):
            return None
        joined = resolve_relative(base_dir, parsed.path)
        if joined is None:
            return None
        settings: PipelineSettings = self.extension.settings
        link = build_link(
            route_from_relative(joined),
            base_url=settings.base_url,
            version=settings.version,
            index_name=settings.index_name,
        )
        return _with_suffix(link, parsed)

    @staticmethod
    def _rewrite_fragment(fragment: str, anchors: set[str]) -> str | None:
        # `[see](#Set Up)` style links written against the heading text.
        if not fragment or fragment in anchors:
            return None
        slug = slugify(fragment)
        return f"#{slug}" if slug in anchors else None


class InternalLinkExtension(PipelineExtension):
    """Rewrite relative ``.md`` links using the route and link-building rules."""

    name = "internal_links"
    phase = Phase.LINKS
    requires = ("heading_anchors",)
    node_kinds = (NodeKind.LINK,)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the internal link tree processor."""
        md.treeprocessors.register(
            InternalLinkTreeprocessor(md, self), "docsite_internal_links", priority
        )


class ImagePathTreeprocessor(Treeprocessor):
    """Resolve relative image sources against the document's directory."""

    def __init__(self, md: Markdown, extension: ImagePathExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Rewrite every relative ``img[src]`` below ``root``."""
        with guard(self.extension.name, self.extension.phase):
            base_dir = _base_dir(self.md)
            settings = self.extension.settings
            for element in root.iter("img"):
                parsed = split_relative(element.get("src"))
                if parsed is None:
                    continue
                joined = resolve_relative(base_dir, parsed.path)
                if joined is None:
                    continue
                link = asset_link(
                    joined, base_url=settings.base_url, version=settings.version
                )
                element.set("src", _with_suffix(link, parsed))


class ImagePathExtension(PipelineExtension):
    """Make relative image paths site-rooted."""

    name = "image_paths"
    phase = Phase.LINKS
    node_kinds = (NodeKind.IMAGE,)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the image path tree processor."""
        md.treeprocessors.register(
            ImagePathTreeprocessor(md, self), "docsite_image_paths", priority
        )


__all__ = [
    "ImagePathExtension",
    "ImagePathTreeprocessor",
    "InternalLinkExtension",
    "InternalLinkTreeprocessor",
    "resolve_relative",
    "split_relative",
]
