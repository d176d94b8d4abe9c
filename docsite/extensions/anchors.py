r"""Assign stable, unique anchor ids to every heading.

Ids are slugs of the heading's visible text. Repeated headings receive
numeric suffixes (``setup``, ``setup-2``) and ids that were already present on
a heading are kept and reserved, so running the processor twice over the same
tree yields the same ids.

Example
-------
>>> from docsite.extensions.anchors import slugify, unique_slug
>>> used: set[str] = set()
>>> [unique_slug(slugify("Set up"), used) for _ in range(2)]
['set-up', 'set-up-2']
"""

from __future__ import annotations

import re
import typing as typ
import unicodedata
import xml.etree.ElementTree as etree

from markdown.treeprocessors import Treeprocessor

from docsite.syntax_tree import NodeKind

from .base import Phase, PipelineExtension, guard, plain_text

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

HEADING_TAGS = frozenset(f"h{level}" for level in range(1, 7))


def slugify(title: str) -> str:
    """Return a lowercase, hyphen-separated, URL-safe slug for ``title``.

    Letters outside ASCII are kept so non-Latin headings still get readable
    ids; headings without any word characters fall back to ``"section"``.
    """
    normalized = unicodedata.normalize("NFKC", title).lower()
    normalized = re.sub(r"['’\"]", "", normalized)
    slug = re.sub(r"[\W_]+", "-", normalized).strip("-")
    return slug or "section"


def unique_slug(base: str, used: set[str]) -> str:
    """Generate a unique slug, appending numeric suffixes when needed."""
    candidate = base
    suffix = 2
    while candidate in used:
        candidate = f"{base}-{suffix}"
        suffix += 1
    used.add(candidate)
    return candidate


def is_permalink(element: Element, permalink_class: str) -> bool:
    """Return True when ``element`` is an anchor carrying ``permalink_class``."""
    wanted = set(permalink_class.split())
    return (
        element.tag == "a"
        and bool(wanted)
        and wanted <= set(element.get("class", "").split())
    )


def is_permalinked(heading: Element, permalink_class: str) -> bool:
    return any(is_permalink(child, permalink_class) for child in heading)


def iter_headings(root: Element) -> typ.Iterator[Element]:
    """Yield heading elements below ``root`` in document order."""
    for element in root.iter():
        if isinstance(element.tag, str) and element.tag in HEADING_TAGS:
            yield element


class HeadingAnchorTreeprocessor(Treeprocessor):
    """Set ``id`` attributes (and optional permalinks) on headings."""

    def __init__(self, md: Markdown, extension: HeadingAnchorExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Assign ids to every heading in ``root``."""
        with guard(self.extension.name, self.extension.phase):
            settings = self.extension.settings
            headings = list(iter_headings(root))
            used = {heading.get("id") for heading in headings if heading.get("id")}
            for heading in headings:
                anchor = heading.get("id")
                if not anchor:
                    anchor = unique_slug(slugify(plain_text(heading, self.md)), used)
                    heading.set("id", anchor)
                if settings.heading_class:
                    self._add_class(heading, settings.heading_class)
                if settings.permalink_symbol and not is_permalinked(
                    heading, settings.permalink_class
                ):
                    link = etree.SubElement(heading, "a")
                    link.set("class", settings.permalink_class)
                    link.set("href", f"#{anchor}")
                    link.set("aria-hidden", "true")
                    link.text = settings.permalink_symbol

    @staticmethod
    def _add_class(element: Element, classes: str) -> None:
        current = element.get("class", "").split()
        for name in classes.split():
            if name not in current:
                current.append(name)
        element.set("class", " ".join(current))


class HeadingAnchorExtension(PipelineExtension):
    """Give every heading a deterministic, collision-free anchor id."""

    name = "heading_anchors"
    phase = Phase.ANCHORS
    node_kinds = (NodeKind.HEADING,)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the heading anchor tree processor."""
        md.treeprocessors.register(
            HeadingAnchorTreeprocessor(md, self), "docsite_heading_anchors", priority
        )


__all__ = [
    "HEADING_TAGS",
    "HeadingAnchorExtension",
    "HeadingAnchorTreeprocessor",
    "is_permalink",
    "iter_headings",
    "slugify",
    "unique_slug",
]
