"""Capture the finished element tree as a :class:`~docsite.syntax_tree.SyntaxNode`.

The capture runs after anchors, links and presentation attributes are in
place, so the syntax tree sees final heading ids and hrefs. Escaped characters
and stashed entities are resolved back into text; other stashed raw HTML is
kept verbatim as ``html_block`` or ``html_inline`` nodes.
"""

from __future__ import annotations

import html
import typing as typ

from markdown import util
from markdown.treeprocessors import Treeprocessor

from docsite.syntax_tree import NodeKind, SyntaxNode

from .anchors import HEADING_TAGS, is_permalink
from .base import (
    ENTITY_PATTERN,
    Phase,
    PipelineExtension,
    conversion_state,
    guard,
    resolve_text,
    stashed_html,
)
from .highlight import code_language

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

SIMPLE_KINDS: dict[str, NodeKind] = {
    "p": NodeKind.PARAGRAPH,
    "em": NodeKind.EMPHASIS,
    "strong": NodeKind.STRONG,
    "ul": NodeKind.LIST,
    "ol": NodeKind.LIST,
    "li": NodeKind.LIST_ITEM,
    "blockquote": NodeKind.BLOCK_QUOTE,
    "table": NodeKind.TABLE,
    "hr": NodeKind.THEMATIC_BREAK,
    "br": NodeKind.LINE_BREAK,
}
BLOCK_KINDS = frozenset(
    {
        NodeKind.DOCUMENT,
        NodeKind.CONTAINER,
        NodeKind.LIST,
        NodeKind.LIST_ITEM,
        NodeKind.BLOCK_QUOTE,
        NodeKind.TABLE,
    }
)
CONTAINER_TITLE_CLASS = "custom-block-title"


class TreeBuilder:
    """Translate a Python-Markdown element tree into syntax nodes."""

    def __init__(
        self, md: Markdown, *, permalink_class: str = "heading-permalink"
    ) -> None:
        self.md = md
        self.permalink_class = permalink_class

    def build(self, root: Element, front_matter: dict[str, typ.Any]) -> SyntaxNode:
        """Return the document node for the children of ``root``."""
        document = SyntaxNode(NodeKind.DOCUMENT, data={"front_matter": front_matter})
        self._fill(document, root)
        return document

    def _fill(self, node: SyntaxNode, element: Element) -> None:
        self._append_text(node, element.text)
        for child in element:
            if not self._is_container_title(node, child):
                node.append_child(self._convert(child))
            self._append_text(node, child.tail)

    def _convert(self, element: Element) -> SyntaxNode:
        tag = element.tag if isinstance(element.tag, str) else ""
        attributes = dict(element.attrib)
        if tag in HEADING_TAGS:
            node = SyntaxNode(
                NodeKind.HEADING, level=int(tag[1]), data={"attributes": attributes}
            )
        elif tag == "p" and self._sole_placeholder(element) is not None:
            return SyntaxNode(
                NodeKind.HTML_BLOCK, literal=self._sole_placeholder(element)
            )
        elif tag == "pre" and element.find("code") is not None:
            return self._code_block(element, attributes)
        elif tag == "div" and "data-container" in attributes:
            node = SyntaxNode(
                NodeKind.CONTAINER,
                data={
                    "container_type": attributes["data-container"],
                    "title": attributes.get("data-title", ""),
                    "attributes": attributes,
                },
            )
        elif tag == "a":
            kind = (
                NodeKind.PERMALINK
                if is_permalink(element, self.permalink_class)
                else NodeKind.LINK
            )
            node = SyntaxNode(
                kind,
                data={
                    "href": attributes.get("href", ""),
                    "title": attributes.get("title"),
                    "attributes": attributes,
                },
            )
        elif tag == "img":
            return SyntaxNode(
                NodeKind.IMAGE,
                data={
                    "src": attributes.get("src", ""),
                    "alt": attributes.get("alt", ""),
                    "title": attributes.get("title"),
                    "attributes": attributes,
                },
            )
        elif tag == "code":
            return SyntaxNode(
                NodeKind.CODE, literal=html.unescape(element.text or "")
            )
        elif tag in SIMPLE_KINDS:
            data: dict[str, typ.Any] = {"attributes": attributes} if attributes else {}
            if tag in {"ul", "ol"}:
                data["ordered"] = tag == "ol"
            node = SyntaxNode(SIMPLE_KINDS[tag], data=data)
        else:
            node = SyntaxNode(
                NodeKind.ELEMENT, data={"tag": tag, "attributes": attributes}
            )
        self._fill(node, element)
        return node

    def _code_block(self, pre: Element, attributes: dict[str, str]) -> SyntaxNode:
        code = pre.find("code")
        text = html.unescape(code.text or "") if code is not None else ""
        language = pre.get("data-language") or (
            code_language(code) if code is not None else None
        )
        return SyntaxNode(
            NodeKind.CODE_BLOCK,
            literal=text.rstrip("\n"),
            data={"language": language, "attributes": attributes},
        )

    def _append_text(self, node: SyntaxNode, text: str | None) -> None:
        if not text:
            return
        if node.kind in BLOCK_KINDS and not text.strip():
            return
        pending = ""
        position = 0
        for match in util.HTML_PLACEHOLDER_RE.finditer(text):
            pending += resolve_text(text[position : match.start()], self.md)
            position = match.end()
            raw = stashed_html(self.md, int(match.group(1)))
            if raw is None:
                continue
            if ENTITY_PATTERN.match(raw):
                pending += html.unescape(raw)
                continue
            if pending:
                node.append_child(SyntaxNode(NodeKind.TEXT, literal=pending))
                pending = ""
            node.append_child(SyntaxNode(NodeKind.HTML_INLINE, literal=raw))
        pending += resolve_text(text[position:], self.md)
        if pending:
            node.append_child(SyntaxNode(NodeKind.TEXT, literal=pending))

    def _sole_placeholder(self, element: Element) -> str | None:
        if len(element) or not element.text:
            return None
        match = util.HTML_PLACEHOLDER_RE.fullmatch(element.text.strip())
        if match is None:
            return None
        raw = stashed_html(self.md, int(match.group(1)))
        if raw is None or ENTITY_PATTERN.match(raw):
            return None
        return raw

    @staticmethod
    def _is_container_title(node: SyntaxNode, child: Element) -> bool:
        return (
            node.kind is NodeKind.CONTAINER
            and child.tag == "p"
            and CONTAINER_TITLE_CLASS in child.get("class", "").split()
        )


class SyntaxTreeTreeprocessor(Treeprocessor):
    """Store the captured syntax tree on the conversion state."""

    def __init__(self, md: Markdown, extension: SyntaxTreeExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Capture ``root`` into ``conversion_state(md).tree``."""
        with guard(self.extension.name, self.extension.phase):
            state = conversion_state(self.md)
            builder = TreeBuilder(
                self.md, permalink_class=self.extension.settings.permalink_class
            )
            state.tree = builder.build(root, state.front_matter)


class SyntaxTreeExtension(PipelineExtension):
    """Expose the converted document as a typed syntax tree."""

    name = "syntax_tree"
    phase = Phase.CAPTURE
    requires = ("front_matter", "heading_anchors")
    node_kinds = tuple(NodeKind)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the capture tree processor."""
        md.treeprocessors.register(
            SyntaxTreeTreeprocessor(md, self), "docsite_syntax_tree", priority
        )


__all__ = [
    "SyntaxTreeExtension",
    "SyntaxTreeTreeprocessor",
    "TreeBuilder",
]
