r"""Typed syntax tree produced by the Markdown conversion pipeline.

Every node carries a :class:`NodeKind` tag, an ordered list of children, and a
``data`` mapping for auxiliary values (heading ids under ``attributes``, front
matter on the document root, code block languages). Queries filter on the tag
rather than on Python types.

Example
-------
>>> from docsite.syntax_tree import NodeKind, SyntaxNode
>>> root = SyntaxNode(NodeKind.DOCUMENT)
>>> heading = root.append_child(SyntaxNode(NodeKind.HEADING, level=1))
>>> _ = heading.append_child(SyntaxNode(NodeKind.TEXT, literal="Intro"))
>>> [node.text_content() for node in root.find_all(NodeKind.HEADING)]
['Intro']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import typing as typ


class NodeKind(enum.StrEnum):
    """Discriminator for :class:`SyntaxNode`."""

    DOCUMENT = "document"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE_BLOCK = "code_block"
    CONTAINER = "container"
    LINK = "link"
    IMAGE = "image"
    TEXT = "text"
    CODE = "code"
    EMPHASIS = "emphasis"
    STRONG = "strong"
    LIST = "list"
    LIST_ITEM = "list_item"
    BLOCK_QUOTE = "block_quote"
    TABLE = "table"
    THEMATIC_BREAK = "thematic_break"
    LINE_BREAK = "line_break"
    HTML_BLOCK = "html_block"
    HTML_INLINE = "html_inline"
    PERMALINK = "permalink"
    ELEMENT = "element"


TEXT_KINDS = frozenset({NodeKind.TEXT, NodeKind.CODE})
"""Leaf kinds whose literals make up the plain text of a node."""

OPAQUE_KINDS = frozenset({NodeKind.PERMALINK, NodeKind.HTML_BLOCK, NodeKind.HTML_INLINE})
"""Kinds whose subtrees never contribute to plain text."""


@dc.dataclass(slots=True, eq=True)
class SyntaxNode:
    """A node in the document syntax tree.

    Attributes
    ----------
    kind : NodeKind
        Tag identifying what the node represents.
    children : list[SyntaxNode]
        Child nodes in document order; use :meth:`append_child` to add them.
    data : dict[str, Any]
        Auxiliary values such as ``attributes`` or ``front_matter``.
    level : int or None
        Heading level from 1 to 6; ``None`` for every other kind.
    literal : str or None
        Literal text of text, code, and raw HTML nodes.
    """

    kind: NodeKind
    children: list[SyntaxNode] = dc.field(default_factory=list)
    data: dict[str, typ.Any] = dc.field(default_factory=dict)
    level: int | None = None
    literal: str | None = None
    parent: SyntaxNode | None = dc.field(
        default=None, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if self.kind is NodeKind.HEADING:
            if self.level is None or not 1 <= self.level <= 6:
                msg = f"Heading level must be between 1 and 6, got {self.level!r}."
                raise ValueError(msg)
        elif self.level is not None:
            msg = f"Only heading nodes carry a level, not {self.kind.value!r}."
            raise ValueError(msg)
        pending = list(self.children)
        self.children = []
        for child in pending:
            self.append_child(child)

    def append_child(self, child: SyntaxNode) -> SyntaxNode:
        """Attach ``child`` as the last child and return it.

        Raises
        ------
        ValueError
            If ``child`` already has a parent or is this node or one of its
            ancestors, which would break the strict tree shape.
        """
        if child.parent is not None:
            msg = f"{child.kind.value!r} node already belongs to another parent."
            raise ValueError(msg)
        ancestor: SyntaxNode | None = self
        while ancestor is not None:
            if ancestor is child:
                msg = "A node cannot be attached beneath itself."
                raise ValueError(msg)
            ancestor = ancestor.parent
        child.parent = self
        self.children.append(child)
        return child

    def walk(self) -> cabc.Iterator[SyntaxNode]:
        """Yield this node and every descendant in pre-order."""
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, *kinds: NodeKind) -> list[SyntaxNode]:
        """Return descendants (and self) matching any of ``kinds`` in pre-order."""
        wanted = frozenset(kinds)
        return [node for node in self.walk() if node.kind in wanted]

    def text_content(self) -> str:
        """Return the concatenated text and inline-code literals below this node.

        Permalink anchors and raw HTML are skipped so labels never pick up
        markup or decoration.
        """
        parts: list[str] = []
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            if node.kind in OPAQUE_KINDS:
                continue
            if node.kind in TEXT_KINDS:
                parts.append(node.literal or "")
                continue
            stack.extend(reversed(node.children))
        return "".join(parts).strip()

    def attribute(self, name: str, default: str | None = None) -> str | None:
        """Return the HTML attribute ``name`` recorded on this node."""
        attributes = self.data.get("attributes") or {}
        return attributes.get(name, default)


__all__ = ["OPAQUE_KINDS", "TEXT_KINDS", "NodeKind", "SyntaxNode"]
