"""Derive a document's title and two-level table of contents."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from .errors import ExtractionError
from .syntax_tree import NodeKind, SyntaxNode


@dc.dataclass(slots=True)
class TocEntry:
    """One table-of-contents entry; level-2 entries hold level-3 children."""

    anchor: str
    label: str
    children: list[TocEntry] = dc.field(default_factory=list)


def _require_document(document: SyntaxNode) -> None:
    if document.kind is not NodeKind.DOCUMENT:
        msg = f"Expected a document node, got {document.kind.value!r}."
        raise ExtractionError(msg)


def extract_title(document: SyntaxNode) -> str:
    """Return the document title.

    The front matter ``title`` wins when present and non-blank; otherwise the
    text of the first level-1 heading is used; otherwise the title is empty.
    """
    _require_document(document)
    front_matter = document.data.get("front_matter") or {}
    title = front_matter.get("title")
    if title is not None:
        text = title if isinstance(title, str) else str(title)
        if text.strip():
            return text.strip()
    for heading in document.find_all(NodeKind.HEADING):
        if heading.level == 1:
            return heading.text_content()
    return ""


def _entry(heading: SyntaxNode) -> TocEntry:
    anchor = heading.attribute("id")
    if not anchor:
        msg = f"Heading '{heading.text_content()}' has no anchor id."
        raise ExtractionError(msg)
    return TocEntry(anchor=anchor, label=heading.text_content())


def build_toc(document: SyntaxNode) -> list[TocEntry]:
    """Return level-2 entries with their level-3 children, in document order.

    Level-3 headings that appear before any level-2 heading have nothing to
    attach to and are dropped. Other heading levels are ignored.

    Raises
    ------
    ExtractionError
        If ``document`` is not a document root or a listed heading has no id.
    """
    _require_document(document)
    entries: list[TocEntry] = []
    current: TocEntry | None = None
    for heading in document.find_all(NodeKind.HEADING):
        if heading.level == 2:
            current = _entry(heading)
            entries.append(current)
        elif heading.level == 3 and current is not None:
            current.children.append(_entry(heading))
    return entries


def toc_to_dict(entries: typ.Iterable[TocEntry]) -> list[dict[str, typ.Any]]:
    """Return ``entries`` as plain mappings for templates and JSON output."""
    return [
        {
            "anchor": entry.anchor,
            "label": entry.label,
            "children": toc_to_dict(entry.children),
        }
        for entry in entries
    ]


__all__ = ["TocEntry", "build_toc", "extract_title", "toc_to_dict"]
