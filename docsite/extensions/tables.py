"""Wrap tables in a scrollable ``div.table-wrapper`` element."""

from __future__ import annotations

import typing as typ
import xml.etree.ElementTree as etree

from markdown.treeprocessors import Treeprocessor

from docsite.syntax_tree import NodeKind

from .base import Phase, PipelineExtension, guard

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown

TABLE_WRAPPER_CLASS = "table-wrapper"


def is_table_wrapper(element: Element) -> bool:
    """Return True when ``element`` already wraps a table."""
    return element.tag == "div" and TABLE_WRAPPER_CLASS in element.get(
        "class", ""
    ).split()


class TableWrapperTreeprocessor(Treeprocessor):
    """Move every unwrapped ``table`` into a wrapper ``div``."""

    def __init__(self, md: Markdown, extension: TableWrapperExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Wrap the tables below ``root``."""
        with guard(self.extension.name, self.extension.phase):
            tables = [
                (parent, child)
                for parent in root.iter()
                for child in parent
                if child.tag == "table" and not is_table_wrapper(parent)
            ]
            for parent, table in tables:
                wrapper = etree.Element("div", {"class": TABLE_WRAPPER_CLASS})
                parent.insert(list(parent).index(table), wrapper)
                parent.remove(table)
                wrapper.append(table)
                wrapper.tail, table.tail = table.tail, None


class TableWrapperExtension(PipelineExtension):
    """Give wide tables a wrapper so themes can scroll them horizontally."""

    name = "table_wrapper"
    phase = Phase.PRESENTATION
    node_kinds = (NodeKind.TABLE,)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the table wrapper tree processor."""
        md.treeprocessors.register(
            TableWrapperTreeprocessor(md, self), "docsite_table_wrapper", priority
        )


__all__ = [
    "TABLE_WRAPPER_CLASS",
    "TableWrapperExtension",
    "TableWrapperTreeprocessor",
    "is_table_wrapper",
]
