"""Custom callout containers such as ``::: warning``.

A container opens with ``:::`` followed by a keyword and an optional title and
closes with a bare ``:::`` line::

    ::: tip Remember
    Containers may hold any Markdown, including other containers.
    :::

The container becomes a ``div.custom-block`` carrying ``data-container`` and
``data-title`` attributes plus a title paragraph. Without an explicit title the
configured default for the keyword is used.
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown.blockprocessors import BlockProcessor

from docsite.syntax_tree import NodeKind

from .base import Phase, PipelineExtension, guard
from .fenced_code import (
    FENCE_OPEN_PATTERN,
    find_fence,
    is_fence_close,
    parse_before,
    restore_blocks,
    source_after,
)

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
    from markdown.blockparser import BlockParser

CONTAINER_CLOSE_PATTERN = re.compile(r"^[ ]{0,3}:::[ \t]*$")


class ContainerSyntaxError(ValueError):
    """Raised when a container is opened but never closed."""


def container_pattern(keywords: typ.Iterable[str]) -> re.Pattern[str]:
    """Return the opening-line pattern recognising ``keywords``."""
    alternatives = "|".join(re.escape(keyword) for keyword in sorted(keywords))
    return re.compile(
        rf"^[ ]{{0,3}}:::[ \t]*(?P<kind>{alternatives})(?![\w-])"
        r"(?:[ \t]+(?P<title>[^\n]*?))?[ \t]*$",
        re.MULTILINE | re.IGNORECASE,
    )


class ContainerProcessor(BlockProcessor):
    """Wrap ``::: <kind>`` blocks in titled container elements."""

    def __init__(self, parser: BlockParser, extension: ContainerExtension) -> None:
        super().__init__(parser)
        self.extension = extension
        self.titles = {
            key.lower(): value
            for key, value in extension.settings.container_titles.items()
        }
        self.pattern = container_pattern(self.titles)

    def test(self, parent: Element, block: str) -> bool:  # noqa: ARG002
        """Return True when ``block`` opens a container before any code fence."""
        if not self.titles:
            return False
        match = self.pattern.search(block)
        if match is None:
            return False
        fence = find_fence(block)
        return fence is None or fence.start() > match.start()

    def run(self, parent: Element, blocks: list[str]) -> None:
        """Consume the container and parse its body as nested Markdown."""
        with guard(self.extension.name, self.extension.phase):
            block = blocks.pop(0)
            match = self.pattern.search(block)
            if match is None:  # pragma: no cover - guarded by test()
                blocks.insert(0, block)
                return
            parse_before(self.parser, parent, block, match.start())
            kind = match.group("kind").lower()
            title = (match.group("title") or "").strip() or self.titles[kind]
            lines = source_after(block, match.end(), blocks)
            closing = self._closing_line(lines)
            if closing is None:
                msg = f"Container '::: {kind}' is never closed with ':::'."
                raise ContainerSyntaxError(msg)

            container = etree.SubElement(parent, "div")
            container.set("class", f"custom-block {kind}")
            container.set("data-container", kind)
            container.set("data-title", title)
            heading = etree.SubElement(container, "p")
            heading.set("class", "custom-block-title")
            heading.text = title
            body = "\n".join(lines[:closing])
            if body.strip():
                self.parser.parseChunk(container, body)
            restore_blocks(lines[closing + 1 :], blocks)

    def _closing_line(self, lines: list[str]) -> int | None:
        """Return the index of the line closing the container, or None."""
        depth = 1
        fence: str | None = None
        for position, line in enumerate(lines):
            if fence is not None:
                if is_fence_close(line, fence):
                    fence = None
                continue
            opened = FENCE_OPEN_PATTERN.match(line)
            if opened is not None:
                fence = opened.group("fence")
            elif self.pattern.match(line):
                depth += 1
            elif CONTAINER_CLOSE_PATTERN.match(line):
                depth -= 1
                if depth == 0:
                    return position
        return None


class ContainerExtension(PipelineExtension):
    """Recognise fenced callout containers (info, tip, warning, danger).

    Register it ahead of :class:`FencedCodeExtension` in the same phase so a
    container wrapping a code fence is claimed by the container first.
    """

    name = "containers"
    phase = Phase.BLOCKS
    node_kinds = (NodeKind.CONTAINER,)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the container block processor."""
        md.parser.blockprocessors.register(
            ContainerProcessor(md.parser, self), "docsite_containers", priority
        )


__all__ = [
    "CONTAINER_CLOSE_PATTERN",
    "ContainerExtension",
    "ContainerProcessor",
    "ContainerSyntaxError",
    "container_pattern",
]
