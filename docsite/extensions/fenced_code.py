"""Fenced code blocks parsed as real ``pre > code`` elements.

Python-Markdown's bundled ``fenced_code`` extension stashes finished HTML in a
preprocessor, which hides code blocks from tree processors. This block
processor keeps them in the element tree so later phases can tag languages and
the syntax tree capture sees every code block.
"""

from __future__ import annotations

import re
import typing as typ
import xml.etree.ElementTree as etree

from markdown import util
from markdown.blockprocessors import BlockProcessor
from markdown.preprocessors import Preprocessor

from docsite.syntax_tree import NodeKind

from .base import Phase, PipelineExtension, guard, stashed_html

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
    from markdown.blockparser import BlockParser

FENCE_OPEN_PATTERN = re.compile(
    r"^(?P<indent>[ ]{0,3})(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>[^\n]*?)[ \t]*$",
    re.MULTILINE,
)
NESTED_FENCE_PATTERN = re.compile(
    r"^(?P<indent>[ ]{4,})(?P<fence>`{3,}|~{3,})(?P<info>.*)$"
)
NESTED_FENCE_PRIORITY = 25


def find_fence(block: str) -> re.Match[str] | None:
    """Return the first opening fence in ``block``.

    Backtick fences whose info string holds a backtick are inline code spans,
    not fences.
    """
    for match in FENCE_OPEN_PATTERN.finditer(block):
        if match.group("fence").startswith("`") and "`" in match.group("info"):
            continue
        return match
    return None


def fence_language(info: str) -> str | None:
    """Return the language named by a fence info string.

    Labels such as ``rust,no_run`` or ``python title="x"`` keep only the
    leading language token.
    """
    token = info.strip().split(maxsplit=1)[0] if info.strip() else ""
    token = token.split(",", 1)[0].strip("{}.")
    return token or None


def is_fence_close(line: str, fence: str) -> bool:
    """Return True when ``line`` closes a block opened with ``fence``."""
    stripped = line.strip()
    if len(line) - len(line.lstrip(" ")) > 3 or not stripped:
        return False
    return set(stripped) == {fence[0]} and len(stripped) >= len(fence)


def source_after(block: str, offset: int, blocks: list[str]) -> list[str]:
    """Return the lines following ``offset`` in ``block`` and every later block.

    The remaining blocks are consumed. Python-Markdown split the document on
    blank lines, so re-joining with ``"\\n\\n"`` restores the original text.
    """
    source = block[offset:] + "".join(f"\n\n{later}" for later in blocks)
    del blocks[:]
    if source.startswith("\n"):
        source = source[1:]
    return source.split("\n")


def restore_blocks(lines: list[str], blocks: list[str]) -> None:
    """Push ``lines`` back onto the parser's block list."""
    rest = "\n".join(lines).lstrip("\n")
    if rest.strip():
        blocks[:0] = rest.split("\n\n")


def parse_before(parser: BlockParser, parent: Element, block: str, start: int) -> None:
    """Parse the text of ``block`` that precedes ``start`` as ordinary blocks."""
    before = block[:start].rstrip("\n")
    if before.strip():
        parser.parseBlocks(parent, [before])


class FencedCodeProcessor(BlockProcessor):
    """Turn ```` ``` ```` and ``~~~`` fences into ``pre > code`` elements."""

    def __init__(self, parser: BlockParser, extension: FencedCodeExtension) -> None:
        super().__init__(parser)
        self.extension = extension

    def test(self, parent: Element, block: str) -> bool:  # noqa: ARG002
        """Return True when ``block`` contains an opening fence line."""
        return find_fence(block) is not None

    def run(self, parent: Element, blocks: list[str]) -> None:
        """Consume the fenced block, including blank lines inside it."""
        with guard(self.extension.name, self.extension.phase):
            block = blocks.pop(0)
            match = find_fence(block)
            if match is None:  # pragma: no cover - guarded by test()
                blocks.insert(0, block)
                return
            parse_before(self.parser, parent, block, match.start())
            fence = match.group("fence")
            indent = len(match.group("indent"))
            lines = source_after(block, match.end(), blocks)
            body: list[str] = []
            rest: list[str] = []
            for position, line in enumerate(lines):
                if is_fence_close(line, fence):
                    rest = lines[position + 1 :]
                    break
                body.append(_dedent(line, indent))
            else:
                # Unclosed: the fence runs to the end of the document.
                while body and not body[-1].strip():
                    body.pop()
            self._emit(parent, "\n".join(body), fence_language(match.group("info")))
            restore_blocks(rest, blocks)

    def _emit(self, parent: Element, code_text: str, language: str | None) -> None:
        # Raw HTML lines were stashed before block parsing; put them back.
        code_text = util.HTML_PLACEHOLDER_RE.sub(self._unstash, code_text)
        pre = etree.SubElement(parent, "pre")
        code = etree.SubElement(pre, "code")
        if language:
            code.set("class", f"language-{language}")
        code.text = util.AtomicString(f"{util.code_escape(code_text)}\n")

    def _unstash(self, match: re.Match[str]) -> str:
        return stashed_html(self.parser.md, int(match.group(1))) or ""


class NestedFencePreprocessor(Preprocessor):
    """Keep blank lines inside indented fences from splitting list items.

    Python-Markdown re-splits an indented list continuation on blank lines
    before the fence processor sees it, so a fence inside a list item would
    lose every line after its first blank one. Blank lines inside such a
    fence are filled with the fence indentation; detabbing the list item
    turns them back into empty lines.
    """

    def __init__(self, md: Markdown, extension: FencedCodeExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, lines: list[str]) -> list[str]:
        """Return ``lines`` with blank lines inside indented fences filled."""
        with guard(self.extension.name, self.extension.phase):
            output: list[str] = []
            fence: str | None = None
            indent = ""
            for line in lines:
                if fence is None:
                    match = NESTED_FENCE_PATTERN.match(line)
                    if match and not (
                        match.group("fence").startswith("`")
                        and "`" in match.group("info")
                    ):
                        fence, indent = match.group("fence"), match.group("indent")
                elif not line.strip():
                    line = indent  # noqa: PLW2901
                elif not line.startswith(indent) or is_fence_close(
                    line[len(indent) :], fence
                ):
                    fence = None
                output.append(line)
            return output


def _dedent(line: str, width: int) -> str:
    """Remove up to ``width`` leading spaces, matching the fence indentation."""
    if not width:
        return line
    leading = len(line) - len(line.lstrip(" "))
    return line[min(leading, width) :]


class FencedCodeExtension(PipelineExtension):
    """Parse fenced code blocks, keeping their language labels."""

    name = "fenced_code"
    phase = Phase.BLOCKS
    node_kinds = (NodeKind.CODE_BLOCK,)

    def install(self, md: Markdown, priority: float) -> None:
        """Register the fenced code block processor."""
        md.preprocessors.register(
            NestedFencePreprocessor(md, self),
            "docsite_nested_fences",
            NESTED_FENCE_PRIORITY,
        )
        md.parser.blockprocessors.register(
            FencedCodeProcessor(md.parser, self), "docsite_fenced_code", priority
        )


__all__ = [
    "FENCE_OPEN_PATTERN",
    "NESTED_FENCE_PATTERN",
    "FencedCodeExtension",
    "FencedCodeProcessor",
    "NestedFencePreprocessor",
    "fence_language",
    "find_fence",
    "is_fence_close",
    "parse_before",
    "restore_blocks",
    "source_after",
]
