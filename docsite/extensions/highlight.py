"""Language tagging and Pygments syntax highlighting for code blocks."""

from __future__ import annotations

import html
import typing as typ
import xml.etree.ElementTree as etree

from markdown.treeprocessors import Treeprocessor
from pygments import highlight
from pygments.formatters.html import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from docsite.syntax_tree import NodeKind

from .base import Phase, PipelineExtension, guard

if typ.TYPE_CHECKING:
    from xml.etree.ElementTree import Element

    from markdown import Markdown
    from pygments.lexer import Lexer

    from .base import PipelineSettings

LANGUAGE_CLASS_PREFIX = "language-"
HIGHLIGHT_CLASS = "codehilite"


def code_language(code: Element) -> str | None:
    """Return the language named by a ``language-*`` class on ``code``."""
    for name in code.get("class", "").split():
        if name.startswith(LANGUAGE_CLASS_PREFIX) and len(name) > len(
            LANGUAGE_CLASS_PREFIX
        ):
            return name[len(LANGUAGE_CLASS_PREFIX) :]
    return None


def iter_code_blocks(root: Element) -> typ.Iterator[tuple[Element, Element]]:
    """Yield ``(pre, code)`` pairs for every code block below ``root``."""
    for pre in root.iter("pre"):
        code = pre.find("code")
        if code is not None:
            yield pre, code


def lexer_for(language: str) -> Lexer:
    """Return the Pygments lexer for ``language``; unknown names read as text."""
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return get_lexer_by_name("text")


class LanguageTagTreeprocessor(Treeprocessor):
    """Give every code block a language class and ``data-language``."""

    def __init__(self, md: Markdown, extension: HighlightExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Tag every ``pre > code`` below ``root``."""
        with guard(self.extension.name, Phase.PRESENTATION):
            default = self.extension.settings.default_language or "text"
            for pre, code in iter_code_blocks(root):
                language = code_language(code) or default
                classes = code.get("class", "").split()
                wanted = f"{LANGUAGE_CLASS_PREFIX}{language}"
                if wanted not in classes:
                    classes.append(wanted)
                code.set("class", " ".join(classes))
                pre.set("data-language", language)


class HighlightTreeprocessor(Treeprocessor):
    """Rebuild tagged code blocks as ``div.codehilite > pre`` elements.

    The wrapper stays in the element tree; only the Pygments token spans
    inside the new ``pre`` travel through the HTML stash.
    """

    def __init__(self, md: Markdown, extension: HighlightExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, root: Element) -> None:
        """Highlight every code block below ``root``."""
        with guard(self.extension.name, Phase.RENDER):
            for pre, code in list(iter_code_blocks(root)):
                language = pre.get("data-language") or code_language(code) or "text"
                source = html.unescape(code.text or "")
                spans = highlight(source, lexer_for(language), self.extension.formatter)
                tail = pre.tail
                pre.clear()
                pre.tag = "div"
                pre.set("class", HIGHLIGHT_CLASS)
                pre.set("data-language", language)
                block = etree.SubElement(pre, "pre")
                block.text = self.md.htmlStash.store(spans)
                pre.tail = tail


class HighlightExtension(PipelineExtension):
    """Tag code block languages and, when enabled, highlight them with Pygments.

    Tagging runs in the presentation phase so the captured syntax tree carries
    the language; the Pygments markup replaces the block only afterwards. The
    formatter is built up front, so an unknown ``pygments_style`` fails when
    the pipeline is created rather than halfway through a document.
    """

    name = "highlight"
    phase = Phase.PRESENTATION
    node_kinds = (NodeKind.CODE_BLOCK,)

    def __init__(self, settings: PipelineSettings | None = None) -> None:
        super().__init__(settings)
        self.formatter = HtmlFormatter(style=self.settings.pygments_style, nowrap=True)

    @property
    def stylesheet(self) -> str:
        """Return the Pygments CSS matching the rendered blocks."""
        return self.formatter.get_style_defs(f".{HIGHLIGHT_CLASS}")

    def install(self, md: Markdown, priority: float) -> None:
        """Register the tagging processor and, if enabled, the highlighter."""
        md.treeprocessors.register(
            LanguageTagTreeprocessor(md, self), "docsite_language_tags", priority
        )
        if self.settings.highlight:
            offset = priority - self.phase.priority()
            md.treeprocessors.register(
                HighlightTreeprocessor(md, self),
                "docsite_highlight",
                Phase.RENDER.priority() + offset,
            )


def highlight_stylesheet(pygments_style: str) -> str:
    """Return the CSS for blocks highlighted with ``pygments_style``."""
    return HtmlFormatter(style=pygments_style).get_style_defs(f".{HIGHLIGHT_CLASS}")


__all__ = [
    "HIGHLIGHT_CLASS",
    "HighlightExtension",
    "HighlightTreeprocessor",
    "LanguageTagTreeprocessor",
    "code_language",
    "highlight_stylesheet",
    "iter_code_blocks",
    "lexer_for",
]
