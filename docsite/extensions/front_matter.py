"""Parse a leading YAML front matter block off the Markdown source."""

from __future__ import annotations

import io
import typing as typ

from markdown.preprocessors import Preprocessor
from ruamel.yaml import YAML

from .base import Phase, PipelineExtension, conversion_state, guard

if typ.TYPE_CHECKING:
    from markdown import Markdown

FRONT_MATTER_OPEN = "---"
FRONT_MATTER_CLOSE = ("---", "...")


class FrontMatterSyntaxError(ValueError):
    """Raised when a front matter block is not valid YAML or not a mapping."""


def split_front_matter(lines: list[str]) -> tuple[str | None, list[str]]:
    """Split ``lines`` into the raw front matter text and the remaining body.

    Returns ``(None, lines)`` when the document does not open with ``---`` or
    the opening line is never closed; the body then keeps the line, which
    Markdown reads as a thematic break.
    """
    if not lines or lines[0].lstrip("\ufeff").rstrip() != FRONT_MATTER_OPEN:
        return None, lines
    for index in range(1, len(lines)):
        if lines[index].rstrip() in FRONT_MATTER_CLOSE:
            return "\n".join(lines[1:index]), lines[index + 1 :]
    return None, lines


def load_front_matter(text: str) -> dict[str, typ.Any]:
    """Parse front matter YAML into a mapping; empty blocks yield ``{}``."""
    loader = YAML(typ="safe")
    loader.version = (1, 2)
    loaded = loader.load(io.StringIO(text))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        msg = f"Front matter must be a mapping, got {type(loaded).__name__}."
        raise FrontMatterSyntaxError(msg)
    return dict(loaded)


class FrontMatterPreprocessor(Preprocessor):
    """Strip the front matter block and store it on the conversion state."""

    def __init__(self, md: Markdown, extension: FrontMatterExtension) -> None:
        super().__init__(md)
        self.extension = extension

    def run(self, lines: list[str]) -> list[str]:
        """Return ``lines`` without the front matter block."""
        with guard(self.extension.name, self.extension.phase):
            raw, body = split_front_matter(lines)
            state = conversion_state(self.md)
            state.front_matter = load_front_matter(raw) if raw is not None else {}
            return body


class FrontMatterExtension(PipelineExtension):
    """Expose a leading ``---`` YAML block as the document's front matter."""

    name = "front_matter"
    phase = Phase.FRONT_MATTER

    def install(self, md: Markdown, priority: float) -> None:
        """Register the front matter preprocessor."""
        md.preprocessors.register(
            FrontMatterPreprocessor(md, self), "docsite_front_matter", priority
        )


__all__ = [
    "FrontMatterExtension",
    "FrontMatterPreprocessor",
    "FrontMatterSyntaxError",
    "load_front_matter",
    "split_front_matter",
]
