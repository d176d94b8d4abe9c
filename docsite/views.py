"""Payloads handed from the builder to a view renderer.

Each document gets its own :class:`RenderContext`; nothing is shared between
documents apart from what the builder passes explicitly.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from pathlib import Path

    from .routes import LinkRoute
    from .syntax_tree import SyntaxNode
    from .toc import TocEntry


@dc.dataclass(slots=True)
class ViewPayload:
    """Everything a renderer needs to write one document."""

    title: str
    toc: list[TocEntry]
    relative_path: str
    route: LinkRoute
    link: str
    content: str
    document: SyntaxNode
    front_matter: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class RenderContext:
    """Per-document values shared by the templates of one render call."""

    toc: list[TocEntry]
    page_title: str
    active_route: LinkRoute | None
    file_path: str
    site_title: str
    version: str | None = None


@dc.dataclass(slots=True)
class IndexPayload:
    """Content of the landing page."""

    main: dict[str, typ.Any]
    title: str
    latest_link: str


class ViewRenderer(typ.Protocol):
    """Write rendered views to their destination."""

    def build_view(
        self, view: str, payload: ViewPayload, context: RenderContext
    ) -> Path:
        """Render ``payload`` with the ``view`` template and return the file."""
        ...

    def build_index(self, payload: IndexPayload, context: RenderContext) -> Path:
        """Render the landing page and return the file."""
        ...


__all__ = ["IndexPayload", "RenderContext", "ViewPayload", "ViewRenderer"]
