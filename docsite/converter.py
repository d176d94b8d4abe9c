"""Convert Markdown source into a syntax tree and HTML in one pass.

Examples
--------
>>> from docsite.converter import Converter
>>> from docsite.syntax_tree import NodeKind
>>> document, html = Converter().convert("# Hello")
>>> document.find_all(NodeKind.HEADING)[0].attribute("id")  # doctest: +SKIP
'hello'
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ

from .errors import ConversionError, ExtensionError
from .extensions import ConversionState, build_pipeline
from .syntax_tree import NodeKind, SyntaxNode

if typ.TYPE_CHECKING:
    from .extensions import ExtensionPipeline, PipelineSettings
    from .routes import LinkRoute

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True)
class ConversionResult:
    """Outcome of converting one document.

    Unpacks as ``(document, html)`` for callers that need only those two.
    """

    document: SyntaxNode
    html: str
    front_matter: dict[str, typ.Any] = dc.field(default_factory=dict)

    def __iter__(self) -> typ.Iterator[typ.Any]:
        yield self.document
        yield self.html


class Converter:
    """Run an :class:`ExtensionPipeline` over Markdown documents.

    A converter owns one ``Markdown`` instance, so it must not be shared
    between threads; create one per worker instead.
    """

    def __init__(
        self,
        pipeline: ExtensionPipeline | None = None,
        *,
        settings: PipelineSettings | None = None,
    ) -> None:
        self.pipeline = pipeline or build_pipeline(settings)
        if "syntax_tree" not in self.pipeline.names:
            msg = "The pipeline must include the 'syntax_tree' extension."
            raise ConversionError(msg)
        self._md = self.pipeline.create_markdown()

    def convert(
        self, raw_text: str, *, route: LinkRoute | None = None
    ) -> ConversionResult:
        """Convert ``raw_text`` into a syntax tree and rendered HTML.

        Parameters
        ----------
        raw_text : str
            Markdown source, optionally starting with YAML front matter.
        route : LinkRoute, optional
            Route of the document, used to resolve relative links.

        Returns
        -------
        ConversionResult
            The document root, its HTML, and its front matter.

        Raises
        ------
        ConversionError
            If any extension fails; no partial result is returned.
        """
        md = self._md
        md.reset()
        state = ConversionState(route=route)
        md.conversion_state = state  # type: ignore[attr-defined]
        try:
            html = md.convert(raw_text)
        except ExtensionError as exc:
            raise ConversionError(
                str(exc), extension=exc.extension, phase=exc.phase
            ) from exc
        except Exception as exc:
            msg = f"Markdown conversion failed: {exc}"
            raise ConversionError(msg) from exc
        finally:
            md.reset()

        document = state.tree
        if document is None:
            # Python-Markdown skips every processor for blank input.
            document = SyntaxNode(
                NodeKind.DOCUMENT, data={"front_matter": dict(state.front_matter)}
            )
        logger.debug(
            "Converted %s into %d nodes",
            route or "<document>",
            sum(1 for _ in document.walk()),
        )
        return ConversionResult(document, html, dict(state.front_matter))


__all__ = ["ConversionResult", "Converter"]
