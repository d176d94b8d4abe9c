"""Write documentation views to disk with Jinja templates.

>>> from pathlib import Path
>>> from docsite.renderer import JinjaViewRenderer
>>> renderer = JinjaViewRenderer(Path("site"))  # doctest: +SKIP
>>> renderer.build_view("single", payload, context)  # doctest: +SKIP
PosixPath('site/guide/intro/index.html')
"""

from __future__ import annotations

import datetime as dt
import logging
import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ._constants import DEFAULT_INDEX_NAME, INDEX_OUTPUT_NAME, INDEX_VIEW
from .extensions.highlight import highlight_stylesheet
from .routes import output_path_for
from .toc import toc_to_dict

if typ.TYPE_CHECKING:
    from .views import IndexPayload, RenderContext, ViewPayload

logger = logging.getLogger(__name__)


class JinjaViewRenderer:
    """Render view payloads into themed HTML files."""

    def __init__(
        self,
        output_dir: Path,
        *,
        templates_dir: Path | None = None,
        pygments_style: str = "monokai",
        index_name: str = DEFAULT_INDEX_NAME,
    ) -> None:
        """Initialize the renderer.

        Parameters
        ----------
        output_dir : Path
            Root folder of the generated site.
        templates_dir : Path, optional
            Directory containing Jinja templates; defaults to the package templates.
        pygments_style : str, optional
            Pygments style whose CSS is embedded in every page.
        index_name : str, optional
            Base name of documents that represent their directory.
        """
        self.output_dir = output_dir
        self.templates_dir = templates_dir or Path(__file__).parent / "templates"
        self.index_name = index_name
        self.pygments_style = pygments_style
        self._stylesheet = highlight_stylesheet(pygments_style)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html", "xml", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    @property
    def stylesheet(self) -> str:
        """Return the CSS used for highlighted code blocks."""
        return self._stylesheet

    def build_view(
        self, view: str, payload: ViewPayload, context: RenderContext
    ) -> Path:
        """Render ``payload`` with ``<view>.jinja`` and write it below the site root."""
        relative = output_path_for(
            payload.route, version=context.version, index_name=self.index_name
        )
        template = self.env.get_template(f"{view}.jinja")
        html = template.render(
            **self._shared_context(context),
            page=payload,
            content=payload.content,
            front_matter=payload.front_matter,
        )
        return self._write(self.output_dir / relative, html)

    def build_index(self, payload: IndexPayload, context: RenderContext) -> Path:
        """Render the landing page to ``index.html`` at the site root."""
        template = self.env.get_template(f"{INDEX_VIEW}.jinja")
        html = template.render(
            **self._shared_context(context),
            main=payload.main,
            latest_link=payload.latest_link,
            index_title=payload.title,
        )
        return self._write(self.output_dir / INDEX_OUTPUT_NAME, html)

    def _shared_context(self, context: RenderContext) -> dict[str, typ.Any]:
        return {
            "site_title": context.site_title,
            "page_title": context.page_title,
            "toc": toc_to_dict(context.toc),
            "active_route": str(context.active_route or ""),
            "file_path": context.file_path,
            "version": context.version,
            "pygments_css": self.stylesheet,
            "generated_at": dt.datetime.now(dt.UTC),
        }

    @staticmethod
    def _write(path: Path, html: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        logger.debug("Wrote %s", path)
        return path


__all__ = ["JinjaViewRenderer"]
