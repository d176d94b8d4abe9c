"""Build a documentation site from a folder of Markdown files.

The :class:`DocsBuilder` discovers documents, converts each one, extracts its
title and table of contents, derives its route and hands a
:class:`~docsite.views.ViewPayload` to the renderer. A failing document is
recorded as an :class:`ErrorRecord` and never stops the batch.

>>> from docsite.builder import DocsBuilder
>>> builder = DocsBuilder(config, renderer)  # doctest: +SKIP
>>> builder.start()  # doctest: +SKIP
True
>>> [record.source for record in builder.errors]  # doctest: +SKIP
['broken.md']
"""

from __future__ import annotations

import concurrent.futures as cf
import dataclasses as dc
import enum
import logging
import threading
import typing as typ

from ._constants import SINGLE_VIEW
from .converter import Converter
from .discovery import DocumentSource, discover_documents
from .errors import ConfigurationError, DiscoveryError, DocsiteError
from .progress import NullProgress
from .routes import LinkRoute, build_link, canonicalize
from .toc import build_toc, extract_title
from .views import IndexPayload, RenderContext, ViewPayload

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .config import SiteConfig
    from .progress import ProgressReporter
    from .views import ViewRenderer

logger = logging.getLogger(__name__)

INDEX_SOURCE = "index"


class BuildState(enum.Enum):
    """Lifecycle of a batch run."""

    IDLE = "idle"
    DISCOVERING = "discovering"
    PROCESSING = "processing"
    INDEXING = "indexing"
    DONE = "done"
    FAILED = "failed"


@dc.dataclass(frozen=True, slots=True)
class ErrorRecord:
    """A failure tied to one document or to a batch-level step such as the index."""

    source: str
    error: BaseException

    @property
    def kind(self) -> str:
        """Return the exception class name."""
        return type(self.error).__name__

    @property
    def message(self) -> str:
        """Return the exception message, or its repr when empty."""
        return str(self.error) or repr(self.error)


class DocsBuilder:
    """Convert and render every document of a site."""

    def __init__(
        self,
        config: SiteConfig,
        renderer: ViewRenderer,
        *,
        progress: ProgressReporter | None = None,
        converter_factory: cabc.Callable[[], Converter] | None = None,
        discover: cabc.Callable[
            [Path, cabc.Sequence[str]], list[DocumentSource]
        ] = discover_documents,
    ) -> None:
        """Initialize the builder.

        Parameters
        ----------
        config : SiteConfig
            Resolved site configuration.
        renderer : ViewRenderer
            Destination of every rendered view and of the landing page.
        progress : ProgressReporter, optional
            Receives progress notifications; silent when omitted.
        converter_factory : Callable[[], Converter], optional
            Creates one converter per worker thread. Defaults to a converter
            built from ``config.pipeline_settings()``.
        discover : Callable, optional
            Document discovery function, replaceable in tests.
        """
        self.config = config
        self.renderer = renderer
        self.progress = progress or NullProgress()
        self.converter_factory = converter_factory or self._default_converter
        self.discover = discover
        self.fatal_error: DocsiteError | None = None
        self._state = BuildState.IDLE
        self._errors: list[ErrorRecord] = []
        self._rendered: list[LinkRoute] = []
        self._lock = threading.Lock()
        self._local = threading.local()
        self._cancelled = threading.Event()

    @property
    def state(self) -> BuildState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def errors(self) -> list[ErrorRecord]:
        """Return the errors recorded so far."""
        with self._lock:
            return list(self._errors)

    @property
    def rendered(self) -> list[LinkRoute]:
        """Return the routes successfully handed to the renderer."""
        with self._lock:
            return list(self._rendered)

    def cancel(self) -> None:
        """Stop scheduling new documents; documents in flight still finish."""
        self._cancelled.set()

    def start(self) -> bool:
        """Run the whole batch.

        Returns
        -------
        bool
            ``True`` when documents were processed, even if some failed;
            ``False`` when discovery failed.

        Raises
        ------
        ConfigurationError
            If ``docs_path`` is not configured or the Markdown pipeline
            cannot be built from the configuration.
        """
        if self.config.docs_path is None:
            msg = "'docs_path' must be configured before building."
            raise ConfigurationError(msg)
        try:
            self._converter()
        except Exception as exc:
            msg = f"Cannot build the Markdown pipeline: {exc}"
            raise ConfigurationError(msg) from exc

        self._state = BuildState.DISCOVERING
        try:
            sources = self.discover(self.config.docs_path, self.config.exclude)
        except DiscoveryError as exc:
            logger.error("Discovery failed: %s", exc)  # noqa: TRY400
            self.fatal_error = exc
            self._state = BuildState.FAILED
            return False

        self._state = BuildState.PROCESSING
        self.progress.start(len(sources), "Building docs")
        try:
            if self.config.workers > 1:
                self._run_parallel(sources)
            else:
                self._run_serial(sources)
        finally:
            self.progress.finish()

        self._state = BuildState.INDEXING
        self.create_index()
        self._state = BuildState.DONE
        self.progress.report_errors(self.errors)
        logger.info(
            "Rendered %d documents with %d errors",
            len(self._rendered),
            len(self._errors),
        )
        return True

    def _run_serial(self, sources: cabc.Sequence[DocumentSource]) -> None:
        for source in sources:
            if self._cancelled.is_set():
                logger.info("Build cancelled; skipping remaining documents")
                break
            self.process_document(source)
            self.progress.advance()

    def _run_parallel(self, sources: cabc.Sequence[DocumentSource]) -> None:
        workers = self.config.workers
        pending = iter(sources)
        in_flight: set[cf.Future[ViewPayload | ErrorRecord]] = set()
        with cf.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="docsite"
        ) as executor:
            while True:
                while len(in_flight) < workers and not self._cancelled.is_set():
                    source = next(pending, None)
                    if source is None:
                        break
                    in_flight.add(executor.submit(self.process_document, source))
                if not in_flight:
                    break
                done, in_flight = cf.wait(in_flight, return_when=cf.FIRST_COMPLETED)
                for future in done:
                    future.result()
                    self.progress.advance()

    def process_document(self, source: DocumentSource) -> ViewPayload | ErrorRecord:
        """Convert, extract, route, and render one document; never raises."""
        relative_path = source.name
        try:
            root = self.config.docs_path
            if root is None:
                msg = "'docs_path' must be configured before building."
                raise ConfigurationError(msg)
            route = canonicalize(source.path, root.absolute(), source.name)
            relative_path = "/".join((*route.directory, source.name))
            text = source.path.read_text(encoding="utf-8")
            result = self._converter().convert(text, route=route)
            title = extract_title(result.document)
            toc = build_toc(result.document)
        except Exception as exc:  # noqa: BLE001 - one document never stops the batch
            return self._record(relative_path, exc)

        settings = self.config
        payload = ViewPayload(
            title=title,
            toc=toc,
            relative_path=relative_path,
            route=route,
            link=build_link(
                route,
                base_url=settings.base_url,
                version=settings.latest_version,
                index_name=settings.index_name,
            ),
            content=result.html,
            document=result.document,
            front_matter=result.front_matter,
        )
        context = RenderContext(
            toc=list(toc),
            page_title=title,
            active_route=route,
            file_path=relative_path,
            site_title=settings.title,
            version=settings.latest_version,
        )
        try:
            self.renderer.build_view(SINGLE_VIEW, payload, context)
        except Exception as exc:  # noqa: BLE001 - renderers are pluggable
            return self._record(relative_path, exc)
        with self._lock:
            self._rendered.append(route)
        logger.debug("Rendered %s as %s", relative_path, payload.link)
        return payload

    def create_index(self) -> bool:
        """Render the landing page from the ``main`` configuration.

        Returns ``False`` without raising when ``main`` is absent or the
        renderer fails; a renderer failure is recorded under ``"index"``.
        """
        main = self.config.main
        if not main:
            logger.info("No 'main' configuration; skipping the landing page")
            return False
        settings = self.config
        title = settings.title
        latest_link = build_link(
            LinkRoute((settings.index_name,)),
            base_url=settings.base_url,
            version=settings.latest_version,
            index_name=settings.index_name,
        )
        if settings.latest_version is None and any(
            route.segments == (settings.index_name,) for route in self.rendered
        ):
            logger.warning("The landing page replaces the root document's page")
        payload = IndexPayload(main=dict(main), title=title, latest_link=latest_link)
        context = RenderContext(
            toc=[],
            page_title=title,
            active_route=None,
            file_path="",
            site_title=settings.title,
            version=settings.latest_version,
        )
        try:
            self.renderer.build_index(payload, context)
        except Exception as exc:  # noqa: BLE001 - renderers are pluggable
            self._record(INDEX_SOURCE, exc)
            return False
        return True

    def _record(self, source: str, error: BaseException) -> ErrorRecord:
        record = ErrorRecord(source=source, error=error)
        with self._lock:
            self._errors.append(record)
        logger.warning("Failed to build %s: %s", source, record.message)
        return record

    def _converter(self) -> Converter:
        converter = getattr(self._local, "converter", None)
        if converter is None:
            converter = self.converter_factory()
            self._local.converter = converter
        return converter

    def _default_converter(self) -> Converter:
        return Converter(settings=self.config.pipeline_settings())


__all__ = ["BuildState", "DocsBuilder", "ErrorRecord"]
