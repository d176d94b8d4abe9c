"""Tests for the batch documentation builder."""

from __future__ import annotations

import dataclasses as dc
import threading
import typing as typ
from pathlib import Path

import pytest

from docsite.builder import BuildState, DocsBuilder, ErrorRecord
from docsite.config import SiteConfig
from docsite.converter import ConversionResult, Converter
from docsite.errors import ConfigurationError, ConversionError, DiscoveryError
from docsite.extensions import PipelineSettings
from docsite.routes import LinkRoute
from docsite.views import IndexPayload, RenderContext, ViewPayload


@dc.dataclass
class RecordingRenderer:
    """Collect payloads instead of writing files."""

    views: list[tuple[str, ViewPayload, RenderContext]] = dc.field(default_factory=list)
    indexes: list[tuple[IndexPayload, RenderContext]] = dc.field(default_factory=list)
    fail_on: set[str] = dc.field(default_factory=set)
    fail_index: bool = False
    lock: threading.Lock = dc.field(default_factory=threading.Lock)

    def build_view(
        self, view: str, payload: ViewPayload, context: RenderContext
    ) -> Path:
        if payload.relative_path in self.fail_on:
            msg = f"cannot render {payload.relative_path}"
            raise RuntimeError(msg)
        with self.lock:
            self.views.append((view, payload, context))
        return Path(payload.relative_path)

    def build_index(self, payload: IndexPayload, context: RenderContext) -> Path:
        if self.fail_index:
            msg = "index template missing"
            raise OSError(msg)
        self.indexes.append((payload, context))
        return Path("index.html")

    def by_path(self) -> dict[str, tuple[ViewPayload, RenderContext]]:
        return {payload.relative_path: (payload, context) for _, payload, context in self.views}


@dc.dataclass
class RecordingProgress:
    events: list[tuple[str, object]] = dc.field(default_factory=list)

    def start(self, total: int, label: str) -> None:
        self.events.append(("start", total))

    def advance(self) -> None:
        self.events.append(("advance", None))

    def finish(self) -> None:
        self.events.append(("finish", None))

    def report_errors(self, errors: typ.Sequence[ErrorRecord]) -> None:
        self.events.append(("errors", len(errors)))


DOCS: dict[str, str] = {
    "index.md": "# Home\n\n## Welcome\n\nSee the [guide](guide/intro.md).\n",
    "guide/intro.md": (
        "---\ntitle: Getting started\n---\n# Intro\n\n## Install\n\n### Pip\n\n## Use\n"
    ),
    "guide/broken.md": "# Broken\n\n::: warning\nnever closed\n",
    "reference/api.md": "## Functions\n\n### build\n",
}


@pytest.fixture
def docs_path(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    for relative, text in DOCS.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root


def _config(docs_path: Path | None, **overrides: typ.Any) -> SiteConfig:
    config = SiteConfig(docs_path=docs_path, title="Example", **overrides)
    config.markdown.highlight.enabled = False
    return config


def test_batch_continues_past_failing_document(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    progress = RecordingProgress()
    builder = DocsBuilder(_config(docs_path), renderer, progress=progress)

    assert builder.start() is True
    assert builder.state is BuildState.DONE
    assert sorted(renderer.by_path()) == [
        "guide/intro.md",
        "index.md",
        "reference/api.md",
    ]
    [record] = builder.errors
    assert record.source == "guide/broken.md"
    assert isinstance(record.error, ConversionError)
    assert record.kind == "ConversionError"
    assert progress.events[0] == ("start", 4)
    assert progress.events.count(("advance", None)) == 4, (
        "expected progress to advance for failed documents too"
    )
    assert progress.events[-1] == ("errors", 1)


def test_payload_contents(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    DocsBuilder(_config(docs_path), renderer).start()
    payload, context = renderer.by_path()["guide/intro.md"]

    assert payload.title == "Getting started"
    assert payload.route.segments == ("guide", "intro")
    assert payload.link == "/guide/intro/"
    assert payload.front_matter == {"title": "Getting started"}
    assert [entry.anchor for entry in payload.toc] == ["install", "use"]
    assert [child.anchor for child in payload.toc[0].children] == ["pip"]
    assert context.page_title == "Getting started"
    assert context.file_path == "guide/intro.md"
    assert context.site_title == "Example"
    assert context.active_route == payload.route

    home, _ = renderer.by_path()["index.md"]
    assert home.link == "/"
    assert 'href="/guide/intro/"' in home.content


def test_untitled_document_has_empty_title(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    DocsBuilder(_config(docs_path), renderer).start()
    payload, _ = renderer.by_path()["reference/api.md"]
    assert payload.title == ""


def test_contexts_are_not_shared_between_documents(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    DocsBuilder(_config(docs_path), renderer).start()
    views = renderer.by_path()
    home_toc = views["index.md"][1].toc
    api_toc = views["reference/api.md"][1].toc
    assert [entry.label for entry in home_toc] == ["Welcome"]
    assert [entry.label for entry in api_toc] == ["Functions"]
    assert home_toc is not api_toc


def test_parallel_build_matches_serial(docs_path: Path) -> None:
    serial = RecordingRenderer()
    DocsBuilder(_config(docs_path), serial).start()
    parallel = RecordingRenderer()
    builder = DocsBuilder(_config(docs_path, workers=3), parallel)

    assert builder.start() is True
    assert sorted(parallel.by_path()) == sorted(serial.by_path())
    for path, (payload, _) in serial.by_path().items():
        other, _ = parallel.by_path()[path]
        assert other.content == payload.content, f"{path} differs between modes"
        assert other.toc == payload.toc
    assert [record.source for record in builder.errors] == ["guide/broken.md"]


def test_latest_version_prefixes_links(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    DocsBuilder(_config(docs_path, latest_version="v2"), renderer).start()
    payload, context = renderer.by_path()["guide/intro.md"]
    assert payload.link == "/v2/guide/intro/"
    assert context.version == "v2"
    home, _ = renderer.by_path()["index.md"]
    assert 'href="/v2/guide/intro/"' in home.content


def test_missing_docs_path_raises() -> None:
    builder = DocsBuilder(_config(None), RecordingRenderer())
    with pytest.raises(ConfigurationError, match="docs_path"):
        builder.start()


def test_empty_docs_folder_fails(tmp_path: Path) -> None:
    (tmp_path / "docs").mkdir()
    renderer = RecordingRenderer()
    builder = DocsBuilder(_config(tmp_path / "docs"), renderer)

    assert builder.start() is False
    assert builder.state is BuildState.FAILED
    assert isinstance(builder.fatal_error, DiscoveryError)
    assert renderer.views == []
    assert renderer.indexes == []


def test_renderer_failure_is_recorded(docs_path: Path) -> None:
    renderer = RecordingRenderer(fail_on={"reference/api.md"})
    builder = DocsBuilder(_config(docs_path), renderer)

    assert builder.start() is True
    sources = sorted(record.source for record in builder.errors)
    assert sources == ["guide/broken.md", "reference/api.md"]
    assert len(builder.rendered) == 2


def test_index_is_built_from_main(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    config = _config(
        docs_path, latest_version="v1", main={"heading": "Welcome", "title": "Ignored"}
    )
    DocsBuilder(config, renderer).start()

    [(payload, context)] = renderer.indexes
    assert payload.main["heading"] == "Welcome"
    assert payload.title == "Example", "expected the site title, not main.title"
    assert context.page_title == "Example"
    assert payload.latest_link == "/v1/"
    assert context.toc == []
    assert context.active_route is None


def test_index_is_skipped_without_main(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    builder = DocsBuilder(_config(docs_path), renderer)
    builder.start()
    assert renderer.indexes == []
    assert builder.create_index() is False


def test_index_failure_is_recorded(docs_path: Path) -> None:
    renderer = RecordingRenderer(fail_index=True)
    builder = DocsBuilder(_config(docs_path, main={"heading": "Example"}), renderer)

    assert builder.start() is True
    assert "index" in [record.source for record in builder.errors]
    assert builder.create_index() is False


def test_cancel_stops_before_processing(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    builder = DocsBuilder(_config(docs_path), renderer)
    builder.cancel()
    assert builder.start() is True
    assert renderer.views == []
    assert builder.state is BuildState.DONE


def test_custom_discovery_is_used(docs_path: Path) -> None:
    calls: list[tuple[Path, tuple[str, ...]]] = []

    def discover(path: Path, exclude: typ.Sequence[str]) -> list:
        calls.append((path, tuple(exclude)))
        msg = "nothing here"
        raise DiscoveryError(msg)

    builder = DocsBuilder(
        _config(docs_path, exclude=["drafts"]), RecordingRenderer(), discover=discover
    )
    assert builder.start() is False
    assert calls == [(docs_path, ("drafts",))]


def test_error_record_message_falls_back_to_repr() -> None:
    record = ErrorRecord("a.md", ValueError())
    assert record.message == "ValueError()"
    assert record.kind == "ValueError"


def test_unknown_pygments_style_stops_before_discovery(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    calls: list[Path] = []

    def discover(path: Path, exclude: typ.Sequence[str]) -> list:
        calls.append(path)
        return []

    builder = DocsBuilder(
        _config(docs_path, pygments_style="nosuchstyle"), renderer, discover=discover
    )
    with pytest.raises(ConfigurationError, match="Markdown pipeline"):
        builder.start()
    assert calls == [], "expected the pipeline check to run before discovery"
    assert renderer.views == []


class _FailingConverter(Converter):
    """Converter that fails with a non-docsite error for one document."""

    def convert(
        self, raw_text: str, *, route: LinkRoute | None = None
    ) -> ConversionResult:
        if "Functions" in raw_text:
            msg = "lexer crashed"
            raise RuntimeError(msg)
        return super().convert(raw_text, route=route)


def test_unexpected_conversion_error_is_recorded(docs_path: Path) -> None:
    renderer = RecordingRenderer()
    builder = DocsBuilder(
        _config(docs_path),
        renderer,
        converter_factory=lambda: _FailingConverter(
            settings=PipelineSettings(highlight=False)
        ),
    )

    assert builder.start() is True
    failures = {record.source: record.kind for record in builder.errors}
    assert failures == {
        "guide/broken.md": "ConversionError",
        "reference/api.md": "RuntimeError",
    }
    assert sorted(renderer.by_path()) == ["guide/intro.md", "index.md"]
