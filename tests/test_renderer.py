"""Tests for the Jinja view renderer."""

from __future__ import annotations

from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from docsite.converter import Converter
from docsite.renderer import JinjaViewRenderer
from docsite.routes import LinkRoute, build_link
from docsite.toc import build_toc, extract_title
from docsite.views import IndexPayload, RenderContext, ViewPayload

SOURCE = """# Getting started & more

## Install

### From PyPI

```python
print("hi")
```

## Use
"""


def _payload(route: LinkRoute, *, version: str | None = None) -> tuple[ViewPayload, RenderContext]:
    result = Converter().convert(SOURCE, route=route)
    title = extract_title(result.document)
    toc = build_toc(result.document)
    payload = ViewPayload(
        title=title,
        toc=toc,
        relative_path="guide/intro.md",
        route=route,
        link=build_link(route, version=version),
        content=result.html,
        document=result.document,
    )
    context = RenderContext(
        toc=toc,
        page_title=title,
        active_route=route,
        file_path="guide/intro.md",
        site_title="Example Docs",
        version=version,
    )
    return payload, context


@pytest.fixture
def renderer(tmp_path: Path) -> JinjaViewRenderer:
    return JinjaViewRenderer(tmp_path / "site", pygments_style="friendly")


def test_build_view_writes_page_at_route(renderer: JinjaViewRenderer) -> None:
    payload, context = _payload(LinkRoute(("guide", "intro")))
    output = renderer.build_view("single", payload, context)

    assert output == renderer.output_dir / "guide" / "intro" / "index.html"
    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    assert soup.title is not None
    assert soup.title.get_text() == "Getting started & more | Example Docs", (
        "expected the escaped title to read back as plain text"
    )
    layout = soup.select_one("div.doc-layout")
    assert layout is not None
    assert layout["data-route"] == "guide/intro"
    assert layout["data-source"] == "guide/intro.md"

    toc_links = [a["href"] for a in soup.select("nav.doc-toc a")]
    assert toc_links == ["#install", "#from-pypi", "#use"]

    article = soup.select_one("article.doc-content")
    assert article is not None
    assert article.select_one("h2#install") is not None
    code = article.select_one("div.codehilite pre")
    assert code is not None, "expected highlighted markup in the article"
    assert 'print("hi")' in code.get_text()

    style = soup.select_one("head style")
    assert style is not None
    assert ".codehilite" in style.get_text()


def test_build_view_places_versioned_output(renderer: JinjaViewRenderer) -> None:
    payload, context = _payload(LinkRoute(("guide", "index")), version="v2")
    output = renderer.build_view("single", payload, context)
    assert output == renderer.output_dir / "v2" / "guide" / "index.html"
    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    version = soup.select_one("span.site-version")
    assert version is not None
    assert version["data-version"] == "v2"


def test_page_without_toc_omits_navigation(renderer: JinjaViewRenderer) -> None:
    route = LinkRoute(("notes",))
    result = Converter().convert("Just text.\n", route=route)
    payload = ViewPayload(
        title="",
        toc=[],
        relative_path="notes.md",
        route=route,
        link=build_link(route),
        content=result.html,
        document=result.document,
    )
    context = RenderContext(
        toc=[], page_title="", active_route=route, file_path="notes.md", site_title="Docs"
    )
    output = renderer.build_view("single", payload, context)
    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    assert soup.select_one("nav.doc-toc") is None
    assert soup.title is not None
    assert soup.title.get_text() == "Docs"


def test_build_index_writes_landing_page(renderer: JinjaViewRenderer) -> None:
    payload = IndexPayload(
        main={
            "heading": "Example",
            "tagline": "Docs that build themselves",
            "cta_label": "Start reading",
            "links": [{"href": "https://example.com", "label": "Home"}],
        },
        title="Welcome",
        latest_link="/v2/",
    )
    context = RenderContext(
        toc=[], page_title="Welcome", active_route=None, file_path="", site_title="Docs"
    )
    output = renderer.build_index(payload, context)

    assert output == renderer.output_dir / "index.html"
    soup = BeautifulSoup(output.read_text(encoding="utf-8"), "html.parser")
    heading = soup.select_one("h1.landing-title")
    assert heading is not None
    assert heading.get_text() == "Example"
    tagline = soup.select_one("p.landing-tagline")
    assert tagline is not None
    assert tagline.get_text() == "Docs that build themselves"
    cta = soup.select_one("a.landing-cta")
    assert cta is not None
    assert cta["href"] == "/v2/"
    assert cta.get_text() == "Start reading"
    assert [a["href"] for a in soup.select("ul.landing-links a")] == ["https://example.com"]


def test_custom_templates_dir(tmp_path: Path) -> None:
    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "single.jinja").write_text(
        "<p>{{ page.title }}|{{ toc | length }}</p>", encoding="utf-8"
    )
    renderer = JinjaViewRenderer(tmp_path / "out", templates_dir=templates)
    payload, context = _payload(LinkRoute(("intro",)))
    output = renderer.build_view("single", payload, context)
    assert output.read_text(encoding="utf-8") == "<p>Getting started &amp; more|2</p>"
