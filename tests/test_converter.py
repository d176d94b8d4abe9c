"""Tests for the Markdown converter."""

from __future__ import annotations

import pytest

from docsite.converter import Converter
from docsite.errors import ConversionError
from docsite.extensions import ExtensionPipeline, FrontMatterExtension, PipelineSettings
from docsite.routes import LinkRoute
from docsite.syntax_tree import NodeKind

SAMPLE = """---
title: Guide
---
# Introduction

Read the [setup](setup.md) notes.

## Install

::: tip
Use a virtualenv.
:::

```python
import docsite
```
"""


@pytest.fixture
def converter() -> Converter:
    return Converter(settings=PipelineSettings(highlight=False))


def test_convert_returns_document_and_html(converter: Converter) -> None:
    document, html = converter.convert(SAMPLE, route=LinkRoute(("guide", "intro")))
    assert document.kind is NodeKind.DOCUMENT
    assert document.data["front_matter"] == {"title": "Guide"}
    assert '<h1 id="introduction">' in html
    assert 'href="/guide/setup/"' in html
    kinds = {node.kind for node in document.walk()}
    assert {
        NodeKind.HEADING,
        NodeKind.PARAGRAPH,
        NodeKind.LINK,
        NodeKind.CONTAINER,
        NodeKind.CODE_BLOCK,
    } <= kinds


def test_conversion_is_deterministic(converter: Converter) -> None:
    first = converter.convert(SAMPLE)
    second = Converter(settings=PipelineSettings(highlight=False)).convert(SAMPLE)
    again = converter.convert(SAMPLE)
    assert first.document == second.document == again.document
    assert first.html == second.html == again.html


def test_state_does_not_leak_between_conversions(converter: Converter) -> None:
    converter.convert("---\ntitle: First\n---\n## Setup\n")
    result = converter.convert("## Setup\n")
    assert result.front_matter == {}
    [heading] = result.document.find_all(NodeKind.HEADING)
    assert heading.attribute("id") == "setup", "expected ids to restart per document"


@pytest.mark.parametrize("text", ["", "   \n\n"])
def test_empty_input_yields_empty_document(converter: Converter, text: str) -> None:
    result = converter.convert(text)
    assert result.document.kind is NodeKind.DOCUMENT
    assert result.document.children == []
    assert result.html == ""


def test_front_matter_only_document(converter: Converter) -> None:
    result = converter.convert("---\ntitle: Only\n---\n")
    assert result.front_matter == {"title": "Only"}
    assert result.document.children == []


def test_failure_returns_no_partial_result(converter: Converter) -> None:
    with pytest.raises(ConversionError) as excinfo:
        converter.convert("# Fine\n\n::: warning\nnever closed\n")
    assert excinfo.value.extension == "containers"
    result = converter.convert("# Fine\n")
    assert [node.text_content() for node in result.document.children] == ["Fine"]


def test_pipeline_without_capture_is_rejected() -> None:
    with pytest.raises(ConversionError, match="syntax_tree"):
        Converter(ExtensionPipeline([FrontMatterExtension()]))


def test_unexpected_errors_become_conversion_errors(
    converter: Converter, monkeypatch: pytest.MonkeyPatch
) -> None:
    def explode(_text: str) -> str:
        msg = "boom"
        raise RuntimeError(msg)

    monkeypatch.setattr(converter._md, "convert", explode)  # noqa: SLF001
    with pytest.raises(ConversionError, match="boom") as excinfo:
        converter.convert("# Title")
    assert excinfo.value.extension is None
