"""Tests for the docsite command line interface."""

from __future__ import annotations

from pathlib import Path
from textwrap import dedent

import pytest

from docsite import cli
from docsite.errors import ConfigurationError


def _project(tmp_path: Path, *, broken: bool = False) -> Path:
    docs = tmp_path / "docs"
    (docs / "guide").mkdir(parents=True)
    (docs / "index.md").write_text("# Home\n\n[Intro](guide/intro.md)\n", encoding="utf-8")
    (docs / "guide" / "intro.md").write_text("# Intro\n\n## Setup\n", encoding="utf-8")
    if broken:
        (docs / "guide" / "broken.md").write_text("::: tip\nopen\n", encoding="utf-8")
    config = tmp_path / "docsite.yaml"
    config.write_text(
        dedent(
            """
            title: CLI Docs
            docs_path: docs
            output_dir: site
            main:
              heading: CLI Docs
            """
        ),
        encoding="utf-8",
    )
    return config


def test_build_writes_site(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = _project(tmp_path)
    cli.build(config=config)

    out = capsys.readouterr().out
    assert "wrote 2 documents to" in out
    assert (tmp_path / "site" / "guide" / "intro" / "index.html").exists()
    assert (tmp_path / "site" / "index.html").exists()


def test_build_overrides_output_dir_and_workers(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = _project(tmp_path)
    cli.build(config=config, output_dir=tmp_path / "dist", workers=2)
    assert "wrote 2 documents" in capsys.readouterr().out
    assert (tmp_path / "dist" / "guide" / "intro" / "index.html").exists()
    assert not (tmp_path / "site").exists()


def test_build_exits_non_zero_when_a_document_fails(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    config = _project(tmp_path, broken=True)
    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=config)
    assert excinfo.value.code == 1
    captured = capsys.readouterr()
    assert "wrote 2 documents" in captured.out
    assert "guide/broken.md: [ConversionError]" in captured.err


def test_build_fails_when_no_documents(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (tmp_path / "docs").mkdir()
    config = tmp_path / "docsite.yaml"
    config.write_text("docs_path: docs\n", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        cli.build(config=config)
    assert excinfo.value.code == 1
    assert "build failed: No Markdown documents" in capsys.readouterr().out


def test_build_requires_docs_path(tmp_path: Path) -> None:
    config = tmp_path / "docsite.yaml"
    config.write_text("title: Nothing\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        cli.build(config=config)


def test_toc_prints_outline(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "intro.md"
    path.write_text(
        "---\ntitle: Intro Guide\n---\n## Setup\n\n### Pip\n\n## Usage\n",
        encoding="utf-8",
    )
    cli.toc(path)
    assert capsys.readouterr().out.splitlines() == [
        "Intro Guide",
        "- Setup (#setup)",
        "  - Pip (#pip)",
        "- Usage (#usage)",
    ]


def test_toc_falls_back_to_file_stem(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    path = tmp_path / "notes.md"
    path.write_text("Plain text only.\n", encoding="utf-8")
    cli.toc(path)
    assert capsys.readouterr().out.splitlines() == ["notes"]


def test_build_rejects_unknown_pygments_style(tmp_path: Path) -> None:
    config = _project(tmp_path)
    config.write_text(
        config.read_text(encoding="utf-8") + "pygments_style: nosuchstyle\n",
        encoding="utf-8",
    )
    with pytest.raises(ConfigurationError, match="pygments_style"):
        cli.build(config=config)
    assert not (tmp_path / "site").exists()
