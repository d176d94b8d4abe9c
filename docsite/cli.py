"""Cyclopts CLI entrypoint for building documentation sites.

The ``docsite`` console script renders every Markdown document below the
configured ``docs_path`` into themed HTML, and can print the title and table
of contents of a single document for quick inspection.

Examples
--------
Build the site described by ``docsite.yaml``:

>>> from docsite.cli import main
>>> main()  # doctest: +SKIP

Build with four workers into a custom directory:

>>> from docsite.cli import app
>>> app(["build", "--workers", "4", "--output-dir", "dist"])  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import typing as typ
from pathlib import Path

import cyclopts
from cyclopts import App, Parameter

from ._constants import DEFAULT_CONFIG_NAME
from .builder import DocsBuilder
from .config import load_site_config
from .converter import Converter
from .progress import ConsoleProgress
from .renderer import JinjaViewRenderer
from .routes import route_from_relative
from .toc import build_toc, extract_title

DEFAULT_CONFIG = Path(DEFAULT_CONFIG_NAME)

app = App(name="docsite", config=cyclopts.config.Env("DOCSITE_", command=False))  # type: ignore[unknown-argument]


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Render every Markdown document into the site output folder.")
def build(
    *,
    config: typ.Annotated[
        Path, Parameter(help="Path to site config", env_var="DOCSITE_CONFIG")
    ] = DEFAULT_CONFIG,
    output_dir: typ.Annotated[
        Path | None,
        Parameter(help="Override the output folder", env_var="DOCSITE_OUTPUT_DIR"),
    ] = None,
    workers: typ.Annotated[
        int | None,
        Parameter(help="Documents converted concurrently", env_var="DOCSITE_WORKERS"),
    ] = None,
    verbose: typ.Annotated[
        bool, Parameter(help="Log diagnostic detail", env_var="DOCSITE_VERBOSE")
    ] = False,
) -> None:
    """Build the documentation site described by ``config``.

    Parameters
    ----------
    config : Path, optional
        Path to the ``docsite.yaml`` configuration file (overridable via
        ``DOCSITE_CONFIG``).
    output_dir : Path or None, optional
        Override for the configured output folder.
    workers : int or None, optional
        Override for the configured worker count.
    verbose : bool, optional
        Enable debug logging.

    Raises
    ------
    SystemExit
        With status 1 when discovery fails or any document failed.
    ConfigurationError
        If the configuration is incomplete, for example without ``docs_path``.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    site_config = load_site_config(config)
    if output_dir is not None:
        site_config.output_dir = output_dir
    if workers is not None:
        site_config.workers = max(1, workers)

    renderer = JinjaViewRenderer(
        site_config.output_dir,
        pygments_style=site_config.pygments_style,
        index_name=site_config.index_name,
    )
    builder = DocsBuilder(site_config, renderer, progress=ConsoleProgress())
    if not builder.start():
        print(f"build failed: {builder.fatal_error}")
        raise SystemExit(1)
    print(
        f"wrote {len(builder.rendered)} documents to "
        f"{_format_path(site_config.output_dir)}"
    )
    if builder.errors:
        raise SystemExit(1)


@app.command(help="Print the title and table of contents of one Markdown file.")
def toc(
    path: typ.Annotated[Path, Parameter(help="Markdown file to inspect")],
) -> None:
    """Print the title and two-level table of contents of ``path``."""
    document, _ = Converter().convert(
        path.read_text(encoding="utf-8"), route=route_from_relative(path.name)
    )
    print(extract_title(document) or path.stem)
    for entry in build_toc(document):
        print(f"- {entry.label} (#{entry.anchor})")
        for child in entry.children:
            print(f"  - {child.label} (#{child.anchor})")


def main() -> None:
    """Invoke the Cyclopts application that powers the ``docsite`` command.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    app()


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    main()
