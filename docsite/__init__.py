"""Build static documentation sites from folders of Markdown files.

This package exposes the CLI entry points used by the ``docsite`` console
script, which converts every document below the configured docs folder into
themed HTML pages with titles, tables of contents, and canonical links.

Exports
-------
- ``app``: Cyclopts application entry for subcommands.
- ``main``: Convenience function that invokes the Cyclopts app.

Examples
--------
>>> from docsite import main
>>> main()  # doctest: +SKIP
>>> from docsite import app
>>> app(["build", "--config", "docsite.yaml"])  # doctest: +SKIP
"""

from __future__ import annotations

from .cli import app, main

__all__ = ["app", "main"]
