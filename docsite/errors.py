"""Exception types raised by the docsite build pipeline.

Fatal errors (:class:`ConfigurationError`, :class:`DiscoveryError`) stop a
build before any document is processed. Per-document errors
(:class:`ConversionError`, :class:`ExtractionError`) are recorded by the
builder and never abort the batch.
"""

from __future__ import annotations


class DocsiteError(Exception):
    """Base class for every error raised by docsite."""


class ConfigurationError(DocsiteError, ValueError):
    """Raised when the site configuration is invalid or incomplete."""


class DiscoveryError(DocsiteError):
    """Raised when the docs folder cannot be enumerated or holds no documents."""


class PipelineError(DocsiteError, ValueError):
    """Raised when an extension pipeline is assembled in an invalid order."""


class ExtensionError(DocsiteError):
    """Raised by a pipeline processor that failed while converting a document.

    Attributes
    ----------
    extension : str
        Name of the extension whose processor failed.
    phase : str
        Name of the pipeline phase the processor was registered in.
    """

    def __init__(self, extension: str, phase: str, message: str) -> None:
        super().__init__(f"{extension} ({phase}): {message}")
        self.extension = extension
        self.phase = phase


class ConversionError(DocsiteError):
    """Raised when a document cannot be converted into a syntax tree.

    Attributes
    ----------
    extension : str or None
        Name of the failing extension when the failure came from one.
    phase : str or None
        Name of the pipeline phase the failure happened in, when known.
    """

    def __init__(
        self,
        message: str,
        *,
        extension: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message)
        self.extension = extension
        self.phase = phase


class ExtractionError(DocsiteError):
    """Raised when title, TOC, or route derivation meets an unexpected tree."""


class RouteError(ExtractionError):
    """Raised when a document path cannot be mapped onto a site route."""


__all__ = [
    "ConfigurationError",
    "ConversionError",
    "DiscoveryError",
    "DocsiteError",
    "ExtensionError",
    "ExtractionError",
    "PipelineError",
    "RouteError",
]
