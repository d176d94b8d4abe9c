"""Markdown extensions that make up the docsite conversion pipeline.

:func:`build_pipeline` assembles the default pipeline: front matter,
containers, fenced code, heading anchors, internal links, image paths,
external links, table wrappers, highlighting, and syntax tree capture. The
GitHub flavoured extras (strikethrough, bare URL autolinks, task lists) come
from pymdown-extensions and load with every pipeline.

Examples
--------
>>> from docsite.extensions import build_pipeline
>>> build_pipeline().names[:3]
['front_matter', 'containers', 'fenced_code']
"""

from __future__ import annotations

import typing as typ

from .anchors import HeadingAnchorExtension, slugify
from .base import (
    ConversionState,
    ExtensionPipeline,
    ExternalLinkSettings,
    Phase,
    PipelineExtension,
    PipelineSettings,
    conversion_state,
)
from .capture import SyntaxTreeExtension
from .containers import ContainerExtension
from .external_links import ExternalLinkExtension
from .fenced_code import FencedCodeExtension
from .front_matter import FrontMatterExtension
from .highlight import HighlightExtension
from .links import ImagePathExtension, InternalLinkExtension
from .tables import TableWrapperExtension

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def default_extensions(
    settings: PipelineSettings | None = None,
) -> list[PipelineExtension]:
    """Return the default extensions configured with ``settings``.

    Containers come before fenced code within the block phase so a container
    wrapping a code fence is claimed by the container.
    """
    settings = settings or PipelineSettings()
    factories: cabc.Sequence[type[PipelineExtension]] = (
        FrontMatterExtension,
        ContainerExtension,
        FencedCodeExtension,
        HeadingAnchorExtension,
        InternalLinkExtension,
        ImagePathExtension,
        ExternalLinkExtension,
        TableWrapperExtension,
        HighlightExtension,
        SyntaxTreeExtension,
    )
    return [factory(settings) for factory in factories]


def build_pipeline(settings: PipelineSettings | None = None) -> ExtensionPipeline:
    """Return the default, validated extension pipeline."""
    return ExtensionPipeline(default_extensions(settings))


__all__ = [
    "ContainerExtension",
    "ConversionState",
    "ExtensionPipeline",
    "ExternalLinkExtension",
    "ExternalLinkSettings",
    "FencedCodeExtension",
    "FrontMatterExtension",
    "HeadingAnchorExtension",
    "HighlightExtension",
    "ImagePathExtension",
    "InternalLinkExtension",
    "Phase",
    "PipelineExtension",
    "PipelineSettings",
    "SyntaxTreeExtension",
    "TableWrapperExtension",
    "build_pipeline",
    "conversion_state",
    "default_extensions",
    "slugify",
]
