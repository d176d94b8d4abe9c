"""Phase-ordered extension pipeline on top of Python-Markdown.

Python-Markdown runs its preprocessors, block processors, and tree processors
in priority order. :class:`Phase` gives every docsite extension an explicit
slot in that order so, for example, front matter is always parsed before the
tree is captured and heading ids exist before link resolution reads them.
:class:`ExtensionPipeline` validates the declared ordering once and then
produces ready-to-use ``Markdown`` instances.
"""

from __future__ import annotations

import contextlib
import dataclasses as dc
import enum
import html
import re
import typing as typ

from markdown import Markdown, util
from markdown.extensions import Extension

from docsite._constants import DEFAULT_CONTAINER_TITLES, DEFAULT_INDEX_NAME
from docsite.errors import ExtensionError, PipelineError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from xml.etree.ElementTree import Element

    from docsite.routes import LinkRoute
    from docsite.syntax_tree import NodeKind, SyntaxNode

ESCAPED_CHAR_PATTERN = re.compile(f"{util.STX}([0-9]+){util.ETX}")
ENTITY_PATTERN = re.compile(r"^&(?:#[0-9]+|#x[0-9a-f]+|[0-9a-z]+);$", re.IGNORECASE)
# GitHub flavoured syntax: tables, strikethrough, bare URL autolinks, task lists.
BUILTIN_EXTENSIONS = (
    "tables",
    "sane_lists",
    "pymdownx.tilde",
    "pymdownx.magiclink",
    "pymdownx.tasklist",
)
BUILTIN_EXTENSION_CONFIGS: dict[str, dict[str, typ.Any]] = {
    "pymdownx.tilde": {"subscript": False},
}


class Phase(enum.IntEnum):
    """Execution phases of the conversion pipeline, in running order."""

    FRONT_MATTER = 1
    BLOCKS = 2
    ANCHORS = 3
    LINKS = 4
    PRESENTATION = 5
    CAPTURE = 6
    RENDER = 7

    @property
    def registry(self) -> str:
        """Name of the Python-Markdown registry the phase runs in."""
        if self is Phase.FRONT_MATTER:
            return "preprocessors"
        if self is Phase.BLOCKS:
            return "blockprocessors"
        return "treeprocessors"

    def priority(self, slot: int = 0) -> float:
        """Return the registry priority for the ``slot``-th extension of a phase.

        Tree phases sit between Python-Markdown's ``inline`` (20) and
        ``prettify`` (10) processors so inline markup has already been parsed.
        """
        return _PHASE_PRIORITIES[self] - slot * 0.01


_PHASE_PRIORITIES: dict[Phase, float] = {
    Phase.FRONT_MATTER: 27.0,
    Phase.BLOCKS: 105.0,
    Phase.ANCHORS: 18.0,
    Phase.LINKS: 16.0,
    Phase.PRESENTATION: 14.0,
    Phase.CAPTURE: 12.0,
    Phase.RENDER: 11.0,
}


@dc.dataclass(slots=True)
class ExternalLinkSettings:
    """Presentation attributes applied to links leaving the site."""

    open_in_new_window: bool = True
    html_class: str = "external-link"
    rel: tuple[str, ...] = ("noopener", "noreferrer")
    internal_hosts: tuple[str, ...] = ()


@dc.dataclass(slots=True)
class PipelineSettings:
    """Site-wide configuration shared by every extension in a pipeline.

    Attributes
    ----------
    base_url : str
        Prefix for every generated site link.
    version : str or None
        Optional version segment placed after ``base_url``.
    index_name : str
        Base name of files that represent their directory.
    container_titles : dict[str, str]
        Default (localized) titles keyed by container keyword.
    external_links : ExternalLinkSettings
        Attributes applied to links leaving the site.
    permalink_symbol : str or None
        Text of the permalink anchor appended to headings; ``None`` disables it.
    permalink_class : str
        CSS classes of the permalink anchor; they also mark it as a permalink
        in the captured syntax tree.
    heading_class : str
        CSS classes added to every heading; empty to skip.
    highlight : bool
        Replace code blocks with Pygments markup during rendering.
    default_language : str
        Language assigned to code blocks without one.
    pygments_style : str
        Pygments style used for highlighting.
    """

    base_url: str = "/"
    version: str | None = None
    index_name: str = DEFAULT_INDEX_NAME
    container_titles: dict[str, str] = dc.field(
        default_factory=lambda: dict(DEFAULT_CONTAINER_TITLES)
    )
    external_links: ExternalLinkSettings = dc.field(
        default_factory=ExternalLinkSettings
    )
    permalink_symbol: str | None = "#"
    permalink_class: str = "heading-permalink"
    heading_class: str = ""
    highlight: bool = True
    default_language: str = "text"
    pygments_style: str = "monokai"


@dc.dataclass(slots=True)
class ConversionState:
    """Per-conversion values shared between the processors of one document."""

    route: LinkRoute | None = None
    front_matter: dict[str, typ.Any] = dc.field(default_factory=dict)
    tree: SyntaxNode | None = None


def conversion_state(md: Markdown) -> ConversionState:
    """Return the state attached to ``md``, creating an empty one if needed."""
    state = getattr(md, "conversion_state", None)
    if state is None:
        state = ConversionState()
        md.conversion_state = state  # type: ignore[attr-defined]
    return state


@contextlib.contextmanager
def guard(extension: str, phase: Phase) -> cabc.Iterator[None]:
    """Re-raise any failure inside the block as an :class:`ExtensionError`."""
    try:
        yield
    except ExtensionError:
        raise
    except Exception as exc:
        raise ExtensionError(extension, phase.name.lower(), str(exc) or repr(exc)) from exc


def plain_text(element: Element, md: Markdown) -> str:
    """Return the visible text of ``element`` with escapes and entities resolved.

    Raw HTML placeholders are dropped unless they hold a single character
    entity, which is decoded into its character.
    """
    parts: list[str] = []
    for chunk in element.itertext():
        parts.append(resolve_text(chunk, md))
    return "".join(parts).strip()


def resolve_text(text: str, md: Markdown) -> str:
    """Resolve backslash escapes and stashed entities inside ``text``."""

    def _stashed(match: re.Match[str]) -> str:
        raw = stashed_html(md, int(match.group(1)))
        if raw is not None and ENTITY_PATTERN.match(raw):
            return html.unescape(raw)
        return ""

    text = util.HTML_PLACEHOLDER_RE.sub(_stashed, text)
    return ESCAPED_CHAR_PATTERN.sub(lambda match: chr(int(match.group(1))), text)


def stashed_html(md: Markdown, index: int) -> str | None:
    """Return the raw HTML stored at ``index`` in the stash, if any."""
    blocks = md.htmlStash.rawHtmlBlocks
    if 0 <= index < len(blocks):
        return str(blocks[index])
    return None


class PipelineExtension(Extension):
    """Base class for docsite extensions.

    Subclasses set :attr:`name` and :attr:`phase` and implement
    :meth:`install`, registering their processors at the given priority. When
    added to a plain ``Markdown`` instance the extension installs itself at the
    first slot of its phase.
    """

    name: typ.ClassVar[str]
    phase: typ.ClassVar[Phase]
    requires: typ.ClassVar[tuple[str, ...]] = ()
    node_kinds: typ.ClassVar[tuple[NodeKind, ...]] = ()

    def __init__(self, settings: PipelineSettings | None = None) -> None:
        super().__init__()
        self.settings = settings or PipelineSettings()

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        """Register the extension's processors on ``md``."""
        self.install(md, self.phase.priority())

    def install(self, md: Markdown, priority: float) -> None:
        """Register processors on ``md`` at ``priority``."""
        raise NotImplementedError


class ExtensionPipeline:
    """An ordered, validated list of :class:`PipelineExtension` objects."""

    def __init__(
        self,
        extensions: cabc.Sequence[PipelineExtension],
        *,
        builtin: cabc.Sequence[str] = BUILTIN_EXTENSIONS,
    ) -> None:
        """Validate and order ``extensions``.

        Parameters
        ----------
        extensions : Sequence[PipelineExtension]
            Extensions in registration order; they are stably sorted by phase.
        builtin : Sequence[str], optional
            Python-Markdown extension names loaded before the pipeline's own.

        Raises
        ------
        PipelineError
            If two extensions share a name, or an extension requires one that
            is missing or scheduled after it.
        """
        self.builtin = tuple(builtin)
        self.extensions = tuple(sorted(extensions, key=lambda ext: ext.phase))
        self._validate()

    def _validate(self) -> None:
        seen: dict[str, int] = {}
        for position, extension in enumerate(self.extensions):
            if extension.name in seen:
                msg = f"Extension '{extension.name}' is registered twice."
                raise PipelineError(msg)
            seen[extension.name] = position
        for position, extension in enumerate(self.extensions):
            for required in extension.requires:
                if required not in seen:
                    msg = f"Extension '{extension.name}' requires '{required}'."
                    raise PipelineError(msg)
                if seen[required] > position:
                    msg = (
                        f"Extension '{required}' must run before '{extension.name}'."
                    )
                    raise PipelineError(msg)

    @property
    def names(self) -> list[str]:
        """Return extension names in execution order."""
        return [extension.name for extension in self.extensions]

    def get(self, name: str) -> PipelineExtension:
        """Return the extension registered as ``name``."""
        for extension in self.extensions:
            if extension.name == name:
                return extension
        msg = f"Unknown extension '{name}'. Known extensions: {', '.join(self.names)}"
        raise KeyError(msg)

    def create_markdown(self) -> Markdown:
        """Return a new ``Markdown`` instance with every extension installed."""
        md = Markdown(
            extensions=list(self.builtin),
            extension_configs={
                name: dict(config)
                for name, config in BUILTIN_EXTENSION_CONFIGS.items()
                if name in self.builtin
            },
            output_format="html",
        )
        slots: dict[Phase, int] = {}
        for extension in self.extensions:
            slot = slots.get(extension.phase, 0)
            slots[extension.phase] = slot + 1
            extension.install(md, extension.phase.priority(slot))
        return md


__all__ = [
    "BUILTIN_EXTENSIONS",
    "BUILTIN_EXTENSION_CONFIGS",
    "ENTITY_PATTERN",
    "ConversionState",
    "ExtensionPipeline",
    "ExternalLinkSettings",
    "Phase",
    "PipelineExtension",
    "PipelineSettings",
    "conversion_state",
    "guard",
    "plain_text",
    "resolve_text",
    "stashed_html",
]
