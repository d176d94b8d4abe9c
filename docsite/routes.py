r"""Map document locations onto canonical site routes and links.

A :class:`LinkRoute` is the root-relative identity of a document: its
directory segments followed by the file's base name without extension.
:func:`canonicalize` derives it from an absolute path, :func:`build_link` turns
it into the href used across the site, and :func:`output_path_for` names the
file the renderer writes, so links and files always agree.

Example
-------
>>> from docsite.routes import build_link, canonicalize
>>> route = canonicalize("/root/docs/guide/intro.md", "/root/docs", "intro.md")
>>> route.segments
('guide', 'intro')
>>> build_link(route)
'/guide/intro/'
>>> build_link(canonicalize("/root/docs/guide/index.md", "/root/docs", "index.md"))
'/guide/'
"""

from __future__ import annotations

import dataclasses as dc
import os
import posixpath
import typing as typ

from ._constants import DEFAULT_INDEX_NAME, INDEX_OUTPUT_NAME
from .errors import RouteError

if typ.TYPE_CHECKING:
    import collections.abc as cabc


@dc.dataclass(frozen=True, slots=True)
class LinkRoute:
    """Canonical, root-relative identifier of a document.

    Attributes
    ----------
    segments : tuple[str, ...]
        Directory segments followed by the base name, never empty strings.
    """

    segments: tuple[str, ...]

    def __post_init__(self) -> None:
        cleaned = tuple(segment for segment in self.segments if segment)
        if not cleaned:
            msg = "A route needs at least one non-empty segment."
            raise RouteError(msg)
        object.__setattr__(self, "segments", cleaned)

    @property
    def name(self) -> str:
        """Return the base name of the document."""
        return self.segments[-1]

    @property
    def directory(self) -> tuple[str, ...]:
        """Return the directory segments of the document."""
        return self.segments[:-1]

    @property
    def path(self) -> str:
        """Return the slash-joined route, for example ``guide/intro``."""
        return "/".join(self.segments)

    def is_index(self, index_name: str = DEFAULT_INDEX_NAME) -> bool:
        """Return True when the route names its directory's index document."""
        return self.name == index_name

    def __str__(self) -> str:
        return self.path


def to_posix(path: str | os.PathLike[str]) -> str:
    """Return ``path`` as a string with forward-slash separators."""
    return os.fspath(path).replace("\\", "/")


def strip_extension(file_name: str) -> str:
    """Return ``file_name`` without its final extension."""
    return posixpath.splitext(file_name)[0]


def _route_from_parts(directory: str, file_name: str) -> LinkRoute:
    segments = [segment for segment in directory.strip("/").split("/") if segment]
    segments.append(strip_extension(file_name))
    return LinkRoute(tuple(segments))


def canonicalize(
    absolute_path: str | os.PathLike[str],
    root_path: str | os.PathLike[str],
    file_name: str,
) -> LinkRoute:
    """Return the route of the document at ``absolute_path`` below ``root_path``.

    Parameters
    ----------
    absolute_path : str or PathLike
        Absolute location of the document, in any separator style.
    root_path : str or PathLike
        Configured docs root; it never appears in the route.
    file_name : str
        Base file name of the document, including its extension.

    Returns
    -------
    LinkRoute
        Directory segments (if any) followed by the base name without extension.

    Raises
    ------
    RouteError
        If the document lies outside ``root_path`` or its path does not end with
        ``file_name``.
    """
    posix_path = to_posix(absolute_path)
    posix_root = to_posix(root_path).rstrip("/")
    if not posix_path.startswith(f"{posix_root}/"):
        msg = f"'{posix_path}' is not inside the docs root '{posix_root or '/'}'."
        raise RouteError(msg)
    relative_path = posix_path[len(posix_root) :]
    if not file_name or not relative_path.endswith(f"/{file_name}"):
        msg = f"'{relative_path}' does not end with the file name '{file_name}'."
        raise RouteError(msg)
    directory = relative_path[: -len(file_name)]
    return _route_from_parts(directory.lstrip("/").rstrip("/"), file_name)


def route_from_relative(relative_path: str) -> LinkRoute:
    """Return the route for a root-relative document path such as ``a/b.md``."""
    directory, _, file_name = to_posix(relative_path).rpartition("/")
    return _route_from_parts(directory, file_name)


def _link_prefix(base_url: str, version: str | None) -> str:
    prefix = base_url.rstrip("/")
    if version:
        prefix = f"{prefix}/{version.strip('/')}"
    return prefix


def build_link(
    route: LinkRoute | cabc.Sequence[str],
    *,
    base_url: str = "/",
    version: str | None = None,
    index_name: str = DEFAULT_INDEX_NAME,
) -> str:
    """Return the site link for ``route``.

    Index documents link to their directory, so ``guide/index`` becomes
    ``/guide/`` and the root ``index`` becomes ``/``.
    """
    if not isinstance(route, LinkRoute):
        route = LinkRoute(tuple(route))
    segments = route.directory if route.is_index(index_name) else route.segments
    path = "/".join(segments)
    prefix = _link_prefix(base_url, version)
    return f"{prefix}/{path}/" if path else f"{prefix}/"


def asset_link(
    relative_path: str, *, base_url: str = "/", version: str | None = None
) -> str:
    """Return the site-rooted link of an asset stored in the docs tree."""
    path = to_posix(relative_path).strip("/")
    return f"{_link_prefix(base_url, version)}/{path}"


def output_path_for(
    route: LinkRoute,
    *,
    version: str | None = None,
    index_name: str = DEFAULT_INDEX_NAME,
) -> str:
    """Return the relative output file for ``route``, matching :func:`build_link`."""
    segments = list(route.directory if route.is_index(index_name) else route.segments)
    if version:
        segments.insert(0, version.strip("/"))
    segments.append(INDEX_OUTPUT_NAME)
    return "/".join(segments)


__all__ = [
    "LinkRoute",
    "asset_link",
    "build_link",
    "canonicalize",
    "output_path_for",
    "route_from_relative",
    "strip_extension",
    "to_posix",
]
