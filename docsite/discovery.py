"""Find the Markdown documents that make up a site."""

from __future__ import annotations

import dataclasses as dc
import fnmatch
import logging
import typing as typ
from pathlib import Path, PurePosixPath

from ._constants import MARKDOWN_GLOB
from .errors import DiscoveryError

logger = logging.getLogger(__name__)

GLOB_CHARACTERS = frozenset("*?[")


@dc.dataclass(frozen=True, slots=True)
class DocumentSource:
    """A Markdown document found during discovery.

    Attributes
    ----------
    path : Path
        Absolute path of the document.
    name : str
        Base file name, including the extension.
    """

    path: Path
    name: str

    @classmethod
    def from_path(cls, path: Path) -> DocumentSource:
        """Return a source for ``path``, made absolute."""
        absolute = path.absolute()
        return cls(path=absolute, name=absolute.name)


def _is_excluded(relative: str, patterns: typ.Sequence[str]) -> bool:
    parents = [
        str(parent) for parent in PurePosixPath(relative).parents if str(parent) != "."
    ]
    for pattern in patterns:
        if GLOB_CHARACTERS & set(pattern):
            candidates = [relative, *parents]
            if any(fnmatch.fnmatchcase(candidate, pattern) for candidate in candidates):
                return True
        elif pattern in relative:
            return True
    return False


def discover_documents(
    docs_path: Path, exclude: typ.Iterable[str] = ()
) -> list[DocumentSource]:
    """Return every Markdown document below ``docs_path``, sorted by path.

    Parameters
    ----------
    docs_path : Path
        Root folder of the documentation sources.
    exclude : Iterable[str], optional
        Patterns removing documents. Entries with glob characters are matched
        against the relative path and each of its parent folders; other
        entries are substring matches on the relative POSIX path.

    Raises
    ------
    DiscoveryError
        If the folder is missing or unreadable, or holds no documents.
    """
    if not docs_path.is_dir():
        msg = f"Docs folder '{docs_path}' does not exist."
        raise DiscoveryError(msg)
    patterns = [pattern for pattern in exclude if pattern]
    root = docs_path.absolute()
    try:
        candidates = sorted(path for path in root.rglob(MARKDOWN_GLOB) if path.is_file())
    except OSError as exc:
        msg = f"Could not read docs folder '{docs_path}': {exc}"
        raise DiscoveryError(msg) from exc

    sources: list[DocumentSource] = []
    for path in candidates:
        relative = path.relative_to(root).as_posix()
        if _is_excluded(relative, patterns):
            logger.debug("Excluding %s", relative)
            continue
        sources.append(DocumentSource.from_path(path))
    if not sources:
        msg = f"No Markdown documents found in '{docs_path}'."
        raise DiscoveryError(msg)
    logger.info("Discovered %d documents in %s", len(sources), docs_path)
    return sources


__all__ = ["DocumentSource", "discover_documents"]
