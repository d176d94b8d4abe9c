"""Tests for route canonicalization and link building."""

from __future__ import annotations

import pytest

from docsite.errors import ExtractionError, RouteError
from docsite.routes import (
    LinkRoute,
    asset_link,
    build_link,
    canonicalize,
    output_path_for,
    route_from_relative,
)


@pytest.mark.parametrize(
    ("absolute", "root", "name", "expected"),
    [
        ("/root/docs/guide/intro.md", "/root/docs", "intro.md", ("guide", "intro")),
        ("/root/docs/intro.md", "/root/docs", "intro.md", ("intro",)),
        ("/root/docs/a/b/c.md", "/root/docs/", "c.md", ("a", "b", "c")),
        (
            "C:\\site\\docs\\guide\\setup.md",
            "C:\\site\\docs",
            "setup.md",
            ("guide", "setup"),
        ),
        ("/root/docs/guide/index.md", "/root/docs", "index.md", ("guide", "index")),
    ],
)
def test_canonicalize(
    absolute: str, root: str, name: str, expected: tuple[str, ...]
) -> None:
    assert canonicalize(absolute, root, name).segments == expected


def test_canonicalize_rejects_paths_outside_root() -> None:
    with pytest.raises(RouteError, match="not inside"):
        canonicalize("/elsewhere/intro.md", "/root/docs", "intro.md")


def test_canonicalize_rejects_sibling_prefix() -> None:
    with pytest.raises(RouteError):
        canonicalize("/root/docs-old/intro.md", "/root/docs", "intro.md")


def test_canonicalize_requires_matching_file_name() -> None:
    with pytest.raises(RouteError, match="does not end with"):
        canonicalize("/root/docs/guide/intro.md", "/root/docs", "other.md")
    with pytest.raises(RouteError):
        canonicalize("/root/docs/guide/bintro.md", "/root/docs", "intro.md")


def test_route_error_is_an_extraction_error() -> None:
    assert issubclass(RouteError, ExtractionError)


def test_link_route_drops_empty_segments() -> None:
    assert LinkRoute(("", "guide", "", "intro")).segments == ("guide", "intro")
    with pytest.raises(RouteError):
        LinkRoute(("", ""))


def test_route_from_relative() -> None:
    route = route_from_relative("guide/setup/install.md")
    assert route.directory == ("guide", "setup")
    assert route.name == "install"
    assert str(route) == "guide/setup/install"


@pytest.mark.parametrize(
    ("segments", "kwargs", "expected"),
    [
        (("guide", "intro"), {}, "/guide/intro/"),
        (("guide", "index"), {}, "/guide/"),
        (("index",), {}, "/"),
        (("guide", "intro"), {"base_url": "/docs/"}, "/docs/guide/intro/"),
        (("guide", "intro"), {"version": "v2"}, "/v2/guide/intro/"),
        (("index",), {"base_url": "/docs", "version": "v2"}, "/docs/v2/"),
        (("guide", "home"), {"index_name": "home"}, "/guide/"),
    ],
)
def test_build_link(
    segments: tuple[str, ...], kwargs: dict[str, str], expected: str
) -> None:
    assert build_link(LinkRoute(segments), **kwargs) == expected


def test_build_link_accepts_plain_sequences() -> None:
    assert build_link(["guide", "intro"]) == "/guide/intro/"


def test_asset_link() -> None:
    assert asset_link("guide/img/a.png") == "/guide/img/a.png"
    assert asset_link("img/a.png", base_url="/docs/", version="v1") == "/docs/v1/img/a.png"


@pytest.mark.parametrize(
    ("segments", "version", "expected"),
    [
        (("guide", "intro"), None, "guide/intro/index.html"),
        (("guide", "index"), None, "guide/index.html"),
        (("index",), None, "index.html"),
        (("guide", "intro"), "v1", "v1/guide/intro/index.html"),
    ],
)
def test_output_path_matches_link(
    segments: tuple[str, ...], version: str | None, expected: str
) -> None:
    route = LinkRoute(segments)
    output = output_path_for(route, version=version)
    assert output == expected
    link = build_link(route, version=version)
    assert f"/{output}".removesuffix("index.html") == link, (
        "expected the output file to be served at the route's link"
    )
