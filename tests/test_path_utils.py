"""
Unit tests for logical path helpers in mdlive.core.utils.path_utils.
Covers listing order, request path decoding and source filtering.
"""

from pathlib import Path

from mdlive.core.utils import (
    decode_request_path,
    is_ignored_path,
    is_source_file,
    join_root,
    relative_to_root,
    sort_listing,
    to_logical_path,
)


def test_listing_order_deeper_paths_first():
    """Paths with more separators sort before shallower ones, ties are lexicographic."""
    listing = ["/z.md", "/a/b.md", "/a.md", "/a/b/c.md"]
    assert sort_listing(listing) == ["/a/b/c.md", "/a/b.md", "/a.md", "/z.md"]


def test_to_logical_path():
    """Relative filesystem paths gain a single leading slash."""
    assert to_logical_path("README.md") == "/README.md"
    assert to_logical_path("docs/intro.md") == "/docs/intro.md"
    assert to_logical_path("/docs//intro.md") == "/docs/intro.md"
    assert to_logical_path("./docs/intro.md") == "/docs/intro.md"


def test_decode_request_path_percent_encoding():
    """Percent-encoded segments are decoded as UTF-8."""
    assert decode_request_path("/a%20b.md") == "/a b.md"
    assert decode_request_path("/d%C3%A9j%C3%A0.md") == "/déjà.md"
    assert decode_request_path("/docs/intro.md") == "/docs/intro.md"


def test_decode_request_path_rejects_malformed():
    """Undecodable, traversing and empty paths are rejected."""
    assert decode_request_path("/%FF.md") is None
    assert decode_request_path("/../secret.md") is None
    assert decode_request_path("/docs/%2E%2E/x.md") is None
    assert decode_request_path("/a%2Fb.md") is None
    assert decode_request_path("/a%00.md") is None
    assert decode_request_path("/") is None
    assert decode_request_path("") is None


def test_is_source_file():
    """Only names carrying a recognized suffix are source documents."""
    assert is_source_file("README.md")
    assert is_source_file("notes.markdown", [".md", "markdown"])
    assert not is_source_file("README.md.swp")
    assert not is_source_file("image.png")


def test_is_ignored_path():
    """Any path component on the ignore list excludes the path."""
    assert is_ignored_path(".git/HEAD.md")
    assert is_ignored_path("sub/.git/x.md")
    assert not is_ignored_path("docs/git.md")


def test_relative_to_root(tmp_path: Path):
    """Paths inside the root become posix relative paths, others become None."""
    (tmp_path / "docs").mkdir()
    assert relative_to_root(tmp_path / "docs" / "a.md", tmp_path) == "docs/a.md"
    assert relative_to_root(tmp_path.parent / "elsewhere.md", tmp_path) is None


def test_join_root(tmp_path: Path):
    """Logical paths map back below the root."""
    assert join_root(tmp_path, "/docs/a.md") == tmp_path / "docs" / "a.md"


def test_listing_order_relative_paths():
    """The order only depends on separators and names."""
    assert sort_listing(["a.md", "b/c.md", "d/e/f.md"]) == ["d/e/f.md", "b/c.md", "a.md"]
