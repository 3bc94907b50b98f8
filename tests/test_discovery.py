"""
Unit tests for the initial source scan in mdlive.core.utils.discovery.
"""

from pathlib import Path

from mdlive.core.utils import scan


def write(root: Path, relative: str, content: str = "# x"):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_scan_finds_nested_sources(tmp_path: Path):
    """Every source document below the root is found, other files are not."""
    write(tmp_path, "README.md")
    write(tmp_path, "docs/intro.md")
    write(tmp_path, "docs/deep/more.md")
    write(tmp_path, "docs/image.png")

    assert scan(tmp_path) == {"README.md", "docs/intro.md", "docs/deep/more.md"}


def test_scan_skips_ignored_directories(tmp_path: Path):
    """Ignored directories are never descended into."""
    write(tmp_path, "README.md")
    write(tmp_path, ".git/COMMIT.md")
    write(tmp_path, "sub/.git/info.md")
    write(tmp_path, "node_modules/pkg/README.md")

    assert scan(tmp_path) == {"README.md", "node_modules/pkg/README.md"}
    assert scan(tmp_path, ignore_dirs=[".git", "node_modules"]) == {"README.md"}


def test_scan_custom_suffixes(tmp_path: Path):
    """Custom suffix lists replace the default one."""
    write(tmp_path, "a.md")
    write(tmp_path, "b.markdown")

    assert scan(tmp_path, suffixes=[".markdown"]) == {"b.markdown"}


def test_scan_empty_root(tmp_path: Path):
    """An empty root yields nothing."""
    assert scan(tmp_path) == set()
