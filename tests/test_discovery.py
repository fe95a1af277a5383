from __future__ import annotations

from pathlib import Path

from deadfiles.discovery import IgnoreFilter, discover_source_files


def _write(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_ignore_filter_uses_patterns_and_gitignore(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "# generated\n*.min.js\n")
    ignore = IgnoreFilter.from_root(str(tmp_path), ["node_modules/", "fixtures/"])

    assert ignore.accepts(str(tmp_path / "src" / "a.js"))
    assert not ignore.accepts(str(tmp_path / "src" / "vendor.min.js"))
    assert not ignore.accepts(str(tmp_path / "node_modules" / "x" / "index.js"))
    assert not ignore.accepts(str(tmp_path / "src" / "fixtures" / "data.js"))
    assert ignore.accepts(str(tmp_path.parent / "elsewhere.js"))


def test_gitignore_can_be_disabled(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.min.js\n")
    ignore = IgnoreFilter.from_root(str(tmp_path), [], use_gitignore=False)

    assert ignore.accepts(str(tmp_path / "src" / "vendor.min.js"))


def test_discover_source_files_filters_extensions_and_ignored_dirs(tmp_path: Path) -> None:
    src = tmp_path / "src"
    keep = _write(src / "a.js")
    nested = _write(src / "deep" / "b.jsx")
    _write(src / "styles.css")
    _write(src / "node_modules" / "pkg" / "index.js")
    _write(src / "generated" / "c.js")

    ignore = IgnoreFilter.from_root(str(tmp_path), ["generated/"])
    files = discover_source_files(str(src), ignore, [".js", ".jsx"])

    assert files == sorted([str(keep), str(nested)])
