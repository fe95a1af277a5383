from __future__ import annotations

import asyncio
import json
from pathlib import Path

from deadfiles.analyzers.package_json import collapse_package_path, is_package_boundary
from deadfiles.resolver.engine import ResolveOptions, candidate_roots, resolve_reference
from deadfiles.resolver.node_resolver import resolve_file
from deadfiles.schemas import ErrorGroup

EXTENSIONS = [".js", ".jsx", ".json"]


def _write(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _resolve(reference: str, origin: Path, module_roots: list[str] | None = None):
    options = ResolveOptions(module_roots=module_roots or [], extensions=EXTENSIONS)
    return asyncio.run(resolve_reference(reference, str(origin), options))


def test_relative_reference_tries_extensions_and_index(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "main.js")
    button = _write(tmp_path / "src" / "button.jsx")
    index = _write(tmp_path / "src" / "lib" / "index.js")

    assert _resolve("./button", origin).targets == [str(button)]
    assert _resolve("./lib", origin).targets == [str(index)]


def test_directory_with_package_main(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "main.js")
    _write(tmp_path / "src" / "widget" / "package.json", json.dumps({"main": "lib/entry"}))
    entry = _write(tmp_path / "src" / "widget" / "lib" / "entry.js")

    assert resolve_file("./widget", str(origin.parent), EXTENSIONS) == str(entry)


def test_node_modules_paths_collapse_to_package_boundary(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "main.js")
    _write(tmp_path / "node_modules" / "lodash" / "package.json", json.dumps({"main": "lodash.js"}))
    _write(tmp_path / "node_modules" / "lodash" / "lodash.js")
    _write(tmp_path / "node_modules" / "lodash" / "fp.js")

    result = _resolve("lodash/fp", origin)

    assert result.targets == [str(tmp_path / "node_modules" / "lodash")]
    assert result.errors == []


def test_scoped_packages_keep_their_scope_in_the_boundary() -> None:
    path = "/repo/node_modules/@babel/core/lib/index.js"

    assert collapse_package_path(path) == "/repo/node_modules/@babel/core"
    assert is_package_boundary(path)
    assert collapse_package_path("/repo/src/a.js") == "/repo/src/a.js"
    assert not is_package_boundary("/repo/src/a.js")


def test_module_roots_only_apply_to_non_relative_references(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "pages" / "home.js")
    shared = tmp_path / "src" / "shared"
    helper = _write(shared / "helpers.js")

    options = ResolveOptions(module_roots=[str(shared)], extensions=EXTENSIONS)
    assert candidate_roots("helpers", str(origin), options) == [str(origin.parent), str(shared)]
    assert candidate_roots("./helpers", str(origin), options) == [str(origin.parent)]

    assert _resolve("helpers", origin, [str(shared)]).targets == [str(helper)]
    relative = _resolve("./helpers", origin, [str(shared)])
    assert relative.targets == []
    assert [item.group for item in relative.errors] == [ErrorGroup.UNABLE_TO_RESOLVE.value]


def test_glob_references_expand_relative_to_origin(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "main.js")
    first = _write(tmp_path / "src" / "mod-a.js")
    second = _write(tmp_path / "src" / "mod-b.js")
    _write(tmp_path / "src" / "other.js")

    result = _resolve("./mod-*", origin)

    assert result.targets == [str(first), str(second)]
    assert result.errors == []


def test_glob_without_matches_is_unresolved(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "main.js")

    result = _resolve("./missing-*", origin)

    assert result.targets == []
    assert [(item.group, item.details) for item in result.errors] == [
        (ErrorGroup.UNABLE_TO_RESOLVE.value, "./missing-*")
    ]


def test_missing_module_is_recorded_not_raised(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "main.js")

    result = _resolve("not-installed", origin)

    assert result.targets == []
    assert [(item.group, item.details) for item in result.errors] == [
        (ErrorGroup.UNABLE_TO_RESOLVE.value, "not-installed")
    ]


def test_core_modules_resolve_to_nothing_without_errors(tmp_path: Path) -> None:
    origin = _write(tmp_path / "src" / "main.js")

    for reference in ("fs", "path/posix", "node:crypto"):
        result = _resolve(reference, origin)
        assert result.targets == []
        assert result.errors == []
