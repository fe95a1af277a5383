from __future__ import annotations

import json
import os
import re

from deadfiles.analyzers.common import ExtractResult
from deadfiles.schemas import ErrorEntry

PACKAGE_JSON = "package.json"
DEPENDENCY_FIELDS = ("dependencies", "devDependencies")
PACKAGE_BOUNDARY_RE = re.compile(r"(?:^|/)node_modules/(?:@[^/]+/)?[^/]+")


def is_package_json(path: str) -> bool:
    return os.path.basename(path) == PACKAGE_JSON


def collapse_package_path(path: str) -> str:
    """Truncate a path inside ``node_modules/<pkg>`` to the package directory."""
    match = PACKAGE_BOUNDARY_RE.search(path)
    if match is None:
        return path
    return path[: match.end()]


def is_package_boundary(path: str) -> bool:
    return PACKAGE_BOUNDARY_RE.search(path) is not None


def declared_dependencies(data: object) -> list[str]:
    names: dict[str, None] = {}
    if not isinstance(data, dict):
        return []
    for key in DEPENDENCY_FIELDS:
        section = data.get(key)
        if isinstance(section, dict):
            for name in section:
                names.setdefault(str(name), None)
    return list(names)


def dependency_references(source: bytes) -> ExtractResult:
    try:
        data = json.loads(source.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return ExtractResult(references=[], errors=[ErrorEntry.parse_error(".json", details=str(exc))])

    result = ExtractResult.empty()
    for name in declared_dependencies(data):
        result.add_reference("default", f"{name}/{PACKAGE_JSON}")
    return result
