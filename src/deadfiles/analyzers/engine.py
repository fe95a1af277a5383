from __future__ import annotations

import os

from deadfiles.analyzers.common import ExtractResult
from deadfiles.analyzers.js_analyzer import extract_references
from deadfiles.analyzers.package_json import dependency_references, is_package_json

DATA_EXTENSIONS = {".json"}


def extract_file_references(path: str, source: bytes) -> ExtractResult:
    if is_package_json(path):
        return dependency_references(source)
    extension = os.path.splitext(path)[1].lower()
    if extension in DATA_EXTENSIONS:
        return ExtractResult.empty()
    return extract_references(source, extension)
