from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any


def normalize_path(value: str | os.PathLike[str]) -> str:
    return os.path.normpath(os.path.abspath(os.fspath(value)))


def is_within(path: str, root: str) -> bool:
    root = root.rstrip(os.sep) or os.sep
    if path == root:
        return True
    prefix = root if root.endswith(os.sep) else root + os.sep
    return path.startswith(prefix)


def relative_name(root: str, path: str) -> str:
    return Path(os.path.relpath(path, root)).as_posix()


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
