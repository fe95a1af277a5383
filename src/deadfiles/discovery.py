from __future__ import annotations

import logging
import os
from pathlib import Path

import pathspec

from deadfiles.utils import is_within, normalize_path, relative_name

logger = logging.getLogger(__name__)

ALWAYS_SKIPPED_DIRS = {"node_modules", ".git"}


def read_ignore_file(path: Path) -> list[str]:
    if not path.is_file():
        return []
    patterns: list[str] = []
    for line in path.read_text(encoding="utf-8", errors="ignore").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


class IgnoreFilter:
    """Gitignore-style accept predicate anchored at the project root."""

    def __init__(self, root: str, patterns: list[str]) -> None:
        self.root = normalize_path(root)
        self.patterns = list(patterns)
        self.spec = pathspec.PathSpec.from_lines("gitwildmatch", self.patterns)

    @classmethod
    def from_root(cls, root: str, patterns: list[str], use_gitignore: bool = True) -> IgnoreFilter:
        combined = list(patterns)
        if use_gitignore:
            combined.extend(read_ignore_file(Path(root) / ".gitignore"))
        return cls(root, combined)

    def accepts(self, path: str) -> bool:
        path = normalize_path(path)
        if not is_within(path, self.root) or path == self.root:
            return True
        return not self.spec.match_file(relative_name(self.root, path))

    def accepts_dir(self, path: str) -> bool:
        if os.path.basename(path) in ALWAYS_SKIPPED_DIRS:
            return False
        path = normalize_path(path)
        if not is_within(path, self.root) or path == self.root:
            return True
        return not self.spec.match_file(relative_name(self.root, path) + "/")

    def __call__(self, path: str) -> bool:
        return self.accepts(path)


def discover_source_files(src_root: str, ignore: IgnoreFilter, extensions: list[str]) -> list[str]:
    suffixes = {ext.lower() for ext in extensions}
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(src_root):
        dirnames[:] = sorted(name for name in dirnames if ignore.accepts_dir(os.path.join(dirpath, name)))
        for filename in filenames:
            if os.path.splitext(filename)[1].lower() not in suffixes:
                continue
            path = normalize_path(os.path.join(dirpath, filename))
            if ignore.accepts(path):
                files.append(path)
    logger.debug("discovered %d source files under %s", len(files), src_root)
    return sorted(files)
