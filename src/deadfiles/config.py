from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG = """src: src
entries: []
module_roots: []
extensions:
  - ".js"
  - ".jsx"
  - ".mjs"
  - ".cjs"
  - ".ts"
  - ".tsx"
  - ".json"
ignore:
  - "node_modules/"
  - ".git/"
  - "coverage/"
  - "dist/"
  - "build/"
use_gitignore: true
log_level: WARNING
"""

DEFAULT_EXTENSIONS = [".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".json"]
TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(slots=True)
class ScanConfig:
    src: str = "src"
    entries: list[str] = field(default_factory=list)
    module_roots: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    ignore: list[str] = field(default_factory=list)
    use_gitignore: bool = True
    log_level: str = "WARNING"

    @classmethod
    def default(cls) -> ScanConfig:
        data = yaml.safe_load(DEFAULT_CONFIG)
        return cls.from_dict(data)

    @classmethod
    def from_path(cls, path: Path) -> ScanConfig:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanConfig:
        extensions = [_normalize_extension(item) for item in data.get("extensions") or DEFAULT_EXTENSIONS]
        config = cls(
            src=str(data.get("src", "src")),
            entries=[str(item) for item in data.get("entries") or []],
            module_roots=[str(item) for item in data.get("module_roots") or []],
            extensions=extensions,
            ignore=[str(item) for item in data.get("ignore") or []],
            use_gitignore=bool(data.get("use_gitignore", True)),
            log_level=str(data.get("log_level", "WARNING")).upper(),
        )

        env_src = os.getenv("DEADFILES_SRC", "").strip()
        env_roots = os.getenv("DEADFILES_MODULE_ROOTS", "").strip()
        env_level = os.getenv("DEADFILES_LOG_LEVEL", "").strip()
        env_gitignore = os.getenv("DEADFILES_USE_GITIGNORE", "").strip().lower()

        if env_src:
            config.src = env_src
        if env_roots:
            config.module_roots = [item for item in env_roots.split(os.pathsep) if item]
        if env_level:
            config.log_level = env_level.upper()
        if env_gitignore in TRUE_VALUES:
            config.use_gitignore = True
        elif env_gitignore in FALSE_VALUES:
            config.use_gitignore = False

        return config

    @property
    def level(self) -> int:
        value = logging.getLevelName(self.log_level)
        return value if isinstance(value, int) else logging.WARNING


def _normalize_extension(value: Any) -> str:
    text = str(value).strip()
    return text if text.startswith(".") else f".{text}"


def load_config(path: Path) -> ScanConfig:
    if not path.exists():
        return ScanConfig.default()
    return ScanConfig.from_path(path)


def ensure_config(path: Path, force: bool = False) -> None:
    if path.exists() and not force:
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG, encoding="utf-8")
