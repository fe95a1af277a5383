from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from deadfiles.config import ScanConfig
from deadfiles.discovery import IgnoreFilter, discover_source_files
from deadfiles.graph.walker import GraphWalker
from deadfiles.resolver.engine import ResolveOptions
from deadfiles.schemas import Context
from deadfiles.utils import normalize_path

PROJECT_MARKER = "package.json"


class ScanSetupError(RuntimeError):
    pass


@dataclass(slots=True)
class ScanResult:
    context: Context
    root: str
    src_root: str
    entries: list[str]


def _resolve_under(root: str, value: str) -> str:
    return normalize_path(value if os.path.isabs(value) else os.path.join(root, value))


def expand_file(filename: str, base: str | None = None) -> str:
    full_path = _resolve_under(base or os.getcwd(), filename)
    if not os.path.exists(full_path):
        raise ScanSetupError(f"Unable to locate file: {filename}")
    return full_path


def validate_project(root: Path, config: ScanConfig) -> tuple[str, str]:
    root_path = normalize_path(root)
    if not os.path.isdir(root_path):
        raise ScanSetupError(f"Root must be a directory: {root}")
    if not os.path.isfile(os.path.join(root_path, PROJECT_MARKER)):
        raise ScanSetupError(f"Unable to locate {PROJECT_MARKER} in {root_path}")
    src_root = _resolve_under(root_path, config.src)
    if not os.path.isdir(src_root):
        raise ScanSetupError(f"Source directory does not exist: {src_root}")
    return root_path, src_root


async def scan_project(
    root: Path,
    config: ScanConfig,
    entries: list[str],
    logger: logging.Logger | None = None,
) -> ScanResult:
    log = logger or logging.getLogger(__name__)
    root_path, src_root = validate_project(root, config)

    entry_paths = [expand_file(item) for item in entries]
    entry_paths.extend(expand_file(item, base=root_path) for item in config.entries)
    if not entry_paths:
        raise ScanSetupError("No entry files given")

    ignore = IgnoreFilter.from_root(root_path, config.ignore, use_gitignore=config.use_gitignore)
    universe = await asyncio.to_thread(discover_source_files, src_root, ignore, config.extensions)

    context = Context()
    for path in universe:
        context.ensure(path, in_src=True)
    log.info("seeded context with %d source files", len(universe))

    options = ResolveOptions(
        module_roots=[_resolve_under(root_path, item) for item in config.module_roots],
        extensions=list(config.extensions),
    )
    walker = GraphWalker(
        context=context,
        src_root=src_root,
        options=options,
        accepts=ignore.accepts,
        logger=log,
    )
    seeds = list(dict.fromkeys([*entry_paths, os.path.join(root_path, PROJECT_MARKER)]))
    await walker.walk(seeds)

    return ScanResult(context=context, root=root_path, src_root=src_root, entries=entry_paths)


def run_scan(
    root: Path,
    config: ScanConfig,
    entries: list[str],
    logger: logging.Logger | None = None,
) -> ScanResult:
    return asyncio.run(scan_project(root=root, config=config, entries=entries, logger=logger))
