from __future__ import annotations

import asyncio
import glob
import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import PurePath

from deadfiles.analyzers.package_json import collapse_package_path
from deadfiles.resolver.node_resolver import is_core_module, is_path_request, resolve_file
from deadfiles.schemas import ErrorEntry, ErrorGroup

logger = logging.getLogger(__name__)

GLOB_MAGIC_RE = re.compile(r"[*?]")


@dataclass(slots=True)
class ResolveOptions:
    module_roots: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ResolveResult:
    targets: list[str] = field(default_factory=list)
    errors: list[ErrorEntry] = field(default_factory=list)

    def extend(self, other: ResolveResult) -> None:
        for target in other.targets:
            if target not in self.targets:
                self.targets.append(target)
        self.errors.extend(other.errors)


def has_glob(reference: str) -> bool:
    return GLOB_MAGIC_RE.search(reference) is not None


def candidate_roots(reference: str, origin: str, options: ResolveOptions) -> list[str]:
    roots = [os.path.dirname(origin)]
    if not reference.startswith("."):
        roots.extend(options.module_roots)
    return roots


def as_relative(reference: str) -> str:
    if is_path_request(reference):
        return reference
    return f"./{reference}"


def expand_glob(pattern: str, basedir: str) -> list[str]:
    matches = glob.glob(pattern, root_dir=basedir)
    return sorted(as_relative(PurePath(item).as_posix()) for item in matches)


def _unresolved(reference: str) -> ResolveResult:
    return ResolveResult(targets=[], errors=[ErrorEntry(group=ErrorGroup.UNABLE_TO_RESOLVE.value, details=reference)])


async def resolve_reference(reference: str, origin: str, options: ResolveOptions) -> ResolveResult:
    basedir = os.path.dirname(origin)

    if has_glob(reference):
        matches = await asyncio.to_thread(expand_glob, reference, basedir)
        if not matches:
            logger.debug("glob %s matched nothing from %s", reference, origin)
            return _unresolved(reference)
        result = ResolveResult()
        for item in await asyncio.gather(*(resolve_reference(match, origin, options) for match in matches)):
            result.extend(item)
        return result

    if is_core_module(reference):
        return ResolveResult()

    for index, root in enumerate(candidate_roots(reference, origin, options)):
        request = reference if index == 0 else as_relative(reference)
        match = await asyncio.to_thread(resolve_file, request, root, options.extensions)
        if match is not None:
            return ResolveResult(targets=[collapse_package_path(match)], errors=[])

    logger.debug("unable to resolve %s from %s", reference, origin)
    return _unresolved(reference)
