from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from deadfiles.analyzers.common import ExtractResult
from deadfiles.analyzers.engine import extract_file_references
from deadfiles.analyzers.package_json import is_package_boundary, is_package_json
from deadfiles.resolver.engine import ResolveOptions, ResolveResult, resolve_reference
from deadfiles.schemas import Context, ErrorEntry, ErrorGroup, FileRecord
from deadfiles.utils import is_within, normalize_path

Extractor = Callable[[str, bytes], ExtractResult]
Accepts = Callable[[str], bool]


def _accept_all(_: str) -> bool:
    return True


def _first_exception(group: BaseExceptionGroup) -> BaseException:
    first = group.exceptions[0]
    while isinstance(first, BaseExceptionGroup):
        first = first.exceptions[0]
    return first


class GraphWalker:
    """Expands the reachability graph from a set of entry files.

    Every record is marked visited before the first await, so a path reached
    over several edges is parsed at most once.
    """

    def __init__(
        self,
        context: Context,
        src_root: str,
        options: ResolveOptions,
        accepts: Accepts = _accept_all,
        extractor: Extractor = extract_file_references,
        logger: logging.Logger | None = None,
    ) -> None:
        self.context = context
        self.src_root = normalize_path(src_root)
        self.options = options
        self.accepts = accepts
        self.extractor = extractor
        self.logger = logger or logging.getLogger(__name__)

    def in_src(self, path: str) -> bool:
        return is_within(path, self.src_root)

    async def walk(self, entries: Iterable[str]) -> Context:
        paths = [normalize_path(item) for item in entries]
        self.logger.info("walking from %d entry files", len(paths))
        try:
            await self._visit_all(paths)
        except BaseExceptionGroup as group:
            raise _first_exception(group) from None
        visited = sum(1 for _, record in self.context.items() if record.visited)
        self.logger.info("walk complete: %d of %d files visited", visited, len(self.context))
        return self.context

    async def _visit_all(self, paths: list[str]) -> None:
        if not paths:
            return
        async with asyncio.TaskGroup() as group:
            for path in paths:
                group.create_task(self.visit(path))

    async def visit(self, path: str) -> None:
        record = self.context.ensure(path, in_src=self.in_src(path))
        if record.visited:
            return
        record.visited = True

        if is_package_boundary(path):
            self.logger.debug("package boundary %s", path)
            return
        if not record.in_src and not is_package_json(path):
            self.logger.debug("outside source root %s", path)
            return

        extracted = await self._extract(record)
        if extracted is None:
            return
        record.imports.extend(extracted.references)
        record.errors.extend(extracted.errors)

        references = extracted.unique_references()
        results: list[ResolveResult] = await asyncio.gather(
            *(resolve_reference(reference, path, self.options) for reference in references)
        )
        pending: list[str] = []
        for result in results:
            record.errors.extend(result.errors)
            for target in result.targets:
                if self._link(record, target):
                    pending.append(target)

        await self._visit_all(pending)

    async def _extract(self, record: FileRecord) -> ExtractResult | None:
        try:
            source = await asyncio.to_thread(Path(record.path).read_bytes)
        except OSError as exc:
            self.logger.warning("unable to read %s: %s", record.path, exc)
            record.errors.append(ErrorEntry(group=ErrorGroup.UNABLE_TO_READ.value, details=str(exc)))
            return None
        self.logger.debug("scanning %s", record.path)
        return self.extractor(record.path, source)

    def _link(self, record: FileRecord, target: str) -> bool:
        """Record the edge ``record -> target``; return True when target should be expanded."""
        record.add_resolved(target)
        node = self.context.ensure(target, in_src=self.in_src(target))
        node.imported_by.add(record.path)

        if is_package_json(record.path):
            node.is_dependency = True
            return False
        if node.visited:
            return False
        if is_package_boundary(target):
            return True
        return self.accepts(target) or is_package_json(target)
