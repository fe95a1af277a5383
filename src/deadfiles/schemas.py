from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class Serializable:
    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ErrorGroup(str, Enum):
    PARSE_ERROR = "parse error"
    UNABLE_TO_PARSE_REQUIRE = "Unable to parse require"
    TEMPLATE_GLOB = "WARNING: Converted template into a glob"
    UNABLE_TO_RESOLVE = "Unable to resolve"
    UNABLE_TO_READ = "Unable to read"


@dataclass(slots=True)
class ModuleReference(Serializable):
    imported_name: str
    module_reference: str


@dataclass(slots=True)
class ErrorEntry(Serializable):
    group: str
    details: str | None = None

    @classmethod
    def parse_error(cls, extension: str, details: str | None = None) -> ErrorEntry:
        return cls(group=f"{ErrorGroup.PARSE_ERROR.value} {extension}".rstrip(), details=details)

    def __str__(self) -> str:
        if self.details is None:
            return self.group
        return f"{self.group}: {self.details}"


@dataclass(slots=True)
class FileRecord(Serializable):
    path: str
    visited: bool = False
    imports: list[ModuleReference] = field(default_factory=list)
    resolved_files: list[str] = field(default_factory=list)
    imported_by: set[str] = field(default_factory=set)
    errors: list[ErrorEntry] = field(default_factory=list)
    is_dependency: bool = False
    in_src: bool = False

    def add_resolved(self, target: str) -> None:
        if target not in self.resolved_files:
            self.resolved_files.append(target)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "visited": self.visited,
            "imports": [item.to_dict() for item in self.imports],
            "resolved_files": list(self.resolved_files),
            "imported_by": sorted(self.imported_by),
            "errors": [item.to_dict() for item in self.errors],
            "is_dependency": self.is_dependency,
            "in_src": self.in_src,
        }


@dataclass(slots=True)
class Context:
    """Reachability graph of a scan: absolute path -> FileRecord.

    Records are created lazily and never removed.
    """

    files: dict[str, FileRecord] = field(default_factory=dict)

    def ensure(self, path: str, in_src: bool = False) -> FileRecord:
        record = self.files.get(path)
        if record is None:
            record = FileRecord(path=path, in_src=in_src)
            self.files[path] = record
        elif in_src:
            record.in_src = True
        return record

    def items(self) -> Iterator[tuple[str, FileRecord]]:
        return iter(self.files.items())

    def __getitem__(self, path: str) -> FileRecord:
        return self.files[path]

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def __iter__(self) -> Iterator[str]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def to_dict(self) -> dict[str, Any]:
        return {path: record.to_dict() for path, record in sorted(self.files.items())}
