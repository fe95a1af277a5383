from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from deadfiles.schemas import ErrorEntry, ModuleReference

if TYPE_CHECKING:
    import tree_sitter


@dataclass(slots=True)
class ExtractResult:
    references: list[ModuleReference] = field(default_factory=list)
    errors: list[ErrorEntry] = field(default_factory=list)

    @classmethod
    def empty(cls) -> ExtractResult:
        return cls(references=[], errors=[])

    def add_reference(self, imported_name: str, module_reference: str) -> None:
        self.references.append(ModuleReference(imported_name=imported_name, module_reference=module_reference))

    def unique_references(self) -> list[str]:
        seen: dict[str, None] = {}
        for item in self.references:
            seen.setdefault(item.module_reference, None)
        return list(seen)


@dataclass(slots=True)
class ParseOutcome:
    """Result of trying the supported dialects in order."""

    dialect: str | None
    tree: tree_sitter.Tree | None
    failed: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.tree is not None


def source_of_node(source: bytes, start: int, end: int) -> str:
    return source[start:end].decode("utf-8", errors="replace")
