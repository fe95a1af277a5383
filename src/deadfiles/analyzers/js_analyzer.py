from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from functools import cache

import tree_sitter
import tree_sitter_javascript
import tree_sitter_typescript

from deadfiles.analyzers.common import ExtractResult, ParseOutcome, source_of_node
from deadfiles.schemas import ErrorEntry, ErrorGroup

logger = logging.getLogger(__name__)

# Tried in order. The javascript grammar covers JSX, decorators, class fields,
# optional chaining, nullish coalescing, dynamic import and BigInt; the two
# TypeScript grammars cover type annotations (tsx first, plain typescript for
# `<T>value` casts that read as JSX).
DIALECTS: tuple[tuple[str, Callable[[], object]], ...] = (
    ("javascript", tree_sitter_javascript.language),
    ("tsx", tree_sitter_typescript.language_tsx),
    ("typescript", tree_sitter_typescript.language_typescript),
)

REQUIRE_NAMES = {"require"}
MULTI_STAR_RE = re.compile(r"\*+")


@cache
def _language(name: str) -> tree_sitter.Language:
    loader = dict(DIALECTS)[name]
    return tree_sitter.Language(loader())


def parse_source(source: bytes) -> ParseOutcome:
    failed: list[str] = []
    for name, _ in DIALECTS:
        parser = tree_sitter.Parser(_language(name))
        tree = parser.parse(source)
        if not tree.root_node.has_error:
            return ParseOutcome(dialect=name, tree=tree, failed=failed)
        failed.append(name)
    return ParseOutcome(dialect=None, tree=None, failed=failed)


def _text(node: tree_sitter.Node, source: bytes) -> str:
    return source_of_node(source, node.start_byte, node.end_byte)


def _string_value(node: tree_sitter.Node, source: bytes) -> str:
    # string nodes include their quotes
    return source_of_node(source, node.start_byte + 1, node.end_byte - 1)


def _template_segments(node: tree_sitter.Node, source: bytes) -> list[str]:
    segments: list[str] = []
    start = node.start_byte + 1
    for child in node.children:
        if child.type == "template_substitution":
            segments.append(source_of_node(source, start, child.start_byte))
            start = child.end_byte
    segments.append(source_of_node(source, start, node.end_byte - 1))
    return segments


def _walk(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _is_require_call(function: tree_sitter.Node, source: bytes) -> bool:
    match function.type:
        case "import":
            return True
        case "identifier":
            return _text(function, source) in REQUIRE_NAMES
        case "member_expression":
            obj = function.child_by_field_name("object")
            prop = function.child_by_field_name("property")
            return (
                obj is not None
                and prop is not None
                and obj.type == "identifier"
                and _text(obj, source) in REQUIRE_NAMES
                and _text(prop, source) == "resolve"
            )
    return False


def _handle_import(node: tree_sitter.Node, source: bytes, result: ExtractResult) -> None:
    source_node = node.child_by_field_name("source")
    if source_node is None:
        for child in node.named_children:
            if child.type == "import_require_clause":
                source_node = child.child_by_field_name("source")
        if source_node is not None:
            result.add_reference("default", _string_value(source_node, source))
        return

    module_reference = _string_value(source_node, source)
    clause = next((child for child in node.named_children if child.type == "import_clause"), None)
    if clause is None:
        result.add_reference("default", module_reference)
        return

    for child in clause.named_children:
        match child.type:
            case "identifier":
                result.add_reference("default", module_reference)
            case "namespace_import":
                result.add_reference("*", module_reference)
            case "named_imports":
                for specifier in child.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    name = specifier.child_by_field_name("name")
                    if name is None:
                        continue
                    imported = _string_value(name, source) if name.type == "string" else _text(name, source)
                    result.add_reference(imported, module_reference)


def _handle_export(node: tree_sitter.Node, source: bytes, result: ExtractResult) -> None:
    source_node = node.child_by_field_name("source")
    if source_node is not None:
        result.add_reference("default", _string_value(source_node, source))


def _handle_call(node: tree_sitter.Node, source: bytes, result: ExtractResult) -> None:
    function = node.child_by_field_name("function")
    arguments = node.child_by_field_name("arguments")
    if function is None or arguments is None or arguments.type != "arguments":
        return
    if not _is_require_call(function, source):
        return

    snippet = _text(node, source)
    args = [child for child in arguments.named_children if child.type != "comment"]
    if len(args) != 1:
        result.errors.append(ErrorEntry(group=ErrorGroup.UNABLE_TO_PARSE_REQUIRE.value, details=snippet))
        return

    arg = args[0]
    if arg.type == "string":
        result.add_reference("default", _string_value(arg, source))
        return

    if arg.type == "template_string":
        segments = _template_segments(arg, source)
        if len(segments) == 1:
            result.add_reference("default", segments[0])
            return
        pattern = MULTI_STAR_RE.sub("*", "*".join(segments))
        logger.debug("converted template %s into glob %s", snippet, pattern)
        result.errors.append(ErrorEntry(group=ErrorGroup.TEMPLATE_GLOB.value, details=f"{snippet} -> {pattern}"))
        result.add_reference("default", pattern)
        return

    result.errors.append(ErrorEntry(group=ErrorGroup.UNABLE_TO_PARSE_REQUIRE.value, details=snippet))


def collect_references(tree: tree_sitter.Tree, source: bytes) -> ExtractResult:
    result = ExtractResult.empty()
    for node in _walk(tree.root_node):
        match node.type:
            case "import_statement":
                _handle_import(node, source, result)
            case "export_statement":
                _handle_export(node, source, result)
            case "call_expression":
                _handle_call(node, source, result)
    return result


def extract_references(source: bytes, extension: str = "") -> ExtractResult:
    outcome = parse_source(source)
    if not outcome.ok:
        logger.debug("no dialect parsed %s source (tried %s)", extension or "<unknown>", ", ".join(outcome.failed))
        return ExtractResult(references=[], errors=[ErrorEntry.parse_error(extension)])
    return collect_references(outcome.tree, source)
