from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from deadfiles.pipeline import ScanResult
from deadfiles.schemas import Context, ErrorEntry, FileRecord, Serializable
from deadfiles.utils import relative_name, write_json


@dataclass(slots=True)
class ScanReport(Serializable):
    root: str
    scanned_count: int = 0
    error_count: int = 0
    errors: dict[str, list[ErrorEntry]] = field(default_factory=dict)
    unreachable: list[str] = field(default_factory=list)
    unused_dependencies: list[str] = field(default_factory=list)


def rekey_context(root: str, context: Context) -> dict[str, FileRecord]:
    return {relative_name(root, path): record for path, record in context.items()}


def build_report(result: ScanResult) -> ScanReport:
    report = ScanReport(root=result.root)
    for name, record in sorted(rekey_context(result.root, result.context).items()):
        if record.visited:
            report.scanned_count += 1
        elif record.is_dependency:
            report.unused_dependencies.append(name)
        elif record.in_src:
            report.unreachable.append(name)

        if record.errors:
            report.errors[name] = list(record.errors)
            report.error_count += len(record.errors)
    return report


def make_tree(files: list[str]) -> str:
    """Render paths as a tree, blanking segments shared with the previous line."""
    out: list[str] = []
    last_segments: list[str] = []
    for filename in sorted(files):
        segments = filename.split("/")
        line = ""
        for idx, part in enumerate(segments):
            if idx < len(last_segments) and last_segments[idx] == part:
                line += " " + " " * len(part)
            else:
                line += "/" + part
        last_segments = segments
        out.append(line)
    return "\n".join(out)


def format_report(report: ScanReport, show_unreachable: bool = True) -> list[str]:
    lines: list[str] = []
    if show_unreachable:
        lines.append(f"Unreachable ({len(report.unreachable)})")
        if report.unreachable:
            lines.extend(f"  {line}" for line in make_tree(report.unreachable).splitlines())
        lines.append("")

    lines.append(f"Unused dependencies ({len(report.unused_dependencies)})")
    lines.extend(f"  {name}" for name in report.unused_dependencies)
    lines.append("")

    lines.append(f"Errors ({report.error_count})")
    for name, entries in report.errors.items():
        lines.append(f"  {name}")
        lines.extend(f"    {entry}" for entry in entries)
    lines.append("")

    lines.append(f"files scanned: {report.scanned_count}")
    lines.append(f"error count: {report.error_count}")
    return lines


def _report_payload(report: ScanReport, context: Context | None) -> dict[str, Any]:
    payload = report.to_dict()
    if context is not None:
        payload["context"] = {
            relative_name(report.root, path): record.to_dict() for path, record in sorted(context.items())
        }
    return payload


def write_report_json(report: ScanReport, output_path: Path, context: Context | None = None) -> None:
    write_json(output_path, _report_payload(report, context))


def write_report_markdown(report: ScanReport, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    lines: list[str] = []
    lines.append("# Dead File Report")
    lines.append("")
    lines.append(f"- Root: `{report.root}`")
    lines.append(f"- Files scanned: {report.scanned_count}")
    lines.append(f"- Errors: {report.error_count}")
    lines.append("")

    def section(title: str, items: list[str]) -> None:
        lines.append(f"## {title}")
        if not items:
            lines.append("- None")
        else:
            for item in items:
                lines.append(f"- `{item}`")
        lines.append("")

    section("Unreachable Files", report.unreachable)
    section("Unused Dependencies", report.unused_dependencies)

    lines.append("## Errors")
    if not report.errors:
        lines.append("- None")
    else:
        for name, entries in report.errors.items():
            lines.append(f"- `{name}`")
            for entry in entries:
                lines.append(f"  - {entry}")
    lines.append("")

    output_path.write_text("\n".join(lines), encoding="utf-8")
