from __future__ import annotations

import logging
from pathlib import Path

import typer

from deadfiles.config import ScanConfig, ensure_config, load_config
from deadfiles.pipeline import ScanSetupError, run_scan
from deadfiles.report.writer import build_report, format_report, write_report_json, write_report_markdown

app = typer.Typer(help="deadfiles: find files and dependencies unreachable from your entry points")

DEFAULT_CONFIG_PATH = Path(".deadfiles/config.yaml")


def _absolute(repo: Path, value: Path) -> Path:
    return (repo / value).resolve() if not value.is_absolute() else value


def configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def init(
    repo: Path = typer.Option(Path("."), help="Project root (where package.json lives)"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Config path"),
    force: bool = typer.Option(False, help="Overwrite existing config"),
) -> None:
    repo = repo.resolve()
    config_path = _absolute(repo, config)
    ensure_config(config_path, force=force)
    typer.echo(f"[deadfiles] config written to {config_path}")


@app.command()
def scan(
    files: list[str] = typer.Argument(None, help="Entry files"),
    root: Path = typer.Option(Path("."), help="Your project root (where package.json lives)"),
    src: str = typer.Option("", help="Your source directory (overrides config)"),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, help="Config path"),
    ignore: list[str] = typer.Option([], help=".gitignore pattern to ignore"),
    module_root: list[str] = typer.Option([], help="Extra directory to resolve bare imports against"),
    extension: list[str] = typer.Option([], help="Extension to try when resolving (repeatable)"),
    json_output: Path | None = typer.Option(None, "--json", help="Write the report and context as JSON"),
    markdown_output: Path | None = typer.Option(None, "--markdown", help="Write a Markdown report"),
    show_unreachable: bool = typer.Option(True, help="List unreachable files"),
    log_level: str = typer.Option("", help="DEBUG|INFO|WARNING|ERROR (overrides config)"),
) -> None:
    root = root.resolve()
    scan_config: ScanConfig = load_config(_absolute(root, config))
    if src:
        scan_config.src = src
    scan_config.ignore.extend(ignore)
    scan_config.module_roots.extend(module_root)
    if extension:
        scan_config.extensions = [item if item.startswith(".") else f".{item}" for item in extension]
    if log_level:
        scan_config.log_level = log_level.upper()
    configure_logging(scan_config.level)

    entries = list(files or [])
    if not entries and not scan_config.entries:
        typer.echo("[deadfiles] no entry files given", err=True)
        raise typer.Exit(code=2)

    try:
        result = run_scan(root=root, config=scan_config, entries=entries)
    except ScanSetupError as exc:
        typer.echo(f"[deadfiles] {exc}", err=True)
        raise typer.Exit(code=1) from exc

    report = build_report(result)
    for line in format_report(report, show_unreachable=show_unreachable):
        typer.echo(line)

    if json_output is not None:
        write_report_json(report, _absolute(root, json_output), context=result.context)
        typer.echo(f"[deadfiles] json report: {json_output}")
    if markdown_output is not None:
        write_report_markdown(report, _absolute(root, markdown_output))
        typer.echo(f"[deadfiles] markdown report: {markdown_output}")


if __name__ == "__main__":
    app()
