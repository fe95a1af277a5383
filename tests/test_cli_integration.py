from __future__ import annotations

import json
import shutil
from pathlib import Path

from typer.testing import CliRunner

from deadfiles.cli import app

runner = CliRunner()

FIXTURE = Path(__file__).parent / "fixtures" / "sample_project"


def _project(tmp_path: Path) -> Path:
    repo = tmp_path / "repo"
    shutil.copytree(FIXTURE, repo)
    for name in ("react", "left-pad", "eslint"):
        package = repo / "node_modules" / name
        package.mkdir(parents=True)
        (package / "package.json").write_text(json.dumps({"name": name}), encoding="utf-8")
        (package / "index.js").write_text("", encoding="utf-8")
    return repo


def test_cli_init_writes_config(tmp_path: Path) -> None:
    repo = _project(tmp_path)

    result = runner.invoke(app, ["init", "--repo", str(repo)])

    assert result.exit_code == 0
    assert (repo / ".deadfiles" / "config.yaml").exists()


def test_cli_scan_prints_report_and_writes_json(tmp_path: Path) -> None:
    repo = _project(tmp_path)
    output = tmp_path / "report.json"

    result = runner.invoke(
        app,
        [
            "scan",
            str(repo / "src" / "index.js"),
            "--root",
            str(repo),
            "--json",
            str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Unreachable (2)" in result.output
    assert "node_modules/left-pad" in result.output
    assert "files scanned: 7" in result.output

    payload = json.loads(output.read_text(encoding="utf-8"))
    assert payload["unreachable"] == ["src/legacy/old.js", "src/unused.js"]
    assert payload["context"]["src/app.jsx"]["visited"] is True


def test_cli_scan_fails_on_setup_errors(tmp_path: Path) -> None:
    repo = _project(tmp_path)
    (repo / "package.json").unlink()

    result = runner.invoke(app, ["scan", str(repo / "src" / "index.js"), "--root", str(repo)])

    assert result.exit_code == 1


def test_cli_scan_requires_entries(tmp_path: Path) -> None:
    repo = _project(tmp_path)

    result = runner.invoke(app, ["scan", "--root", str(repo)])

    assert result.exit_code == 2
