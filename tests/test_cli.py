"""Integration tests for CLI commands."""

import json
from pathlib import Path

from typer.testing import CliRunner

from depgraph_cli import __version__
from depgraph_cli.cli import app


runner = CliRunner()


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_analyze_summary(sample_project_path: Path):
    result = runner.invoke(app, ["analyze", str(sample_project_path)])

    assert result.exit_code == 0
    assert "Files" in result.stdout
    assert "Cycles" in result.stdout
    assert "Clusters" in result.stdout


def test_analyze_json(sample_project_path: Path):
    result = runner.invoke(app, ["analyze", str(sample_project_path), "--json", "--workers", "2"])

    assert result.exit_code == 0
    assert '"total_files": 8' in result.stdout


def test_analyze_nonexistent_path():
    result = runner.invoke(app, ["analyze", "/nonexistent/path"])

    assert result.exit_code != 0


def test_file_lookup(sample_project_path: Path):
    result = runner.invoke(app, ["file", str(sample_project_path), "src/components/index.ts"])

    assert result.exit_code == 0
    assert "Button" in result.stdout
    assert "src/app.tsx" in result.stdout


def test_file_lookup_unknown(sample_project_path: Path):
    result = runner.invoke(app, ["file", str(sample_project_path), "src/missing.ts"])

    assert result.exit_code != 0


def test_cycles_reported(sample_project_path: Path):
    result = runner.invoke(app, ["cycles", str(sample_project_path)])

    assert result.exit_code == 1
    assert "direct" in result.stdout


def test_no_cycles(write_tree):
    root = write_tree({"a.ts": "import { b } from './b';\n", "b.ts": "export const b = 1;\n"})
    result = runner.invoke(app, ["cycles", str(root)])

    assert result.exit_code == 0
    assert "No circular dependencies" in result.stdout


def test_export_json_to_file(sample_project_path: Path, temp_dir: Path):
    output = temp_dir / "graph.json"
    result = runner.invoke(app, ["export", str(sample_project_path), "--format", "json", "-o", str(output)])

    assert result.exit_code == 0
    assert "Exported graph" in result.stdout
    assert json.loads(output.read_text(encoding="utf-8"))["stats"]["total_files"] == 8


def test_export_dot_to_stdout(sample_project_path: Path):
    result = runner.invoke(app, ["export", str(sample_project_path), "--format", "dot"])

    assert result.exit_code == 0
    assert "digraph DependencyGraph" in result.stdout


def test_export_rejects_unknown_format(sample_project_path: Path):
    result = runner.invoke(app, ["export", str(sample_project_path), "--format", "svg"])

    assert result.exit_code != 0
