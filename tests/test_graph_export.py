"""Tests for JSON and DOT export."""

import json
from pathlib import Path

from depgraph_cli.analyzer import analyze
from depgraph_cli.graph_export import export_dot, export_json, snapshot_to_dict


def test_snapshot_to_dict_is_json_ready(sample_project_path: Path):
    payload = snapshot_to_dict(analyze(sample_project_path))
    decoded = json.loads(json.dumps(payload))

    assert [n["path"] for n in decoded["nodes"]][0] == "lib/util.js"
    assert decoded["stats"]["total_edges"] == 6
    assert decoded["cycles"][0]["kind"] == "direct"
    assert {c["id"] for c in decoded["clusters"]} == {"lib", "scripts", "src"}


def test_export_json_writes_file(sample_project_path: Path, temp_dir: Path):
    output = temp_dir / "graph.json"
    text = export_json(analyze(sample_project_path), output)

    assert output.read_text(encoding="utf-8") == text
    assert json.loads(text)["root"] == str(sample_project_path.resolve())


def test_export_dot_highlights_cycle_edges(sample_project_path: Path):
    dot = export_dot(analyze(sample_project_path))

    assert dot.startswith("digraph DependencyGraph {")
    assert 'label="src";' in dot
    assert '"src/store.ts" -> "src/app.tsx" [label="type", color=red];' in dot
    assert '"src/index.ts" -> "src/app.tsx" [label="import"];' in dot
    assert dot.rstrip().endswith("}")
