"""Graph export helpers for JSON-ready dicts and Graphviz DOT output."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from .models import GraphSnapshot


def snapshot_to_dict(snapshot: GraphSnapshot) -> Dict[str, Any]:
    return {
        "root": snapshot.root,
        "nodes": [node.to_dict() for node in snapshot.node_list()],
        "edges": [edge.to_dict() for edge in snapshot.edges],
        "cycles": [cycle.to_dict() for cycle in snapshot.cycles],
        "clusters": [cluster.to_dict() for cluster in snapshot.clusters],
        "stats": snapshot.stats.to_dict(),
    }


def export_json(snapshot: GraphSnapshot, output_file: Optional[Path] = None) -> str:
    text = json.dumps(snapshot_to_dict(snapshot), indent=2)
    if output_file is not None:
        output_file.write_text(text, encoding="utf-8")
    return text


def _cycle_edges(snapshot: GraphSnapshot) -> Set[Tuple[str, str]]:
    pairs: Set[Tuple[str, str]] = set()
    for cycle in snapshot.cycles:
        pairs.update(zip(cycle.path, cycle.path[1:]))
    return pairs


def export_dot(snapshot: GraphSnapshot, output_file: Optional[Path] = None) -> str:
    """Render the graph as DOT, one subgraph per cluster; cycle edges in red."""
    in_cycle = _cycle_edges(snapshot)
    lines: List[str] = ["digraph DependencyGraph {", "  rankdir=LR;", "  node [shape=box];"]

    for index, cluster in enumerate(snapshot.clusters):
        lines.append(f"  subgraph cluster_{index} {{")
        lines.append(f'    label="{_esc(cluster.id)}";')
        for path in cluster.files:
            node = snapshot.nodes[path]
            lines.append(f'    "{_esc(path)}" [label="{_esc(node.name)}"];')
        lines.append("  }")

    seen: Set[Tuple[str, str]] = set()
    for edge in snapshot.edges:
        pair = (edge.source, edge.target)
        if pair in seen:
            continue
        seen.add(pair)
        attrs = f'label="{edge.kind.value}"'
        if pair in in_cycle:
            attrs += ", color=red"
        lines.append(f'  "{_esc(edge.source)}" -> "{_esc(edge.target)}" [{attrs}];')

    lines.append("}")
    text = "\n".join(lines)
    if output_file is not None:
        output_file.write_text(text, encoding="utf-8")
    return text


def _esc(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')
