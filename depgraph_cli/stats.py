"""Summary statistics over a built graph."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .cycles import adjacency
from .models import Cycle, DependencyEdge, GraphStats, SourceFileRecord

logger = logging.getLogger(__name__)


def longest_chain_from(start: str, graph: Mapping[str, Sequence[str]]) -> int:
    """Files on the longest acyclic chain starting at *start*.

    Fresh depth-first search with an explicit stack; an edge back into the
    current path is ignored so cycles terminate.  Not memoised across
    start nodes: a route blocked on one path may be open on another.
    """
    on_path = {start}
    # frame: [node, targets still to visit, best child depth]
    stack: List[list] = [[start, list(graph.get(start, ())), 0]]
    depth = 0
    while stack:
        frame = stack[-1]
        if frame[1]:
            target = frame[1].pop()
            if target not in on_path:
                on_path.add(target)
                stack.append([target, list(graph.get(target, ())), 0])
            continue
        stack.pop()
        on_path.discard(frame[0])
        depth = frame[2] + 1
        if stack:
            stack[-1][2] = max(stack[-1][2], depth)
    return depth


def chain_depths(nodes: Sequence[str], edges: Sequence[DependencyEdge]) -> Dict[str, int]:
    """Length in files of the longest acyclic chain starting at each node."""
    graph = adjacency(nodes, edges)
    return {node: longest_chain_from(node, graph) for node in nodes}


def max_depth(nodes: Sequence[str], edges: Sequence[DependencyEdge]) -> Tuple[int, Optional[str]]:
    """Deepest chain length and the first node (in *nodes* order) starting it."""
    depths = chain_depths(nodes, edges)
    best, deepest = 0, None
    for node in nodes:
        if depths[node] > best:
            best, deepest = depths[node], node
    return best, deepest


def most_connected(nodes: Mapping[str, SourceFileRecord]) -> Optional[str]:
    best, winner = 0, None
    for path, node in nodes.items():
        if node.connections > best:
            best, winner = node.connections, path
    return winner


def compute_stats(
    nodes: Mapping[str, SourceFileRecord],
    edges: Sequence[DependencyEdge],
    cycles: Sequence[Cycle],
) -> GraphStats:
    paths = list(nodes)
    depth, deepest = max_depth(paths, edges)
    total = len(paths)
    stats = GraphStats(
        total_files=total,
        total_edges=len(edges),
        external_dependencies=sum(1 for node in nodes.values() if node.has_external_imports),
        cycle_count=len(cycles),
        max_depth=depth,
        deepest_file=deepest,
        avg_edges_per_file=len(edges) / total if total else 0.0,
        most_connected_file=most_connected(nodes),
        least_connected_files=tuple(p for p, node in nodes.items() if node.connections == 0),
    )
    logger.debug("Stats: %s", stats)
    return stats
