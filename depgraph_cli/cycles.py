"""Circular dependency detection over internal edges."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Sequence, Set, Tuple

from .models import Cycle, DependencyEdge

logger = logging.getLogger(__name__)


def adjacency(nodes: Iterable[str], edges: Sequence[DependencyEdge]) -> Dict[str, List[str]]:
    """Outgoing targets per node, in import order."""
    graph: Dict[str, List[str]] = {node: [] for node in nodes}
    for edge in edges:
        graph.setdefault(edge.source, []).append(edge.target)
    return graph


def find_cycles(nodes: Sequence[str], edges: Sequence[DependencyEdge]) -> List[Cycle]:
    """Depth-first search reporting every back edge as a cycle.

    Each cycle's path runs from the revisited node round to itself.  Roots
    are taken in *nodes* order, so the output is deterministic.  Rotations
    of one loop found from different entry points are reported separately.
    """
    graph = adjacency(nodes, edges)
    visited: Set[str] = set()
    cycles: List[Cycle] = []

    for start in nodes:
        if start in visited:
            continue

        path: List[str] = [start]
        on_path: Dict[str, int] = {start: 0}
        stack: List[Tuple[str, Iterator[str]]] = [(start, iter(graph.get(start, ())))]
        visited.add(start)

        while stack:
            node, targets = stack[-1]
            target = next(targets, None)
            if target is None:
                stack.pop()
                path.pop()
                del on_path[node]
                continue
            if target in on_path:
                cycles.append(Cycle(path=tuple(path[on_path[target]:]) + (target,)))
            elif target not in visited:
                visited.add(target)
                on_path[target] = len(path)
                path.append(target)
                stack.append((target, iter(graph.get(target, ()))))

    logger.debug("Cycle detection: %d cycle(s) over %d nodes", len(cycles), len(graph))
    return cycles
