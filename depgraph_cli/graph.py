"""Dependency graph construction.

Built in passes, none of which mutate an earlier result:

1. one ``SourceFileRecord`` per parsed file, dependents empty;
2. every raw import resolved, an edge emitted when the target is a node;
3. dependents derived as a fold over the finished edge list.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .models import DependencyEdge, FileExtraction, SourceFileRecord
from .resolver import DependencyResolver

logger = logging.getLogger(__name__)

ParsedFile = Tuple[str, Optional[str], FileExtraction]


def build_nodes(parsed: Iterable[ParsedFile]) -> Dict[str, SourceFileRecord]:
    nodes: Dict[str, SourceFileRecord] = {}
    for path, language, extraction in parsed:
        if path in nodes:
            raise ValueError(f"duplicate node path: {path}")
        nodes[path] = SourceFileRecord(
            path=path,
            name=posixpath.basename(path),
            language=language,
            symbols=extraction.symbols,
            imports=extraction.imports,
            exports=extraction.exports,
            extractor=extraction.extractor,
        )
    return nodes


def resolve_edges(
    nodes: Mapping[str, SourceFileRecord],
    resolver: DependencyResolver,
) -> Tuple[Dict[str, SourceFileRecord], List[DependencyEdge]]:
    """Resolve every raw import; return updated records and the edge list."""
    resolved_nodes: Dict[str, SourceFileRecord] = {}
    edges: List[DependencyEdge] = []

    for path, node in nodes.items():
        imports = []
        dependencies: List[str] = []
        for imp in node.imports:
            target = resolver.resolve(imp.specifier, path)
            if target is not None and target not in nodes:
                target = None
            imports.append(replace(imp, resolved=target))
            if target is None:
                continue
            edges.append(DependencyEdge(source=path, target=target, kind=imp.kind, names=imp.names))
            if target not in dependencies:
                dependencies.append(target)
        resolved_nodes[path] = replace(node, imports=tuple(imports), dependencies=tuple(dependencies))

    return resolved_nodes, edges


def fold_dependents(
    paths: Iterable[str],
    edges: Sequence[DependencyEdge],
) -> Dict[str, Tuple[str, ...]]:
    """target -> importing files, one entry per edge, in edge order."""
    dependents: Dict[str, List[str]] = {path: [] for path in paths}
    for edge in edges:
        dependents[edge.target].append(edge.source)
    return {path: tuple(sources) for path, sources in dependents.items()}


def build_graph(
    parsed: Iterable[ParsedFile],
    resolver_factory=DependencyResolver,
) -> Tuple[Dict[str, SourceFileRecord], List[DependencyEdge]]:
    """Run all passes; the returned records carry dependencies and dependents."""
    nodes = build_nodes(parsed)
    resolver = resolver_factory(nodes.keys())
    resolved, edges = resolve_edges(nodes, resolver)
    dependents = fold_dependents(resolved.keys(), edges)
    final = {path: replace(node, dependents=dependents[path]) for path, node in resolved.items()}
    logger.debug("Graph built: %d nodes, %d edges", len(final), len(edges))
    return final, edges


def assign_clusters(
    nodes: Mapping[str, SourceFileRecord],
    cluster_of: Mapping[str, str],
) -> Dict[str, SourceFileRecord]:
    return {path: replace(node, cluster=cluster_of.get(path)) for path, node in nodes.items()}
