"""Directory-based clustering and cohesion."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping

from .config import ROOT_CLUSTER
from .models import Cluster, SourceFileRecord

logger = logging.getLogger(__name__)


def cluster_key(path: str) -> str:
    """First path segment under the root, ``(root)`` for top-level files."""
    head, sep, _ = path.partition("/")
    return head if sep else ROOT_CLUSTER


def compute_clusters(nodes: Mapping[str, SourceFileRecord]) -> List[Cluster]:
    """Group *nodes* by :func:`cluster_key` and count their outgoing imports.

    An import is internal when it resolved to a file in the same cluster.
    Everything else counts as external, including unresolved specifiers
    and package imports.  Clusters are returned in first-seen order.
    """
    members: Dict[str, List[str]] = {}
    internal: Dict[str, int] = {}
    external: Dict[str, int] = {}

    for path in nodes:
        key = cluster_key(path)
        members.setdefault(key, []).append(path)
        internal.setdefault(key, 0)
        external.setdefault(key, 0)

    for path, node in nodes.items():
        key = cluster_key(path)
        for imp in node.imports:
            if imp.resolved is not None and imp.resolved in nodes and cluster_key(imp.resolved) == key:
                internal[key] += 1
            else:
                external[key] += 1

    clusters = [
        Cluster(id=key, files=tuple(files), internal=internal[key], external=external[key])
        for key, files in members.items()
    ]
    for cluster in clusters:
        logger.debug(
            "Cluster %s: %d files, cohesion %.2f", cluster.id, len(cluster.files), cluster.cohesion
        )
    return clusters


def cluster_map(clusters: List[Cluster]) -> Dict[str, str]:
    return {path: cluster.id for cluster in clusters for path in cluster.files}
