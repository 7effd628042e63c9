"""The ``analyze()`` pipeline: collect, extract, build, and summarise."""

from __future__ import annotations

import functools
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Union

from . import extractor
from .clusters import cluster_map, compute_clusters
from .collector import collect_files, make_skip_predicate
from .config_manager import AnalysisConfig, load_analysis_config
from .cycles import find_cycles
from .graph import ParsedFile, assign_clusters, build_graph
from .models import FileExtraction, GraphSnapshot
from .resolver import DependencyResolver
from .stats import compute_stats

logger = logging.getLogger(__name__)


class AnalysisError(Exception):
    """Base class for failures that abort a whole analysis run."""


class InvalidRootError(AnalysisError, ValueError):
    """The analysis root does not exist or is not a directory."""


class AnalysisTimeoutError(AnalysisError, TimeoutError):
    """The caller-imposed time limit expired before the graph was complete."""


def _validate_root(root_path: Union[str, Path]) -> Path:
    root = Path(root_path).expanduser()
    if not root.exists():
        raise InvalidRootError(f"Analysis root does not exist: {root}")
    if not root.is_dir():
        raise InvalidRootError(f"Analysis root is not a directory: {root}")
    return root.resolve()


def parse_file(root: Path, rel_path: str) -> Optional[ParsedFile]:
    """Read and extract one file; ``None`` when it cannot be read."""
    try:
        content = (root / rel_path).read_text(encoding="utf-8", errors="ignore")
    except OSError as exc:
        logger.debug("Skipping unreadable file %s: %s", rel_path, exc)
        return None
    language = extractor.language_for(rel_path)
    try:
        extraction = extractor.extract(content, language)
    except Exception as exc:
        logger.debug("Extraction failed for %s: %s", rel_path, exc)
        extraction = FileExtraction()
    return rel_path, language, extraction


def _parse_sequential(root: Path, files: List[str], deadline: Optional[float]) -> List[Optional[ParsedFile]]:
    results: List[Optional[ParsedFile]] = []
    for rel_path in files:
        if deadline is not None and time.monotonic() > deadline:
            raise AnalysisTimeoutError(
                f"Analysis of {root} exceeded its time limit after {len(results)} of {len(files)} files"
            )
        results.append(parse_file(root, rel_path))
    return results


def _parse_parallel(
    root: Path, files: List[str], workers: int, timeout: Optional[float]
) -> List[Optional[ParsedFile]]:
    executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="depgraph")
    try:
        results = list(executor.map(lambda rel: parse_file(root, rel), files, timeout=timeout))
    except FuturesTimeoutError as exc:
        executor.shutdown(wait=False, cancel_futures=True)
        raise AnalysisTimeoutError(f"Analysis of {root} exceeded its time limit of {timeout}s") from exc
    executor.shutdown(wait=True)
    return results


def analyze(
    root_path: Union[str, Path],
    *,
    config: Optional[AnalysisConfig] = None,
    workers: Optional[int] = None,
    timeout: Optional[float] = None,
) -> GraphSnapshot:
    """Analyse the source tree under *root_path* and return its graph.

    Args:
        root_path: Directory to analyse.
        config: Settings to use instead of loading them from TOML files.
        workers: Threads for reading and extracting files; overrides config.
        timeout: Seconds allowed for the whole run; overrides config.

    Returns:
        An immutable ``GraphSnapshot``.

    Raises:
        InvalidRootError: *root_path* is missing or not a directory.
        AnalysisTimeoutError: *timeout* expired; no partial graph is returned.
    """
    root = _validate_root(root_path)
    cfg = config if config is not None else load_analysis_config(root)
    if workers is not None:
        cfg = replace(cfg, workers=max(1, workers))
    if timeout is not None:
        cfg = replace(cfg, timeout=timeout if timeout > 0 else None)

    started = time.monotonic()
    deadline = started + cfg.timeout if cfg.timeout is not None else None

    files = collect_files(root, cfg.extensions, make_skip_predicate(cfg))
    logger.info("Analysing %d files under %s", len(files), root)

    if cfg.workers > 1 and len(files) > 1:
        remaining = deadline - time.monotonic() if deadline is not None else None
        parsed = _parse_parallel(root, files, cfg.workers, remaining)
    else:
        parsed = _parse_sequential(root, files, deadline)

    nodes, edges = build_graph(
        (p for p in parsed if p is not None),
        resolver_factory=functools.partial(DependencyResolver, extensions=cfg.extensions),
    )
    cycles = find_cycles(list(nodes), edges)
    clusters = compute_clusters(nodes)
    nodes = assign_clusters(nodes, cluster_map(clusters))
    stats = compute_stats(nodes, edges, cycles)

    if deadline is not None and time.monotonic() > deadline:
        raise AnalysisTimeoutError(f"Analysis of {root} exceeded its time limit of {cfg.timeout}s")

    logger.info(
        "Analysis complete: %d files, %d edges, %d cycles in %.2fs",
        stats.total_files,
        stats.total_edges,
        stats.cycle_count,
        time.monotonic() - started,
    )
    return GraphSnapshot(
        root=str(root),
        nodes=nodes,
        edges=tuple(edges),
        cycles=tuple(cycles),
        clusters=tuple(clusters),
        stats=stats,
    )

