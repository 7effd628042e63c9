"""Filesystem enumeration of candidate source files."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Callable, Iterable, List

from .config_manager import AnalysisConfig

logger = logging.getLogger(__name__)

SkipPredicate = Callable[[str], bool]


def make_skip_predicate(cfg: AnalysisConfig) -> SkipPredicate:
    """Return a predicate telling whether a directory name should be pruned."""
    skip_dirs = cfg.skip_dirs
    patterns = cfg.skip_patterns
    include_hidden = cfg.include_hidden

    def _skip(name: str) -> bool:
        if name in skip_dirs:
            return True
        if not include_hidden and name.startswith("."):
            return True
        return any(fnmatch.fnmatch(name, pat) for pat in patterns)

    return _skip


def collect_files(
    root: Path,
    extensions: Iterable[str],
    skip: SkipPredicate,
) -> List[str]:
    """List source files under *root* as sorted, root-relative POSIX paths.

    Skipped directories are pruned rather than descended into.  Directories
    that cannot be listed are omitted without raising.
    """
    wanted = {ext.lower() for ext in extensions}
    found: List[str] = []

    def _on_error(exc: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", exc.filename, exc)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(d for d in dirnames if not skip(d))
        rel_dir = Path(dirpath).relative_to(root)
        for filename in filenames:
            if os.path.splitext(filename)[1].lower() not in wanted:
                continue
            if skip(filename):
                continue
            found.append((rel_dir / filename).as_posix())

    found.sort()
    logger.debug("Collected %d source files under %s", len(found), root)
    return found
