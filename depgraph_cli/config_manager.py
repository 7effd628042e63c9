"""Configuration manager for dependency analysis using TOML files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple

import toml

from . import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisConfig:
    """Effective settings for one ``analyze()`` run."""

    extensions: Tuple[str, ...] = config.SOURCE_EXTENSIONS
    skip_dirs: FrozenSet[str] = config.SKIP_DIRS
    skip_patterns: Tuple[str, ...] = config.SKIP_PATTERNS
    include_hidden: bool = False
    workers: int = config.DEFAULT_WORKERS
    timeout: Optional[float] = None


def load_full_config(path: Path) -> Dict[str, Any]:
    """Load an entire TOML file, returning ``{}`` when missing or malformed."""
    if not path.is_file():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config file %s: %s", path, exc)
        return {}


def apply_section(base: AnalysisConfig, section: Dict[str, Any], source: str = "") -> AnalysisConfig:
    """Overlay an ``[analysis]`` table on top of *base*.

    Args:
        base: Configuration to start from.
        section: Parsed ``[analysis]`` table.
        source: Where the table came from, used in log messages.

    Returns:
        A new ``AnalysisConfig``; *base* is left untouched.
    """
    if not isinstance(section, dict):
        logger.warning("Ignoring non-table [analysis] section in %s", source or "config")
        return base

    updates: Dict[str, Any] = {}

    for key, value in section.items():
        if key == "extensions" and isinstance(value, list):
            updates["extensions"] = tuple(
                v if v.startswith(".") else f".{v}" for v in value if isinstance(v, str) and v
            )
        elif key == "skip_dirs" and isinstance(value, list):
            updates["skip_dirs"] = base.skip_dirs | frozenset(v for v in value if isinstance(v, str))
        elif key == "skip_patterns" and isinstance(value, list):
            updates["skip_patterns"] = base.skip_patterns + tuple(
                v for v in value if isinstance(v, str)
            )
        elif key == "include_hidden" and isinstance(value, bool):
            updates["include_hidden"] = value
        elif key == "workers" and isinstance(value, int) and not isinstance(value, bool):
            updates["workers"] = max(1, value)
        elif key == "timeout" and isinstance(value, (int, float)) and not isinstance(value, bool):
            updates["timeout"] = float(value) if value > 0 else None
        else:
            logger.warning("Unknown or invalid analysis setting '%s' in %s", key, source or "config")

    return replace(base, **updates)


def load_analysis_config(
    root: Optional[Path] = None,
    config_file: Optional[Path] = None,
) -> AnalysisConfig:
    """Build the effective configuration for analysing *root*.

    Defaults are overlaid with the global ``config.toml`` and then with the
    project's ``.depgraph.toml``; later sources win.
    """
    cfg = AnalysisConfig()

    global_file = config_file if config_file is not None else config.CONFIG_FILE
    global_section = load_full_config(global_file).get("analysis")
    if global_section is not None:
        cfg = apply_section(cfg, global_section, str(global_file))

    if root is not None:
        project_file = root / config.PROJECT_CONFIG_NAME
        project_section = load_full_config(project_file).get("analysis")
        if project_section is not None:
            cfg = apply_section(cfg, project_section, str(project_file))

    return cfg
