"""Built-in defaults for dependency analysis."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, FrozenSet, Tuple

BASE_DIR = Path(os.environ.get("DEPGRAPH_HOME", str(Path.home() / ".depgraph"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"
PROJECT_CONFIG_NAME = ".depgraph.toml"

# Resolution priority order; also the default inventory filter.
SOURCE_EXTENSIONS: Tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".py")

INDEX_NAMES: Tuple[str, ...] = ("index", "__init__")

LANGUAGE_MAP: Dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".py": "python",
}

SKIP_DIRS: FrozenSet[str] = frozenset({
    "node_modules", ".git", "dist", "build", ".next", "coverage", ".cache",
    "tmp", "temp", "__pycache__", ".venv", "venv", ".tox", ".mypy_cache",
    ".pytest_cache", "site-packages",
})

SKIP_PATTERNS: Tuple[str, ...] = ("*.egg-info",)

COMPONENT_WRAPPERS: FrozenSet[str] = frozenset({"memo", "forwardRef", "lazy", "createContext"})

ROOT_CLUSTER = "(root)"

DEFAULT_WORKERS = 1
