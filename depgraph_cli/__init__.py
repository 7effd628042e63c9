"""Static dependency-graph analysis for JavaScript, TypeScript and Python trees."""

from __future__ import annotations

__version__ = "0.1.0"

from .analyzer import (
    AnalysisError,
    AnalysisTimeoutError,
    InvalidRootError,
    analyze,
)
from .models import GraphSnapshot

__all__ = [
    "AnalysisError",
    "AnalysisTimeoutError",
    "GraphSnapshot",
    "InvalidRootError",
    "__version__",
    "analyze",
]
