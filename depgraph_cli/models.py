"""Core data models produced by the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple


class SymbolKind(str, Enum):
    FUNCTION = "function"
    CLASS = "class"
    INTERFACE = "interface"
    TYPE = "type"
    ENUM = "enum"
    CONST = "const"
    VARIABLE = "variable"
    COMPONENT = "component"


class ImportKind(str, Enum):
    STATIC = "import"
    DYNAMIC = "dynamic"
    REQUIRE = "require"
    TYPE_ONLY = "type"


class CycleKind(str, Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"


def is_external_specifier(specifier: str) -> bool:
    """A specifier is external unless it is a relative or absolute path."""
    return not specifier.startswith((".", "/"))


@dataclass(frozen=True)
class Symbol:
    name: str
    kind: SymbolKind
    exported: bool = False
    line: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "exported": self.exported,
            "line": self.line,
        }


@dataclass(frozen=True)
class RawImport:
    """An import as written in source, plus where it resolved to (if anywhere)."""

    specifier: str
    kind: ImportKind = ImportKind.STATIC
    names: Optional[Tuple[str, ...]] = None
    line: int = 0
    resolved: Optional[str] = None

    @property
    def external(self) -> bool:
        return is_external_specifier(self.specifier)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "specifier": self.specifier,
            "kind": self.kind.value,
            "names": list(self.names) if self.names is not None else None,
            "external": self.external,
            "line": self.line,
            "resolved": self.resolved,
        }


@dataclass(frozen=True)
class FileExtraction:
    """Per-file parse result, before any graph-level information exists."""

    symbols: Tuple[Symbol, ...] = ()
    imports: Tuple[RawImport, ...] = ()
    exports: Tuple[str, ...] = ()
    extractor: str = "none"

    @property
    def empty(self) -> bool:
        return not (self.symbols or self.imports or self.exports)


@dataclass(frozen=True)
class SourceFileRecord:
    path: str
    name: str
    language: Optional[str]
    symbols: Tuple[Symbol, ...] = ()
    imports: Tuple[RawImport, ...] = ()
    exports: Tuple[str, ...] = ()
    dependencies: Tuple[str, ...] = ()
    dependents: Tuple[str, ...] = ()
    cluster: Optional[str] = None
    extractor: str = "none"

    @property
    def connections(self) -> int:
        return len(self.imports) + len(self.dependents)

    @property
    def has_external_imports(self) -> bool:
        return any(imp.external for imp in self.imports)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "language": self.language,
            "symbols": [s.to_dict() for s in self.symbols],
            "imports": [i.to_dict() for i in self.imports],
            "exports": list(self.exports),
            "dependencies": list(self.dependencies),
            "dependents": list(self.dependents),
            "cluster": self.cluster,
            "extractor": self.extractor,
        }


@dataclass(frozen=True)
class DependencyEdge:
    source: str
    target: str
    kind: ImportKind = ImportKind.STATIC
    names: Optional[Tuple[str, ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "kind": self.kind.value,
            "names": list(self.names) if self.names is not None else None,
        }


@dataclass(frozen=True)
class Cycle:
    """A circular chain; ``path`` repeats its first node at the end."""

    path: Tuple[str, ...]

    @property
    def length(self) -> int:
        return len(set(self.path))

    @property
    def kind(self) -> CycleKind:
        return CycleKind.DIRECT if self.length <= 2 else CycleKind.INDIRECT

    def canonical(self) -> Tuple[str, ...]:
        """Rotation-independent key: the loop rotated to start at its smallest id."""
        loop = self.path[:-1]
        if not loop:
            return ()
        pivot = loop.index(min(loop))
        return loop[pivot:] + loop[:pivot]

    def to_dict(self) -> Dict[str, Any]:
        return {"path": list(self.path), "length": self.length, "kind": self.kind.value}


@dataclass(frozen=True)
class Cluster:
    id: str
    files: Tuple[str, ...]
    internal: int = 0
    external: int = 0

    @property
    def cohesion(self) -> float:
        total = self.internal + self.external
        return self.internal / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "files": list(self.files),
            "internal": self.internal,
            "external": self.external,
            "cohesion": self.cohesion,
        }


@dataclass(frozen=True)
class GraphStats:
    total_files: int = 0
    total_edges: int = 0
    external_dependencies: int = 0
    cycle_count: int = 0
    max_depth: int = 0
    deepest_file: Optional[str] = None
    avg_edges_per_file: float = 0.0
    most_connected_file: Optional[str] = None
    least_connected_files: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_files": self.total_files,
            "total_edges": self.total_edges,
            "external_dependencies": self.external_dependencies,
            "cycle_count": self.cycle_count,
            "max_depth": self.max_depth,
            "deepest_file": self.deepest_file,
            "avg_edges_per_file": self.avg_edges_per_file,
            "most_connected_file": self.most_connected_file,
            "least_connected_files": list(self.least_connected_files),
        }


@dataclass(frozen=True)
class GraphSnapshot:
    """Immutable result of one analysis run."""

    root: str
    nodes: Mapping[str, SourceFileRecord]
    edges: Tuple[DependencyEdge, ...] = ()
    cycles: Tuple[Cycle, ...] = ()
    clusters: Tuple[Cluster, ...] = ()
    stats: GraphStats = field(default_factory=GraphStats)

    def __post_init__(self) -> None:
        if not isinstance(self.nodes, MappingProxyType):
            object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))

    def __getitem__(self, path: str) -> SourceFileRecord:
        return self.nodes[path]

    def __contains__(self, path: object) -> bool:
        return path in self.nodes

    def get(self, path: str) -> Optional[SourceFileRecord]:
        return self.nodes.get(path)

    def node_list(self) -> List[SourceFileRecord]:
        """Nodes in inventory order, for transport."""
        return list(self.nodes.values())

    def unique_cycles(self) -> List[Cycle]:
        """Cycles with rotations of the same loop collapsed, first occurrence kept."""
        seen = set()
        result: List[Cycle] = []
        for cycle in self.cycles:
            key = cycle.canonical()
            if key in seen:
                continue
            seen.add(key)
            result.append(cycle)
        return result
