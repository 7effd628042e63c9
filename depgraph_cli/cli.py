"""Typer-based CLI for dependency-graph analysis."""

from __future__ import annotations

import json
import logging
import posixpath
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .analyzer import AnalysisError, analyze
from .graph_export import export_dot, export_json, snapshot_to_dict
from .models import CycleKind, GraphSnapshot

console = Console()

app = typer.Typer(
    help="Static dependency-graph analysis for JavaScript, TypeScript and Python projects.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"depgraph v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    )
):
    """depgraph: map files, imports, cycles and clusters of a source tree."""
    pass


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _run(project_path: Path, workers: Optional[int] = None, timeout: Optional[float] = None) -> GraphSnapshot:
    try:
        return analyze(project_path, workers=workers, timeout=timeout)
    except AnalysisError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _render_summary(snapshot: GraphSnapshot) -> None:
    stats = snapshot.stats
    table = Table(title=f"Dependency graph: {snapshot.root}", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="bold")
    table.add_row("Files", str(stats.total_files))
    table.add_row("Edges", str(stats.total_edges))
    table.add_row("Files with external imports", str(stats.external_dependencies))
    table.add_row("Cycles", str(stats.cycle_count))
    depth = f"{stats.max_depth} ({stats.deepest_file})" if stats.deepest_file else str(stats.max_depth)
    table.add_row("Max depth", depth)
    table.add_row("Avg edges per file", f"{stats.avg_edges_per_file:.2f}")
    table.add_row("Most connected", stats.most_connected_file or "-")
    table.add_row("Isolated files", str(len(stats.least_connected_files)))
    console.print(table)

    if snapshot.clusters:
        clusters = Table(title="Clusters")
        clusters.add_column("Cluster", style="cyan")
        clusters.add_column("Files", justify="right")
        clusters.add_column("Internal", justify="right")
        clusters.add_column("External", justify="right")
        clusters.add_column("Cohesion", justify="right")
        for cluster in snapshot.clusters:
            clusters.add_row(
                cluster.id,
                str(len(cluster.files)),
                str(cluster.internal),
                str(cluster.external),
                f"{cluster.cohesion:.2f}",
            )
        console.print(clusters)


@app.command("analyze")
def analyze_command(
    project_path: Path = typer.Argument(..., help="Root directory of the project to analyse."),
    as_json: bool = typer.Option(False, "--json", help="Print the full graph as JSON."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Parallel file workers."),
    timeout: Optional[float] = typer.Option(None, "--timeout", "-t", help="Abort after this many seconds."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """Analyse a project and print a summary."""
    _setup_logging(verbose)
    snapshot = _run(project_path, workers=workers, timeout=timeout)
    if as_json:
        typer.echo(json.dumps(snapshot_to_dict(snapshot), indent=2))
        return
    _render_summary(snapshot)


@app.command("file")
def file_command(
    project_path: Path = typer.Argument(..., help="Root directory of the project."),
    relative_path: str = typer.Argument(..., help="File path relative to the root, e.g. src/app.ts."),
):
    """Show exports, imports, dependents and cluster of one file."""
    _setup_logging(False)
    snapshot = _run(project_path)
    key = posixpath.normpath(Path(relative_path).as_posix())
    node = snapshot.get(key)
    if node is None:
        raise typer.BadParameter(f"File '{relative_path}' is not part of the analysed project.")

    console.print(f"[bold]{node.path}[/bold]  cluster=[cyan]{node.cluster}[/cyan]  extractor={node.extractor}")
    console.print(f"Exports: {', '.join(node.exports) if node.exports else '-'}")

    if node.symbols:
        symbols = Table(title="Symbols")
        symbols.add_column("Name")
        symbols.add_column("Kind")
        symbols.add_column("Exported")
        symbols.add_column("Line", justify="right")
        for sym in node.symbols:
            symbols.add_row(sym.name, sym.kind.value, "yes" if sym.exported else "", str(sym.line))
        console.print(symbols)

    imports = Table(title="Imports")
    imports.add_column("Specifier")
    imports.add_column("Kind")
    imports.add_column("Resolved")
    for imp in node.imports:
        resolved = imp.resolved or ("external" if imp.external else "[red]unresolved[/red]")
        imports.add_row(imp.specifier, imp.kind.value, resolved)
    console.print(imports)

    console.print(f"Dependents: {', '.join(node.dependents) if node.dependents else '-'}")


@app.command("cycles")
def cycles_command(
    project_path: Path = typer.Argument(..., help="Root directory of the project."),
    unique: bool = typer.Option(False, "--unique", help="Collapse rotations of the same loop."),
):
    """List circular dependencies; exits with status 1 when any exist."""
    _setup_logging(False)
    snapshot = _run(project_path)
    cycles = snapshot.unique_cycles() if unique else list(snapshot.cycles)
    if not cycles:
        console.print("[green]No circular dependencies found.[/green]")
        return
    for cycle in cycles:
        color = "red" if cycle.kind == CycleKind.DIRECT else "yellow"
        console.print(f"[{color}]{cycle.kind.value}[/{color}] ({cycle.length}): {' -> '.join(cycle.path)}")
    raise typer.Exit(code=1)


@app.command("export")
def export_command(
    project_path: Path = typer.Argument(..., help="Root directory of the project."),
    fmt: str = typer.Option("json", "--format", "-f", help="Export format: json or dot."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path."),
):
    """Export the graph as JSON or Graphviz DOT."""
    fmt = fmt.lower()
    if fmt not in {"json", "dot"}:
        raise typer.BadParameter("Format must be one of: json, dot")

    _setup_logging(False)
    snapshot = _run(project_path)
    text = export_json(snapshot, output) if fmt == "json" else export_dot(snapshot, output)
    if output is None:
        typer.echo(text)
    else:
        typer.echo(f"Exported graph to {output}")


if __name__ == "__main__":
    app()
