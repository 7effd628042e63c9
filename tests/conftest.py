"""Pytest configuration and fixtures for depgraph CLI tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, Iterable, Optional, Tuple

import pytest

from depgraph_cli.models import FileExtraction, ImportKind, RawImport


@pytest.fixture(autouse=True)
def _isolated_global_config(tmp_path_factory, monkeypatch):
    """Keep a developer's ~/.depgraph/config.toml out of the test run."""
    home = tmp_path_factory.mktemp("depgraph_home")
    monkeypatch.setattr("depgraph_cli.config.BASE_DIR", home)
    monkeypatch.setattr("depgraph_cli.config.CONFIG_FILE", home / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Get path to sample test project."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def write_tree(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative path: content}`` under ``temp_dir`` and return the root."""

    def _write(files: Dict[str, str]) -> Path:
        for rel, content in files.items():
            target = temp_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return temp_dir

    return _write


def make_extraction(*specifiers: str, kind: ImportKind = ImportKind.STATIC) -> FileExtraction:
    """A parse result carrying only the given import specifiers."""
    return FileExtraction(imports=tuple(RawImport(specifier=s, kind=kind) for s in specifiers))


@pytest.fixture
def parsed_files() -> Callable[..., Tuple[Tuple[str, Optional[str], FileExtraction], ...]]:
    """Turn ``{path: [specifier, ...]}`` into graph-builder input."""

    def _build(imports: Dict[str, Iterable[str]], language: Optional[str] = "typescript"):
        return tuple((path, language, make_extraction(*specs)) for path, specs in imports.items())

    return _build
