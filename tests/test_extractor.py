"""Tests for the per-language strategy registry and fallback pipeline."""

from depgraph_cli import extractor
from depgraph_cli.extractor import LanguageStrategy, combine, extract, language_for, strategy_for
from depgraph_cli.models import FileExtraction, RawImport, Symbol, SymbolKind


def test_language_for_extension():
    assert language_for("src/a.ts") == "typescript"
    assert language_for("src/a.tsx") == "tsx"
    assert language_for("lib/a.mjs") == "javascript"
    assert language_for("pkg/mod.py") == "python"
    assert language_for("README.md") is None


def test_python_strategy_is_structured():
    strategy = strategy_for("python")

    assert strategy is not None
    assert strategy.structured is not None


def test_unknown_language_has_no_strategy():
    assert strategy_for("cobol") is None
    assert extract("anything", "cobol") == FileExtraction()


def test_structured_result_with_symbols_wins():
    extraction = extract("def run():\n    pass\n", "python")

    assert extraction.extractor == "structured"
    assert [s.name for s in extraction.symbols] == ["run"]


def test_lexical_fallback_when_structured_fails():
    """A Python file that does not parse still gets lexical symbols."""
    source = "def ok():\n    pass\n\ndef broken(:\n"
    extraction = extract(source, "python")

    assert extraction.extractor == "lexical"
    assert [s.name for s in extraction.symbols] == ["ok", "broken"]


def test_fallback_keeps_structured_imports(monkeypatch):
    structured = FileExtraction(imports=(RawImport("./a"),), extractor="structured")
    monkeypatch.setattr(
        extractor, "strategy_for", lambda language: LanguageStrategy("python", lambda content: structured)
    )

    extraction = extract("def helper():\n    pass\n", "python")

    assert [s.name for s in extraction.symbols] == ["helper"]
    assert [i.specifier for i in extraction.imports] == ["./a"]


def test_file_without_anything_is_empty():
    extraction = extract("# just a comment\n", "python")

    assert extraction.empty
    assert extraction.extractor == "none"


def test_combine_prefers_fallback_symbols():
    structured = FileExtraction(exports=("x",))
    fallback = FileExtraction(
        symbols=(Symbol("x", SymbolKind.CONST, True, 1),),
        imports=(RawImport("./y"),),
        extractor="lexical",
    )
    merged = combine(structured, fallback)

    assert merged.symbols == fallback.symbols
    assert merged.imports == fallback.imports
    assert merged.exports == ("x",)
    assert merged.extractor == "lexical"


def test_combine_without_structured():
    fallback = FileExtraction(extractor="lexical")

    assert combine(None, fallback) is fallback


def test_strategy_exposes_lexical_patterns():
    assert strategy_for("tsx").patterns == strategy_for("typescript").patterns
    assert len(strategy_for("javascript").patterns) > 0
