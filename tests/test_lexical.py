"""Tests for the regex-based fallback extractor."""

from depgraph_cli import lexical
from depgraph_cli.models import ImportKind, SymbolKind


TS_SOURCE = '''import { a, b as c } from './a';
import type { Shape } from "./types";
import Default, * as ns from '../lib';
import './side-effect';
export { helper } from './helper';
export * from './all';

export async function load() {}
function local() {}
export const handler = async (req) => req;
export class Store {}
export interface Props { id: string }
export type Id = string;
export enum Color { Red }
export const LIMIT = 10;
'''


def test_symbols_sorted_by_line_with_kinds():
    """Each pattern contributes its kind; results come back in source order."""
    symbols = lexical.extract_symbols(TS_SOURCE, "typescript")
    by_name = {s.name: s for s in symbols}

    assert [s.line for s in symbols] == sorted(s.line for s in symbols)
    assert by_name["load"].kind == SymbolKind.FUNCTION
    assert by_name["local"].kind == SymbolKind.FUNCTION
    assert by_name["handler"].kind == SymbolKind.FUNCTION
    assert by_name["Store"].kind == SymbolKind.CLASS
    assert by_name["Props"].kind == SymbolKind.INTERFACE
    assert by_name["Id"].kind == SymbolKind.TYPE
    assert by_name["Color"].kind == SymbolKind.ENUM
    assert by_name["LIMIT"].kind == SymbolKind.CONST


def test_exported_flag_follows_export_keyword():
    symbols = {s.name: s for s in lexical.extract_symbols(TS_SOURCE, "typescript")}

    assert symbols["load"].exported is True
    assert symbols["local"].exported is False


def test_first_match_wins_for_duplicate_names():
    """An arrow function matches the function pattern before the const one."""
    source = "export const run = () => 1;\n"
    symbols = lexical.extract_symbols(source, "javascript")

    assert len(symbols) == 1
    assert symbols[0].kind == SymbolKind.FUNCTION


def test_unknown_language_yields_nothing():
    assert lexical.extract_symbols("function x() {}", "cobol") == []
    assert lexical.extract_symbols("function x() {}", None) == []
    assert lexical.extract("function x() {}", None).empty


def test_never_raises_on_garbage():
    result = lexical.extract("\x00\x01 export {{{{ import from '", "typescript")

    assert result.extractor in ("lexical", "none")


def test_imports_in_source_order():
    imports = lexical.extract(TS_SOURCE, "typescript").imports
    specifiers = [imp.specifier for imp in imports]

    assert specifiers == ["./a", "./types", "../lib", "./side-effect", "./helper", "./all"]


def test_import_names_use_source_side_names():
    imports = {imp.specifier: imp for imp in lexical.extract(TS_SOURCE, "typescript").imports}

    assert imports["./a"].names == ("a", "b")
    assert imports["../lib"].names == ("Default", "* as ns")
    assert imports["./side-effect"].names is None


def test_type_only_import_kind():
    imports = {imp.specifier: imp for imp in lexical.extract(TS_SOURCE, "typescript").imports}

    assert imports["./types"].kind == ImportKind.TYPE_ONLY
    assert imports["./a"].kind == ImportKind.STATIC


def test_reexports_are_static_imports():
    imports = {imp.specifier: imp for imp in lexical.extract(TS_SOURCE, "typescript").imports}

    assert imports["./helper"].kind == ImportKind.STATIC
    assert imports["./helper"].names == ("helper",)
    assert imports["./all"].names == ("*",)


def test_require_and_dynamic_import():
    source = (
        "const fs = require('fs');\n"
        "async function later() {\n"
        "  const mod = await import('./lazy');\n"
        "}\n"
    )
    imports = lexical.extract(source, "javascript").imports

    assert [(i.specifier, i.kind) for i in imports] == [
        ("fs", ImportKind.REQUIRE),
        ("./lazy", ImportKind.DYNAMIC),
    ]
    assert imports[1].line == 3


def test_exports_collected():
    exports = lexical.extract(TS_SOURCE, "typescript").exports

    assert "helper" in exports
    assert "*" in exports
    assert "load" in exports
    assert "LIMIT" in exports
    assert "local" not in exports


def test_export_default_and_clause_alias():
    source = "const a = 1;\nexport { a as alpha };\nexport default 42;\n"
    exports = lexical.extract(source, "javascript").exports

    assert exports == ("alpha", "default")


def test_python_relative_imports_become_paths():
    source = (
        "import os, sys as system\n"
        "from . import sibling, other\n"
        "from .models import Record\n"
        "from ..core.base import (\n"
        "    Base,\n"
        "    Mixin as M,\n"
        ")\n"
    )
    imports = lexical.extract(source, "python").imports

    assert [i.specifier for i in imports] == [
        "os", "sys", "./sibling", "./other", "./models", "../core/base",
    ]
    assert imports[-1].names == ("Base", "Mixin")


def test_python_specifier():
    assert lexical.python_specifier("", "os.path") == "os.path"
    assert lexical.python_specifier(".", "a.b") == "./a/b"
    assert lexical.python_specifier("..", "pkg") == "../pkg"
    assert lexical.python_specifier("...", "x") == "../../x"


def test_python_exports_prefer_dunder_all():
    source = "__all__ = ['public_fn']\n\ndef public_fn():\n    pass\n\ndef other():\n    pass\n"
    extraction = lexical.extract(source, "python")

    assert extraction.exports == ("public_fn",)
    assert {s.name for s in extraction.symbols} == {"public_fn", "other"}


def test_parse_import_clause():
    assert lexical.parse_import_clause("React, { useState, useEffect as effect }") == (
        "React", "useState", "useEffect",
    )
    assert lexical.parse_import_clause("* as path") == ("* as path",)
