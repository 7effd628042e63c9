"""Grammar-based extraction of top-level symbols, imports and exports.

JavaScript, TypeScript and TSX are parsed with Tree-sitter; Python is parsed
with the built-in ``ast`` module.  Only declarations directly at file scope
become symbols.  Imports are gathered from the whole tree (``require`` and
``import()`` calls may sit anywhere).

None of the entry points raise: malformed input, or a grammar package that
is not installed, produces an empty ``FileExtraction`` so the caller can
fall back to the lexical extractor.
"""

from __future__ import annotations

import ast
import importlib
import logging
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Set, Tuple

from .config import COMPONENT_WRAPPERS
from .lexical import python_specifier
from .models import FileExtraction, ImportKind, RawImport, Symbol, SymbolKind

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tree-sitter grammar loading
# ---------------------------------------------------------------------------

# language tag -> (grammar module, factory returning the Language capsule)
_GRAMMAR_MODULES: Dict[str, Tuple[str, str]] = {
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
    "javascript": ("tree_sitter_javascript", "language"),
}

_LOCK = threading.Lock()
_LANGUAGES: Dict[str, Any] = {}
_MISSING: Set[str] = set()
# Parser objects are not shared between threads.
_local = threading.local()


def _load_language(language: str) -> Optional[Any]:
    with _LOCK:
        if language in _LANGUAGES:
            return _LANGUAGES[language]
        if language in _MISSING:
            return None

        spec = _GRAMMAR_MODULES.get(language)
        if spec is None:
            _MISSING.add(language)
            return None
        mod_name, factory = spec

        try:
            from tree_sitter import Language  # type: ignore[import-untyped]

            mod = importlib.import_module(mod_name)
            ts_lang = Language(getattr(mod, factory)())
        except ImportError:
            logger.warning(
                "Grammar package '%s' not installed for language '%s'; "
                "using lexical extraction. Install with: pip install tree-sitter %s",
                mod_name, language, mod_name.replace("_", "-"),
            )
            _MISSING.add(language)
            return None
        except (AttributeError, TypeError, ValueError) as exc:
            logger.warning("Could not load tree-sitter grammar for %s: %s", language, exc)
            _MISSING.add(language)
            return None

        _LANGUAGES[language] = ts_lang
        logger.debug("Loaded tree-sitter grammar for %s", language)
        return ts_lang


def get_parser(language: str) -> Optional[Any]:
    """Return this thread's Tree-sitter parser for *language*, or None."""
    ts_lang = _load_language(language)
    if ts_lang is None:
        return None

    cache: Optional[Dict[str, Any]] = getattr(_local, "parsers", None)
    if cache is None:
        cache = {}
        _local.parsers = cache
    parser = cache.get(language)
    if parser is None:
        from tree_sitter import Parser as TSParser  # type: ignore[import-untyped]

        parser = TSParser(ts_lang)
        cache[language] = parser
    return parser


def tree_sitter_available(language: str) -> bool:
    return _load_language(language) is not None


# ---------------------------------------------------------------------------
# Tree-sitter node helpers
# ---------------------------------------------------------------------------

_FUNCTION_VALUES = frozenset({"arrow_function", "function_expression", "function", "generator_function"})
_MARKUP_NODES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})


def _text(node: Any) -> str:
    if node is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _line(node: Any) -> int:
    return node.start_point[0] + 1


def _string_value(node: Any) -> Optional[str]:
    if node is None or node.type != "string":
        return None
    raw = _text(node)
    return raw[1:-1] if len(raw) >= 2 else None


def _has_token(node: Any, token: str) -> bool:
    return any(not child.is_named and child.type == token for child in node.children)


def _first_named(node: Any, node_type: str) -> Optional[Any]:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def _is_component_name(name: str) -> bool:
    return name[:1].isupper()


def _contains_markup(node: Any) -> bool:
    if node is None:
        return False
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _MARKUP_NODES:
            return True
        stack.extend(current.named_children)
    return False


def _is_wrapper_call(node: Any) -> bool:
    if node is None or node.type != "call_expression":
        return False
    func = node.child_by_field_name("function")
    return func is not None and func.type == "identifier" and _text(func) in COMPONENT_WRAPPERS


# ---------------------------------------------------------------------------
# Tree-sitter: symbols and exports
# ---------------------------------------------------------------------------

def _named_symbol(decl: Any, kind: SymbolKind, exported: bool, line: int) -> List[Symbol]:
    name_node = decl.child_by_field_name("name")
    if name_node is None:
        return []
    return [Symbol(name=_text(name_node), kind=kind, exported=exported, line=line)]


def _variable_kind(name: str, keyword: str, value: Any, exported: bool) -> SymbolKind:
    component_candidate = exported and _is_component_name(name)
    if value is not None and value.type in _FUNCTION_VALUES:
        if component_candidate and _contains_markup(value):
            return SymbolKind.COMPONENT
        return SymbolKind.FUNCTION
    if keyword == "const":
        if component_candidate and _is_wrapper_call(value):
            return SymbolKind.COMPONENT
        return SymbolKind.CONST
    return SymbolKind.VARIABLE


def _declaration_symbols(decl: Any, exported: bool, line: int) -> List[Symbol]:
    kind_type = decl.type

    if kind_type in ("function_declaration", "generator_function_declaration", "function_signature"):
        symbols = _named_symbol(decl, SymbolKind.FUNCTION, exported, line)
        if (
            symbols
            and exported
            and _is_component_name(symbols[0].name)
            and _contains_markup(decl.child_by_field_name("body"))
        ):
            symbols = [replace(symbols[0], kind=SymbolKind.COMPONENT)]
        return symbols
    if kind_type in ("class_declaration", "abstract_class_declaration"):
        return _named_symbol(decl, SymbolKind.CLASS, exported, line)
    if kind_type == "interface_declaration":
        return _named_symbol(decl, SymbolKind.INTERFACE, exported, line)
    if kind_type == "type_alias_declaration":
        return _named_symbol(decl, SymbolKind.TYPE, exported, line)
    if kind_type == "enum_declaration":
        return _named_symbol(decl, SymbolKind.ENUM, exported, line)

    if kind_type in ("lexical_declaration", "variable_declaration"):
        keyword = decl.children[0].type if decl.children else "var"
        symbols: List[Symbol] = []
        for declarator in decl.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            # destructuring patterns are not reported
            if name_node is None or name_node.type != "identifier":
                continue
            name = _text(name_node)
            value = declarator.child_by_field_name("value")
            symbols.append(Symbol(
                name=name,
                kind=_variable_kind(name, keyword, value, exported),
                exported=exported,
                line=line,
            ))
        return symbols

    return []


def _export_clause_names(clause: Any, prefer_alias: bool) -> List[str]:
    names: List[str] = []
    for spec in clause.named_children:
        if spec.type != "export_specifier":
            continue
        node = spec.child_by_field_name("alias") if prefer_alias else None
        if node is None:
            node = spec.child_by_field_name("name")
        if node is not None:
            names.append(_text(node).strip("'\""))
    return names


def _top_level(root: Any) -> Tuple[List[Symbol], List[str]]:
    """Symbols and export names declared directly at file scope."""
    symbols: List[Symbol] = []
    exports: List[str] = []
    default_targets: List[Tuple[str, int]] = []

    for stmt in root.named_children:
        line = _line(stmt)
        if stmt.type != "export_statement":
            symbols.extend(_declaration_symbols(stmt, False, line))
            continue

        is_default = _has_token(stmt, "default")
        decl = stmt.child_by_field_name("declaration")
        if decl is not None:
            declared = _declaration_symbols(decl, True, line)
            symbols.extend(declared)
            if declared:
                exports.extend(s.name for s in declared)
            elif is_default:
                exports.append("default")
            continue

        value = stmt.child_by_field_name("value")
        if value is not None:
            if value.type == "identifier":
                default_targets.append((_text(value), line))
            exports.append("default")
            continue

        clause = _first_named(stmt, "export_clause")
        namespace = _first_named(stmt, "namespace_export")
        if clause is not None:
            exports.extend(_export_clause_names(clause, prefer_alias=True))
        elif namespace is not None:
            ident = namespace.named_children[-1] if namespace.named_children else None
            exports.append(_text(ident).strip("'\"") or "*")
        elif _has_token(stmt, "*"):
            exports.append("*")

    # export default Foo: marks a local declaration exported, or records Foo
    for name, line in default_targets:
        for i, sym in enumerate(symbols):
            if sym.name == name:
                symbols[i] = replace(sym, exported=True)
                break
        else:
            symbols.append(Symbol(name=name, kind=SymbolKind.FUNCTION, exported=True, line=line))

    return _unique_symbols(symbols), _unique(exports)


def _unique_symbols(symbols: List[Symbol]) -> List[Symbol]:
    seen: Set[str] = set()
    out: List[Symbol] = []
    for sym in symbols:
        if sym.name in seen:
            continue
        seen.add(sym.name)
        out.append(sym)
    return out


def _unique(names: List[str]) -> List[str]:
    return list(dict.fromkeys(n for n in names if n))


# ---------------------------------------------------------------------------
# Tree-sitter: imports
# ---------------------------------------------------------------------------

def _import_clause_names(clause: Any) -> List[str]:
    names: List[str] = []
    for child in clause.named_children:
        if child.type == "identifier":
            names.append(_text(child))
        elif child.type == "namespace_import":
            ident = _first_named(child, "identifier")
            if ident is not None:
                names.append(f"* as {_text(ident)}")
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                name_node = spec.child_by_field_name("name")
                if name_node is not None:
                    names.append(_text(name_node).strip("'\""))
    return names


def _import_statement(node: Any) -> Optional[RawImport]:
    specifier = _string_value(node.child_by_field_name("source"))
    if specifier is None:
        return None
    kind = ImportKind.TYPE_ONLY if _has_token(node, "type") else ImportKind.STATIC
    clause = _first_named(node, "import_clause")
    names = _import_clause_names(clause) if clause is not None else []
    return RawImport(specifier=specifier, kind=kind, names=tuple(names) or None, line=_line(node))


def _reexport(node: Any) -> Optional[RawImport]:
    specifier = _string_value(node.child_by_field_name("source"))
    if specifier is None:
        return None
    kind = ImportKind.TYPE_ONLY if _has_token(node, "type") else ImportKind.STATIC
    clause = _first_named(node, "export_clause")
    if clause is not None:
        names: List[str] = _export_clause_names(clause, prefer_alias=False)
    else:
        names = ["*"]
    return RawImport(specifier=specifier, kind=kind, names=tuple(names) or None, line=_line(node))


def _call_import(node: Any) -> Optional[RawImport]:
    func = node.child_by_field_name("function")
    args = node.child_by_field_name("arguments")
    if func is None or args is None:
        return None
    if func.type == "identifier" and _text(func) == "require":
        kind = ImportKind.REQUIRE
    elif func.type == "import":
        kind = ImportKind.DYNAMIC
    else:
        return None
    first = next((c for c in args.named_children if c.type != "comment"), None)
    specifier = _string_value(first)
    if specifier is None:
        return None
    return RawImport(specifier=specifier, kind=kind, line=_line(node))


def _collect_imports(root: Any) -> List[RawImport]:
    """Walk the whole tree in document order with an explicit stack."""
    imports: List[RawImport] = []
    stack = [root]
    while stack:
        node = stack.pop()
        found: Optional[RawImport] = None
        if node.type == "import_statement":
            found = _import_statement(node)
        elif node.type == "export_statement" and node.child_by_field_name("source") is not None:
            found = _reexport(node)
        elif node.type == "call_expression":
            found = _call_import(node)
        if found is not None:
            imports.append(found)
        stack.extend(reversed(node.named_children))
    return imports


def parse_tree_sitter(content: str, language: str) -> FileExtraction:
    """Structured extraction for JavaScript / TypeScript / TSX source."""
    parser = get_parser(language)
    if parser is None:
        return FileExtraction()

    try:
        tree = parser.parse(content.encode("utf-8"))
        root = tree.root_node
        if root.has_error:
            logger.debug("Tree-sitter reported syntax errors (%s); discarding tree", language)
            return FileExtraction()
        symbols, exports = _top_level(root)
        imports = _collect_imports(root)
    except Exception as exc:
        logger.debug("Tree-sitter extraction failed for %s source: %s", language, exc)
        return FileExtraction()

    return FileExtraction(
        symbols=tuple(symbols),
        imports=tuple(imports),
        exports=tuple(exports),
        extractor="structured",
    )


# ---------------------------------------------------------------------------
# Python (built-in ast)
# ---------------------------------------------------------------------------

_ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})
_INTERFACE_BASES = frozenset({"Protocol", "ABC"})


def _base_name(expr: ast.expr) -> str:
    if isinstance(expr, ast.Name):
        return expr.id
    if isinstance(expr, ast.Attribute):
        return expr.attr
    if isinstance(expr, ast.Subscript):
        return _base_name(expr.value)
    return ""


def _is_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _assignment_kind(name: str, value: Optional[ast.expr]) -> SymbolKind:
    if isinstance(value, ast.Lambda):
        return SymbolKind.FUNCTION
    if name.isupper():
        return SymbolKind.CONST
    return SymbolKind.VARIABLE


def _python_statement_symbols(stmt: ast.stmt) -> List[Symbol]:
    line = stmt.lineno
    if isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return [Symbol(stmt.name, SymbolKind.FUNCTION, line=line)]
    if isinstance(stmt, ast.ClassDef):
        bases = {_base_name(b) for b in stmt.bases}
        if bases & _ENUM_BASES:
            kind = SymbolKind.ENUM
        elif bases & _INTERFACE_BASES:
            kind = SymbolKind.INTERFACE
        else:
            kind = SymbolKind.CLASS
        return [Symbol(stmt.name, kind, line=line)]
    type_alias = getattr(ast, "TypeAlias", None)
    if type_alias is not None and isinstance(stmt, type_alias):
        return [Symbol(stmt.name.id, SymbolKind.TYPE, line=line)]
    if isinstance(stmt, ast.Assign):
        return [
            Symbol(t.id, _assignment_kind(t.id, stmt.value), line=line)
            for t in stmt.targets
            if isinstance(t, ast.Name) and not _is_dunder(t.id)
        ]
    if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
        name = stmt.target.id
        if _is_dunder(name):
            return []
        if _base_name(stmt.annotation) == "TypeAlias":
            return [Symbol(name, SymbolKind.TYPE, line=line)]
        return [Symbol(name, _assignment_kind(name, stmt.value), line=line)]
    return []


def _dunder_all(tree: ast.Module) -> Optional[List[str]]:
    names: Optional[List[str]] = None
    for stmt in tree.body:
        target: Optional[ast.expr] = None
        value: Optional[ast.expr] = None
        if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1:
            target, value = stmt.targets[0], stmt.value
        elif isinstance(stmt, (ast.AugAssign, ast.AnnAssign)):
            target, value = stmt.target, stmt.value
        if not (isinstance(target, ast.Name) and target.id == "__all__"):
            continue
        if not isinstance(value, (ast.List, ast.Tuple)):
            continue
        listed = [
            elt.value for elt in value.elts
            if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
        ]
        if isinstance(stmt, ast.AugAssign) and names is not None:
            names.extend(listed)
        else:
            names = listed
    return names


def _is_type_checking(test: ast.expr) -> bool:
    return _base_name(test) == "TYPE_CHECKING"


def _dynamic_python_import(call: ast.Call) -> Optional[str]:
    name = _base_name(call.func)
    if name not in ("import_module", "__import__") or not call.args:
        return None
    arg = call.args[0]
    if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
        return arg.value
    return None


def _python_imports(tree: ast.Module) -> List[RawImport]:
    imports: List[RawImport] = []
    stack: List[Tuple[ast.AST, bool]] = [(node, False) for node in reversed(tree.body)]
    while stack:
        node, type_only = stack.pop()
        static_kind = ImportKind.TYPE_ONLY if type_only else ImportKind.STATIC

        if isinstance(node, ast.Import):
            for alias in node.names:
                imports.append(RawImport(specifier=alias.name, kind=static_kind, line=node.lineno))
            continue
        if isinstance(node, ast.ImportFrom):
            dots = "." * (node.level or 0)
            if node.module:
                imports.append(RawImport(
                    specifier=python_specifier(dots, node.module),
                    kind=static_kind,
                    names=tuple(a.name for a in node.names),
                    line=node.lineno,
                ))
            else:
                for alias in node.names:
                    imports.append(RawImport(
                        specifier=python_specifier(dots, alias.name),
                        kind=static_kind,
                        names=(alias.name,),
                        line=node.lineno,
                    ))
            continue
        if isinstance(node, ast.If) and _is_type_checking(node.test):
            stack.extend((child, type_only) for child in reversed(node.orelse))
            stack.extend((child, True) for child in reversed(node.body))
            continue
        if isinstance(node, ast.Call):
            specifier = _dynamic_python_import(node)
            if specifier is not None:
                imports.append(RawImport(specifier=specifier, kind=ImportKind.DYNAMIC, line=node.lineno))

        stack.extend((child, type_only) for child in reversed(list(ast.iter_child_nodes(node))))
    return imports


def parse_python(content: str) -> FileExtraction:
    """Structured extraction for Python source."""
    try:
        tree = ast.parse(content)
    except (SyntaxError, ValueError, RecursionError, MemoryError) as exc:
        logger.debug("Python source did not parse: %s", exc)
        return FileExtraction()

    public = _dunder_all(tree)
    symbols: List[Symbol] = []
    for stmt in tree.body:
        for sym in _python_statement_symbols(stmt):
            exported = sym.name in public if public is not None else not sym.name.startswith("_")
            symbols.append(replace(sym, exported=exported))

    if public is not None:
        exports = _unique(public)
    else:
        exports = [s.name for s in symbols if s.exported]

    return FileExtraction(
        symbols=tuple(_unique_symbols(symbols)),
        imports=tuple(_python_imports(tree)),
        exports=tuple(_unique(exports)),
        extractor="structured",
    )
