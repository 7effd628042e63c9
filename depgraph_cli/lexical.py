"""Regex-based extraction used when structured parsing is unavailable.

Pattern templates are applied in order; the first match for a name wins and
later duplicates are dropped.  Results are sorted by line.  Nothing here
raises on odd input: an unknown language simply yields nothing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from .models import FileExtraction, ImportKind, RawImport, Symbol, SymbolKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternTemplate:
    pattern: Pattern[str]
    kind: SymbolKind
    name_group: int = 1


def _p(regex: str, kind: SymbolKind, group: int = 1, flags: int = 0) -> PatternTemplate:
    return PatternTemplate(re.compile(regex, flags), kind, group)


TYPESCRIPT_PATTERNS: Tuple[PatternTemplate, ...] = (
    _p(r"export\s+(async\s+)?function\s+(\w+)", SymbolKind.FUNCTION, 2),
    _p(r"^(?!export)(async\s+)?function\s+(\w+)", SymbolKind.FUNCTION, 2, re.MULTILINE),
    _p(r"(?:export\s+)?(?:const|let)\s+(\w+)\s*=\s*(?:async\s*)?\([^)]*\)\s*=>", SymbolKind.FUNCTION),
    _p(r"(?:export\s+)?class\s+(\w+)", SymbolKind.CLASS),
    _p(r"(?:export\s+)?interface\s+(\w+)", SymbolKind.INTERFACE),
    _p(r"(?:export\s+)?type\s+(\w+)\s*=", SymbolKind.TYPE),
    _p(r"(?:export\s+)?enum\s+(\w+)", SymbolKind.ENUM),
    _p(r"(?:export\s+)?const\s+(\w+)\s*(?::|=)", SymbolKind.CONST),
    _p(
        r"(?:export\s+)?(?:function|const)\s+(\w+)\s*(?::\s*React\.FC|:\s*FC|.*?return\s+(?:<|\(?\s*<))",
        SymbolKind.COMPONENT,
    ),
)

JAVASCRIPT_PATTERNS: Tuple[PatternTemplate, ...] = (
    _p(r"export\s+(async\s+)?function\s+(\w+)", SymbolKind.FUNCTION, 2),
    _p(r"^(?!export)(async\s+)?function\s+(\w+)", SymbolKind.FUNCTION, 2, re.MULTILINE),
    _p(r"(?:export\s+)?(?:const|let)\s+(\w+)\s*=\s*(?:async\s*)?\([^)]*\)\s*=>", SymbolKind.FUNCTION),
    _p(r"(?:export\s+)?class\s+(\w+)", SymbolKind.CLASS),
    _p(r"(?:export\s+)?const\s+(\w+)\s*=", SymbolKind.CONST),
    _p(
        r"(?:export\s+)?(?:function|const)\s+(\w+)\s*\([^)]*\)\s*\{[\s\S]*?return\s+(?:<|\(?\s*<)",
        SymbolKind.COMPONENT,
    ),
)

PYTHON_PATTERNS: Tuple[PatternTemplate, ...] = (
    _p(r"^class\s+(\w+)", SymbolKind.CLASS, flags=re.MULTILINE),
    _p(r"^def\s+(\w+)", SymbolKind.FUNCTION, flags=re.MULTILINE),
    _p(r"^async\s+def\s+(\w+)", SymbolKind.FUNCTION, flags=re.MULTILINE),
    _p(r"^(\w+)\s*=\s*(?:lambda|.*?def)", SymbolKind.FUNCTION, flags=re.MULTILINE),
)

SYMBOL_PATTERNS: Dict[str, Tuple[PatternTemplate, ...]] = {
    "typescript": TYPESCRIPT_PATTERNS,
    "tsx": TYPESCRIPT_PATTERNS,
    "javascript": JAVASCRIPT_PATTERNS,
    "python": PYTHON_PATTERNS,
}


def _line_at(content: str, offset: int) -> int:
    return content.count("\n", 0, offset) + 1


def _js_exported(match: "re.Match[str]", name: str) -> bool:
    return match.group(0).lstrip().startswith("export")


def _py_exported(match: "re.Match[str]", name: str) -> bool:
    return not name.startswith("_")


_EXPORT_RULES: Dict[str, Callable[["re.Match[str]", str], bool]] = {
    "typescript": _js_exported,
    "tsx": _js_exported,
    "javascript": _js_exported,
    "python": _py_exported,
}


def extract_symbols(content: str, language: Optional[str]) -> List[Symbol]:
    """Apply the language's pattern templates to *content*."""
    patterns = SYMBOL_PATTERNS.get(language or "")
    if not patterns:
        logger.debug("No lexical patterns for language %s", language)
        return []
    exported_rule = _EXPORT_RULES[language]

    symbols: List[Symbol] = []
    seen = set()
    for template in patterns:
        for match in template.pattern.finditer(content):
            name = match.group(template.name_group)
            if not name or name in seen:
                continue
            seen.add(name)
            symbols.append(
                Symbol(
                    name=name,
                    kind=template.kind,
                    exported=exported_rule(match, name),
                    line=_line_at(content, match.start(template.name_group)),
                )
            )

    symbols.sort(key=lambda s: s.line)
    return symbols


# ---------------------------------------------------------------------------
# Imports / exports
# ---------------------------------------------------------------------------

_JS_IMPORT_FROM = re.compile(
    r"^[ \t]*import\s+(?P<type>type\s+)?(?P<clause>[\w$*{}\s,]+?)\s+from\s+['\"](?P<spec>[^'\"]+)['\"]",
    re.MULTILINE,
)
_JS_IMPORT_BARE = re.compile(r"^[ \t]*import\s+['\"](?P<spec>[^'\"]+)['\"]", re.MULTILINE)
_JS_REEXPORT = re.compile(
    r"^[ \t]*export\s+(?:type\s+)?(?P<clause>\*(?:\s+as\s+[\w$]+)?|\{[^}]*\})\s*from\s+['\"](?P<spec>[^'\"]+)['\"]",
    re.MULTILINE,
)
_JS_REQUIRE = re.compile(r"\brequire\s*\(\s*['\"](?P<spec>[^'\"]+)['\"]\s*\)")
_JS_DYNAMIC = re.compile(r"\bimport\s*\(\s*['\"](?P<spec>[^'\"]+)['\"]\s*\)")

_JS_EXPORT_DECL = re.compile(
    r"export\s+(?:declare\s+)?(?:abstract\s+)?(?:async\s+)?(?:const|let|var|function\*?|class|interface|type|enum)\s+([\w$]+)"
)
_JS_EXPORT_CLAUSE = re.compile(r"export\s+(?:type\s+)?\{\s*([^}]*)\}")
_JS_EXPORT_DEFAULT = re.compile(r"export\s+default\s+(?:async\s+)?(?:function\s*\*?\s*([\w$]+)|class\s+([\w$]+)|([\w$]+))")
_JS_EXPORT_STAR = re.compile(r"export\s+\*(?:\s+as\s+([\w$]+))?\s+from")

_PY_FROM_IMPORT = re.compile(r"^[ \t]*from\s+(?P<dots>\.*)(?P<module>[\w.]*)\s+import\s+(?P<names>\([^)]*\)|[^\n#]+)", re.MULTILINE)
_PY_IMPORT = re.compile(r"^[ \t]*import\s+(?P<modules>[\w., \t]+)", re.MULTILINE)
_PY_ALL = re.compile(r"^__all__\s*=\s*[\[(](?P<names>[^\])]*)[\])]", re.MULTILINE)


def _split_names(text: str) -> List[str]:
    return [part.strip() for part in text.replace("\n", " ").split(",") if part.strip()]


def parse_import_clause(clause: str) -> Tuple[str, ...]:
    """Turn ``Default, { a, b as c }`` / ``* as ns`` into binding names.

    Named bindings are reported by their source-side name.
    """
    names: List[str] = []
    clause = clause.strip()
    brace = re.search(r"\{([^}]*)\}", clause)
    head = clause[: brace.start()] if brace else clause
    for part in _split_names(head):
        star = re.match(r"\*\s+as\s+([\w$]+)", part)
        if star:
            names.append(f"* as {star.group(1)}")
        elif re.fullmatch(r"[\w$]+", part):
            names.append(part)
    if brace:
        for part in _split_names(brace.group(1)):
            part = re.sub(r"^type\s+", "", part)
            names.append(part.split(" as ")[0].strip())
    tail = clause[brace.end():] if brace else ""
    for part in _split_names(tail):
        star = re.match(r"\*\s+as\s+([\w$]+)", part)
        if star:
            names.append(f"* as {star.group(1)}")
    return tuple(n for n in names if n)


def _js_imports(content: str) -> List[Tuple[int, RawImport]]:
    found: List[Tuple[int, RawImport]] = []

    for m in _JS_IMPORT_FROM.finditer(content):
        kind = ImportKind.TYPE_ONLY if m.group("type") else ImportKind.STATIC
        names = parse_import_clause(m.group("clause"))
        found.append((m.start(), RawImport(
            specifier=m.group("spec"),
            kind=kind,
            names=names or None,
            line=_line_at(content, m.start()),
        )))

    for m in _JS_IMPORT_BARE.finditer(content):
        found.append((m.start(), RawImport(
            specifier=m.group("spec"), kind=ImportKind.STATIC,
            line=_line_at(content, m.start()),
        )))

    for m in _JS_REEXPORT.finditer(content):
        clause = m.group("clause")
        if clause.startswith("{"):
            names: Optional[Tuple[str, ...]] = tuple(
                p.split(" as ")[0].strip() for p in _split_names(clause[1:-1])
            ) or None
        else:
            names = ("*",)
        found.append((m.start(), RawImport(
            specifier=m.group("spec"), kind=ImportKind.STATIC, names=names,
            line=_line_at(content, m.start()),
        )))

    for m in _JS_REQUIRE.finditer(content):
        found.append((m.start(), RawImport(
            specifier=m.group("spec"), kind=ImportKind.REQUIRE,
            line=_line_at(content, m.start()),
        )))

    for m in _JS_DYNAMIC.finditer(content):
        found.append((m.start(), RawImport(
            specifier=m.group("spec"), kind=ImportKind.DYNAMIC,
            line=_line_at(content, m.start()),
        )))

    return found


def _js_exports(content: str) -> List[Tuple[int, str]]:
    found: List[Tuple[int, str]] = []
    for m in _JS_EXPORT_DECL.finditer(content):
        found.append((m.start(), m.group(1)))
    for m in _JS_EXPORT_CLAUSE.finditer(content):
        for part in _split_names(m.group(1)):
            part = re.sub(r"^type\s+", "", part)
            exported = part.split(" as ")[-1].strip()
            if exported:
                found.append((m.start(), exported))
    for m in _JS_EXPORT_DEFAULT.finditer(content):
        name = m.group(1) or m.group(2)
        if name:
            found.append((m.start(), name))
        else:
            found.append((m.start(), "default"))
    for m in _JS_EXPORT_STAR.finditer(content):
        found.append((m.start(), m.group(1) or "*"))
    return found


def python_specifier(dots: str, module: str) -> str:
    """Map a Python relative import to a path-style specifier.

    ``.`` -> ``./``, ``..`` -> ``../``; dotted module parts become path parts.
    Absolute imports keep their dotted name and are therefore external.
    """
    if not dots:
        return module
    prefix = "./" if len(dots) == 1 else "../" * (len(dots) - 1)
    return prefix + module.replace(".", "/")


def _py_imports(content: str) -> List[Tuple[int, RawImport]]:
    found: List[Tuple[int, RawImport]] = []
    for m in _PY_FROM_IMPORT.finditer(content):
        dots, module = m.group("dots"), m.group("module")
        names = tuple(
            n.split(" as ")[0].strip()
            for n in _split_names(m.group("names").strip("() \t"))
        )
        line = _line_at(content, m.start("dots"))
        if dots and not module:
            for name in names:
                found.append((m.start(), RawImport(
                    specifier=python_specifier(dots, name), names=(name,), line=line,
                )))
        elif module:
            found.append((m.start(), RawImport(
                specifier=python_specifier(dots, module), names=names or None, line=line,
            )))
    for m in _PY_IMPORT.finditer(content):
        line = _line_at(content, m.start("modules"))
        for part in _split_names(m.group("modules")):
            module = part.split(" as ")[0].strip()
            if module:
                found.append((m.start(), RawImport(specifier=module, line=line)))
    return found


def _py_exports(content: str, symbols: List[Symbol]) -> List[str]:
    m = _PY_ALL.search(content)
    if m:
        return [n.strip("'\" ") for n in _split_names(m.group("names")) if n.strip("'\" ")]
    return [s.name for s in symbols if s.exported]


def extract(content: str, language: Optional[str]) -> FileExtraction:
    """Full lexical extraction: symbols, imports and exports."""
    symbols = extract_symbols(content, language)
    if language in ("typescript", "tsx", "javascript"):
        imports = [imp for _, imp in sorted(_js_imports(content), key=lambda t: t[0])]
        exports = _dedupe(name for _, name in sorted(_js_exports(content), key=lambda t: t[0]))
    elif language == "python":
        imports = [imp for _, imp in sorted(_py_imports(content), key=lambda t: t[0])]
        exports = _dedupe(_py_exports(content, symbols))
    else:
        imports, exports = [], []

    return FileExtraction(
        symbols=tuple(symbols),
        imports=tuple(imports),
        exports=tuple(exports),
        extractor="lexical" if symbols else "none",
    )


def _dedupe(names) -> List[str]:
    seen = set()
    out: List[str] = []
    for name in names:
        if name not in seen:
            seen.add(name)
            out.append(name)
    return out
