"""Per-language extraction strategies and the two-step extraction pipeline."""

from __future__ import annotations

import functools
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from . import lexical
from .config import LANGUAGE_MAP
from .models import FileExtraction
from .parser import parse_python, parse_tree_sitter, tree_sitter_available

logger = logging.getLogger(__name__)

StructuredParser = Callable[[str], FileExtraction]


@dataclass(frozen=True)
class LanguageStrategy:
    """How one language tag is handled: an optional grammar-based parser
    followed by the lexical pattern set for that tag."""

    language: str
    structured: Optional[StructuredParser] = None

    @property
    def patterns(self) -> Tuple[lexical.PatternTemplate, ...]:
        return lexical.SYMBOL_PATTERNS.get(self.language, ())

    def lexical(self, content: str) -> FileExtraction:
        return lexical.extract(content, self.language)


def _tree_sitter_strategy(language: str) -> LanguageStrategy:
    structured: Optional[StructuredParser] = None
    if tree_sitter_available(language):
        structured = functools.partial(parse_tree_sitter, language=language)
    return LanguageStrategy(language=language, structured=structured)


@functools.lru_cache(maxsize=None)
def strategy_for(language: Optional[str]) -> Optional[LanguageStrategy]:
    """Return the strategy for *language*; ``None`` for unrecognised tags."""
    if language in ("typescript", "tsx", "javascript"):
        return _tree_sitter_strategy(language)
    if language == "python":
        return LanguageStrategy(language="python", structured=parse_python)
    return None


def language_for(path: str) -> Optional[str]:
    return LANGUAGE_MAP.get(os.path.splitext(path)[1].lower())


def combine(structured: Optional[FileExtraction], fallback: Optional[FileExtraction]) -> FileExtraction:
    """Merge the two steps: symbols from whichever step produced them,
    imports and exports from the structured step unless it found none."""
    if fallback is None:
        return structured if structured is not None else FileExtraction()
    if structured is None:
        return fallback
    return FileExtraction(
        symbols=fallback.symbols,
        imports=structured.imports or fallback.imports,
        exports=structured.exports or fallback.exports,
        extractor=fallback.extractor,
    )


def extract(content: str, language: Optional[str]) -> FileExtraction:
    """Structured parse, then lexical fallback when it is unavailable or
    finds no symbols.  Never raises."""
    strategy = strategy_for(language)
    if strategy is None:
        return FileExtraction()

    structured = strategy.structured(content) if strategy.structured is not None else None
    if structured is not None and structured.symbols:
        return structured

    logger.debug("Using lexical extraction for %s content", language)
    return combine(structured, strategy.lexical(content))


def extract_file(path: str, content: str) -> FileExtraction:
    return extract(content, language_for(path))

