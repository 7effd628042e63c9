"""Resolution of import specifiers to files in the scanned inventory."""

from __future__ import annotations

import logging
import posixpath
from typing import AbstractSet, Iterable, Optional, Sequence

from .config import INDEX_NAMES, SOURCE_EXTENSIONS
from .models import is_external_specifier

logger = logging.getLogger(__name__)


class DependencyResolver:
    """Map ``(specifier, importing file)`` to a root-relative inventory path.

    External specifiers (anything not starting with ``.`` or ``/``) are never
    resolved.  Internal ones are tried as the literal path, then with each
    extension appended in priority order, then as a directory holding an
    index file; the first path present in the inventory wins.
    """

    def __init__(
        self,
        inventory: Iterable[str],
        extensions: Sequence[str] = SOURCE_EXTENSIONS,
        index_names: Sequence[str] = INDEX_NAMES,
    ) -> None:
        self.inventory: AbstractSet[str] = frozenset(inventory)
        self.extensions = tuple(extensions)
        self.index_names = tuple(index_names)

    def base_path(self, specifier: str, importer: str) -> Optional[str]:
        """Normalised root-relative path a specifier points at, or None if it
        escapes the root."""
        if specifier.startswith("/"):
            joined = specifier.lstrip("/")
        else:
            joined = posixpath.join(posixpath.dirname(importer), specifier)
        normalised = posixpath.normpath(joined) if joined else "."
        if normalised == ".." or normalised.startswith("../"):
            return None
        return normalised

    def candidates(self, base: str) -> Iterable[str]:
        yield base
        for ext in self.extensions:
            yield base + ext
        directory = "" if base == "." else base + "/"
        for name in self.index_names:
            for ext in self.extensions:
                yield f"{directory}{name}{ext}"

    def resolve(self, specifier: str, importer: str) -> Optional[str]:
        if not specifier or is_external_specifier(specifier):
            return None
        base = self.base_path(specifier, importer)
        if base is None:
            logger.debug("Specifier %r in %s escapes the analysis root", specifier, importer)
            return None
        for candidate in self.candidates(base):
            if candidate in self.inventory:
                return candidate
        logger.debug("Unresolved specifier %r in %s", specifier, importer)
        return None
