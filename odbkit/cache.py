"""Per-file caching of parsed stores."""

from __future__ import annotations

import os
from typing import Any, Callable, Generic, Protocol, TypeVar

from .features import FeaturesDataStore, FeaturesParser
from .font import FontDataStore, FontParser
from .structured_text import StructuredTextDataStore, StructuredTextParser

T = TypeVar("T")


class _Parser(Protocol[T]):
    def parse(self) -> T: ...


class CachedParser(Generic[T]):
    """Parses each file once and hands back the same store afterwards."""

    def __init__(self, parser_factory: Callable[[str], Any]) -> None:
        self._factory = parser_factory
        self._cache: dict[str, T] = {}

    def parse(self, filename: str | os.PathLike[str]) -> T:
        """Return the store for *filename*, parsing it on first use."""
        key = os.fspath(filename)
        try:
            return self._cache[key]
        except KeyError:
            pass
        store = self._factory(key).parse()
        self._cache[key] = store
        return store

    def clear(self) -> None:
        """Forget every cached store."""
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)

    def __contains__(self, filename: object) -> bool:
        if isinstance(filename, (str, os.PathLike)):
            return os.fspath(filename) in self._cache
        return False


_features_cache: CachedParser[FeaturesDataStore] = CachedParser(FeaturesParser)
_font_cache: CachedParser[FontDataStore] = CachedParser(FontParser)
_structured_text_cache: CachedParser[StructuredTextDataStore] = CachedParser(
    StructuredTextParser
)


def parse_features(filename: str | os.PathLike[str]) -> FeaturesDataStore:
    """Parse a features file through the shared cache."""
    return _features_cache.parse(filename)


def parse_font_file(filename: str | os.PathLike[str]) -> FontDataStore:
    """Parse a font file through the shared cache."""
    return _font_cache.parse(filename)


def parse_structured_text_file(
    filename: str | os.PathLike[str],
) -> StructuredTextDataStore:
    """Parse a structured text file through the shared cache."""
    return _structured_text_cache.parse(filename)