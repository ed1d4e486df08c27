"""Structured text files: ``KEY=VALUE`` lines and named ``{ }`` blocks."""

from __future__ import annotations

import os
import sys
from enum import Enum
from typing import TextIO


class InvalidKeyError(KeyError):
    """Raised when a key has no value in a structured text store."""


class StructuredTextSyntaxError(ValueError):
    """Raised when structured text cannot be parsed."""


class _PutMode(Enum):
    KEY_VALUE = 0
    BLOCK = 1


class StructuredTextDataStore:
    """Key/value pairs plus named, possibly repeated, nested blocks."""

    def __init__(self) -> None:
        self._mode = _PutMode.KEY_VALUE
        self._values: dict[str, str] = {}
        self._blocks: list[tuple[str, StructuredTextDataStore]] = []
        self._current_block: StructuredTextDataStore | None = None
        self._current_name = ""

    def put(self, key: str, value: str) -> None:
        """Store a value here, or in the innermost open block."""
        if self._mode is _PutMode.BLOCK and self._current_block is not None:
            self._current_block.put(key, value)
        else:
            self._values[key] = value

    def new_element(self, name: str) -> None:
        """Open a block named *name* inside the innermost open block."""
        if self._current_block is not None:
            self._current_block.new_element(name)
        else:
            self._mode = _PutMode.BLOCK
            self._current_name = name
            self._current_block = StructuredTextDataStore()

    def commit_element(self) -> bool:
        """Close the innermost open block; False when no block is open."""
        if self._current_block is None:
            return False
        if not self._current_block.commit_element():
            self._mode = _PutMode.KEY_VALUE
            self._blocks.append((self._current_name, self._current_block))
            self._current_block = None
        return True

    def get(self, key: str) -> str:
        """Return the value for *key*, raising InvalidKeyError if absent."""
        try:
            return self._values[key]
        except KeyError:
            raise InvalidKeyError(key) from None

    def blocks(self, key: str) -> list[StructuredTextDataStore]:
        """Return the committed blocks named *key*, in file order."""
        return [block for name, block in self._blocks if name == key]

    def values(self) -> dict[str, str]:
        """Return the key/value pairs, ordered by key."""
        return dict(sorted(self._values.items()))

    def dump(self, file: TextIO | None = None) -> None:
        """Write the store in readable, indented form."""
        self._dump(file if file is not None else sys.stdout, 0)

    def _dump(self, out: TextIO, depth: int) -> None:
        indent = " " * (depth * 2)
        for key, value in sorted(self._values.items()):
            out.write(f"{indent}{key} = {value}\n")
        for name, block in sorted(self._blocks, key=lambda item: item[0]):
            out.write(f"{indent}{name} {{\n")
            block._dump(out, depth + 1)
            out.write(f"{indent}}}\n")


def parse_structured_text(text: str) -> StructuredTextDataStore:
    """Parse structured text into a new store."""
    store = StructuredTextDataStore()
    depth = 0
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.endswith("{"):
            name = line[:-1].strip()
            if not name:
                raise StructuredTextSyntaxError(f"line {lineno}: block without a name")
            store.new_element(name)
            depth += 1
        elif line == "}":
            if not store.commit_element():
                raise StructuredTextSyntaxError(f"line {lineno}: unmatched '}}'")
            depth -= 1
        elif "=" in line:
            key, _, value = line.partition("=")
            key = key.strip()
            if not key:
                raise StructuredTextSyntaxError(f"line {lineno}: missing key")
            store.put(key, value.strip())
        else:
            raise StructuredTextSyntaxError(f"line {lineno}: unexpected {line!r}")
    if depth:
        raise StructuredTextSyntaxError("unterminated block at end of input")
    return store


class StructuredTextParser:
    """Parses a structured text file."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self.filename = os.fspath(filename)

    def parse(self) -> StructuredTextDataStore:
        """Read and parse the file; OSError if it cannot be opened."""
        with open(self.filename, encoding="utf-8", errors="replace") as fh:
            return parse_structured_text(fh.read())