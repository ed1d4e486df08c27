"""Stroke fonts: sizes, offset and per-character line strokes."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .shapes import CharRecord, parse_char_line_record, parse_char_record


@dataclass
class FontDataStore:
    """Font metrics and the characters it defines."""

    xsize: float = 0.0
    ysize: float = 0.0
    offset: float = 0.0
    records: dict[str, CharRecord] = field(default_factory=dict)

    def put_char_record(self, rec: CharRecord) -> None:
        """Add or replace the definition of a character."""
        self.records[rec.tchar] = rec

    def char_record(self, tchar: str) -> Optional[CharRecord]:
        """Return the character's definition, or None if the font lacks it."""
        return self.records.get(tchar)


def _value(params: Sequence[str], name: str) -> float:
    try:
        token = params[1]
    except IndexError:
        raise ValueError(f"{name}: missing value") from None
    try:
        return float(token)
    except ValueError:
        return 0.0


def parse_font(lines: Iterable[str]) -> FontDataStore:
    """Parse the lines of a font file."""
    ds = FontDataStore()
    current: Optional[CharRecord] = None
    for raw in lines:
        line = raw.rstrip("\r\n")
        params = line.split()
        if not params or line.startswith("#"):
            continue
        if current is not None:
            if line.startswith("ECHAR"):
                current = None
            else:
                current.lines.append(parse_char_line_record(params))
            continue
        if line.startswith("XSIZE"):
            ds.xsize = _value(params, "XSIZE")
        elif line.startswith("YSIZE"):
            ds.ysize = _value(params, "YSIZE")
        elif line.startswith("OFFSET"):
            ds.offset = _value(params, "OFFSET")
        elif line.startswith("CHAR"):
            current = parse_char_record(params)
            ds.put_char_record(current)
    return ds


class FontParser:
    """Parses a font file."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self.filename = os.fspath(filename)

    def parse(self) -> FontDataStore:
        """Read and parse the file; OSError if it cannot be opened."""
        with open(self.filename, encoding="utf-8", errors="replace") as fh:
            return parse_font(fh)