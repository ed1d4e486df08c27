"""Layer notes: timestamped, user-attributed text placed at a position."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Sequence

from .records import Record


@dataclass(kw_only=True)
class NoteRecord(Record):
    """A single note."""

    timestamp: int
    user: str
    x: float
    y: float
    text: str

    def position(self) -> tuple[float, float]:
        """Scene position of the note (y axis pointing down)."""
        return (self.x, -self.y)


def _integer(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        return 0


def _number(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return 0.0


def parse_note_record(params: Sequence[str]) -> NoteRecord:
    """Build a note from ``timestamp,user,x,y,...,text`` fields.

    The text is the last field, with ``\\n`` sequences turned into newlines.
    """
    if len(params) < 4:
        raise ValueError("note record: too few fields")
    return NoteRecord(
        timestamp=_integer(params[0]),
        user=params[1],
        x=_number(params[2]),
        y=_number(params[3]),
        text=params[-1].replace("\\n", "\n").strip(),
    )


@dataclass
class NotesDataStore:
    """The notes of a layer, in file order."""

    records: list[NoteRecord] = field(default_factory=list)

    def put_record(self, params: Sequence[str]) -> NoteRecord:
        """Parse and append a note; return it."""
        rec = parse_note_record(params)
        rec.ds = self
        self.records.append(rec)
        return rec


class NotesParser:
    """Parses a notes file of comma-separated lines."""

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self.filename = os.fspath(filename)

    def parse(self) -> NotesDataStore:
        """Read and parse the file; OSError if it cannot be opened."""
        ds = NotesDataStore()
        with open(self.filename, encoding="utf-8", errors="replace") as fh:
            for line in fh:
                if line.strip():
                    ds.put_record(line.split(","))
        return ds