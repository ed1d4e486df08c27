"""Layer feature files: symbol tables, attributes and feature records."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Sequence, TextIO

from .records import (
    ArcRecord,
    AttribData,
    BarcodeRecord,
    LineRecord,
    PadRecord,
    Polarity,
    Record,
    TextRecord,
    parse_arc_record,
    parse_barcode_record,
    parse_line_record,
    parse_pad_record,
    parse_text_record,
)
from .shapes import (
    OpType,
    PolygonRecord,
    SurfaceOperation,
    SurfaceRecord,
    parse_polygon_record,
    parse_surface_record,
)
from .structured_text import StructuredTextDataStore, StructuredTextParser

_FEATURES_PATH_RE = re.compile(r".*/([^/]+)/steps/([^/]+)/layers/([^/]+)/features")
_STEP_DIR_RE = re.compile(r"(steps/[^/]+)/.*")
_LAYER_DIR_RE = re.compile(r"(layers/[^/]+)/.*")


def _bump(counts: dict[str, int], key: str) -> None:
    counts[key] = counts.get(key, 0) + 1


@dataclass
class FeaturesDataStore:
    """Everything read from one features file, with per-symbol statistics."""

    job_name: str = ""
    step_name: str = ""
    layer_name: str = ""
    attrlist_data: dict[str, str] = field(default_factory=dict)
    symbol_name_map: dict[int, str] = field(default_factory=dict)
    attrib_name_map: dict[int, str] = field(default_factory=dict)
    attrib_text_map: dict[int, str] = field(default_factory=dict)
    records: list[Record] = field(default_factory=list)

    pos_line_count_map: dict[str, int] = field(default_factory=dict)
    pos_pad_count_map: dict[str, int] = field(default_factory=dict)
    pos_arc_count_map: dict[str, int] = field(default_factory=dict)
    pos_surface_count: int = 0
    pos_text_count: int = 0
    pos_barcode_count: int = 0

    neg_line_count_map: dict[str, int] = field(default_factory=dict)
    neg_pad_count_map: dict[str, int] = field(default_factory=dict)
    neg_arc_count_map: dict[str, int] = field(default_factory=dict)
    neg_surface_count: int = 0
    neg_text_count: int = 0
    neg_barcode_count: int = 0

    def set_job_name(self, name: str) -> None:
        """Set the job name, upper-cased."""
        self.job_name = name.upper()

    def set_step_name(self, name: str) -> None:
        """Set the step name, upper-cased."""
        self.step_name = name.upper()

    def set_layer_name(self, name: str) -> None:
        """Set the layer name, upper-cased."""
        self.layer_name = name.upper()

    def put_attrlist_item(self, key: str, value: str) -> None:
        """Record a step or layer attribute."""
        self.attrlist_data[key] = value

    def put_symbol_name(self, id: int, name: str) -> None:
        """Record the name of symbol number *id*."""
        self.symbol_name_map[id] = name

    def put_attrib_name(self, id: int, name: str) -> None:
        """Record the name of attribute number *id*."""
        self.attrib_name_map[id] = name

    def put_attrib_text(self, id: int, text: str) -> None:
        """Record attribute text string number *id*."""
        self.attrib_text_map[id] = text

    def _symbol(self, sym_num: int) -> str:
        return self.symbol_name_map.get(sym_num, "")

    def put_line(self, rec: LineRecord) -> None:
        """Add a line and count it under its symbol."""
        self.records.append(rec)
        counts = (
            self.pos_line_count_map
            if rec.polarity is Polarity.P
            else self.neg_line_count_map
        )
        _bump(counts, self._symbol(rec.sym_num))

    def put_pad(self, rec: PadRecord) -> None:
        """Add a pad and count it under its symbol."""
        self.records.append(rec)
        counts = (
            self.pos_pad_count_map
            if rec.polarity is Polarity.P
            else self.neg_pad_count_map
        )
        _bump(counts, self._symbol(rec.sym_num))

    def put_arc(self, rec: ArcRecord) -> None:
        """Add an arc and count it under its symbol."""
        self.records.append(rec)
        counts = (
            self.pos_arc_count_map
            if rec.polarity is Polarity.P
            else self.neg_arc_count_map
        )
        _bump(counts, self._symbol(rec.sym_num))

    def put_text(self, rec: TextRecord) -> None:
        """Add a text feature."""
        self.records.append(rec)
        if rec.polarity is Polarity.P:
            self.pos_text_count += 1
        else:
            self.neg_text_count += 1

    def put_barcode(self, rec: BarcodeRecord) -> None:
        """Add a barcode feature."""
        self.records.append(rec)
        if rec.polarity is Polarity.P:
            self.pos_barcode_count += 1
        else:
            self.neg_barcode_count += 1

    def put_surface(self, rec: SurfaceRecord) -> None:
        """Add a surface feature."""
        self.records.append(rec)
        if rec.polarity is Polarity.P:
            self.pos_surface_count += 1
        else:
            self.neg_surface_count += 1

    def attrlist(self, name: str) -> str:
        """Return a step or layer attribute, or an empty string."""
        return self.attrlist_data.get(name, "")

    def dump(self, file: Optional[TextIO] = None) -> None:
        """Write the symbol and attribute tables in readable form."""
        out = file if file is not None else sys.stdout
        sections = [
            ("Symbol names", self.symbol_name_map),
            ("Attrib names", self.attrib_name_map),
            ("Attrib text", self.attrib_text_map),
        ]
        for index, (title, table) in enumerate(sections):
            if index:
                out.write("\n")
            out.write(f"=== {title} ===\n")
            for key, value in sorted(table.items()):
                out.write(f'{key} "{value}"\n')


def _to_int(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        return 0


def _to_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return 0.0


def _field(params: Sequence[str], index: int, kind: str) -> str:
    try:
        return params[index]
    except IndexError:
        raise ValueError(f"{kind} record: too few fields") from None


class FeaturesParser:
    """Parses a layer features file.

    Set ``now`` to fix the time used for ``$$date``/``$$time`` text variables.
    """

    def __init__(self, filename: str | os.PathLike[str]) -> None:
        self.filename = os.fspath(filename)
        self.now: Optional[datetime] = None
        self._ds = FeaturesDataStore()
        self._polygon: Optional[PolygonRecord] = None

    def parse(self) -> FeaturesDataStore:
        """Read and parse the file; OSError if it cannot be opened.

        When the file sits at ``<job>/steps/<step>/layers/<layer>/features``
        the names are taken from the path and the step and layer attribute
        lists next to it are loaded as well.
        """
        with open(self.filename, encoding="utf-8", errors="replace") as fh:
            self._ds = FeaturesDataStore()
            self._polygon = None
            path = self.filename.replace("\\", "/")
            match = _FEATURES_PATH_RE.fullmatch(path)
            if match:
                self._ds.set_job_name(match.group(1))
                self._ds.set_step_name(match.group(2))
                self._ds.set_layer_name(match.group(3))
                for pattern in (_STEP_DIR_RE, _LAYER_DIR_RE):
                    attr_path = pattern.sub(r"\1/attrlist", path, count=1)
                    self._load_attrlist(attr_path)
            return self._consume(fh)

    def parse_lines(self, lines: Iterable[str]) -> FeaturesDataStore:
        """Parse feature lines into a fresh store and return it."""
        self._ds = FeaturesDataStore()
        self._polygon = None
        return self._consume(lines)

    def _load_attrlist(self, path: str) -> None:
        try:
            store: StructuredTextDataStore = StructuredTextParser(path).parse()
        except OSError:
            return
        for key, value in store.values().items():
            self._ds.put_attrlist_item(key, value)

    def _consume(self, lines: Iterable[str]) -> FeaturesDataStore:
        ds = self._ds
        surface: Optional[SurfaceRecord] = None
        for raw in lines:
            line = raw.rstrip("\r\n")
            if not line or line.startswith("#"):
                continue

            if surface is not None:
                if line.startswith("SE"):
                    surface = None
                    self._polygon = None
                else:
                    self._surface_line(surface, line)
                continue

            lead = line[0]
            if lead == "$":
                self._name_line(line, ds.put_symbol_name)
            elif lead == "@":
                self._name_line(line, ds.put_attrib_name)
            elif lead == "&":
                self._name_line(line, ds.put_attrib_text)
            elif lead == "L":
                ds.put_line(parse_line_record(ds, *self.parse_attributes(line)))
            elif lead == "P":
                ds.put_pad(parse_pad_record(ds, *self.parse_attributes(line)))
            elif lead == "A":
                ds.put_arc(parse_arc_record(ds, *self.parse_attributes(line)))
            elif lead == "T":
                params, attrib = self.parse_attributes(line)
                ds.put_text(parse_text_record(ds, params, attrib, self.now))
            elif lead == "B":
                params, attrib = self.parse_attributes(line)
                ds.put_barcode(parse_barcode_record(ds, params, attrib, self.now))
            elif lead == "S":
                surface = parse_surface_record(ds, *self.parse_attributes(line))
                ds.put_surface(surface)
        return ds

    @staticmethod
    def _name_line(line: str, put) -> None:
        params = line.split()
        if len(params) == 2:
            put(_to_int(params[0][1:]), params[1])

    def _surface_line(self, surface: SurfaceRecord, line: str) -> None:
        params, _ = self.parse_attributes(line)
        if line.startswith("OB"):
            polygon = parse_polygon_record(params)
            surface.polygons.append(polygon)
            self._polygon = polygon
        elif line.startswith("OS"):
            self._current_polygon(line).operations.append(
                SurfaceOperation(
                    OpType.SEGMENT,
                    x=_to_float(_field(params, 1, "segment")),
                    y=_to_float(_field(params, 2, "segment")),
                )
            )
        elif line.startswith("OC"):
            self._current_polygon(line).operations.append(
                SurfaceOperation(
                    OpType.CURVE,
                    xe=_to_float(_field(params, 1, "curve")),
                    ye=_to_float(_field(params, 2, "curve")),
                    xc=_to_float(_field(params, 3, "curve")),
                    yc=_to_float(_field(params, 4, "curve")),
                    cw=_field(params, 5, "curve") == "Y",
                )
            )
        elif line.startswith("OE"):
            self._polygon = None

    def _current_polygon(self, line: str) -> PolygonRecord:
        if self._polygon is None:
            raise ValueError(f"surface operation outside a polygon: {line!r}")
        return self._polygon

    def parse_attributes(self, line: str) -> tuple[list[str], AttribData]:
        """Split a record line into its fields and its resolved attributes.

        A single-quoted part of the record counts as one field. Attributes
        follow the last ``;`` as ``name`` or ``name=text`` index pairs.
        """
        loc = line.rfind(";")
        if loc == -1:
            record, attr = line.strip(), ""
        else:
            record, attr = line[:loc].strip(), line[loc + 1 :].strip()

        quote = record.find("'")
        if quote != -1:
            end = record.find("'", quote + 1)
            if end == -1:
                middle, right = record[quote + 1 :], ""
            else:
                middle, right = record[quote + 1 : end], record[end + 1 :]
            params = record[:quote].split() + [middle] + right.split()
        else:
            params = record.split()

        attrib: AttribData = {}
        if attr:
            for term in attr.split(","):
                parts = term.split("=")
                key = self._ds.attrib_name_map.get(_to_int(parts[0]), "")
                if len(parts) == 1:
                    attrib[key] = "true"
                else:
                    attrib[key] = self._ds.attrib_text_map.get(_to_int(parts[1]), "")
        return params, attrib