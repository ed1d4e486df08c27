"""Feature records of an ODB++ layer: lines, pads, arcs, text and barcodes."""

from __future__ import annotations

import itertools
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Iterator, Mapping, Optional, Protocol, Sequence

AttribData = dict[str, str]


class FeaturesContext(Protocol):
    """What a record needs from the features store it belongs to."""

    job_name: str
    step_name: str
    layer_name: str
    symbol_name_map: Mapping[int, str]

    def attrlist(self, name: str) -> str: ...


class Polarity(Enum):
    """Positive or negative feature polarity."""

    P = "P"
    N = "N"


class Orient(IntEnum):
    """Feature orientation: rotation in 90 degree steps, optionally mirrored."""

    P_0 = 0
    P_90 = 1
    P_180 = 2
    P_270 = 3
    M_0 = 4
    M_90 = 5
    M_180 = 6
    M_270 = 7


class AstrPos(IntEnum):
    """Position of the human-readable string of a barcode."""

    T = 0
    B = 1


@dataclass(frozen=True)
class Placement:
    """Where a symbol goes in scene coordinates (y axis pointing down)."""

    x: float
    y: float
    mirrored: bool
    rotation: int


def _placement(x: float, y: float, orient: Orient) -> Placement:
    return Placement(
        x=x,
        y=-y,
        mirrored=orient >= Orient.M_0,
        rotation=(orient % 4) * 90,
    )


def parse_polarity(token: str) -> Polarity:
    """Return P for ``"P"`` and N for anything else."""
    return Polarity.P if token == "P" else Polarity.N


def _to_float(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return 0.0


def _to_int(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        return 0


class _Fields:
    """Reads the fields of a record line after its type token."""

    def __init__(self, kind: str, params: Sequence[str]) -> None:
        self._kind = kind
        self._it: Iterator[str] = itertools.islice(iter(params), 1, None)

    def text(self) -> str:
        try:
            return next(self._it)
        except StopIteration:
            raise ValueError(f"{self._kind} record: too few fields") from None

    def number(self) -> float:
        return _to_float(self.text())

    def integer(self) -> int:
        return _to_int(self.text())

    def flag(self) -> bool:
        return self.text() == "Y"

    def polarity(self) -> Polarity:
        return parse_polarity(self.text())

    def orient(self) -> Orient:
        value = self.integer()
        try:
            return Orient(value)
        except ValueError:
            raise ValueError(
                f"{self._kind} record: invalid orientation {value}"
            ) from None


_ATTR_RE = re.compile(r"\$\$(\S+)")


def _replace_ci(text: str, token: str, replacement: str) -> str:
    return re.sub(re.escape(token), lambda _m: replacement, text, flags=re.IGNORECASE)


def dynamic_text(
    ds: FeaturesContext,
    text: str,
    x: float,
    y: float,
    now: Optional[datetime] = None,
) -> str:
    """Expand ``$$`` variables (date, time, job, position, attributes) in *text*."""
    if now is None:
        now = datetime.now()
    yy = now.year % 100
    substitutions = [
        ("$$date-ddmmyy", f"{now.day:02d}/{now.month:02d}/{yy:02d}"),
        ("$$date", f"{now.month:02d}/{now.day:02d}/{yy:02d}"),
        ("$$time", f"{now.hour:02d}:{now.minute:02d}"),
        ("$$job", ds.job_name),
        ("$$step", ds.step_name),
        ("$$layer", ds.layer_name),
        ("$$x_mm", format(x * 25.4, "g")),
        ("$$y_mm", format(y * 25.4, "g")),
        ("$$x", format(x, "g")),
        ("$$y", format(y, "g")),
    ]
    for token, replacement in substitutions:
        text = _replace_ci(text, token, replacement)
    return _ATTR_RE.sub(lambda m: ds.attrlist(m.group(1)).upper(), text)


@dataclass(kw_only=True)
class Record:
    """Common part of every feature record."""

    ds: Any = field(default=None, repr=False, compare=False)
    attrib: AttribData = field(default_factory=dict)


@dataclass(kw_only=True)
class LineRecord(Record):
    xs: float
    ys: float
    xe: float
    ye: float
    sym_num: int
    polarity: Polarity
    dcode: int


@dataclass(kw_only=True)
class PadRecord(Record):
    x: float
    y: float
    sym_num: int
    polarity: Polarity
    dcode: int
    orient: Orient
    sym_name: str

    def placement(self) -> Placement:
        """Scene position, mirroring and rotation of the pad's symbol."""
        return _placement(self.x, self.y, self.orient)


@dataclass(kw_only=True)
class ArcRecord(Record):
    xs: float
    ys: float
    xe: float
    ye: float
    xc: float
    yc: float
    sym_num: int
    polarity: Polarity
    dcode: int
    cw: bool


@dataclass(kw_only=True)
class TextRecord(Record):
    x: float
    y: float
    font: str
    polarity: Polarity
    orient: Orient
    text: str
    xsize: float = 0.0
    ysize: float = 0.0
    width_factor: float = 0.0
    version: int = 0

    def placement(self) -> Placement:
        """Scene position, mirroring and rotation of the text."""
        return _placement(self.x, self.y, self.orient)


@dataclass(kw_only=True)
class BarcodeRecord(TextRecord):
    barcode: str
    e: str
    w: float
    h: float
    fasc: bool
    cs: bool
    bg: bool
    astr: bool
    astr_pos: AstrPos


def parse_line_record(
    ds: Any, params: Sequence[str], attrib: Optional[AttribData] = None
) -> LineRecord:
    """Build a line record from ``L xs ys xe ye sym_num pol dcode``."""
    f = _Fields("line", params)
    return LineRecord(
        ds=ds,
        attrib=dict(attrib or {}),
        xs=f.number(),
        ys=f.number(),
        xe=f.number(),
        ye=f.number(),
        sym_num=f.integer(),
        polarity=f.polarity(),
        dcode=f.integer(),
    )


def parse_pad_record(
    ds: FeaturesContext, params: Sequence[str], attrib: Optional[AttribData] = None
) -> PadRecord:
    """Build a pad record from ``P x y sym_num pol dcode orient``."""
    f = _Fields("pad", params)
    x = f.number()
    y = f.number()
    sym_num = f.integer()
    polarity = f.polarity()
    dcode = f.integer()
    orient = f.orient()
    return PadRecord(
        ds=ds,
        attrib=dict(attrib or {}),
        x=x,
        y=y,
        sym_num=sym_num,
        polarity=polarity,
        dcode=dcode,
        orient=orient,
        sym_name=ds.symbol_name_map.get(sym_num, ""),
    )


def parse_arc_record(
    ds: Any, params: Sequence[str], attrib: Optional[AttribData] = None
) -> ArcRecord:
    """Build an arc record from ``A xs ys xe ye xc yc sym_num pol dcode cw``."""
    f = _Fields("arc", params)
    return ArcRecord(
        ds=ds,
        attrib=dict(attrib or {}),
        xs=f.number(),
        ys=f.number(),
        xe=f.number(),
        ye=f.number(),
        xc=f.number(),
        yc=f.number(),
        sym_num=f.integer(),
        polarity=f.polarity(),
        dcode=f.integer(),
        cw=f.flag(),
    )


def parse_text_record(
    ds: FeaturesContext,
    params: Sequence[str],
    attrib: Optional[AttribData] = None,
    now: Optional[datetime] = None,
) -> TextRecord:
    """Build a text record from
    ``T x y font pol orient xsize ysize width_factor text version``."""
    f = _Fields("text", params)
    x = f.number()
    y = f.number()
    font = f.text()
    polarity = f.polarity()
    orient = f.orient()
    xsize = f.number()
    ysize = f.number()
    width_factor = f.number()
    text = dynamic_text(ds, f.text(), x, y, now)
    version = f.integer()
    return TextRecord(
        ds=ds,
        attrib=dict(attrib or {}),
        x=x,
        y=y,
        font=font,
        polarity=polarity,
        orient=orient,
        xsize=xsize,
        ysize=ysize,
        width_factor=width_factor,
        text=text,
        version=version,
    )


def parse_barcode_record(
    ds: FeaturesContext,
    params: Sequence[str],
    attrib: Optional[AttribData] = None,
    now: Optional[datetime] = None,
) -> BarcodeRecord:
    """Build a barcode record from
    ``B x y barcode font pol orient e w h fasc cs bg astr astr_pos text``."""
    f = _Fields("barcode", params)
    x = f.number()
    y = f.number()
    barcode = f.text()
    font = f.text()
    polarity = f.polarity()
    orient = f.orient()
    e = f.text()
    w = f.number()
    h = f.number()
    fasc = f.flag()
    cs = f.flag()
    bg = f.flag()
    astr = f.flag()
    astr_pos = AstrPos.T if f.text() == "T" else AstrPos.B
    text = dynamic_text(ds, f.text(), x, y, now)
    return BarcodeRecord(
        ds=ds,
        attrib=dict(attrib or {}),
        x=x,
        y=y,
        barcode=barcode,
        font=font,
        polarity=polarity,
        orient=orient,
        e=e,
        w=w,
        h=h,
        fasc=fasc,
        cs=cs,
        bg=bg,
        astr=astr,
        astr_pos=astr_pos,
        text=text,
    )