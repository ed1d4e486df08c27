"""Outline geometry for surface polygons and font character strokes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Sequence

from .records import Polarity, Record, parse_polarity

R2D = 180.0 / math.pi
D2R = math.pi / 180.0


class FillRule(Enum):
    """How overlapping subpaths are filled."""

    ODD_EVEN = "odd_even"
    WINDING = "winding"


class ElementKind(Enum):
    """Kind of a painter path element."""

    MOVE_TO = "move_to"
    LINE_TO = "line_to"
    ARC = "arc"
    CLOSE = "close"
    ELLIPSE = "ellipse"
    RECT = "rect"


@dataclass(frozen=True)
class PathElement:
    """One drawing command of a painter path and its numeric arguments."""

    kind: ElementKind
    values: tuple[float, ...] = ()


def _arc_point(
    x: float, y: float, w: float, h: float, angle: float
) -> tuple[float, float]:
    rad = angle * D2R
    cx, cy = x + w / 2.0, y + h / 2.0
    return cx + (w / 2.0) * math.cos(rad), cy - (h / 2.0) * math.sin(rad)


def _arc_extremes(values: tuple[float, ...]) -> list[tuple[float, float]]:
    x, y, w, h, start, sweep = values
    lo, hi = sorted((start, start + sweep))
    angles = [lo, hi]
    angles.extend(k * 90.0 for k in range(math.ceil(lo / 90.0), math.floor(hi / 90.0) + 1))
    return [_arc_point(x, y, w, h, a) for a in angles]


class PainterPath:
    """A sequence of drawing commands in scene coordinates (y axis down).

    Arc angles are in degrees, counter-clockwise as seen on screen.
    """

    def __init__(self, fill_rule: FillRule = FillRule.ODD_EVEN) -> None:
        self.fill_rule = fill_rule
        self.elements: list[PathElement] = []
        self._current = (0.0, 0.0)
        self._start = (0.0, 0.0)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[PathElement]:
        return iter(self.elements)

    @property
    def current_position(self) -> tuple[float, float]:
        """The point the next segment starts from."""
        return self._current

    def move_to(self, x: float, y: float) -> None:
        """Start a new subpath at (x, y)."""
        self.elements.append(PathElement(ElementKind.MOVE_TO, (x, y)))
        self._current = self._start = (x, y)

    def line_to(self, x: float, y: float) -> None:
        """Draw a straight segment to (x, y)."""
        self.elements.append(PathElement(ElementKind.LINE_TO, (x, y)))
        self._current = (x, y)

    def close_subpath(self) -> None:
        """Close the current subpath back to its start point."""
        self.elements.append(PathElement(ElementKind.CLOSE))
        self._current = self._start

    def add_ellipse(self, cx: float, cy: float, rx: float, ry: float) -> None:
        """Add a closed ellipse as a new subpath."""
        self.elements.append(PathElement(ElementKind.ELLIPSE, (cx, cy, rx, ry)))
        self._current = self._start = (cx + rx, cy)

    def add_rect(self, x: float, y: float, w: float, h: float) -> None:
        """Add a closed rectangle as a new subpath."""
        self.elements.append(PathElement(ElementKind.RECT, (x, y, w, h)))
        self._current = self._start = (x, y)

    def arc_to(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        start_angle: float,
        sweep_angle: float,
    ) -> None:
        """Draw an arc of the ellipse inscribed in the given rectangle.

        The arc is joined to the current position by a straight line.
        """
        start = _arc_point(x, y, w, h, start_angle)
        if not self.elements:
            self.move_to(*start)
        elif not (
            math.isclose(start[0], self._current[0], abs_tol=1e-12)
            and math.isclose(start[1], self._current[1], abs_tol=1e-12)
        ):
            self.line_to(*start)
        self.elements.append(
            PathElement(ElementKind.ARC, (x, y, w, h, start_angle, sweep_angle))
        )
        self._current = _arc_point(x, y, w, h, start_angle + sweep_angle)

    def add_path(self, other: PainterPath) -> None:
        """Append every element of *other* to this path."""
        self.elements.extend(other.elements)
        if other.elements:
            self._current = other._current
            self._start = other._start

    def bounding_rect(self) -> tuple[float, float, float, float]:
        """Return (x, y, width, height) enclosing every element."""
        points: list[tuple[float, float]] = []
        for element in self.elements:
            v = element.values
            if element.kind in (ElementKind.MOVE_TO, ElementKind.LINE_TO):
                points.append((v[0], v[1]))
            elif element.kind is ElementKind.RECT:
                points.extend([(v[0], v[1]), (v[0] + v[2], v[1] + v[3])])
            elif element.kind is ElementKind.ELLIPSE:
                points.extend([(v[0] - v[2], v[1] - v[3]), (v[0] + v[2], v[1] + v[3])])
            elif element.kind is ElementKind.ARC:
                points.extend(_arc_extremes(v))
        if not points:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return (min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def _field(params: Sequence[str], index: int, kind: str) -> str:
    try:
        return params[index]
    except IndexError:
        raise ValueError(f"{kind} record: too few fields") from None


def _number(token: str) -> float:
    try:
        return float(token)
    except ValueError:
        return 0.0


def _integer(token: str) -> int:
    try:
        return int(token)
    except ValueError:
        return 0


class OpType(Enum):
    """Kind of step along a polygon outline."""

    SEGMENT = 0
    CURVE = 1


@dataclass
class SurfaceOperation:
    """A straight segment to (x, y) or an arc to (xe, ye) around (xc, yc)."""

    type: OpType
    x: float = 0.0
    y: float = 0.0
    xe: float = 0.0
    ye: float = 0.0
    xc: float = 0.0
    yc: float = 0.0
    cw: bool = False


class PolyType(Enum):
    """Island or hole."""

    I = 0  # noqa: E741
    H = 1


@dataclass
class PolygonRecord:
    """One closed outline of a surface."""

    xbs: float
    ybs: float
    poly_type: PolyType
    operations: list[SurfaceOperation] = field(default_factory=list)

    def painter_path(self) -> PainterPath:
        """Return the outline in scene coordinates."""
        path = PainterPath()
        lx, ly = self.xbs, self.ybs
        path.move_to(lx, -ly)
        for op in self.operations:
            if op.type is OpType.SEGMENT:
                lx, ly = op.x, op.y
                path.line_to(lx, -ly)
                continue
            sx, sy = lx, ly
            ex, ey = op.xe, op.ye
            cx, cy = op.xc, op.yc
            sax, say = sx - cx, sy - cy
            eax, eay = ex - cx, ey - cy
            r = math.sqrt(sax * sax + say * say)
            sa = math.atan2(say, sax)
            ea = math.atan2(eay, eax)
            if op.cw:
                if sa <= ea:
                    sa += 2 * math.pi
            elif ea <= sa:
                ea += 2 * math.pi
            path.arc_to(cx - r, -cy - r, r * 2, r * 2, sa * R2D, (ea - sa) * R2D)
            path.line_to(ex, -ey)
            lx, ly = ex, ey
        path.close_subpath()
        return path


@dataclass(kw_only=True)
class SurfaceRecord(Record):
    """A surface feature made of island and hole polygons."""

    polarity: Polarity
    dcode: int
    polygons: list[PolygonRecord] = field(default_factory=list)


def parse_polygon_record(params: Sequence[str]) -> PolygonRecord:
    """Build a polygon from ``OB xbs ybs poly_type``."""
    return PolygonRecord(
        xbs=_number(_field(params, 1, "polygon")),
        ybs=_number(_field(params, 2, "polygon")),
        poly_type=PolyType.I if _field(params, 3, "polygon") == "I" else PolyType.H,
    )


def parse_surface_record(ds, params: Sequence[str], attrib=None) -> SurfaceRecord:
    """Build a surface from ``S polarity dcode``."""
    return SurfaceRecord(
        ds=ds,
        attrib=dict(attrib or {}),
        polarity=parse_polarity(_field(params, 1, "surface")),
        dcode=_integer(_field(params, 2, "surface")),
    )


class ShapeType(Enum):
    """End shape of a character stroke: round or square."""

    R = 0
    S = 1


@dataclass
class CharLineRecord:
    """One stroke of a font character."""

    xs: float
    ys: float
    xe: float
    ye: float
    polarity: Polarity
    shape: ShapeType
    width: float

    def painter_path(self, width_factor: float) -> PainterPath:
        """Return the stroke outline, its width scaled by *width_factor*."""
        path = PainterPath()
        radius = self.width * width_factor / 2.0
        sx, sy, ex, ey = self.xs, self.ys, self.xe, self.ye
        a = math.atan2(ey - sy, ex - sx)
        rsina, rcosa = radius * math.sin(a), radius * math.cos(a)

        path.move_to(sx + rsina, -(sy - rcosa))
        path.line_to(sx - rsina, -(sy + rcosa))
        path.line_to(ex - rsina, -(ey + rcosa))
        path.line_to(ex + rsina, -(ey - rcosa))
        path.close_subpath()
        if self.shape is ShapeType.R:
            path.add_ellipse(sx, -sy, radius, radius)
            path.add_ellipse(ex, -ey, radius, radius)
        else:
            side = radius * 2
            path.add_rect(sx - radius, -sy - radius, side, side)
            path.add_rect(ex - radius, -ey - radius, side, side)
        return path


@dataclass
class CharRecord:
    """A font character: its code and its strokes."""

    tchar: str
    lines: list[CharLineRecord] = field(default_factory=list)

    def painter_path(self, width_factor: float) -> PainterPath:
        """Return the union of all strokes, filled with the winding rule."""
        path = PainterPath(FillRule.WINDING)
        for line in self.lines:
            path.add_path(line.painter_path(width_factor))
        return path


def parse_char_line_record(params: Sequence[str]) -> CharLineRecord:
    """Build a stroke from ``LINE xs ys xe ye pol shape width``."""
    return CharLineRecord(
        xs=_number(_field(params, 1, "char line")),
        ys=_number(_field(params, 2, "char line")),
        xe=_number(_field(params, 3, "char line")),
        ye=_number(_field(params, 4, "char line")),
        polarity=parse_polarity(_field(params, 5, "char line")),
        shape=ShapeType.R if _field(params, 6, "char line") == "R" else ShapeType.S,
        width=_number(_field(params, 7, "char line")),
    )


def parse_char_record(params: Sequence[str]) -> CharRecord:
    """Build an empty character from ``CHAR c``."""
    token = _field(params, 1, "char")
    if not token:
        raise ValueError("char record: empty character")
    return CharRecord(tchar=token[0])