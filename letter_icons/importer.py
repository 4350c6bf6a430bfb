"""Conversion of SVG shape elements into shapely geometry.

The walk over an element tree resolves inherited presentation attributes
and composes transforms through groups, yielding one :class:`Primitive`
per drawable leaf. Geometry stays in the element's local coordinates;
``Primitive.matrix`` maps it to the root coordinate system.
"""

import enum
import logging
import math
import re

from shapely import affinity
from shapely.geometry import LineString, MultiLineString, Point, Polygon
from shapely.validation import make_valid
from svgpathtools import Line, parse_path

from .config import ARC_RESOLUTION, CURVE_SAMPLES
from .geometry import polygonal
from .markup import local_name, parse_style
from .svgmath import IDENTITY, multiply, parse_numbers, parse_transform


class PrimitiveKind(enum.Enum):
    CIRCLE = "circle"
    RECT = "rect"
    ELLIPSE = "ellipse"
    POLYGON = "polygon"
    POLYLINE = "polyline"
    LINE = "line"
    SIMPLE_PATH = "path"
    COMPOUND_PATH = "compound-path"
    GROUP = "g"


CONTAINER_TAGS = {"svg", "g", "a", "switch"}
SKIPPED_TAGS = {
    "defs",
    "clipPath",
    "mask",
    "symbol",
    "pattern",
    "marker",
    "linearGradient",
    "radialGradient",
    "style",
    "title",
    "desc",
    "metadata",
}
INHERITED_ATTRS = (
    "fill",
    "stroke",
    "stroke-width",
    "stroke-linejoin",
    "stroke-linecap",
    "stroke-miterlimit",
    "stroke-dasharray",
    "stroke-opacity",
    "fill-opacity",
    "fill-rule",
    "visibility",
)
DEFAULT_STYLE = {
    "fill": "black",
    "stroke": "none",
    "stroke-width": "1",
    "stroke-linejoin": "miter",
    "stroke-linecap": "butt",
    "stroke-miterlimit": "4",
    "stroke-dasharray": "none",
    "fill-rule": "nonzero",
    "visibility": "visible",
}

_MOVE_RE = re.compile(r"[Mm]")


def classify(elem):
    tag = local_name(elem.tag)
    if tag in CONTAINER_TAGS:
        return PrimitiveKind.GROUP
    if tag == "path":
        d = elem.get("d") or ""
        if len(_MOVE_RE.findall(d)) > 1:
            return PrimitiveKind.COMPOUND_PATH
        return PrimitiveKind.SIMPLE_PATH
    for kind in PrimitiveKind:
        if kind.value == tag and kind is not PrimitiveKind.GROUP:
            return kind
    return None


def element_style(elem):
    """Presentation attributes of elem, with style declarations taking precedence."""
    style = {}
    for name in INHERITED_ATTRS + ("display", "opacity"):
        value = elem.get(name)
        if value is not None:
            style[name] = value.strip()
    for name, value in parse_style(elem.get("style")).items():
        style[name] = value
    return style


def resolve_style(elem, inherited):
    style = dict(inherited)
    for name, value in element_style(elem).items():
        if name in INHERITED_ATTRS and value != "inherit":
            style[name] = value
        elif name == "display":
            style["display"] = value
    return style


class Primitive:
    """One drawable leaf.

    ``geometry`` is the outline a stroke follows and ``area`` the region the
    fill paints, both in local coordinates. They differ for open outlines,
    whose fill closes each subpath implicitly. ``closed`` is true when the
    outline has no open subpath.
    """

    def __init__(
        self, kind, element, parent, parent_matrix, style, geometry, closed, params, area=None
    ):
        self.kind = kind
        self.element = element
        self.parent = parent
        self.parent_matrix = parent_matrix
        self.matrix = multiply(parent_matrix, parse_transform(element.get("transform")))
        self.style = style
        self.geometry = geometry
        self.area = geometry if area is None else area
        self.closed = closed
        self.params = params

    @property
    def tag(self):
        return local_name(self.element.tag)

    @property
    def fill(self):
        value = self.style.get("fill", "black")
        return None if value == "none" else value

    @property
    def stroke(self):
        value = self.style.get("stroke", "none")
        if value == "none" or self.stroke_width <= 0:
            return None
        return value

    @property
    def stroke_width(self):
        try:
            return parse_numbers(self.style.get("stroke-width", "1"))[0]
        except IndexError:
            return 0.0

    @property
    def miter_limit(self):
        nums = parse_numbers(self.style.get("stroke-miterlimit", "4"))
        return nums[0] if nums else 4.0

    @property
    def dashed(self):
        value = self.style.get("stroke-dasharray", "none")
        return value != "none" and any(n > 0 for n in parse_numbers(value))

    @property
    def visible(self):
        if self.style.get("visibility") in ("hidden", "collapse"):
            return False
        return self.fill is not None or self.stroke is not None

    def __repr__(self):
        return f"Primitive({self.kind.value}, fill={self.fill}, stroke={self.stroke})"


def _float(elem, name, default=0.0):
    value = elem.get(name)
    if value is None:
        return default
    nums = parse_numbers(value)
    return nums[0] if nums else default


def rounded_rect(x, y, width, height, rx, ry, resolution=ARC_RESOLUTION):
    if rx <= 0 or ry <= 0:
        return Polygon([(x, y), (x + width, y), (x + width, y + height), (x, y + height)])
    points = []
    corners = (
        (x + width - rx, y + ry, -90.0),
        (x + width - rx, y + height - ry, 0.0),
        (x + rx, y + height - ry, 90.0),
        (x + rx, y + ry, 180.0),
    )
    for cx, cy, start in corners:
        for i in range(resolution + 1):
            angle = math.radians(start + 90.0 * i / resolution)
            points.append((cx + rx * math.cos(angle), cy + ry * math.sin(angle)))
    return Polygon(points)


def rect_radii(elem, width, height):
    rx = elem.get("rx")
    ry = elem.get("ry")
    rx = _float(elem, "rx") if rx not in (None, "auto") else None
    ry = _float(elem, "ry") if ry not in (None, "auto") else None
    if rx is None and ry is None:
        rx = ry = 0.0
    elif rx is None:
        rx = ry
    elif ry is None:
        ry = rx
    return min(max(rx, 0.0), width / 2.0), min(max(ry, 0.0), height / 2.0)


def _valid(geom):
    if geom.is_valid:
        return geom
    return polygonal(make_valid(geom))


def _signed_area(points):
    total = 0.0
    for (x1, y1), (x2, y2) in zip(points, points[1:] + points[:1]):
        total += x1 * y2 - x2 * y1
    return total / 2.0


def sample_subpath(subpath, samples):
    points = []
    for segment in subpath:
        if isinstance(segment, Line):
            points.append((segment.start.real, segment.start.imag))
            continue
        for i in range(samples):
            pt = segment.point(i / float(samples))
            points.append((pt.real, pt.imag))
    end = subpath[-1].end
    points.append((end.real, end.imag))
    return points


def combine_contours(contours, fill_rule):
    """Merge closed contours under the SVG fill rule."""
    polys = []
    for points in contours:
        if len(points) < 3:
            continue
        poly = _valid(Polygon(points))
        if poly.is_empty:
            continue
        polys.append((poly, 1 if _signed_area(points) > 0 else -1))
    if not polys:
        return Polygon()

    if fill_rule == "evenodd":
        result = polys[0][0]
        for poly, _ in polys[1:]:
            result = result.symmetric_difference(poly)
        return polygonal(result)

    # nonzero: winding of each contour's interior counts the contours that
    # enclose it (itself included); zero winding carves a hole.
    polys.sort(key=lambda item: item[0].area, reverse=True)
    result = Polygon()
    for i, (poly, _) in enumerate(polys):
        inside = poly.representative_point()
        winding = sum(
            sign
            for other, sign in polys[: i + 1]
            if other is poly or other.contains(inside)
        )
        if winding != 0:
            result = result.union(poly)
        else:
            result = result.difference(poly)
    return polygonal(result)


def path_geometry(d, fill_rule, samples):
    """Return (area, outline) for path data, or (None, None) if it draws nothing.

    area is what the fill paints: every subpath, open ones implicitly
    closed, combined under fill_rule. outline is what the stroke follows;
    it is area itself when every subpath is closed.
    """
    path = parse_path(d)
    contours = []
    closed = True
    lines = []
    for subpath in path.continuous_subpaths():
        if len(subpath) == 0 or subpath.length() == 0:
            continue
        points = sample_subpath(subpath, samples)
        if subpath.isclosed():
            contours.append(points[:-1])
        else:
            contours.append(points)
            closed = False
        lines.append(LineString(points))
    if not lines:
        return None, None
    area = combine_contours(contours, fill_rule)
    if closed:
        return area, area
    if len(lines) == 1:
        return area, lines[0]
    return area, MultiLineString([list(line.coords) for line in lines])


def import_primitive(
    elem, parent, parent_matrix, style, samples=CURVE_SAMPLES, resolution=ARC_RESOLUTION
):
    """Build a Primitive for elem, or None for unsupported or degenerate elements."""
    kind = classify(elem)
    if kind is None or kind is PrimitiveKind.GROUP:
        return None

    params = {}
    closed = True
    geometry = None
    area = None
    if kind is PrimitiveKind.CIRCLE:
        cx, cy, r = _float(elem, "cx"), _float(elem, "cy"), _float(elem, "r")
        if r <= 0:
            return None
        params = {"cx": cx, "cy": cy, "r": r}
        geometry = Point(cx, cy).buffer(r, quad_segs=resolution)
    elif kind is PrimitiveKind.ELLIPSE:
        cx, cy = _float(elem, "cx"), _float(elem, "cy")
        rx, ry = _float(elem, "rx"), _float(elem, "ry")
        if rx <= 0 or ry <= 0:
            return None
        params = {"cx": cx, "cy": cy, "rx": rx, "ry": ry}
        unit = Point(0, 0).buffer(1.0, quad_segs=resolution)
        geometry = affinity.affine_transform(unit, [rx, 0, 0, ry, cx, cy])
    elif kind is PrimitiveKind.RECT:
        x, y = _float(elem, "x"), _float(elem, "y")
        width, height = _float(elem, "width"), _float(elem, "height")
        if width <= 0 or height <= 0:
            return None
        rx, ry = rect_radii(elem, width, height)
        params = {"x": x, "y": y, "width": width, "height": height, "rx": rx, "ry": ry}
        geometry = rounded_rect(x, y, width, height, rx, ry, resolution)
    elif kind in (PrimitiveKind.POLYGON, PrimitiveKind.POLYLINE):
        nums = parse_numbers(elem.get("points"))
        points = list(zip(nums[0::2], nums[1::2]))
        if len(points) < 2:
            return None
        if kind is PrimitiveKind.POLYGON and len(points) >= 3:
            geometry = _valid(Polygon(points))
        else:
            geometry = LineString(points)
            area = _valid(Polygon(points)) if len(points) >= 3 else Polygon()
            closed = False
    elif kind is PrimitiveKind.LINE:
        start = (_float(elem, "x1"), _float(elem, "y1"))
        end = (_float(elem, "x2"), _float(elem, "y2"))
        if start == end:
            return None
        geometry = LineString([start, end])
        area = Polygon()
        closed = False
    else:
        d = elem.get("d")
        if not d:
            return None
        try:
            area, geometry = path_geometry(d, style.get("fill-rule", "nonzero"), samples)
        except (ValueError, IndexError) as exc:
            logging.debug("Skipping unparseable path data %r: %s", d[:40], exc)
            return None
        if geometry is None:
            return None
        closed = geometry is area

    return Primitive(kind, elem, parent, parent_matrix, style, geometry, closed, params, area)


def iter_primitives(root, skip=(), samples=CURVE_SAMPLES, resolution=ARC_RESOLUTION):
    """Yield a Primitive for every drawable leaf under root, in document order.

    Elements in ``skip`` are not descended into.
    """
    skip_ids = {id(elem) for elem in skip}

    def walk(elem, parent, matrix, inherited):
        if id(elem) in skip_ids:
            return
        tag = local_name(elem.tag)
        if tag is None or tag in SKIPPED_TAGS:
            return
        style = resolve_style(elem, inherited)
        if style.get("display") == "none":
            return
        try:
            if tag in CONTAINER_TAGS:
                own = IDENTITY if parent is None else parse_transform(elem.get("transform"))
                child_matrix = multiply(matrix, own)
            else:
                primitive = import_primitive(elem, parent, matrix, style, samples, resolution)
        except ValueError as exc:
            logging.debug("Skipping <%s>: %s", tag, exc)
            return
        if tag in CONTAINER_TAGS:
            for child in list(elem):
                yield from walk(child, elem, child_matrix, style)
            return
        if primitive is None:
            logging.debug("Skipping unsupported element <%s>", tag)
            return
        yield primitive

    yield from walk(root, None, IDENTITY, dict(DEFAULT_STYLE))
