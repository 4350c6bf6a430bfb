"""Shapely-backed boolean geometry with scoped ownership of intermediate shapes.

Every union, difference, offset or transform hands back a :class:`Shape`
handle registered with the innermost open :meth:`ShapelyGeometry.scope`.
Closing a scope releases every handle it still owns, so the intermediate
results of a long chain of boolean operations never outlive the function
that produced them. Results that must survive are moved to the enclosing
scope with :meth:`Scope.keep`.

Operations never raise on geometric failure. They return an
:class:`OpResult` whose ``error`` is a :class:`GeometryError`.
"""

import logging
from contextlib import contextmanager

from shapely import affinity
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Point, Polygon, box
from shapely.ops import unary_union

from .config import (
    ARC_RESOLUTION,
    BUFFER_STEP_FACTOR,
    BUFFER_STEP_MAX,
    BUFFER_STEP_MIN,
    CURVE_SAMPLES,
    PATH_PRECISION,
)
from .svgmath import fmt_number, to_shapely

JOIN_STYLES = {"miter": "mitre", "miter-clip": "mitre", "arcs": "round", "round": "round", "bevel": "bevel"}
CAP_STYLES = {"butt": "flat", "round": "round", "square": "square"}


class GeometryError(Exception):
    def __init__(self, operation, reason):
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason


class OpResult:
    __slots__ = ("value", "error")

    def __init__(self, value=None, error=None):
        self.value = value
        self.error = error

    @property
    def ok(self):
        return self.error is None

    def __repr__(self):
        if self.error is not None:
            return f"OpResult(error={self.error!s})"
        return f"OpResult({self.value!r})"


class Shape:
    """Owned handle around a shapely geometry."""

    __slots__ = ("_geom", "_backend")

    def __init__(self, geom, backend):
        self._geom = geom
        self._backend = backend

    @property
    def geom(self):
        if self._geom is None:
            raise RuntimeError("Shape used after release")
        return self._geom

    @property
    def released(self):
        return self._geom is None

    @property
    def is_empty(self):
        return self.geom.is_empty

    @property
    def bounds(self):
        return self.geom.bounds

    def release(self):
        if self._geom is not None:
            self._geom = None
            self._backend._forget(self)

    def __repr__(self):
        if self._geom is None:
            return "Shape(<released>)"
        return f"Shape({self._geom.geom_type}, area={self._geom.area:.4f})"


class Scope:
    def __init__(self, backend, parent):
        self._backend = backend
        self._parent = parent
        self._owned = []

    def own(self, shape):
        self._owned.append(shape)

    def keep(self, shape):
        """Detach shape from this scope and hand it to the enclosing one."""
        if shape is None:
            return None
        self._owned = [s for s in self._owned if s is not shape]
        if self._parent is not None:
            self._parent.own(shape)
        return shape

    def close(self):
        for shape in self._owned:
            shape.release()
        self._owned = []


def polygonal(geom):
    """Keep only the area-bearing parts of a geometry."""
    if geom.is_empty:
        return Polygon()
    if isinstance(geom, (Polygon, MultiPolygon)):
        return geom
    parts = []
    for part in getattr(geom, "geoms", []):
        if isinstance(part, (Polygon, MultiPolygon)):
            parts.append(part)
    if not parts:
        return Polygon()
    return unary_union(parts)


def iter_polygons(geom):
    if isinstance(geom, Polygon):
        if not geom.is_empty:
            yield geom
    elif hasattr(geom, "geoms"):
        for part in geom.geoms:
            yield from iter_polygons(part)


def contour_count(geom):
    return sum(1 + len(poly.interiors) for poly in iter_polygons(geom))


def ring_to_path(coords, precision=PATH_PRECISION):
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]
    if len(coords) < 3:
        return ""
    parts = [f"M{fmt_number(coords[0][0], precision)} {fmt_number(coords[0][1], precision)}"]
    for x, y in coords[1:]:
        parts.append(f"L{fmt_number(x, precision)} {fmt_number(y, precision)}")
    parts.append("Z")
    return "".join(parts)


def geom_to_path_data(geom, precision=PATH_PRECISION):
    paths = []
    for poly in iter_polygons(geom):
        paths.append(ring_to_path(list(poly.exterior.coords), precision))
        for interior in poly.interiors:
            paths.append(ring_to_path(list(interior.coords), precision))
    return "".join(p for p in paths if p)


class ShapelyGeometry:
    """The {unite, subtract, offset, offset_stroke} capability over shapely."""

    def __init__(
        self,
        exact_offset=True,
        curve_samples=CURVE_SAMPLES,
        arc_resolution=ARC_RESOLUTION,
    ):
        self.exact_offset = exact_offset
        self.curve_samples = curve_samples
        self.arc_resolution = arc_resolution
        self._live = {}
        self._scopes = []

    # -- ownership --------------------------------------------------------

    @property
    def live_count(self):
        return len(self._live)

    @contextmanager
    def scope(self):
        parent = self._scopes[-1] if self._scopes else None
        current = Scope(self, parent)
        self._scopes.append(current)
        try:
            yield current
        finally:
            self._scopes.pop()
            current.close()

    def adopt(self, geom):
        shape = Shape(geom, self)
        self._live[id(shape)] = shape
        if self._scopes:
            self._scopes[-1].own(shape)
        return shape

    def release(self, *shapes):
        for shape in shapes:
            if shape is not None:
                shape.release()

    def _forget(self, shape):
        self._live.pop(id(shape), None)

    # -- constructors -----------------------------------------------------

    def rect(self, x, y, width, height):
        return self.adopt(box(x, y, x + width, y + height))

    def circle(self, cx, cy, r):
        return self.adopt(Point(cx, cy).buffer(r, quad_segs=self.arc_resolution))

    # -- capability -------------------------------------------------------

    def _run(self, operation, fn, *inputs):
        for shape in inputs:
            if shape.is_empty:
                continue
            if not shape.geom.is_valid:
                return OpResult(error=GeometryError(operation, "invalid input geometry"))
        try:
            geom = fn()
        except (GEOSException, ValueError) as exc:
            return OpResult(error=GeometryError(operation, str(exc)))
        return OpResult(self.adopt(polygonal(geom)))

    def unite(self, a, b):
        return self._run("unite", lambda: a.geom.union(b.geom), a, b)

    def subtract(self, a, b):
        return self._run("subtract", lambda: a.geom.difference(b.geom), a, b)

    def offset(self, shape, distance, join="round", miter_limit=4.0):
        """Grow (or shrink, for negative distance) a filled shape."""
        return self._run(
            "offset",
            lambda: shape.geom.buffer(
                distance,
                quad_segs=self.arc_resolution,
                join_style=JOIN_STYLES.get(join, "mitre"),
                mitre_limit=miter_limit,
            ),
            shape,
        )

    def offset_stroke(self, shape, half_width, join="miter", cap="butt", miter_limit=4.0):
        """Area painted by a centred stroke of 2 * half_width along shape's outline."""
        geom = shape.geom
        line = geom.boundary if isinstance(geom, (Polygon, MultiPolygon)) else geom
        try:
            ring = line.buffer(
                half_width,
                quad_segs=self.arc_resolution,
                cap_style=CAP_STYLES.get(cap, "flat"),
                join_style=JOIN_STYLES.get(join, "mitre"),
                mitre_limit=miter_limit,
            )
        except (GEOSException, ValueError) as exc:
            return OpResult(error=GeometryError("offset_stroke", str(exc)))
        return OpResult(self.adopt(polygonal(ring)))

    def transform(self, shape, matrix):
        return OpResult(self.adopt(affinity.affine_transform(shape.geom, to_shapely(matrix))))

    def intersects(self, a, b):
        try:
            return a.geom.intersects(b.geom)
        except GEOSException:
            return True

    # -- composite helpers ------------------------------------------------

    def tree_unite(self, shapes):
        """Unite shapes pairwise, level by level, releasing consumed inputs."""
        if not shapes:
            return OpResult(self.adopt(Polygon()))
        shapes = list(shapes)
        while len(shapes) > 1:
            merged = []
            for i in range(0, len(shapes), 2):
                if i + 1 >= len(shapes):
                    merged.append(shapes[i])
                    continue
                result = self.unite(shapes[i], shapes[i + 1])
                if not result.ok:
                    self.release(*shapes[i:], *merged)
                    return result
                self.release(shapes[i], shapes[i + 1])
                merged.append(result.value)
            shapes = merged
        return OpResult(shapes[0])

    def approximate_offset(self, shape, radius):
        """Grow shape by radius with a Minkowski circle buffer along its boundary.

        Corners come out rounded and the result never self-intersects.
        """
        if radius <= 0 or shape.is_empty:
            return OpResult(self.adopt(shape.geom))
        step = max(BUFFER_STEP_MIN, min(BUFFER_STEP_MAX, radius * BUFFER_STEP_FACTOR))
        with self.scope() as scope:
            circles = []
            for poly in iter_polygons(shape.geom):
                for ring in [poly.exterior, *poly.interiors]:
                    distance = 0.0
                    while distance < ring.length:
                        pt = ring.interpolate(distance)
                        circles.append(self.circle(pt.x, pt.y, radius))
                        distance += step
            if not circles:
                return OpResult(self.adopt(shape.geom))
            buffer = self.tree_unite(circles)
            if not buffer.ok:
                return buffer
            result = self.unite(shape, buffer.value)
            if result.ok:
                scope.keep(result.value)
            logging.debug(
                "Circle buffer: %d circles, radius=%s, step=%s",
                len(circles),
                fmt_number(radius),
                fmt_number(step),
            )
            return result

    def path_data(self, shape, precision=PATH_PRECISION):
        return geom_to_path_data(shape.geom, precision)

    def contour_count(self, shape):
        return contour_count(shape.geom)
