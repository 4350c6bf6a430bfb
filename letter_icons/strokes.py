"""Stroke-to-fill decomposition.

A stroked primitive becomes a filled ring (the painted stroke area) plus an
optional fill interior. Circles and rects use exact outer/inner outlines;
everything else goes through ``offset_stroke``. Work happens in the
primitive's local coordinates and the results are mapped to root
coordinates afterwards, so non-uniform transforms distort the stroke
exactly as a renderer would.
"""

from shapely.geometry import Point

from .geometry import GeometryError, OpResult
from .importer import PrimitiveKind, rounded_rect

ANALYTIC_KINDS = (PrimitiveKind.CIRCLE, PrimitiveKind.RECT)


class StrokeParts:
    __slots__ = ("fill", "ring")

    def __init__(self, fill=None, ring=None):
        self.fill = fill
        self.ring = ring

    def shapes(self):
        return [s for s in (self.fill, self.ring) if s is not None]


def analytic_outlines(primitive, half, resolution):
    params = primitive.params
    if primitive.kind is PrimitiveKind.CIRCLE:
        center = Point(params["cx"], params["cy"])
        outer = center.buffer(params["r"] + half, quad_segs=resolution)
        inner_r = max(0.0, params["r"] - half)
        inner = center.buffer(inner_r, quad_segs=resolution) if inner_r > 0 else None
        return outer, inner

    x, y = params["x"], params["y"]
    width, height = params["width"], params["height"]
    rx, ry = params["rx"], params["ry"]
    outer_rx = rx + half if rx > 0 else 0.0
    outer_ry = ry + half if ry > 0 else 0.0
    outer = rounded_rect(
        x - half, y - half, width + 2 * half, height + 2 * half, outer_rx, outer_ry, resolution
    )
    inner_w = width - 2 * half
    inner_h = height - 2 * half
    if inner_w <= 0 or inner_h <= 0:
        return outer, None
    inner = rounded_rect(
        x + half, y + half, inner_w, inner_h, max(0.0, rx - half), max(0.0, ry - half), resolution
    )
    return outer, inner


def decompose(primitive, backend):
    """Split a primitive into root-coordinate fill and stroke-ring shapes.

    Returns an OpResult holding StrokeParts. Shapes are owned by the
    caller's scope.
    """
    fill_color = primitive.fill
    stroke_color = primitive.stroke
    if stroke_color is not None and primitive.dashed:
        return OpResult(error=GeometryError("stroke", "dashed strokes have no ring form"))

    with backend.scope() as scope:
        local_fill = None
        local_ring = None
        if stroke_color is not None:
            half = primitive.stroke_width / 2.0
            if primitive.kind in ANALYTIC_KINDS:
                outer, inner = analytic_outlines(primitive, half, backend.arc_resolution)
                outer = backend.adopt(outer)
                if inner is None:
                    local_ring = outer
                else:
                    inner = backend.adopt(inner)
                    result = backend.subtract(outer, inner)
                    if not result.ok:
                        return result
                    local_ring = result.value
                    if fill_color is not None:
                        local_fill = inner
            else:
                source = backend.adopt(primitive.geometry)
                result = backend.offset_stroke(
                    source,
                    half,
                    join=primitive.style.get("stroke-linejoin", "miter"),
                    cap=primitive.style.get("stroke-linecap", "butt"),
                    miter_limit=primitive.miter_limit,
                )
                if not result.ok:
                    return result
                local_ring = result.value
                if fill_color is not None and not primitive.area.is_empty:
                    local_fill = backend.adopt(primitive.area)
        elif fill_color is not None and not primitive.area.is_empty:
            local_fill = backend.adopt(primitive.area)

        parts = StrokeParts()
        if local_fill is not None:
            parts.fill = scope.keep(backend.transform(local_fill, primitive.matrix).value)
        if local_ring is not None:
            parts.ring = scope.keep(backend.transform(local_ring, primitive.matrix).value)
        return OpResult(parts)


def silhouette_shapes(primitive, backend):
    """Root-coordinate shapes covering everything a badge primitive paints.

    A stroked closed outline contributes its whole enclosed area grown by
    half the stroke width, not just the ring. A filled open outline
    contributes its implicitly closed area as well as its stroke.
    """
    with backend.scope() as scope:
        source = backend.adopt(primitive.geometry)
        join = primitive.style.get("stroke-linejoin", "miter")
        shapes = []
        if primitive.stroke is not None:
            half = primitive.stroke_width / 2.0
            if primitive.closed:
                result = backend.offset(source, half, join=join, miter_limit=primitive.miter_limit)
            else:
                result = backend.offset_stroke(
                    source,
                    half,
                    join=join,
                    cap=primitive.style.get("stroke-linecap", "butt"),
                    miter_limit=primitive.miter_limit,
                )
            if not result.ok:
                return result
            shapes.append(result.value)
        # A grown closed outline already covers its own area.
        covered = primitive.closed and shapes
        if primitive.fill is not None and not covered and not primitive.area.is_empty:
            shapes.append(backend.adopt(primitive.area))
        placed = [backend.transform(shape, primitive.matrix).value for shape in shapes]
        return OpResult([scope.keep(shape) for shape in placed])
