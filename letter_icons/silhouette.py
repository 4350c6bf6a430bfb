"""Badge silhouette ("notch") construction."""

import logging

from .geometry import OpResult
from .importer import iter_primitives
from .markup import parse_svg
from .strokes import silhouette_shapes
from .svgmath import fmt_number


def expand(shape, gap, backend):
    """Grow shape outward by gap with round joins."""
    if gap <= 0:
        return OpResult(backend.adopt(shape.geom))
    if backend.exact_offset:
        result = backend.offset(shape, gap, join="round")
        if result.ok:
            return result
        logging.debug("Exact offset failed (%s); using circle buffer", result.error)
    return backend.approximate_offset(shape, gap)


def build_notch(markup, placement, gap, backend):
    """Return the placed, gap-expanded union of everything the badge paints.

    Returns None when the badge cannot be parsed or paints nothing. A failed
    union or offset comes back as an OpResult error.
    """
    try:
        root = parse_svg(markup)
    except ValueError as exc:
        logging.warning("Skipping badge silhouette: %s", exc)
        return None

    with backend.scope() as scope:
        shapes = []
        for primitive in iter_primitives(
            root, samples=backend.curve_samples, resolution=backend.arc_resolution
        ):
            if not primitive.visible:
                continue
            result = silhouette_shapes(primitive, backend)
            if not result.ok:
                logging.debug("Badge <%s> left out of silhouette: %s", primitive.tag, result.error)
                continue
            shapes.extend(s for s in result.value if not s.is_empty)
        if not shapes:
            return None

        count = len(shapes)
        united = backend.tree_unite(shapes)
        if not united.ok:
            return united
        placed = backend.transform(united.value, placement.matrix)
        expanded = expand(placed.value, gap, backend)
        if not expanded.ok:
            return expanded
        logging.debug(
            "Notch: %d badge shapes, gap=%s, bounds=%s",
            count,
            fmt_number(gap),
            ", ".join(fmt_number(v) for v in expanded.value.bounds),
        )
        return OpResult(scope.keep(expanded.value))
