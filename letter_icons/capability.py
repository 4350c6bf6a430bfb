"""Detection of the boolean-geometry capability."""

import logging

from .config import ARC_RESOLUTION, CURVE_SAMPLES


def try_import_geometry():
    """Return the shapely version, or None when shapely/svgpathtools are missing."""
    try:
        import shapely
        import svgpathtools  # noqa: F401
    except Exception:
        return None
    return shapely.__version__


def load_geometry_backend(
    exact_offset=True, curve_samples=CURVE_SAMPLES, arc_resolution=ARC_RESOLUTION
):
    """Return a geometry backend, or None when shapely/svgpathtools are missing."""
    version = try_import_geometry()
    if not version:
        logging.warning(
            "shapely/svgpathtools not available; badges will use rectangular clip cutouts."
        )
        return None

    from .geometry import ShapelyGeometry

    logging.debug("Geometry backend: shapely %s", version)
    return ShapelyGeometry(
        exact_offset=exact_offset,
        curve_samples=curve_samples,
        arc_resolution=arc_resolution,
    )
