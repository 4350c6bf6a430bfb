"""Boolean compositing of one notch into a base icon tree."""

import logging
from collections import namedtuple

from .importer import element_style, iter_primitives
from .markup import ensure_defs, index_in, make_element
from .strokes import decompose
from .svgmath import invert, matrix_key

FallbackEvent = namedtuple("FallbackEvent", "badge_index tag element_id reason")

# Non-stroke properties copied onto the filled replacement path, whether
# they were set as attributes or inside style="...".
CARRIED_ATTRS = ("opacity", "fill-opacity", "display", "visibility")


class KeepRegions:
    """Clip paths holding the canvas minus the notch.

    The keep region is built in root coordinates; each element that
    references it gets a copy mapped into its own user space.
    """

    def __init__(self, root, keep, backend, prefix):
        self.root = root
        self.keep = keep
        self.backend = backend
        self.prefix = prefix
        self._ids = {}

    def clip_id(self, matrix):
        key = matrix_key(matrix)
        if key in self._ids:
            return self._ids[key]
        inverse = invert(matrix)
        if inverse is None:
            return None
        with self.backend.scope():
            local = self.backend.transform(self.keep, inverse).value
            d = self.backend.path_data(local)
            compound = self.backend.contour_count(local) > 1
        clip_id = self.prefix if not self._ids else f"{self.prefix}-{len(self._ids)}"
        clip = make_element(self.root, "clipPath", {"id": clip_id})
        attrib = {"d": d}
        if compound:
            attrib["clip-rule"] = "evenodd"
        clip.append(make_element(self.root, "path", attrib))
        ensure_defs(self.root).append(clip)
        self._ids[key] = clip_id
        return clip_id

    def url(self, matrix):
        clip_id = self.clip_id(matrix)
        return f"url(#{clip_id})" if clip_id else None


def _path_element(root, backend, shape, attrib):
    attrib = dict(attrib)
    attrib["d"] = backend.path_data(shape)
    if backend.contour_count(shape) > 1:
        attrib["fill-rule"] = "evenodd"
    return make_element(root, "path", attrib)


def _replacement_attrs(primitive):
    own = element_style(primitive.element)
    fill_attrs = {}
    if primitive.element.get("class") is not None:
        fill_attrs["class"] = primitive.element.get("class")
    for name in CARRIED_ATTRS:
        if name in own:
            fill_attrs[name] = own[name]
    ring_attrs = {
        name: fill_attrs[name] for name in ("opacity", "display", "visibility") if name in fill_attrs
    }
    fill_attrs["fill"] = primitive.fill or "none"
    fill_attrs["stroke"] = "none"
    ring_attrs["fill"] = primitive.stroke or "none"
    ring_attrs["stroke"] = "none"
    stroke_opacity = primitive.style.get("stroke-opacity")
    if stroke_opacity is not None:
        ring_attrs["fill-opacity"] = stroke_opacity
    elif "fill-opacity" in primitive.style:
        ring_attrs["fill-opacity"] = "1"
    return fill_attrs, ring_attrs


def clip_element(primitive, regions):
    """Clip the untouched element to the keep region."""
    elem = primitive.element
    if elem.get("clip-path") is None:
        url = regions.url(primitive.matrix)
        if url:
            elem.set("clip-path", url)
        return
    url = regions.url(primitive.parent_matrix)
    if not url:
        return
    wrapper = make_element(regions.root, "g", {"clip-path": url})
    position = index_in(primitive.parent, elem)
    primitive.parent.remove(elem)
    wrapper.append(elem)
    primitive.parent.insert(position, wrapper)


def composite_primitive(primitive, notch, regions, backend):
    """Cut notch out of one primitive. Returns a failure reason or None."""
    elem = primitive.element
    if elem.get("clip-path") is not None or elem.get("mask") is not None:
        return "element is already clipped or masked"
    with backend.scope():
        parts = decompose(primitive, backend)
        if not parts.ok:
            return str(parts.error)
        shapes = [s for s in parts.value.shapes() if not s.is_empty]
        if not any(backend.intersects(s, notch) for s in shapes):
            return None

        inverse = invert(primitive.parent_matrix)
        if inverse is None:
            return "non-invertible parent transform"

        fill_attrs, ring_attrs = _replacement_attrs(primitive)
        replacements = []
        for shape, attrib in ((parts.value.fill, fill_attrs), (parts.value.ring, ring_attrs)):
            if shape is None:
                continue
            cut = backend.subtract(shape, notch)
            if not cut.ok:
                return str(cut.error)
            if cut.value.is_empty:
                continue
            local = backend.transform(cut.value, inverse).value
            replacements.append(_path_element(regions.root, backend, local, attrib))

    element_id = primitive.element.get("id")
    if replacements and element_id is not None:
        replacements[0].set("id", element_id)
    parent = primitive.parent
    position = index_in(parent, primitive.element)
    parent.remove(primitive.element)
    for offset, elem in enumerate(replacements):
        parent.insert(position + offset, elem)
    return None


def composite(root, notch, regions, backend, badge_index=0, skip=()):
    """Subtract notch from every visible primitive under root, in place.

    Primitives whose boolean operations fail keep their original markup and
    are clipped to the keep region instead. Returns the list of such
    FallbackEvents.
    """
    events = []
    primitives = [
        p
        for p in iter_primitives(
            root, skip=skip, samples=backend.curve_samples, resolution=backend.arc_resolution
        )
        if p.visible
    ]
    for primitive in primitives:
        reason = composite_primitive(primitive, notch, regions, backend)
        if reason is None:
            continue
        element_id = primitive.element.get("id")
        logging.debug(
            "Clipping <%s>%s instead of cutting: %s",
            primitive.tag,
            f" #{element_id}" if element_id else "",
            reason,
        )
        clip_element(primitive, regions)
        events.append(FallbackEvent(badge_index, primitive.tag, element_id, reason))
    return events
