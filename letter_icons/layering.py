"""Badge layering and engine selection.

Badges are applied in descriptor order. Each badge's notch is cut out of
the original icon artwork only; badge layers rendered earlier are wrapped
in a clip group keyed to the new notch instead of being cut themselves.
"""

import logging

from .capability import load_geometry_backend
from .fallback import ClipPathEngine
from .markup import canvas_box, index_in, make_element, parse_fragment, parse_svg, serialize
from .placement import CompositionResult, compute_placement, normalize_descriptors
from .svgmath import IDENTITY

LAYER_ATTR = "data-badge-layer"


class BooleanEngine:
    """Badge compositing through boolean path geometry."""

    name = "boolean"

    def __init__(self, backend):
        self.backend = backend

    def apply(self, svg, descriptors):
        descriptors = normalize_descriptors(descriptors)
        if not descriptors:
            return CompositionResult(svg, [], self.name, 0)

        from .compositor import KeepRegions, composite
        from .silhouette import build_notch

        root = parse_svg(svg)
        min_x, min_y, size, _ = canvas_box(root)
        backend = self.backend
        layers = []
        events = []

        for index, descriptor in descriptors:
            placement = compute_placement(
                descriptor.markup,
                size,
                descriptor.x_offset,
                descriptor.y_offset,
                descriptor.scale,
                descriptor.anchor,
                origin=(min_x, min_y),
            )
            if not placement.inner:
                logging.warning("Badge %d has no content; skipped", index)
                continue

            with backend.scope():
                notch = build_notch(descriptor.markup, placement, descriptor.gap, backend)
                if notch is None:
                    logging.warning("Badge %d paints nothing; skipped", index)
                    continue
                if not notch.ok:
                    logging.warning(
                        "Badge %d silhouette failed (%s); using its bounding box", index, notch.error
                    )
                    notch_shape = backend.rect(*placement.badge_box(descriptor.gap))
                else:
                    notch_shape = notch.value

                canvas = backend.rect(min_x, min_y, size, size)
                keep = backend.subtract(canvas, notch_shape)
                if not keep.ok:
                    logging.warning(
                        "Badge %d keep region failed (%s); using its bounding box", index, keep.error
                    )
                    notch_shape = backend.rect(*placement.badge_box(descriptor.gap))
                    keep = backend.subtract(canvas, notch_shape)
                    if not keep.ok:
                        logging.warning("Badge %d skipped: %s", index, keep.error)
                        continue

                regions = KeepRegions(root, keep.value, backend, f"badge-keep-{index}")
                events.extend(
                    composite(root, notch_shape, regions, backend, badge_index=index, skip=layers)
                )
                if layers:
                    url = regions.url(IDENTITY)
                    for position, layer in enumerate(layers):
                        layers[position] = wrap_in_clip(root, layer, url)

            layer = make_element(root, "g", {"transform": placement.transform_attr()})
            layer.set(LAYER_ATTR, str(index))
            for child in parse_fragment(root, placement.inner):
                layer.append(child)
            root.append(layer)
            layers.append(layer)

        if events:
            logging.debug("%d element(s) clipped instead of cut", len(events))
        return CompositionResult(serialize(root), events, self.name, len(layers))


def wrap_in_clip(root, layer, url):
    wrapper = make_element(root, "g", {"clip-path": url})
    position = index_in(root, layer)
    root.remove(layer)
    wrapper.append(layer)
    root.insert(position, wrapper)
    return wrapper


def create_modifier_engine(geometry=True, exact_offset=True):
    """Pick the badge engine for a whole run.

    With ``geometry`` off, or without shapely/svgpathtools installed, the
    rectangular clip-path engine is returned.
    """
    backend = load_geometry_backend(exact_offset=exact_offset) if geometry else None
    if backend is None:
        return ClipPathEngine()
    return BooleanEngine(backend)


def apply_modifier(svg, descriptors, engine=None):
    """Composite badges onto svg and return the resulting markup."""
    if engine is None:
        engine = create_modifier_engine()
    return engine.apply(svg, descriptors).markup
