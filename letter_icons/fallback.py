"""Rectangular clip-path badge compositing.

Used for the whole run when the boolean-geometry libraries are missing or
were switched off. Works directly on the markup string.
"""

import logging
import re

from .placement import CompositionResult, compute_placement, declared_box, normalize_descriptors
from .svgmath import fmt_number

_SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)
_SVG_CLOSE_RE = re.compile(r"</svg\s*>", re.IGNORECASE)


def keep_path(min_x, min_y, size, box):
    """Canvas square followed by the cut-out rectangle, for evenodd clipping."""
    x, y, w, h = (fmt_number(v, 3) for v in box)
    right = fmt_number(box[0] + box[2], 3)
    bottom = fmt_number(box[1] + box[3], 3)
    x0, y0 = fmt_number(min_x, 3), fmt_number(min_y, 3)
    x1, y1 = fmt_number(min_x + size, 3), fmt_number(min_y + size, 3)
    return f"M{x0} {y0}H{x1}V{y1}H{x0}Z M{x} {y}H{right}V{bottom}H{x}Z"


class ClipPathEngine:
    """Cut a gap-expanded bounding box out of the whole icon per badge."""

    name = "clip-path"

    def apply(self, svg, descriptors):
        descriptors = normalize_descriptors(descriptors)
        if not descriptors:
            return CompositionResult(svg, [], self.name, 0)

        box = declared_box(svg)
        if box is None:
            raise ValueError("Missing viewBox and width/height")
        min_x, min_y, size, _ = box

        applied = 0
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

            clip_id = f"badge-clip-{index}"
            d = keep_path(min_x, min_y, size, placement.badge_box(descriptor.gap))
            opening = (
                f'<defs><clipPath id="{clip_id}"><path d="{d}" clip-rule="evenodd"/>'
                f'</clipPath></defs><g clip-path="url(#{clip_id})">'
            )
            layer = (
                f'</g><g transform="{placement.transform_attr()}" '
                f'data-badge-layer="{index}">{placement.inner}</g>'
            )

            svg = _SVG_OPEN_RE.sub(lambda m: m.group(0) + opening, svg, count=1)
            closing = list(_SVG_CLOSE_RE.finditer(svg))
            if not closing:
                raise ValueError("Unterminated <svg> element")
            end = closing[-1].start()
            svg = svg[:end] + layer + svg[end:]
            applied += 1

        return CompositionResult(svg, [], self.name, applied)
