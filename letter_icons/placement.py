"""Badge descriptors and badge placement on the icon canvas."""

import logging
import re
from collections import namedtuple
from dataclasses import dataclass
from typing import Optional

from .config import (
    DEFAULT_ANCHOR,
    DEFAULT_BADGE_SIZE,
    DEFAULT_GAP,
    DEFAULT_TARGET_FRACTION,
    SCALE_PRECISION,
)
from .markup import inner_markup, opening_tag
from .svgmath import fmt_number, parse_numbers

# Fractional (ax, ay) position on both the canvas and the badge box.
ANCHORS = {
    "tl": (0.0, 0.0),
    "t": (0.5, 0.0),
    "tr": (1.0, 0.0),
    "l": (0.0, 0.5),
    "c": (0.5, 0.5),
    "r": (1.0, 0.5),
    "bl": (0.0, 1.0),
    "b": (0.5, 1.0),
    "br": (1.0, 1.0),
}
ANCHOR_ALIASES = {
    "top-left": "tl",
    "top": "t",
    "top-right": "tr",
    "left": "l",
    "center": "c",
    "centre": "c",
    "right": "r",
    "bottom-left": "bl",
    "bottom": "b",
    "bottom-right": "br",
}

_ATTR_RE = r'(?<![\w:-]){}\s*=\s*["\']([^"\']+)["\']'

CompositionResult = namedtuple("CompositionResult", "markup events engine applied")


def resolve_anchor(name):
    key = (name or DEFAULT_ANCHOR).strip().lower()
    key = ANCHOR_ALIASES.get(key, key)
    if key not in ANCHORS:
        valid = ", ".join(list(ANCHORS) + list(ANCHOR_ALIASES))
        raise ValueError(f'Unknown anchor "{name}". Valid anchors: {valid}')
    return key


@dataclass
class BadgeDescriptor:
    markup: str
    x_offset: float = 0.0
    y_offset: float = 0.0
    scale: float = 1.0
    gap: float = DEFAULT_GAP
    anchor: str = DEFAULT_ANCHOR
    z_index: Optional[int] = None


def normalize_descriptors(descriptors):
    """Return [(paint_index, BadgeDescriptor)] in paint order.

    Descriptors without a z_index keep their list position; plain dicts are
    accepted as BadgeDescriptor keyword arguments.
    """
    ordered = []
    for position, descriptor in enumerate(descriptors or ()):
        if isinstance(descriptor, dict):
            descriptor = BadgeDescriptor(**descriptor)
        z = descriptor.z_index if descriptor.z_index is not None else position
        ordered.append((z, position, descriptor))
    ordered.sort(key=lambda item: (item[0], item[1]))
    return [(index, item[2]) for index, item in enumerate(ordered)]


@dataclass(frozen=True)
class Placement:
    tx: float
    ty: float
    scale: float
    inner: str
    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def matrix(self):
        return (self.scale, 0.0, 0.0, self.scale, self.tx, self.ty)

    def badge_box(self, gap=0.0):
        """Badge's coordinate box on the canvas, grown by gap on every side."""
        x = self.tx + self.min_x * self.scale - gap
        y = self.ty + self.min_y * self.scale - gap
        return x, y, self.width * self.scale + 2 * gap, self.height * self.scale + 2 * gap

    def transform_attr(self):
        return (
            f"translate({fmt_number(self.tx, 3)} {fmt_number(self.ty, 3)}) "
            f"scale({fmt_number(self.scale, SCALE_PRECISION)})"
        )


def declared_box(markup):
    """Return (min_x, min_y, width, height) from the <svg> tag, or None.

    With only one of width/height declared, the other is DEFAULT_BADGE_SIZE.
    """
    tag = opening_tag(markup)
    match = re.search(_ATTR_RE.format("viewBox"), tag)
    if match:
        parts = parse_numbers(match.group(1))
        if len(parts) == 4 and parts[2] > 0 and parts[3] > 0:
            return parts[0], parts[1], parts[2], parts[3]
        logging.debug("Ignoring unusable viewBox %r", match.group(1))
        return None

    width = _declared_length(tag, "width")
    height = _declared_length(tag, "height")
    if width is None and height is None:
        return None
    return 0.0, 0.0, width or DEFAULT_BADGE_SIZE, height or DEFAULT_BADGE_SIZE


def _declared_length(tag, name):
    match = re.search(_ATTR_RE.format(name), tag)
    if not match:
        return None
    value = parse_numbers(match.group(1))
    if not value or value[0] <= 0:
        return None
    return value[0]


def badge_dimensions(markup):
    """Return the badge's native box, defaulting to a 16x16 square."""
    box = declared_box(markup)
    if box is None:
        return 0.0, 0.0, DEFAULT_BADGE_SIZE, DEFAULT_BADGE_SIZE
    return box


def compute_placement(
    markup,
    canvas_size,
    x_offset=0.0,
    y_offset=0.0,
    user_scale=1.0,
    anchor=DEFAULT_ANCHOR,
    target_fraction=DEFAULT_TARGET_FRACTION,
    origin=(0.0, 0.0),
):
    """Position and scale a badge so its anchor point meets the canvas's."""
    min_x, min_y, width, height = badge_dimensions(markup)
    ax, ay = ANCHORS[resolve_anchor(anchor)]

    target = canvas_size * target_fraction
    fit = min(target / width, target / height)
    scale = fit * user_scale

    tx = origin[0] + ax * canvas_size - ax * width * scale - min_x * scale + x_offset
    ty = origin[1] + ay * canvas_size - ay * height * scale - min_y * scale + y_offset

    logging.debug(
        "Badge placement: anchor=%s translate=(%s, %s) scale=%s native=%sx%s",
        anchor,
        fmt_number(tx),
        fmt_number(ty),
        fmt_number(scale),
        fmt_number(width),
        fmt_number(height),
    )
    return Placement(tx, ty, scale, inner_markup(markup), min_x, min_y, width, height)
