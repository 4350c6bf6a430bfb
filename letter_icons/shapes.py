"""Background shapes and colour presets for letter icons.

Each shape generator takes (fill, stroke, stroke_width, center), where
center is half the shape's native viewBox size, and returns markup that
stays inside a 1 unit transparent border.
"""

import math
from collections import namedtuple
from dataclasses import dataclass
from typing import Callable

from .config import DEFAULT_TARGET_HEIGHT, DEFAULT_VIEWBOX
from .svgmath import fmt_number

Preset = namedtuple("Preset", "name light_fill light_stroke dark_fill dark_stroke official")

PRESETS = [
    Preset("Blue", "#E7EFFD", "#3574F0", "#25324D", "#548AF7", True),
    Preset("Orange", "#FFF4EB", "#E66D17", "#45322B", "#C77D55", True),
    Preset("Purple", "#FAF5FF", "#834DF0", "#2F2936", "#A571E6", True),
    Preset("Red", "#FFF7F7", "#DB3B4B", "#402929", "#DB5C5C", True),
    Preset("Green", "#F2FCF3", "#208A3C", "#253627", "#57965C", True),
    Preset("Amber", "#FFFAEB", "#C27D04", "#3D3223", "#D6AE58", True),
    Preset("Grey", "#F0F0F0", "#757575", "#303030", "#9E9E9E", False),
    Preset("Teal", "#E0F2F1", "#00796B", "#1A3230", "#4DB6AC", False),
    Preset("Pink", "#FCE4EC", "#AD1457", "#3B2430", "#F06292", False),
]


def find_preset(name):
    """Case-insensitive preset lookup. Returns None when unknown."""
    lower = name.strip().lower()
    for preset in PRESETS:
        if preset.name.lower() == lower:
            return preset
    return None


@dataclass(frozen=True)
class ShapeDef:
    label: str
    official: bool
    generate: Callable[[str, str, float, float], str]
    view_box_size: float = DEFAULT_VIEWBOX
    target_height: float = DEFAULT_TARGET_HEIGHT
    default_x_offset: float = 0.0
    default_y_offset: float = 0.0
    dashed: bool = False


def _n(value):
    return fmt_number(value, 4)


def _circle(fill, stroke, sw, c):
    return (
        f'<circle cx="{_n(c)}" cy="{_n(c)}" r="{_n(c - 1 - sw / 2)}" '
        f'fill="{fill}" stroke="{stroke}" stroke-width="{_n(sw)}"/>'
    )


def _roundrect(fill, stroke, sw, c):
    inset = 1.5 + sw / 2
    size = 2 * (c - 1.5) - sw
    return (
        f'<rect x="{_n(inset)}" y="{_n(inset)}" width="{_n(size)}" height="{_n(size)}" rx="1.5" '
        f'fill="{fill}" stroke="{stroke}" stroke-width="{_n(sw)}"/>'
    )


def _diamond(rx):
    def generate(fill, stroke, sw, c):
        half_diag = c - 1 - sw / 2
        side = round(half_diag * math.sqrt(2), 2)
        offset = round(c - side / 2, 2)
        return (
            f'<rect x="{_n(offset)}" y="{_n(offset)}" width="{_n(side)}" height="{_n(side)}" '
            f'rx="{rx}" transform="rotate(45 {_n(c)} {_n(c)})" '
            f'fill="{fill}" stroke="{stroke}" stroke-width="{_n(sw)}"/>'
        )

    return generate


_SHIELD_D = (
    "M2.5 3.83333L8 1.54167L13.5 3.83333L13.5 9.17871C13.5 10.7502 12.7145 11.9168 11.6339 "
    "12.8852C10.8323 13.6036 9.84849 14.226 8.90452 14.8218L8.9021 14.8233C8.59264 15.0186 "
    "8.28712 15.2115 8 15.4009C7.71296 15.2115 7.40754 15.0187 7.09817 14.8235L7.09548 "
    "14.8218C6.15151 14.226 5.16769 13.6036 4.36607 12.8852C3.28548 11.9168 2.5 10.7502 "
    "2.5 9.17871V3.83333Z"
)


def _shield(fill, stroke, sw, c):
    return f'<path d="{_SHIELD_D}" fill="{fill}" stroke="{stroke}" stroke-width="{_n(sw)}"/>'


_DASHED_CIRCLE_BODY = (
    "M12.9498 3.05025C15.6835 5.78392 15.6835 10.2161 12.9498 12.9497C10.2162 15.6834 "
    "5.784 15.6834 3.05033 12.9497C0.316663 10.2161 0.316663 5.78392 3.05033 3.05025C5.784 "
    "0.316582 10.2162 0.316583 12.9498 3.05025Z"
)
_DASHED_CIRCLE_DASHES = (
    "M14.9144 6.90481L13.9266 7.06045C13.736 5.85124 13.1756 4.69027 12.2427 3.75736C11.3098 "
    "2.82445 10.1488 2.26404 8.93963 2.07352L9.09527 1.0857C10.5063 1.30802 11.8624 1.96287 "
    "12.9498 3.05025C14.0372 4.13763 14.6921 5.49375 14.9144 6.90481ZM6.90489 1.0857L7.06053 "
    "2.07352C5.85132 2.26404 4.69035 2.82445 3.75744 3.75736C2.82453 4.69027 2.26412 5.85124 "
    "2.0736 7.06045L1.08579 6.90481C1.30811 5.49375 1.96295 4.13763 3.05033 3.05025C4.13771 "
    "1.96287 5.49383 1.30802 6.90489 1.0857ZM1.08579 9.09519C1.30811 10.5063 1.96295 11.8624 "
    "3.05033 12.9497C4.13771 14.0371 5.49383 14.692 6.90489 14.9143L7.06053 13.9265C5.85132 "
    "13.736 4.69035 13.1755 3.75744 12.2426C2.82453 11.3097 2.26412 10.1488 2.0736 "
    "8.93955L1.08579 9.09519ZM9.09527 14.9143L8.93963 13.9265C10.1488 13.736 11.3098 13.1755 "
    "12.2427 12.2426C13.1756 11.3097 13.736 10.1488 13.9266 8.93955L14.9144 9.09519C14.6921 "
    "10.5063 14.0372 11.8624 12.9498 12.9497C11.8624 14.0371 10.5063 14.692 9.09527 14.9143Z"
)


def _dashed_circle(fill, stroke, sw, c):
    return (
        f'<path d="{_DASHED_CIRCLE_BODY}" fill="{fill}"/>\n'
        f'  <path fill-rule="evenodd" clip-rule="evenodd" d="{_DASHED_CIRCLE_DASHES}" fill="{stroke}"/>'
    )


_DASHED_RECT_PATHS = (
    "M9 3H12C12.5523 3 13 3.44772 13 4V7H14V4C14 2.89543 13.1046 2 12 2H9V3Z",
    "M7 3V2H4C2.89543 2 2 2.89543 2 4V7H3V4C3 3.44772 3.44772 3 4 3H7Z",
    "M3 9H2V12C2 13.1046 2.89543 14 4 14H7V13H4C3.44772 13 3 12.5523 3 12V9Z",
    "M9 13V14H12C13.1046 14 14 13.1046 14 12V9H13V12C13 12.5523 12.5523 13 12 13H9Z",
)


def _dashed_rect(fill, stroke, sw, c):
    body = (
        '<path d="M2 4C2 2.89543 2.89543 2 4 2H12C13.1046 2 14 2.89543 14 4V12C14 13.1046 '
        f'13.1046 14 12 14H4C2.89543 14 2 13.1046 2 12V4Z" fill="{fill}"/>'
    )
    dashes = "".join(f'\n  <path d="{d}" fill="{stroke}"/>' for d in _DASHED_RECT_PATHS)
    return body + dashes


def _composite(fill, stroke, sw, c):
    return (
        f'<path d="M13 10V3.5C13 2.67 12.33 2 11.5 2H5" fill="none" stroke="{stroke}" '
        f'stroke-width="{_n(sw)}" stroke-linecap="round"/>\n'
        f'  <rect x="2" y="5" width="9" height="9" rx="1.5" fill="{fill}" stroke="{stroke}" '
        f'stroke-width="{_n(sw)}"/>'
    )


def _hexagon(fill, stroke, sw, c):
    return (
        f'<path d="M8 2.5L13 5v6L8 13.5L3 11v-6Z" fill="{fill}" stroke="{stroke}" '
        f'stroke-width="{_n(sw)}"/>'
    )


def _document(fill, stroke, sw, c):
    return (
        '<path d="M3.75 2.25h6.5l3 3v7.5a1 1 0 0 1-1 1h-8.5a1 1 0 0 1-1-1v-9.5a1 1 0 0 1 1-1z" '
        f'fill="{fill}" stroke="{stroke}" stroke-width="{_n(sw)}"/>\n'
        f'  <path d="M10.25 2.25v3h3" fill="none" stroke="{stroke}" stroke-width="{_n(sw)}" '
        'stroke-linecap="round"/>'
    )


SHAPES = {
    "circle": ShapeDef("Circle", True, _circle),
    "roundrect": ShapeDef("Rounded Rect", True, _roundrect),
    "diamond": ShapeDef("Diamond", True, _diamond("0.5"), view_box_size=18, target_height=6.3),
    "rounded-diamond": ShapeDef(
        "Rounded Diamond", True, _diamond("1.5"), view_box_size=18, target_height=6.3
    ),
    "shield": ShapeDef("Shield", True, _shield, target_height=6.3),
    "dashed-circle": ShapeDef("Dashed Circle", True, _dashed_circle, dashed=True),
    "dashed-rect": ShapeDef("Dashed Rect", True, _dashed_rect, dashed=True),
    "composite": ShapeDef(
        "Composite",
        False,
        _composite,
        target_height=5.0,
        default_x_offset=-1.5,
        default_y_offset=1.5,
    ),
    "hexagon": ShapeDef("Hexagon", False, _hexagon, target_height=5.5),
    "document": ShapeDef("Document", False, _document, target_height=5.5, default_y_offset=1.0),
}


def get_shape(name):
    shape = SHAPES.get(name)
    if shape is None:
        raise ValueError(f'Unknown shape: "{name}". Valid shapes: {", ".join(SHAPES)}')
    return shape
