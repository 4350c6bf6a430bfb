"""Letter-on-shape icon assembly."""

import logging
import math
from collections import namedtuple

from .config import DEFAULT_STROKE_WIDTH, DEFAULT_TARGET_HEIGHT
from .shapes import SHAPES
from .svgmath import fmt_number

IconResult = namedtuple("IconResult", "svg error view_box_size")

LETTER_PRECISION = 2
FIT_PADDING = 1.0

# Half-extents (width, height) of the letter area for shapes whose interior
# is neither round, diamond nor a plain inset square.
INTERIOR_HALF_EXTENTS = {
    "shield": (5.5, 4.17),
    "hexagon": (5.0, 5.5),
    "document": (4.25, 3.75),
    "composite": (4.5, 4.5),
}


def calibrate_font_size(glyphs, target_height=DEFAULT_TARGET_HEIGHT):
    """Font size at which a capital E is target_height units tall."""
    bbox = glyphs.text_path("E", 0, 0, 100).bbox
    height = bbox[3] - bbox[1]
    if height <= 0:
        return DEFAULT_TARGET_HEIGHT
    return round(target_height / height * 100, 1)


def _fit_box(half_w, half_h, limit_w, limit_h):
    if limit_w <= 0 or limit_h <= 0:
        return 1.0
    sx = limit_w / half_w if half_w > limit_w else 1.0
    sy = limit_h / half_h if half_h > limit_h else 1.0
    return min(sx, sy)


def content_fit_scale(text_w, text_h, shape_name, stroke_width, x_offset, y_offset, shape_scale):
    """Factor in (0, 1] that fits a text box inside the shape's interior."""
    shape = SHAPES.get(shape_name)
    if shape is None:
        return 1.0
    c = shape.view_box_size / 2
    sw = 1.0 if shape.dashed else stroke_width
    half_w = text_w / 2
    half_h = text_h / 2
    scale = 1.0

    if shape_name in ("circle", "dashed-circle"):
        r = (c - 1 - sw) * shape_scale - FIT_PADDING - math.hypot(x_offset, y_offset)
        diag = math.hypot(half_w, half_h)
        if r > 0 and diag > r:
            scale = r / diag
    elif shape_name in ("diamond", "rounded-diamond"):
        d = (c - 1 - sw) * shape_scale - FIT_PADDING - abs(x_offset) - abs(y_offset)
        l1 = half_w + half_h
        if d > 0 and l1 > d:
            scale = d / l1
    elif shape_name in INTERIOR_HALF_EXTENTS:
        ext_w, ext_h = INTERIOR_HALF_EXTENTS[shape_name]
        scale = _fit_box(
            half_w,
            half_h,
            (ext_w - sw / 2) * shape_scale - FIT_PADDING - abs(x_offset),
            (ext_h - sw / 2) * shape_scale - FIT_PADDING - abs(y_offset),
        )
    else:
        scale = _fit_box(
            half_w,
            half_h,
            (c - 1.5 - sw) * shape_scale - FIT_PADDING - abs(x_offset),
            (c - 1.5 - sw) * shape_scale - FIT_PADDING - abs(y_offset),
        )
    return min(scale, 1.0)


def bound_font_size(
    glyphs, text, calibrated, shape_name, stroke_width, x_offset=0.0, y_offset=0.0, shape_scale=1.0
):
    """Shrink the calibrated size until multi-character text fits the shape."""
    if glyphs is None or not text or len(text) <= 1:
        return calibrated
    x1, y1, x2, y2 = glyphs.text_path(text, 0, 0, calibrated).bbox
    width = x2 - x1
    height = y2 - y1
    if width <= 0 and height <= 0:
        return calibrated
    scale = content_fit_scale(
        width, height, shape_name, stroke_width, x_offset, y_offset, shape_scale
    )
    return round(calibrated * scale, 1)


def _describe(ch):
    return f'"{ch}" (U+{ord(ch):04X})'


def generate_letter_path(glyphs, text, fill, font_size, x_offset=0.0, y_offset=0.0, center=8.0):
    """Return (path markup, error message) for text centred on center."""
    if glyphs is None or not text:
        return "", None

    missing = glyphs.missing_glyphs(text)
    if missing:
        chars = ", ".join(_describe(ch) for ch in missing)
        return "", f"The current font has no glyph for {chars}."

    x1, y1, x2, y2 = glyphs.text_path(text, 0, 0, font_size).bbox
    width = x2 - x1
    height = y2 - y1
    if width == 0 and height == 0:
        return "", f'The current font has no glyph for "{text}".'

    tx = center + x_offset - width / 2 - x1
    ty = center + y_offset - height / 2 - y1
    d = glyphs.text_path(text, tx, ty, font_size, precision=LETTER_PRECISION).d
    return f'<path d="{d}" fill="{fill}"/>', None


def icon_view_box(base, scale):
    if scale == 1.0:
        return base
    scaled_half = scale * (base / 2 - 1)
    return max(base, math.ceil(2 * scaled_half + 2))


def generate_svg(
    glyphs,
    text,
    shape,
    fill,
    stroke,
    letter_color,
    stroke_width=DEFAULT_STROKE_WIDTH,
    font_size=None,
    x_offset=0.0,
    y_offset=0.0,
    shape_scale=None,
):
    """Assemble a square letter-on-shape icon. Never raises for glyph problems."""
    shape_def = SHAPES.get(shape)
    if shape_def is None:
        return IconResult(
            "", f'Unknown shape: "{shape}". Valid shapes: {", ".join(SHAPES)}', 16
        )

    base = shape_def.view_box_size
    scale = 1.0 if shape_scale is None else shape_scale
    native_center = base / 2
    view_box = icon_view_box(base, scale)
    center = view_box / 2

    if font_size is not None:
        size = font_size
    elif glyphs is not None:
        calibrated = calibrate_font_size(glyphs, shape_def.target_height)
        size = bound_font_size(
            glyphs, text, calibrated, shape, stroke_width, x_offset, y_offset, scale
        )
    else:
        size = shape_def.target_height
    logging.debug("Letter %r: font size %s, viewBox %s", text, fmt_number(size), fmt_number(view_box))

    shape_markup = shape_def.generate(fill, stroke, stroke_width, native_center)
    if scale != 1.0:
        shape_markup = (
            f'<g transform="translate({fmt_number(center)} {fmt_number(center)}) '
            f"scale({fmt_number(scale)}) "
            f'translate(-{fmt_number(native_center)} -{fmt_number(native_center)})">\n'
            f"    {shape_markup}\n  </g>"
        )

    letter_markup, error = generate_letter_path(
        glyphs,
        text,
        letter_color,
        size,
        x_offset + shape_def.default_x_offset,
        y_offset + shape_def.default_y_offset,
        center,
    )
    vb = fmt_number(view_box)
    svg = (
        f'<svg width="{vb}" height="{vb}" viewBox="0 0 {vb} {vb}" fill="none" '
        f'xmlns="http://www.w3.org/2000/svg">\n'
        f"  {shape_markup}\n"
        f"  {letter_markup}\n"
        f"</svg>"
    )
    return IconResult(svg, error, view_box)
