"""Glyph outlines from TrueType/OpenType/WOFF fonts via fontTools."""

import io
import logging
from collections import namedtuple

from fontTools.pens.boundsPen import BoundsPen
from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont, TTLibError

from .svgmath import fmt_number

TextPath = namedtuple("TextPath", "d bbox")


def load_font(source):
    """Open a font from a file path or raw bytes."""
    try:
        if isinstance(source, (bytes, bytearray)):
            font = TTFont(io.BytesIO(bytes(source)))
        else:
            font = TTFont(source)
    except (TTLibError, OSError, AssertionError) as exc:
        raise ValueError(f"Could not read font: {exc}") from exc
    return GlyphRun(font)


class GlyphRun:
    """Lays out a string glyph by glyph with horizontal advances.

    No shaping or kerning is applied; letter icons carry one to three
    characters.
    """

    def __init__(self, font):
        self.font = font
        self.units_per_em = font["head"].unitsPerEm
        self.cmap = font.getBestCmap() or {}
        self.glyph_set = font.getGlyphSet()
        self.metrics = font["hmtx"].metrics

    def missing_glyphs(self, text):
        return [ch for ch in text if not self.cmap.get(ord(ch))]

    def has_glyphs(self, text):
        return not self.missing_glyphs(text)

    def text_path(self, text, x, y, font_size, precision=None):
        """Outline of text with its baseline origin at (x, y) in SVG coordinates."""
        scale = font_size / self.units_per_em
        if precision is None:
            ntos = repr
        else:
            ntos = lambda v: fmt_number(v, precision)  # noqa: E731
        svg_pen = SVGPathPen(self.glyph_set, ntos=ntos)
        bounds_pen = BoundsPen(self.glyph_set)

        cursor = x
        for ch in text:
            name = self.cmap.get(ord(ch))
            if not name:
                logging.debug("No glyph for %r", ch)
                continue
            matrix = (scale, 0, 0, -scale, cursor, y)
            glyph = self.glyph_set[name]
            glyph.draw(TransformPen(svg_pen, matrix))
            glyph.draw(TransformPen(bounds_pen, matrix))
            advance = self.metrics.get(name, (0, 0))[0]
            cursor += advance * scale

        if bounds_pen.bounds is None:
            bbox = (x, y, x, y)
        else:
            bbox = bounds_pen.bounds
        return TextPath(svg_pen.getCommands(), bbox)
