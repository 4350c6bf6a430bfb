"""Shared test fixtures."""

import xml.etree.ElementTree as ET

import pytest

SVG_NS = "http://www.w3.org/2000/svg"


CIRCLE_ICON_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16" viewBox="0 0 16 16">
  <circle id="body" cx="8" cy="8" r="6" fill="#3574F0"/>
</svg>'''

STROKED_RECT_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16" viewBox="0 0 16 16">
  <rect x="2" y="2" width="12" height="12" fill="none" stroke="#208A3C" stroke-width="2"/>
</svg>'''

MIXED_ICON_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16" viewBox="0 0 16 16" fill="none">
  <circle id="far" cx="3" cy="3" r="1" fill="#DB3B4B"/>
  <rect id="corner" x="14" y="14" width="1" height="1" fill="#DB3B4B"/>
  <g transform="translate(1 1)" opacity="0.5">
    <circle id="shifted" cx="7" cy="7" r="6" fill="#000000"/>
  </g>
</svg>'''

LETTER_ICON_SVG = '''<svg width="16" height="16" viewBox="0 0 16 16" fill="none" xmlns="http://www.w3.org/2000/svg">
  <circle cx="8" cy="8" r="6.5" fill="#E7EFFD" stroke="#3574F0" stroke-width="1"/>
  <path d="M5 4.5H10V5.5H6V7.5H9.5V8.5H6V10.5H10V11.5H5Z" fill="#3574F0"/>
</svg>'''

SQUARE_BADGE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 8 8">
  <rect width="8" height="8" fill="#E66D17"/>
</svg>'''

PLUS_BADGE_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="16" height="16" viewBox="0 0 16 16" fill="none">
  <circle cx="8" cy="8" r="7" fill="#208A3C"/>
  <path d="M8 4V12M4 8H12" stroke="#FFFFFF" stroke-width="2"/>
</svg>'''

EMPTY_BADGE_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 8 8"></svg>'


def find_all(root, name):
    return list(root.iter(f"{{{SVG_NS}}}{name}"))


def parse(markup):
    return ET.fromstring(markup)


@pytest.fixture
def backend():
    pytest.importorskip("shapely")
    pytest.importorskip("svgpathtools")
    from letter_icons.geometry import ShapelyGeometry

    return ShapelyGeometry()


def _box_glyph(x0, y0, x1, y1):
    from fontTools.pens.ttGlyphPen import TTGlyphPen

    pen = TTGlyphPen(None)
    pen.moveTo((x0, y0))
    pen.lineTo((x0, y1))
    pen.lineTo((x1, y1))
    pen.lineTo((x1, y0))
    pen.closePath()
    return pen.glyph()


@pytest.fixture(scope="session")
def font_path(tmp_path_factory):
    """A tiny TrueType font: E is a 400x700 block, N a 400x700 block, .notdef a box."""
    pytest.importorskip("fontTools")
    from fontTools.fontBuilder import FontBuilder

    builder = FontBuilder(1000, isTTF=True)
    builder.setupGlyphOrder([".notdef", "E", "N"])
    builder.setupCharacterMap({ord("E"): "E", ord("N"): "N"})
    builder.setupGlyf(
        {
            ".notdef": _box_glyph(50, 0, 450, 700),
            "E": _box_glyph(100, 0, 500, 700),
            "N": _box_glyph(100, 0, 500, 700),
        }
    )
    glyf = builder.font["glyf"]
    builder.setupHorizontalMetrics(
        {name: (600, glyf[name].xMin) for name in (".notdef", "E", "N")}
    )
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": "Blocks", "styleName": "Regular"})
    builder.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    builder.setupPost()

    path = tmp_path_factory.mktemp("fonts") / "blocks.ttf"
    builder.save(str(path))
    return str(path)


@pytest.fixture
def glyphs(font_path):
    from letter_icons.glyphs import load_font

    return load_font(font_path)
