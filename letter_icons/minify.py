"""Lightweight SVG minification."""

import re

from .markup import parse_svg, serialize
from .svgmath import fmt_number

NUMERIC_ATTRS = ("d", "transform", "points")

_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
_BETWEEN_TAGS_RE = re.compile(r">\s+<")
_NUMBER_RE = re.compile(r"-?(?:\d+\.\d+|\d+\.|\.\d+|\d+)(?:[eE][-+]?\d+)?")


def round_numbers(value, precision=3):
    return _NUMBER_RE.sub(lambda m: fmt_number(float(m.group(0)), precision), value)


def minify_svg(svg, precision=3):
    """Drop comments and layout whitespace, round coordinates, sort attributes.

    Running it on its own output returns the same string.
    """
    svg = _COMMENT_RE.sub("", svg)
    svg = _BETWEEN_TAGS_RE.sub("><", svg.strip())
    root = parse_svg(svg)
    for elem in root.iter():
        if not isinstance(elem.tag, str):
            continue
        for name in NUMERIC_ATTRS:
            value = elem.get(name)
            if value is not None:
                elem.set(name, round_numbers(value, precision))
        if elem.text is not None and not elem.text.strip():
            elem.text = None
        if elem.tail is not None and not elem.tail.strip():
            elem.tail = None
        items = sorted(elem.attrib.items())
        elem.attrib.clear()
        elem.attrib.update(items)
    return serialize(root)

