"""Parsing and serialization of SVG markup with xml.etree."""

import re
import xml.etree.ElementTree as ET

from .svgmath import parse_length, parse_viewbox

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"


def register_namespaces():
    # svgpathtools maps the SVG namespace to an "svg" prefix when imported.
    ET.register_namespace("", SVG_NS)
    ET.register_namespace("xlink", XLINK_NS)


register_namespaces()

_INNER_RE = re.compile(r"<svg[^>]*>([\s\S]*)</svg>", re.IGNORECASE)
_SVG_OPEN_RE = re.compile(r"<svg\b[^>]*>", re.IGNORECASE)


def local_name(tag):
    if not isinstance(tag, str):
        return None
    return tag.rsplit("}", 1)[-1]


def namespace_of(elem):
    if isinstance(elem.tag, str) and elem.tag.startswith("{"):
        return elem.tag[1:].split("}", 1)[0]
    return None


def parse_svg(markup):
    try:
        root = ET.fromstring(markup)
    except ET.ParseError as exc:
        raise ValueError(f"Invalid SVG markup: {exc}") from exc
    if local_name(root.tag) != "svg":
        raise ValueError(f"Expected <svg> root element, got <{local_name(root.tag)}>")
    return root


def canvas_box(root):
    """Return (min_x, min_y, width, height) of the root coordinate box."""
    return parse_viewbox(
        root.get("viewBox"),
        parse_length(root.get("width")),
        parse_length(root.get("height")),
    )


def make_element(root, name, attrib=None):
    ns = namespace_of(root)
    tag = f"{{{ns}}}{name}" if ns else name
    return ET.Element(tag, attrib or {})


def find_child(root, name):
    for child in root:
        if local_name(child.tag) == name:
            return child
    return None


def ensure_defs(root):
    defs = find_child(root, "defs")
    if defs is None:
        defs = make_element(root, "defs")
        root.insert(0, defs)
    return defs


def parse_style(value):
    declarations = {}
    if not value:
        return declarations
    for item in value.split(";"):
        if ":" not in item:
            continue
        key, _, val = item.partition(":")
        key = key.strip()
        val = val.strip()
        if key and val:
            declarations[key] = val
    return declarations


def opening_tag(markup):
    match = _SVG_OPEN_RE.search(markup)
    return match.group(0) if match else ""


def inner_markup(markup):
    match = _INNER_RE.search(markup)
    return match.group(1).strip() if match else ""


def _strip_namespaces(elem):
    for node in elem.iter():
        if isinstance(node.tag, str) and node.tag.startswith("{"):
            node.tag = local_name(node.tag)


def parse_fragment(root, markup):
    """Parse loose SVG content into elements matching root's namespace."""
    wrapper = f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}">{markup}</svg>'
    try:
        holder = ET.fromstring(wrapper)
    except ET.ParseError as exc:
        raise ValueError(f"Invalid SVG fragment: {exc}") from exc
    if namespace_of(root) is None:
        _strip_namespaces(holder)
    return list(holder)


def index_in(parent, child):
    for i, node in enumerate(parent):
        if node is child:
            return i
    raise ValueError("element is not a child of parent")


def serialize(root):
    register_namespaces()
    return ET.tostring(root, encoding="unicode")
