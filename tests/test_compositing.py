"""Tests for the boolean compositor and the badge layering engine."""

import pytest

pytest.importorskip("shapely")
pytest.importorskip("svgpathtools")

from shapely.geometry import Point  # noqa: E402

from letter_icons.geometry import GeometryError, OpResult, ShapelyGeometry  # noqa: E402
from letter_icons.importer import path_geometry  # noqa: E402
from letter_icons.layering import BooleanEngine  # noqa: E402
from letter_icons.placement import BadgeDescriptor, compute_placement  # noqa: E402
from letter_icons.silhouette import build_notch  # noqa: E402
from tests.conftest import (  # noqa: E402
    CIRCLE_ICON_SVG,
    EMPTY_BADGE_SVG,
    LETTER_ICON_SVG,
    MIXED_ICON_SVG,
    PLUS_BADGE_SVG,
    SQUARE_BADGE_SVG,
    STROKED_RECT_SVG,
    find_all,
    parse,
)


class FailingSubtract(ShapelyGeometry):
    """Rejects every subtraction except the canvas keep region."""

    def subtract(self, a, b):
        if a.bounds == (0.0, 0.0, 16.0, 16.0):
            return super().subtract(a, b)
        return OpResult(error=GeometryError("subtract", "self-intersection"))


def _area(d):
    geom, _ = path_geometry(d, "nonzero", 8)
    return geom


def _wrap(body):
    return f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 16 16">{body}</svg>'


def _content(root):
    """Paths and shapes outside <defs> and badge layers."""
    badge = {id(e) for layer in root.iter() if layer.get("data-badge-layer") for e in layer.iter()}
    defs = {id(e) for d in find_all(root, "defs") for e in d.iter()}
    return [e for e in root.iter() if id(e) not in badge and id(e) not in defs and e is not root]


class TestNotch:
    def test_square_badge_notch(self, backend):
        placement = compute_placement(SQUARE_BADGE_SVG, 16)
        with backend.scope():
            notch = build_notch(SQUARE_BADGE_SVG, placement, 1.0, backend)
            assert notch.ok
            minx, miny, maxx, maxy = notch.value.bounds
            assert (minx, miny) == pytest.approx((9, 9), abs=1e-6)
            assert (maxx, maxy) == pytest.approx((17, 17), abs=1e-6)
            assert notch.value.geom.contains(Point(9.5, 12))
            assert not notch.value.geom.contains(Point(9.1, 9.1))
        assert backend.live_count == 0

    def test_approximate_notch(self):
        backend = ShapelyGeometry(exact_offset=False)
        placement = compute_placement(SQUARE_BADGE_SVG, 16)
        with backend.scope():
            notch = build_notch(SQUARE_BADGE_SVG, placement, 1.0, backend)
            assert notch.ok
            assert notch.value.bounds[0] == pytest.approx(9, abs=0.05)
        assert backend.live_count == 0

    def test_empty_badge(self, backend):
        placement = compute_placement(EMPTY_BADGE_SVG, 16)
        with backend.scope():
            assert build_notch(EMPTY_BADGE_SVG, placement, 1.0, backend) is None

    def test_unparseable_badge(self, backend):
        placement = compute_placement("<svg><rect></svg>", 16)
        with backend.scope():
            assert build_notch("<svg><rect></svg>", placement, 1.0, backend) is None


class TestCompositor:
    def test_filled_circle_with_square_badge(self, backend):
        engine = BooleanEngine(backend)
        result = engine.apply(CIRCLE_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)])
        root = parse(result.markup)

        assert result.events == []
        assert result.applied == 1
        assert find_all(root, "circle") == []
        [cut] = [e for e in _content(root) if e.tag.endswith("path")]
        assert cut.get("id") == "body"
        assert cut.get("fill") == "#3574F0"
        assert cut.get("stroke") == "none"

        geom = _area(cut.get("d"))
        assert geom.contains(Point(8, 8))
        assert not geom.contains(Point(12, 12))
        assert not geom.contains(Point(9.5, 12.5))
        assert geom.area < 3.1416 * 36

        [layer] = [e for e in root.iter() if e.get("data-badge-layer") == "0"]
        assert layer.get("transform") == "translate(10 10) scale(0.75)"
        assert find_all(layer, "rect")[0].get("fill") == "#E66D17"
        assert backend.live_count == 0

    def test_stroked_rect_emits_ring_only(self, backend):
        result = BooleanEngine(backend).apply(
            STROKED_RECT_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)]
        )
        root = parse(result.markup)
        paths = [e for e in _content(root) if e.tag.endswith("path")]
        assert len(paths) == 1
        ring = paths[0]
        assert ring.get("fill") == "#208A3C"
        assert ring.get("stroke") == "none"
        assert [e for e in _content(root) if e.tag.endswith("rect")] == []
        geom = _area(ring.get("d"))
        assert geom.area < 14 * 14 - 10 * 10
        assert not geom.contains(Point(13.5, 13.5))
        assert geom.contains(Point(2.5, 2.5))

    def test_untouched_and_swallowed_primitives(self, backend):
        result = BooleanEngine(backend).apply(
            MIXED_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)]
        )
        root = parse(result.markup)
        ids = [e.get("id") for e in _content(root) if e.get("id")]
        assert "corner" not in ids

        [far] = [e for e in find_all(root, "circle") if e.get("id") == "far"]
        assert far.attrib == {"id": "far", "cx": "3", "cy": "3", "r": "1", "fill": "#DB3B4B"}

    def test_replacement_stays_in_group_frame(self, backend):
        result = BooleanEngine(backend).apply(
            MIXED_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)]
        )
        root = parse(result.markup)
        [group] = [e for e in root if e.get("transform") == "translate(1 1)"]
        assert group.get("opacity") == "0.5"
        [shifted] = list(group)
        assert shifted.get("id") == "shifted"
        assert shifted.tag.endswith("path")
        local = _area(shifted.get("d"))
        minx, miny, _, _ = local.bounds
        assert minx == pytest.approx(1.0, abs=0.01)
        assert miny == pytest.approx(1.0, abs=0.01)
        assert local.contains(Point(7, 7))
        assert not local.contains(Point(11, 11))

    def test_letter_icon_keeps_paint_order(self, backend):
        result = BooleanEngine(backend).apply(
            LETTER_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=0.5)]
        )
        root = parse(result.markup)
        fills = [e.get("fill") for e in _content(root) if e.tag.endswith("path")]
        assert fills[:2] == ["#E7EFFD", "#3574F0"]
        assert result.events == []

    def test_failed_subtraction_falls_back_to_clip(self):
        backend = FailingSubtract()
        result = BooleanEngine(backend).apply(
            CIRCLE_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)]
        )
        root = parse(result.markup)

        [event] = result.events
        assert event.tag == "circle"
        assert event.element_id == "body"
        assert "self-intersection" in event.reason

        [circle] = find_all(root, "circle")
        assert circle.get("clip-path") == "url(#badge-keep-0)"
        for name, value in (("cx", "8"), ("cy", "8"), ("r", "6"), ("fill", "#3574F0")):
            assert circle.get(name) == value

        [clip] = find_all(root, "clipPath")
        assert clip.get("id") == "badge-keep-0"
        [keep] = find_all(clip, "path")
        # Canvas minus a corner notch is a single contour.
        assert keep.get("clip-rule") is None
        assert backend.live_count == 0

    def test_dashed_stroke_is_clipped(self, backend):
        svg = (
            '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 16 16">'
            '<circle cx="8" cy="8" r="6" fill="none" stroke="#000" stroke-dasharray="2 1"/></svg>'
        )
        result = BooleanEngine(backend).apply(svg, [BadgeDescriptor(SQUARE_BADGE_SVG)])
        [event] = result.events
        assert "dashed" in event.reason
        [circle] = find_all(parse(result.markup), "circle")
        assert circle.get("stroke-dasharray") == "2 1"
        assert circle.get("clip-path", "").startswith("url(#badge-keep-0")


class TestLayering:
    def test_zero_badges_is_identity(self, backend):
        result = BooleanEngine(backend).apply(LETTER_ICON_SVG, [])
        assert result.markup == LETTER_ICON_SVG
        assert result.applied == 0

    def test_second_badge_clips_first_layer(self, backend):
        descriptors = [
            BadgeDescriptor(PLUS_BADGE_SVG, gap=0.5),
            BadgeDescriptor(SQUARE_BADGE_SVG, gap=0.5, scale=0.5),
        ]
        result = BooleanEngine(backend).apply(LETTER_ICON_SVG, descriptors)
        root = parse(result.markup)

        assert result.applied == 2
        assert result.events == []

        [wrapper] = [e for e in root if e.get("clip-path")]
        assert wrapper.get("clip-path") == "url(#badge-keep-1)"
        [first] = list(wrapper)
        assert first.get("data-badge-layer") == "0"
        assert len(find_all(first, "circle")) == 1
        assert len(find_all(first, "path")) == 1

        last = list(root)[-1]
        assert last.get("data-badge-layer") == "1"
        assert last.get("clip-path") is None
        assert backend.live_count == 0

    def test_first_layer_geometry_never_rewritten(self, backend):
        descriptors = [BadgeDescriptor(PLUS_BADGE_SVG), BadgeDescriptor(PLUS_BADGE_SVG)]
        result = BooleanEngine(backend).apply(CIRCLE_ICON_SVG, descriptors)
        root = parse(result.markup)
        layer = [e for e in root.iter() if e.get("data-badge-layer") == "0"][0]
        assert find_all(layer, "path")[0].get("d") == "M8 4V12M4 8H12"
        assert result.events == []

    def test_keep_region_clip_rule(self, backend):
        descriptors = [
            BadgeDescriptor(SQUARE_BADGE_SVG, anchor="tl"),
            BadgeDescriptor(SQUARE_BADGE_SVG, anchor="c"),
        ]
        result = BooleanEngine(backend).apply(CIRCLE_ICON_SVG, descriptors)
        root = parse(result.markup)
        [clip] = find_all(root, "clipPath")
        [keep] = find_all(clip, "path")
        assert keep.get("clip-rule") == "evenodd"

    def test_output_keeps_default_namespace(self, backend):
        result = BooleanEngine(backend).apply(CIRCLE_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG)])
        assert result.markup.startswith("<svg ")
        assert "svg:" not in result.markup

    def test_style_declarations_carried_to_replacement(self, backend):
        svg = _wrap(
            '<circle id="c" cx="8" cy="8" r="6" style="fill:#f00;opacity:0.5;fill-opacity:0.3"/>'
        )
        result = BooleanEngine(backend).apply(svg, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)])
        [cut] = [e for e in _content(parse(result.markup)) if e.tag.endswith("path")]
        assert cut.get("id") == "c"
        assert cut.get("fill") == "#f00"
        assert cut.get("opacity") == "0.5"
        assert cut.get("fill-opacity") == "0.3"

    def test_filled_open_path_is_cut(self, backend):
        svg = _wrap('<path d="M2 2H14V14H2" fill="#000"/>')
        result = BooleanEngine(backend).apply(svg, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)])
        assert result.events == []
        [cut] = [e for e in _content(parse(result.markup)) if e.tag.endswith("path")]
        assert cut.get("d") != "M2 2H14V14H2"
        assert cut.get("fill") == "#000"
        geom = _area(cut.get("d"))
        assert geom.contains(Point(4, 4))
        assert not geom.contains(Point(12, 12))

    def test_mixed_path_keeps_fill_and_ring(self, backend):
        svg = _wrap('<path d="M2 2H14V14H2Z M4 8H8" fill="#f00" stroke="#000"/>')
        result = BooleanEngine(backend).apply(svg, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)])
        paths = [e for e in _content(parse(result.markup)) if e.tag.endswith("path")]
        assert [p.get("fill") for p in paths] == ["#f00", "#000"]
        fill = _area(paths[0].get("d"))
        assert fill.contains(Point(4, 4))
        assert not fill.contains(Point(12, 12))

    def test_badge_of_filled_open_paths(self, backend):
        badge = '<svg viewBox="0 0 8 8"><path d="M0 0H8V8H0" fill="#0a0"/></svg>'
        placement = compute_placement(badge, 16)
        with backend.scope():
            notch = build_notch(badge, placement, 1.0, backend)
            assert notch is not None and notch.ok
            assert notch.value.bounds[0] == pytest.approx(9, abs=1e-6)
        result = BooleanEngine(backend).apply(CIRCLE_ICON_SVG, [BadgeDescriptor(badge)])
        assert result.applied == 1
        assert backend.live_count == 0

    def test_single_contour_cut_has_no_fill_rule(self, backend):
        svg = _wrap(
            '<circle cx="8" cy="8" r="6" fill="#000" fill-rule="evenodd" clip-rule="evenodd"/>'
        )
        result = BooleanEngine(backend).apply(svg, [BadgeDescriptor(SQUARE_BADGE_SVG, gap=1.0)])
        [cut] = [e for e in _content(parse(result.markup)) if e.tag.endswith("path")]
        assert cut.get("fill-rule") is None
        assert cut.get("clip-rule") is None

    def test_hole_in_cut_uses_evenodd(self, backend):
        result = BooleanEngine(backend).apply(
            CIRCLE_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG, anchor="c")]
        )
        assert result.events == []
        [cut] = [e for e in _content(parse(result.markup)) if e.tag.endswith("path")]
        assert cut.get("fill-rule") == "evenodd"
        geom, _ = path_geometry(cut.get("d"), "evenodd", 8)
        assert not geom.contains(Point(8, 8))
        assert geom.contains(Point(2.5, 8))

    def test_empty_badge_skipped(self, backend):
        result = BooleanEngine(backend).apply(CIRCLE_ICON_SVG, [BadgeDescriptor(EMPTY_BADGE_SVG)])
        assert result.applied == 0
        assert find_all(parse(result.markup), "circle")
