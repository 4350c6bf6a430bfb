"""Tests for the clip-path fallback engine and engine selection."""

import pytest

from letter_icons import apply_modifier, create_modifier_engine
from letter_icons.fallback import ClipPathEngine, keep_path
from letter_icons.placement import BadgeDescriptor
from tests.conftest import (
    CIRCLE_ICON_SVG,
    EMPTY_BADGE_SVG,
    LETTER_ICON_SVG,
    PLUS_BADGE_SVG,
    SQUARE_BADGE_SVG,
    find_all,
    parse,
)


class TestClipPathEngine:
    def test_one_evenodd_cutout_per_badge(self):
        descriptors = [
            BadgeDescriptor(SQUARE_BADGE_SVG),
            BadgeDescriptor(PLUS_BADGE_SVG, anchor="tl"),
        ]
        result = ClipPathEngine().apply(LETTER_ICON_SVG, descriptors)
        root = parse(result.markup)

        clips = find_all(root, "clipPath")
        assert sorted(c.get("id") for c in clips) == ["badge-clip-0", "badge-clip-1"]
        for clip in clips:
            [keep] = find_all(clip, "path")
            assert keep.get("clip-rule") == "evenodd"
            assert keep.get("d").count("Z") == 2
        assert result.applied == 2
        assert result.engine == "clip-path"

    def test_keep_region_is_gap_expanded_box(self):
        result = ClipPathEngine().apply(CIRCLE_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG)])
        root = parse(result.markup)
        [keep] = find_all(root, "path")[:1]
        assert keep.get("d") == "M0 0H16V16H0Z M9.5 9.5H16.5V16.5H9.5Z"

    def test_whole_icon_wrapped_and_badge_on_top(self):
        result = ClipPathEngine().apply(CIRCLE_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG)])
        root = parse(result.markup)
        children = list(root)
        wrapper, layer = children[-2], children[-1]
        assert wrapper.get("clip-path") == "url(#badge-clip-0)"
        assert find_all(wrapper, "circle")[0].get("id") == "body"
        assert layer.get("transform") == "translate(10 10) scale(0.75)"
        assert layer.get("data-badge-layer") == "0"

    def test_zero_badges_is_identity(self):
        assert ClipPathEngine().apply(LETTER_ICON_SVG, []).markup == LETTER_ICON_SVG

    def test_empty_badge_skipped(self):
        result = ClipPathEngine().apply(CIRCLE_ICON_SVG, [BadgeDescriptor(EMPTY_BADGE_SVG)])
        assert result.markup == CIRCLE_ICON_SVG
        assert result.applied == 0

    def test_base_without_size(self):
        with pytest.raises(ValueError, match="Missing viewBox"):
            ClipPathEngine().apply("<svg><rect/></svg>", [BadgeDescriptor(SQUARE_BADGE_SVG)])

    def test_keep_path_origin(self):
        assert keep_path(-1, -1, 18, (1, 2, 3, 4)) == "M-1 -1H17V17H-1Z M1 2H4V6H1Z"


class TestEngineSelection:
    def test_geometry_off_selects_fallback(self):
        assert isinstance(create_modifier_engine(geometry=False), ClipPathEngine)

    def test_missing_libraries_select_fallback(self, monkeypatch):
        from letter_icons import capability

        monkeypatch.setattr(capability, "try_import_geometry", lambda: None)
        assert isinstance(create_modifier_engine(), ClipPathEngine)

    def test_boolean_engine_when_available(self):
        pytest.importorskip("shapely")
        pytest.importorskip("svgpathtools")
        engine = create_modifier_engine(exact_offset=False)
        assert engine.name == "boolean"
        assert engine.backend.exact_offset is False

    def test_available_geometry_reports_shapely_version(self):
        shapely = pytest.importorskip("shapely")
        pytest.importorskip("svgpathtools")
        from letter_icons import capability

        assert capability.try_import_geometry() == shapely.__version__

    def test_apply_modifier_single_interface(self):
        engine = ClipPathEngine()
        markup = apply_modifier(CIRCLE_ICON_SVG, [BadgeDescriptor(SQUARE_BADGE_SVG)], engine)
        assert "badge-clip-0" in markup
