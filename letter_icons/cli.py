#!/usr/bin/env python3
"""
Generate letter-on-shape SVG icons and composite badges onto icons.
"""

import argparse
import logging
import os
import sys

from .config import DEFAULT_ANCHOR, DEFAULT_GAP, DEFAULT_STROKE_WIDTH
from .fonts import BUILTIN_FONTS, resolve_font
from .glyphs import load_font
from .icon import generate_svg
from .layering import create_modifier_engine
from .minify import minify_svg
from .placement import ANCHORS, BadgeDescriptor, resolve_anchor
from .shapes import PRESETS, SHAPES, find_preset
from .svgmath import fmt_number

BADGE_OPTIONS = (
    ("badge_x_offset", "x_offset", 0.0),
    ("badge_y_offset", "y_offset", 0.0),
    ("badge_scale", "scale", 1.0),
    ("badge_gap", "gap", DEFAULT_GAP),
    ("badge_anchor", "anchor", DEFAULT_ANCHOR),
)


def list_items(kind):
    if kind in ("presets", "colors"):
        width = max(len(p.name) for p in PRESETS)
        lines = ["Available color presets:", ""]
        for p in PRESETS:
            tag = " (JetBrains)" if p.official else ""
            lines.append(
                f"  {p.name.ljust(width)}  light: {p.light_fill} / {p.light_stroke}   "
                f"dark: {p.dark_fill} / {p.dark_stroke}{tag}"
            )
    elif kind == "shapes":
        width = max(len(k) for k in SHAPES)
        lines = ["Available shapes:", ""]
        for key, shape in SHAPES.items():
            tag = " (JetBrains)" if shape.official else ""
            lines.append(f"  {key.ljust(width)}  {shape.label}{tag}")
    else:
        lines = ["Available badge anchors:", ""]
        for key, (ax, ay) in ANCHORS.items():
            lines.append(f"  {key.ljust(2)}  ({fmt_number(ax)}, {fmt_number(ay)})")
    return "\n".join(lines)


def per_badge(values, count, default, name):
    """Expand an option given once, or once per badge, to one value per badge."""
    if not values:
        return [default] * count
    if len(values) == 1:
        return values * count
    if len(values) != count:
        raise ValueError(
            f"--{name.replace('_', '-')} given {len(values)} times for {count} badge(s)"
        )
    return list(values)


def build_descriptors(args):
    count = len(args.badge or [])
    if not count:
        return []
    columns = {}
    for option, field, default in BADGE_OPTIONS:
        columns[field] = per_badge(getattr(args, option), count, default, option)

    descriptors = []
    for i, path in enumerate(args.badge):
        with open(path, "r", encoding="utf-8") as f:
            markup = f.read()
        anchor = resolve_anchor(columns["anchor"][i])
        descriptors.append(
            BadgeDescriptor(
                markup,
                x_offset=columns["x_offset"][i],
                y_offset=columns["y_offset"][i],
                scale=columns["scale"][i],
                gap=columns["gap"][i],
                anchor=anchor,
            )
        )
        logging.debug("Badge %d: %s (anchor=%s)", i, path, anchor)
    return descriptors


def resolve_colors(args):
    preset = find_preset(args.color)
    overrides = (args.light_fill, args.light_stroke, args.dark_fill, args.dark_stroke)
    if preset is None and not all(overrides):
        raise ValueError(
            f'Unknown color preset "{args.color}". Use --list presets to see available '
            "presets, or provide all four --light-fill/--light-stroke/--dark-fill/--dark-stroke."
        )
    return {
        "light_fill": args.light_fill or preset.light_fill,
        "light_stroke": args.light_stroke or preset.light_stroke,
        "dark_fill": args.dark_fill or preset.dark_fill,
        "dark_stroke": args.dark_stroke or preset.dark_stroke,
    }


def compose(svg, descriptors, engine):
    if not descriptors:
        return svg
    result = engine.apply(svg, descriptors)
    for event in result.events:
        logging.debug(
            "Badge %d clipped <%s>%s: %s",
            event.badge_index,
            event.tag,
            f" #{event.element_id}" if event.element_id else "",
            event.reason,
        )
    logging.info(
        "Applied %d badge(s) with the %s engine", result.applied, result.engine
    )
    return result.markup


def build_variants(args, descriptors, engine):
    """Return [(file name, svg)] for the requested outputs."""
    if args.base_svg:
        with open(args.base_svg, "r", encoding="utf-8") as f:
            base = f.read()
        name = args.name or os.path.splitext(os.path.basename(args.base_svg))[0]
        return [(f"{name}.svg", minify_svg(compose(base, descriptors, engine)))]

    colors = resolve_colors(args)
    font_path = resolve_font(
        args.font,
        font_file=args.font_file,
        google_font=args.google_font,
        weight=args.font_weight,
        bold=args.bold,
        italic=args.italic,
        cache_dir=args.cache_dir,
    )
    glyphs = load_font(font_path)
    name = args.name or args.letter.lower()

    themes = []
    if not args.dark_only:
        themes.append((f"{name}.svg", colors["light_fill"], colors["light_stroke"]))
    if not args.light_only:
        themes.append((f"{name}_dark.svg", colors["dark_fill"], colors["dark_stroke"]))

    variants = []
    for file_name, fill, stroke in themes:
        result = generate_svg(
            glyphs,
            args.letter,
            args.shape,
            fill,
            stroke,
            stroke,
            stroke_width=args.stroke_width,
            font_size=args.font_size,
            x_offset=args.x_offset,
            y_offset=args.y_offset,
            shape_scale=args.shape_scale,
        )
        if result.error:
            logging.warning("%s", result.error)
        svg = compose(result.svg, descriptors, engine)
        variants.append((file_name, minify_svg(svg)))
    return variants


def build_parser():
    parser = argparse.ArgumentParser(
        prog="letter-icons",
        description="Generate letter-on-shape SVG icons with optional badge cutouts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -l N -s circle -c blue -o ./icons
  %(prog)s -l E -s hexagon -c purple --name element
  %(prog)s -l R -s document --font inter --bold --badge plus.svg
  %(prog)s --base-svg icon.svg --badge lock.svg --badge-anchor tr --stdout
  %(prog)s --list shapes
        """,
    )
    parser.add_argument("-l", "--letter", help="Letter(s) to render (e.g. N, Ab)")
    parser.add_argument(
        "-s", "--shape", default="circle", help="Shape name (default: circle)"
    )
    parser.add_argument(
        "-c", "--color", default="blue", help="Color preset (default: blue)"
    )
    parser.add_argument("--light-fill", help="Override light fill color")
    parser.add_argument("--light-stroke", help="Override light stroke/letter color")
    parser.add_argument("--dark-fill", help="Override dark fill color")
    parser.add_argument("--dark-stroke", help="Override dark stroke/letter color")

    parser.add_argument(
        "-f",
        "--font",
        default="open-sans",
        choices=BUILTIN_FONTS,
        help="Built-in font (default: open-sans)",
    )
    parser.add_argument("--font-file", help="Load a local .ttf/.otf/.woff file")
    parser.add_argument("--google-font", help='Load a Google Font by name (e.g. "Roboto")')
    parser.add_argument(
        "--font-weight", default="600", help="Google font weight (default: 600)"
    )
    parser.add_argument("--bold", action="store_true", help="Use the bold variant")
    parser.add_argument("--italic", action="store_true", help="Use the italic variant")
    parser.add_argument(
        "--cache-dir",
        type=str,
        default=None,
        help="Directory to cache downloaded fonts (default: system temp directory)",
    )

    parser.add_argument(
        "--font-size", type=float, default=None, help="Font size (auto-calibrated if omitted)"
    )
    parser.add_argument("--x-offset", type=float, default=0.0, help="Horizontal letter offset")
    parser.add_argument("--y-offset", type=float, default=0.0, help="Vertical letter offset")
    parser.add_argument(
        "--stroke-width",
        type=float,
        default=DEFAULT_STROKE_WIDTH,
        help="Shape stroke width (default: 1)",
    )
    parser.add_argument("--shape-scale", type=float, default=None, help="Shape scale factor")

    parser.add_argument(
        "--base-svg", help="Compose badges onto this SVG instead of generating a letter icon"
    )
    parser.add_argument(
        "--badge",
        action="append",
        help="Badge SVG file; repeat for several badges, painted in argument order",
    )
    parser.add_argument(
        "--badge-x-offset", type=float, action="append", help="Badge horizontal offset"
    )
    parser.add_argument(
        "--badge-y-offset", type=float, action="append", help="Badge vertical offset"
    )
    parser.add_argument(
        "--badge-scale", type=float, action="append", help="Badge scale factor (default: 1)"
    )
    parser.add_argument(
        "--badge-gap",
        type=float,
        action="append",
        help=f"Gap around the badge (default: {fmt_number(DEFAULT_GAP)})",
    )
    parser.add_argument(
        "--badge-anchor",
        action="append",
        help=f"Badge anchor: {', '.join(ANCHORS)} (default: {DEFAULT_ANCHOR})",
    )
    parser.add_argument(
        "--no-geometry",
        action="store_true",
        help="Use rectangular clip-path cutouts instead of boolean geometry",
    )
    parser.add_argument(
        "--approximate-offset",
        action="store_true",
        help="Expand badge silhouettes with a circle buffer instead of an exact offset",
    )

    parser.add_argument("-n", "--name", help="Base file name (default: derived from letter)")
    parser.add_argument(
        "-o", "--out", default=".", help="Output directory (default: current directory)"
    )
    parser.add_argument("--light-only", action="store_true", help="Only the light variant")
    parser.add_argument("--dark-only", action="store_true", help="Only the dark variant")
    parser.add_argument(
        "--stdout", action="store_true", help="Print SVG to stdout instead of writing files"
    )
    parser.add_argument(
        "--list",
        choices=("presets", "colors", "shapes", "anchors"),
        help="List presets, shapes or badge anchors and exit",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        print(list_items(args.list))
        return 0

    if not args.letter and not args.base_svg:
        parser.error("--letter or --base-svg is required")
    if args.light_only and args.dark_only:
        parser.error("--light-only and --dark-only are mutually exclusive")
    if args.shape not in SHAPES:
        parser.error(f'Unknown shape "{args.shape}". Valid shapes: {", ".join(SHAPES)}')
    if args.stroke_width < 0:
        parser.error("--stroke-width must be >= 0")
    if args.shape_scale is not None and args.shape_scale <= 0:
        parser.error("--shape-scale must be > 0")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    try:
        descriptors = build_descriptors(args)
        engine = None
        if descriptors:
            engine = create_modifier_engine(
                geometry=not args.no_geometry, exact_offset=not args.approximate_offset
            )
        variants = build_variants(args, descriptors, engine)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        if args.verbose:
            import traceback

            traceback.print_exc()
        return 1

    if args.stdout:
        for i, (file_name, svg) in enumerate(variants):
            if i:
                print()
            print(f"<!-- {file_name} -->")
            print(svg)
        return 0

    os.makedirs(args.out, exist_ok=True)
    for file_name, svg in variants:
        path = os.path.join(args.out, file_name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(svg + "\n")
        logging.info("Created: %s", path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
