"""Number formatting, viewBox parsing and 2D affine matrices."""

import math
import re

IDENTITY = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

_NUMBER_RE = re.compile(r"[-+]?(?:\d*\.\d+|\d+\.?)(?:[eE][-+]?\d+)?")
_TRANSFORM_RE = re.compile(
    r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)"
)


def fmt_number(value, precision=4):
    if abs(value - round(value)) < 10 ** -(precision + 2):
        return str(int(round(value)))
    text = f"{value:.{precision}f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def parse_length(value):
    if value is None:
        return None
    match = _NUMBER_RE.search(value)
    if not match:
        return None
    return float(match.group(0))


def parse_numbers(text):
    if not text:
        return []
    return [float(n) for n in _NUMBER_RE.findall(text)]


def parse_viewbox(viewbox, width, height):
    if viewbox:
        parts = parse_numbers(viewbox)
        if len(parts) != 4:
            raise ValueError(f"Invalid viewBox: {viewbox}")
        return parts[0], parts[1], parts[2], parts[3]
    if width is None or height is None:
        raise ValueError("Missing viewBox and width/height")
    return 0.0, 0.0, float(width), float(height)


# Matrices are (a, b, c, d, e, f) as in SVG's matrix(): x' = a*x + c*y + e,
# y' = b*x + d*y + f.


def multiply(m1, m2):
    """Return m1 * m2, the matrix that applies m2 first and then m1."""
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def invert(matrix):
    a, b, c, d, e, f = matrix
    det = a * d - b * c
    if abs(det) < 1e-12:
        return None
    return (
        d / det,
        -b / det,
        -c / det,
        a / det,
        (c * f - d * e) / det,
        (b * e - a * f) / det,
    )


def translate(tx, ty=0.0):
    return (1.0, 0.0, 0.0, 1.0, tx, ty)


def scale(sx, sy=None):
    return (sx, 0.0, 0.0, sx if sy is None else sy, 0.0, 0.0)


def rotate(angle, cx=0.0, cy=0.0):
    rad = math.radians(angle)
    cos_a = math.cos(rad)
    sin_a = math.sin(rad)
    rot = (cos_a, sin_a, -sin_a, cos_a, 0.0, 0.0)
    if cx or cy:
        return multiply(multiply(translate(cx, cy), rot), translate(-cx, -cy))
    return rot


def skew_x(angle):
    return (1.0, 0.0, math.tan(math.radians(angle)), 1.0, 0.0, 0.0)


def skew_y(angle):
    return (1.0, math.tan(math.radians(angle)), 0.0, 1.0, 0.0, 0.0)


def parse_transform(text):
    """Parse an SVG transform list into a single matrix.

    The list is composed left to right, so the rightmost operation is the
    first one applied to the element's local coordinates.
    """
    matrix = IDENTITY
    if not text:
        return matrix
    for name, args in _TRANSFORM_RE.findall(text):
        nums = parse_numbers(args)
        if name == "matrix":
            if len(nums) != 6:
                raise ValueError(f"Invalid matrix(): {args}")
            op = tuple(nums)
        elif name == "translate":
            if not nums:
                raise ValueError(f"Invalid translate(): {args}")
            op = translate(nums[0], nums[1] if len(nums) > 1 else 0.0)
        elif name == "scale":
            if not nums:
                raise ValueError(f"Invalid scale(): {args}")
            op = scale(nums[0], nums[1] if len(nums) > 1 else None)
        elif name == "rotate":
            if len(nums) not in (1, 3):
                raise ValueError(f"Invalid rotate(): {args}")
            op = rotate(*nums)
        elif not nums:
            raise ValueError(f"Invalid {name}(): {args}")
        elif name == "skewX":
            op = skew_x(nums[0])
        else:
            op = skew_y(nums[0])
        matrix = multiply(matrix, op)
    return matrix


def is_identity(matrix, tolerance=1e-9):
    return all(abs(v - w) <= tolerance for v, w in zip(matrix, IDENTITY))


def apply_point(matrix, x, y):
    a, b, c, d, e, f = matrix
    return a * x + c * y + e, b * x + d * y + f


def to_shapely(matrix):
    """Reorder a matrix into shapely's affine_transform coefficients."""
    a, b, c, d, e, f = matrix
    return [a, c, b, d, e, f]


def matrix_key(matrix, precision=6):
    return tuple(round(v, precision) for v in matrix)
