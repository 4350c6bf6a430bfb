"""Default values shared by the compositing engine and the command line."""

# Badge placement
DEFAULT_GAP = 0.5
DEFAULT_TARGET_FRACTION = 0.375
DEFAULT_BADGE_SIZE = 16.0
DEFAULT_ANCHOR = "br"

# Curve flattening: samples per curved path segment, and quarter-circle
# resolution for circles, ellipses and rounded corners.
CURVE_SAMPLES = 24
ARC_RESOLUTION = 16

# Circle-buffer notch expansion step, clamped to [MIN, MAX] and otherwise
# STEP_FACTOR * radius.
BUFFER_STEP_FACTOR = 0.6
BUFFER_STEP_MIN = 0.2
BUFFER_STEP_MAX = 0.6

# Decimal places written into generated path data and badge transforms.
PATH_PRECISION = 3
SCALE_PRECISION = 4

DEFAULT_VIEWBOX = 16
DEFAULT_STROKE_WIDTH = 1.0
DEFAULT_TARGET_HEIGHT = 7.0
