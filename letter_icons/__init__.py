"""Letter-on-shape icon generation with badge compositing."""

from .layering import BooleanEngine, apply_modifier, create_modifier_engine
from .fallback import ClipPathEngine
from .placement import BadgeDescriptor, CompositionResult, Placement, compute_placement

__version__ = "0.1.0"

__all__ = [
    "BadgeDescriptor",
    "BooleanEngine",
    "ClipPathEngine",
    "CompositionResult",
    "Placement",
    "apply_modifier",
    "compute_placement",
    "create_modifier_engine",
]
