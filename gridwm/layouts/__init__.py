"""
Arrangement System

Provides window arrangement strategies and the generator that picks one.
"""

from .layout_base import (
    Layout,
    ScreenInfo,
    ArrangementGenerator,
    role_for_rank,
)
from .layout_tiled import TiledLayout
from .layout_cascade import (
    CascadeLayout,
    CascadeParameters,
    CascadeStyle,
    classify_visibility,
)

__all__ = [
    # Base classes
    "Layout",
    "ScreenInfo",
    "ArrangementGenerator",
    "role_for_rank",
    # Layout implementations
    "TiledLayout",
    "CascadeLayout",
    "CascadeParameters",
    "CascadeStyle",
    "classify_visibility",
]
