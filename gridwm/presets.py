"""
Layout Templates

Named slot layouts used for feasibility checks. Slot positions and sizes are
screen fractions; slot i is filled by the i-th window.
"""

from __future__ import annotations
from typing import Dict, List, Optional

from .objects import LayoutSlot, LayoutTemplate


def _template(name: str, description: str, *slots: LayoutSlot) -> LayoutTemplate:
    return LayoutTemplate(name=name, slots=tuple(slots), description=description)


FULLSCREEN = _template(
    "fullscreen",
    "Single window takes full screen",
    LayoutSlot(1.0, 1.0, "main"),
)

CENTERED_LARGE = _template(
    "centered_large",
    "Single window centered, 80% of screen",
    LayoutSlot(0.8, 0.8, "main", x=0.1, y=0.1),
)

CENTERED_MEDIUM = _template(
    "centered_medium",
    "Single window centered, 60% of screen",
    LayoutSlot(0.6, 0.6, "main", x=0.2, y=0.2),
)

LEFT_RIGHT_SPLIT = _template(
    "left_right_split",
    "Two windows side by side, 50% each",
    LayoutSlot(0.5, 1.0, "left"),
    LayoutSlot(0.5, 1.0, "right", x=0.5),
)

TOP_BOTTOM_SPLIT = _template(
    "top_bottom_split",
    "Two windows stacked vertically, 50% each",
    LayoutSlot(1.0, 0.5, "top"),
    LayoutSlot(1.0, 0.5, "bottom", y=0.5),
)

MAIN_SIDEBAR = _template(
    "main_sidebar",
    "Main window 70% left, sidebar 30% right",
    LayoutSlot(0.7, 1.0, "main"),
    LayoutSlot(0.3, 1.0, "sidebar", x=0.7),
)

SIDEBAR_MAIN = _template(
    "sidebar_main",
    "Sidebar 30% left, main window 70% right",
    LayoutSlot(0.3, 1.0, "sidebar"),
    LayoutSlot(0.7, 1.0, "main", x=0.3),
)

THREE_COLUMN = _template(
    "three_column",
    "Three windows in columns: 33%, 34%, 33%",
    LayoutSlot(0.33, 1.0, "left"),
    LayoutSlot(0.34, 1.0, "center", x=0.33),
    LayoutSlot(0.33, 1.0, "right", x=0.67),
)

MAIN_TWO_SIDE = _template(
    "main_two_side",
    "Main window 50% left, two windows 25% each on right",
    LayoutSlot(0.5, 1.0, "main"),
    LayoutSlot(0.5, 0.5, "side_top", x=0.5),
    LayoutSlot(0.5, 0.5, "side_bottom", x=0.5, y=0.5),
)

TWO_TOP_ONE_BOTTOM = _template(
    "two_top_one_bottom",
    "Two windows on top 50% each, one window bottom 100%",
    LayoutSlot(0.5, 0.5, "top_left"),
    LayoutSlot(0.5, 0.5, "top_right", x=0.5),
    LayoutSlot(1.0, 0.5, "bottom", y=0.5),
)

FOUR_QUADRANTS = _template(
    "four_quadrants",
    "Four windows in 2x2 grid, 25% each",
    LayoutSlot(0.5, 0.5, "top_left"),
    LayoutSlot(0.5, 0.5, "top_right", x=0.5),
    LayoutSlot(0.5, 0.5, "bottom_left", y=0.5),
    LayoutSlot(0.5, 0.5, "bottom_right", x=0.5, y=0.5),
)

MAIN_THREE_SIDE = _template(
    "main_three_side",
    "Main window 60% left, three windows stacked right 40%",
    LayoutSlot(0.6, 1.0, "main"),
    LayoutSlot(0.4, 0.33, "side_top", x=0.6),
    LayoutSlot(0.4, 0.34, "side_middle", x=0.6, y=0.33),
    LayoutSlot(0.4, 0.33, "side_bottom", x=0.6, y=0.67),
)

TEMPLATES: Dict[str, LayoutTemplate] = {
    t.name: t
    for t in (
        FULLSCREEN,
        CENTERED_LARGE,
        CENTERED_MEDIUM,
        LEFT_RIGHT_SPLIT,
        TOP_BOTTOM_SPLIT,
        MAIN_SIDEBAR,
        SIDEBAR_MAIN,
        THREE_COLUMN,
        MAIN_TWO_SIDE,
        TWO_TOP_ONE_BOTTOM,
        FOUR_QUADRANTS,
        MAIN_THREE_SIDE,
    )
}


def get_template(name: str) -> Optional[LayoutTemplate]:
    return TEMPLATES.get(name)


def templates_for(window_count: int) -> List[LayoutTemplate]:
    """Templates with exactly one slot per window, in declaration order."""
    return [t for t in TEMPLATES.values() if len(t.slots) == window_count]


def recommend_template(window_count: int, context: str = "general") -> LayoutTemplate:
    """
    Pick a starting template from the window count and a free-text context.

    Five or more windows fall back to main_three_side; extra windows get no
    slot and are left where they are.
    """
    context = context.lower()
    if window_count <= 1:
        if "focus" in context or "present" in context:
            return FULLSCREEN
        return CENTERED_LARGE
    if window_count == 2:
        if "cod" in context or "research" in context:
            return MAIN_SIDEBAR
        return LEFT_RIGHT_SPLIT
    if window_count == 3:
        if "cod" in context:
            return MAIN_TWO_SIDE
        return THREE_COLUMN
    if window_count == 4:
        return FOUR_QUADRANTS
    return MAIN_THREE_SIDE
