"""
Cascade Layout

Overlapping windows stepped diagonally from a base position, most important
window on top. Sizes scale with role and never drop below an app's known
minimum size.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence

from .layout_base import Layout, ScreenInfo
from ..objects import (
    Arrangement,
    DiscoveredConstraint,
    WindowImportance,
    WindowRole,
    WindowVisibility,
)
from ..protocol import Area


class CascadeStyle(Enum):
    CLASSIC = "classic"
    COMPACT = "compact"
    SPREAD = "spread"
    INTELLIGENT = "intelligent"


# Fixed offset fraction of the screen for the non-adaptive styles
STYLE_OFFSETS = {
    CascadeStyle.CLASSIC: 0.03,
    CascadeStyle.COMPACT: 0.015,
    CascadeStyle.SPREAD: 0.05,
}


@dataclass(frozen=True)
class CascadeParameters:
    offset_x: float
    offset_y: float
    primary_scale: float
    secondary_scale: float
    auxiliary_scale: float
    max_cascade_steps: int

    def scale_for(self, role: WindowRole) -> float:
        if role == WindowRole.PRIMARY:
            return self.primary_scale
        if role == WindowRole.SECONDARY:
            return self.secondary_scale
        return self.auxiliary_scale


def classify_visibility(index: int, offset_x: float, width: float) -> WindowVisibility:
    """Estimate how much of a cascaded window peeks out from under the stack."""
    if index == 0:
        return WindowVisibility.FULLY_VISIBLE
    if width <= 0:
        return WindowVisibility.HIDDEN
    ratio = 1 - (offset_x * index) / width
    if ratio >= 0.9:
        return WindowVisibility.FULLY_VISIBLE
    if ratio >= 0.6:
        return WindowVisibility.MOSTLY_VISIBLE
    if ratio >= 0.3:
        return WindowVisibility.PARTIALLY_VISIBLE
    if ratio >= 0.1:
        return WindowVisibility.MINIMALLY_VISIBLE
    return WindowVisibility.HIDDEN


class CascadeLayout(Layout):
    """
    Cascade layout - diagonal stack sorted by importance.

    constraint_lookup maps an app name to its known minimum size (or None);
    it should be a cache read so arranging never triggers probing.
    """

    def __init__(
        self,
        style: CascadeStyle = CascadeStyle.INTELLIGENT,
        constraint_lookup: Optional[Callable[[str], Optional[DiscoveredConstraint]]] = None,
    ):
        self.style = style
        self.constraint_lookup = constraint_lookup

    @property
    def name(self) -> str:
        return "cascade"

    def parameters(self, window_count: int, screen: ScreenInfo) -> CascadeParameters:
        bounds = screen.bounds
        if self.style != CascadeStyle.INTELLIGENT:
            offset = STYLE_OFFSETS[self.style]
            return CascadeParameters(
                offset_x=bounds.width * offset,
                offset_y=bounds.height * offset,
                primary_scale=0.7,
                secondary_scale=0.6,
                auxiliary_scale=0.5,
                max_cascade_steps=min(window_count, 10),
            )

        if screen.is_ultrawide:
            offset_x, offset_y = bounds.width * 0.04, bounds.height * 0.02
        elif screen.is_large:
            offset_x, offset_y = bounds.width * 0.035, bounds.height * 0.035
        else:
            offset_x, offset_y = bounds.width * 0.02, bounds.height * 0.025

        # Tighter steps for crowded stacks
        if window_count > 5:
            offset_x *= 0.7
            offset_y *= 0.7

        primary = 0.6 if screen.is_ultrawide else 0.7
        return CascadeParameters(
            offset_x=offset_x,
            offset_y=offset_y,
            primary_scale=primary,
            secondary_scale=primary * 0.85,
            auxiliary_scale=primary * 0.7,
            max_cascade_steps=min(window_count, 12 if screen.is_large else 8),
        )

    def calculate(
        self, ranked: Sequence[WindowImportance], screen: ScreenInfo
    ) -> List[Arrangement]:
        if not ranked:
            return []

        ordered = sorted(ranked, key=lambda i: i.score, reverse=True)
        params = self.parameters(len(ordered), screen)
        return [
            self._place(importance, index, params, screen)
            for index, importance in enumerate(ordered)
        ]

    @staticmethod
    def role_for(index: int, importance: WindowImportance) -> WindowRole:
        if index == 0:
            return WindowRole.PRIMARY
        if index <= 2 and importance.score > 0.6:
            return WindowRole.SECONDARY
        return WindowRole.AUXILIARY

    def _place(
        self,
        importance: WindowImportance,
        index: int,
        params: CascadeParameters,
        screen: ScreenInfo,
    ) -> Arrangement:
        bounds = screen.bounds
        role = self.role_for(index, importance)
        scale = params.scale_for(role)

        width = bounds.width * scale
        height = bounds.height * scale
        if self.constraint_lookup is not None:
            constraint = self.constraint_lookup(importance.window.app)
            if constraint is not None:
                width = max(width, constraint.min_width)
                height = max(height, constraint.min_height)
        width = min(width, bounds.width)
        height = min(height, bounds.height)

        step = min(index, params.max_cascade_steps - 1)
        x = bounds.x + (bounds.width - width) * 0.2 + params.offset_x * step
        y = bounds.y + (bounds.height - height) * 0.1 + params.offset_y * step

        # Keep on screen
        x = max(bounds.x, min(x, bounds.max_x - width))
        y = max(bounds.y, min(y, bounds.max_y - height))

        return Arrangement(
            window=importance.window,
            target_bounds=Area(x, y, width, height),
            layer_index=index,
            visibility=classify_visibility(index, params.offset_x, width),
            role=role,
        )
