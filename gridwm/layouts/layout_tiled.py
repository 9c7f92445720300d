"""
Tiled Layout

Non-overlapping tiles in importance order: full screen, 60/40 split, half plus
two quadrants, four quadrants, then a uniform grid.
"""

from __future__ import annotations
from typing import List, Sequence

from .layout_base import Layout, ScreenInfo, role_for_rank
from ..objects import Arrangement, WindowImportance, WindowVisibility
from ..protocol import Area


class TiledLayout(Layout):
    """
    Tiled layout - every window fully visible.
    """

    def __init__(self, primary_ratio: float = 0.6, gap: int = 0):
        self.primary_ratio = primary_ratio
        self.gap = gap

    @property
    def name(self) -> str:
        return "tiled"

    def calculate(
        self, ranked: Sequence[WindowImportance], screen: ScreenInfo
    ) -> List[Arrangement]:
        if not ranked:
            return []

        area = screen.bounds
        # Apply gap to area
        usable = Area(
            area.x + self.gap,
            area.y + self.gap,
            area.width - 2 * self.gap,
            area.height - 2 * self.gap,
        )
        rects = self.tiles(len(ranked), usable)

        return [
            Arrangement(
                window=importance.window,
                target_bounds=rect,
                layer_index=i,
                visibility=WindowVisibility.FULLY_VISIBLE,
                role=role_for_rank(i),
            )
            for i, (importance, rect) in enumerate(zip(ranked, rects))
        ]

    def tiles(self, n: int, usable: Area) -> List[Area]:
        """Tile rectangles for n windows, most important first."""
        gap = self.gap
        half_w = (usable.width - gap) / 2
        half_h = (usable.height - gap) / 2
        right_x = usable.x + half_w + gap
        lower_y = usable.y + half_h + gap

        if n == 1:
            return [usable]

        if n == 2:
            left_w = (usable.width - gap) * self.primary_ratio
            right_w = usable.width - gap - left_w
            return [
                Area(usable.x, usable.y, left_w, usable.height),
                Area(usable.x + left_w + gap, usable.y, right_w, usable.height),
            ]

        if n == 3:
            return [
                Area(usable.x, usable.y, half_w, usable.height),
                Area(right_x, usable.y, half_w, half_h),
                Area(right_x, lower_y, half_w, half_h),
            ]

        if n == 4:
            return [
                Area(usable.x, usable.y, half_w, half_h),
                Area(right_x, usable.y, half_w, half_h),
                Area(usable.x, lower_y, half_w, half_h),
                Area(right_x, lower_y, half_w, half_h),
            ]

        # Calculate grid dimensions
        cols = 1
        while cols * cols < n:
            cols += 1
        rows = (n + cols - 1) // cols

        cell_width = (usable.width - (cols - 1) * gap) / cols
        cell_height = (usable.height - (rows - 1) * gap) / rows

        rects = []
        for i in range(n):
            row = i // cols
            col = i % cols
            x = usable.x + col * (cell_width + gap)
            y = usable.y + row * (cell_height + gap)
            rects.append(Area(x, y, cell_width, cell_height))
        return rects
