"""
Occlusion Calculator

Pairwise window intersections and visible area under a z-order. A window is
occluded only by windows on the same display with a strictly higher layer.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Sequence

from . import topics
from .objects import (
    MIN_CLICKABLE_AREA,
    Overlap,
    VisibilityResult,
    VisibilityViolation,
    WindowState,
)
from .protocol import Area

_LOG = logging.getLogger(__name__)


class OcclusionMode(Enum):
    """How areas hidden by several higher windows are combined."""

    # Subtract every qualifying overlap in full. Regions covered by two or
    # more higher windows are subtracted more than once, so visible area can
    # be under-counted. Existing thresholds were tuned against this.
    SEQUENTIAL = auto()
    # Subtract the exact union of the occluding rectangles.
    UNION = auto()


@dataclass
class ConstraintValidationResult:
    """Outcome of checking every window against the clickable minimum."""

    results: List[VisibilityResult]
    violations: List[VisibilityViolation]
    overlaps: Dict[str, List[Overlap]] = field(default_factory=dict)

    @property
    def windows(self) -> List[WindowState]:
        return [r.window for r in self.results]

    @property
    def is_valid(self) -> bool:
        return not self.violations

    def visible_area(self, window_id: str) -> Optional[float]:
        for result in self.results:
            if result.window.window_id == window_id:
                return result.visible_area
        return None


def union_area(rects: Sequence[Area]) -> float:
    """Area covered by the union of rectangles (sweep over x strips)."""
    rects = [r for r in rects if not r.is_empty]
    if not rects:
        return 0.0

    xs = sorted({r.x for r in rects} | {r.max_x for r in rects})
    total = 0.0
    for left, right in zip(xs, xs[1:]):
        strip_width = right - left
        if strip_width <= 0:
            continue
        spans = sorted(
            (r.y, r.max_y) for r in rects if r.x <= left and r.max_x >= right
        )
        covered = 0.0
        current_start: Optional[float] = None
        current_end = 0.0
        for start, end in spans:
            if current_start is None:
                current_start, current_end = start, end
            elif start > current_end:
                covered += current_end - current_start
                current_start, current_end = start, end
            else:
                current_end = max(current_end, end)
        if current_start is not None:
            covered += current_end - current_start
        total += covered * strip_width
    return total


class OcclusionCalculator:
    """Computes overlaps, visible areas and clickable-area violations."""

    def __init__(
        self,
        mode: OcclusionMode = OcclusionMode.SEQUENTIAL,
        min_visible_area: float = MIN_CLICKABLE_AREA,
        bus=None,
    ):
        self.mode = mode
        self.min_visible_area = min_visible_area
        self.bus = bus

    def calculate_overlaps(self, windows: Sequence[WindowState]) -> Dict[str, List[Overlap]]:
        """
        Intersect every unordered pair of windows on the same display.

        Returns:
            Mapping from window id to the overlaps it takes part in; every
            window gets an entry, possibly empty
        """
        overlaps: Dict[str, List[Overlap]] = {w.window_id: [] for w in windows}

        for i, first in enumerate(windows):
            for second in windows[i + 1 :]:
                # Windows on different displays never overlap
                if first.display_index != second.display_index:
                    continue
                intersection = first.frame.intersection(second.frame)
                if intersection is None:
                    continue
                overlap = Overlap(first.window_id, second.window_id, intersection)
                overlaps[first.window_id].append(overlap)
                overlaps[second.window_id].append(overlap)

        return overlaps

    def calculate_visible_area(
        self,
        window: WindowState,
        overlaps: Sequence[Overlap],
        all_windows: Sequence[WindowState],
    ) -> float:
        """Total area minus the parts hidden by higher-layer windows, >= 0."""
        by_id = {w.window_id: w for w in all_windows}
        occluders: List[Overlap] = []
        for overlap in overlaps:
            other = by_id.get(overlap.other(window.window_id))
            if other is not None and other.layer > window.layer:
                occluders.append(overlap)

        if self.mode == OcclusionMode.UNION:
            hidden = union_area([o.intersection for o in occluders])
        else:
            hidden = sum(o.area for o in occluders)

        visible = max(window.total_area - hidden, 0.0)
        if occluders:
            _LOG.debug(
                "%s occluded by %d windows: %d of %d px visible",
                window.app,
                len(occluders),
                visible,
                window.total_area,
            )
        return visible

    def validate_constraints(self, windows: Sequence[WindowState]) -> ConstraintValidationResult:
        """Check every non-minimized window against the clickable minimum."""
        overlaps = self.calculate_overlaps(windows)
        results: List[VisibilityResult] = []
        violations: List[VisibilityViolation] = []

        for window in sorted(windows, key=lambda w: w.layer, reverse=True):
            if window.is_minimized:
                # Minimized windows need no visible area
                results.append(VisibilityResult(window, window.total_area, True))
                continue

            visible = self.calculate_visible_area(
                window, overlaps[window.window_id], windows
            )
            meets = visible >= self.min_visible_area
            results.append(VisibilityResult(window, visible, meets))
            if not meets:
                violations.append(
                    VisibilityViolation(
                        window_id=window.window_id,
                        app=window.app,
                        required_area=self.min_visible_area,
                        actual_area=visible,
                    )
                )

        if violations and self.bus is not None:
            self.bus.sendMessage(topics.VISIBILITY_VIOLATIONS, violations=violations)

        return ConstraintValidationResult(results, violations, overlaps)
