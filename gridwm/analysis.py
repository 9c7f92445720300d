"""
Symbolic Workspace Analysis

Human- and model-readable text describing window geometry, overlaps and
clickable-area violations, plus conversion from plain window summaries
(as read from JSON) into WindowState snapshots.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .objects import Overlap, WindowState
from .occlusion import OcclusionCalculator
from .protocol import Area

_LOG = logging.getLogger(__name__)


def symbolic_notation(window: WindowState) -> str:
    """App[x,y,w,h,L<layer>] with [MINIMIZED] and [D<n>] suffixes."""
    frame = window.frame
    notation = (
        f"{window.app}[{int(frame.x)},{int(frame.y)},"
        f"{int(frame.width)},{int(frame.height)},L{window.layer}]"
    )
    if window.is_minimized:
        notation += "[MINIMIZED]"
    if window.display_index > 0:
        notation += f"[D{window.display_index}]"
    return notation


def overlap_notation(overlap: Overlap, names: Optional[Mapping[str, str]] = None) -> str:
    """A∩B = [x,y,w,h] = <area>px², naming windows through names when given."""
    names = names or {}
    first = names.get(overlap.window1, overlap.window1)
    second = names.get(overlap.window2, overlap.window2)
    rect = overlap.intersection
    return (
        f"{first}∩{second} = [{int(rect.x)},{int(rect.y)},"
        f"{int(rect.width)},{int(rect.height)}] = {int(overlap.area)}px²"
    )


def window_from_dict(data: Mapping[str, Any], index: int = 0, layer: Optional[int] = None) -> WindowState:
    """
    Build a WindowState from a summary mapping.

    Accepts either a "bounds" list [x, y, width, height] or separate
    x/y/width/height keys. A missing window_id becomes "<app>-<index>".
    """
    app = data["app"]
    if "bounds" in data:
        x, y, width, height = data["bounds"]
    else:
        x, y = data.get("x", 0), data.get("y", 0)
        width, height = data["width"], data["height"]
    return WindowState(
        app=app,
        window_id=str(data.get("window_id") or f"{app}-{index}"),
        frame=Area(x, y, width, height),
        layer=data.get("layer", 0) if layer is None else layer,
        display_index=data.get("display_index", 0),
        is_minimized=bool(data.get("is_minimized", False)),
    )


@dataclass
class WorkspaceAnalysis:
    total_windows: int
    constraint_violations: int
    suggestions: List[str] = field(default_factory=list)


class WorkspaceAnalyzer:
    """Builds snapshots from summaries and reports on their visibility."""

    def __init__(self, calculator: Optional[OcclusionCalculator] = None):
        self.calculator = calculator or OcclusionCalculator()

    @staticmethod
    def to_window_states(summaries: Sequence[Mapping[str, Any]]) -> List[WindowState]:
        """Convert a front-to-back list of summaries; the first is the top layer."""
        count = len(summaries)
        return [
            window_from_dict(summary, index, layer=count - index)
            for index, summary in enumerate(summaries)
        ]

    @classmethod
    def load_windows(cls, summaries: Sequence[Mapping[str, Any]]) -> List[WindowState]:
        """Use explicit layers when every summary has one, else front-to-back order."""
        if summaries and all("layer" in s for s in summaries):
            return [window_from_dict(s, i) for i, s in enumerate(summaries)]
        return cls.to_window_states(summaries)

    def symbolic_analysis(self, windows: Sequence[WindowState]) -> str:
        names: Dict[str, str] = {w.window_id: w.app for w in windows}
        lines = ["SYMBOLIC WINDOW ANALYSIS:", "", "WINDOW LAYOUT:"]
        for window in sorted(windows, key=lambda w: w.layer, reverse=True):
            lines.append(f"- {symbolic_notation(window)}")

        lines += ["", "OVERLAP ANALYSIS:"]
        seen = set()
        for overlaps in self.calculator.calculate_overlaps(windows).values():
            for overlap in overlaps:
                pair = tuple(sorted((overlap.window1, overlap.window2)))
                if pair in seen:
                    continue
                seen.add(pair)
                lines.append(f"- {overlap_notation(overlap, names)}")

        validation = self.calculator.validate_constraints(windows)
        lines += ["", "CONSTRAINT VALIDATION:"]
        minimum = int(self.calculator.min_visible_area)
        if validation.is_valid:
            lines.append(f"✓ All windows satisfy {minimum}px² clickable area constraint")
        else:
            lines.append(f"✗ {len(validation.violations)} constraint violations found:")
            for violation in validation.violations:
                lines.append(
                    f"  - {violation.app}: {int(violation.actual_area)}px² visible "
                    f"(need {int(violation.required_area)}px²)"
                )
        return "\n".join(lines) + "\n"

    def analyze(self, windows: Sequence[WindowState]) -> WorkspaceAnalysis:
        validation = self.calculator.validate_constraints(windows)
        if validation.is_valid:
            suggestions = ["✓ All windows satisfy visibility constraints"]
        else:
            suggestions = [f"⚠️ {len(validation.violations)} windows need repositioning"]
            for violation in validation.violations:
                suggestions.append(
                    f"→ {violation.app} needs {int(violation.deficit)}px² more visible area"
                )
        _LOG.debug("Analyzed %d windows: %d violations", len(windows), len(validation.violations))
        return WorkspaceAnalysis(
            total_windows=len(windows),
            constraint_violations=len(validation.violations),
            suggestions=suggestions,
        )
