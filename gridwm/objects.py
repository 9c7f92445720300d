"""
Spatial Reasoning Objects

Value types shared by the grid codec, occlusion calculator, constraint
discovery and arrangement generator. Everything here is immutable for the
duration of one reasoning pass.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .protocol import Area, Size

# 40x40 px, enough for a user to click on a window
MIN_CLICKABLE_AREA = 1600


@dataclass(frozen=True)
class WindowState:
    """Snapshot of one window taken at the start of a reasoning pass."""

    app: str
    window_id: str
    frame: Area
    layer: int = 0  # higher = more in front
    display_index: int = 0
    is_minimized: bool = False

    def __post_init__(self):
        if self.frame.width < 0 or self.frame.height < 0:
            raise ValueError(
                f"window {self.window_id} has negative size "
                f"{self.frame.width}x{self.frame.height}"
            )

    @property
    def total_area(self) -> float:
        return self.frame.area


@dataclass(frozen=True)
class Overlap:
    """Intersection of two windows on the same display.

    The pair is unordered: Overlap(A, B) and Overlap(B, A) describe the same
    rectangle and area.
    """

    window1: str
    window2: str
    intersection: Area

    @property
    def area(self) -> float:
        return self.intersection.area

    def other(self, window_id: str) -> str:
        """Return the id of the window paired with window_id."""
        return self.window2 if self.window1 == window_id else self.window1

    def involves(self, window_id: str) -> bool:
        return window_id in (self.window1, self.window2)


@dataclass(frozen=True)
class VisibilityResult:
    """Visible area of a window after occlusion by higher layers."""

    window: WindowState
    visible_area: float
    meets_minimum: bool


@dataclass(frozen=True)
class VisibilityViolation:
    """A window that exposes less than the clickable-area minimum."""

    window_id: str
    app: str
    required_area: float
    actual_area: float

    @property
    def deficit(self) -> float:
        return self.required_area - self.actual_area


@dataclass(frozen=True)
class DiscoveredConstraint:
    """Empirically discovered minimum size for an application."""

    app: str
    min_width: float
    min_height: float
    discovered_at: float
    complete: bool = True

    @property
    def min_size(self) -> Size:
        return Size(self.min_width, self.min_height)

    def __str__(self) -> str:
        return f"{self.app}: min={int(self.min_width)}x{int(self.min_height)}"


@dataclass(frozen=True)
class WindowImportance:
    """Composite importance score in [0, 1] with its named factors."""

    window: WindowState
    score: float
    factors: Dict[str, float] = field(default_factory=dict)


class WindowVisibility(Enum):
    """How much of a cascaded window remains exposed."""

    FULLY_VISIBLE = "fully_visible"
    MOSTLY_VISIBLE = "mostly_visible"  # 60-90%
    PARTIALLY_VISIBLE = "partially_visible"  # 30-60%
    MINIMALLY_VISIBLE = "minimally_visible"  # 10-30%
    HIDDEN = "hidden"


class WindowRole(Enum):
    """Arrangement role derived from importance rank."""

    PRIMARY = "primary"
    SECONDARY = "secondary"
    AUXILIARY = "auxiliary"


@dataclass(frozen=True)
class Arrangement:
    """Target placement for one window. Applying it is the caller's job."""

    window: WindowState
    target_bounds: Area
    layer_index: int
    visibility: WindowVisibility
    role: WindowRole

    def to_dict(self) -> dict:
        return {
            "app": self.window.app,
            "window_id": self.window.window_id,
            "bounds": list(self.target_bounds.as_tuple()),
            "layer_index": self.layer_index,
            "visibility": self.visibility.value,
            "role": self.role.value,
        }


class CommandAction(Enum):
    OPEN = "open"
    MOVE = "move"
    RESIZE = "resize"
    FOCUS = "focus"
    ARRANGE = "arrange"
    CLOSE = "close"


class WindowPosition(Enum):
    """Symbolic position produced by the command-text layer."""

    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"
    CENTER = "center"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"
    PRECISE = "precise"


class WindowSize(Enum):
    """Symbolic size produced by the command-text layer."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    HALF = "half"
    QUARTER = "quarter"
    THREE_QUARTERS = "three-quarters"
    FULL = "full"
    PRECISE = "precise"


@dataclass(frozen=True)
class WindowCommand:
    """A command for a target application.

    Carries either a symbolic position/size pair or explicit pixel
    coordinates (custom_position + custom_size).
    """

    action: CommandAction
    target: str
    position: Optional[WindowPosition] = None
    size: Optional[WindowSize] = None
    custom_position: Optional[Tuple[float, float]] = None
    custom_size: Optional[Tuple[float, float]] = None

    @property
    def target_bounds(self) -> Optional[Area]:
        """Explicit pixel rectangle, when the command carries one."""
        if self.custom_position is None or self.custom_size is None:
            return None
        x, y = self.custom_position
        width, height = self.custom_size
        return Area(x, y, width, height)

    def to_dict(self) -> dict:
        data = {"action": self.action.value, "target": self.target}
        if self.position is not None:
            data["position"] = self.position.value
        if self.size is not None:
            data["size"] = self.size.value
        if self.custom_position is not None:
            data["custom_position"] = list(self.custom_position)
        if self.custom_size is not None:
            data["custom_size"] = list(self.custom_size)
        return data


@dataclass(frozen=True)
class LayoutSlot:
    """One position in a layout template, as screen fractions (0-1)."""

    width: float
    height: float
    role: str
    x: float = 0.0
    y: float = 0.0

    def to_rect(self, screen: Area) -> Area:
        return Area(
            screen.x + self.x * screen.width,
            screen.y + self.y * screen.height,
            self.width * screen.width,
            self.height * screen.height,
        )


@dataclass(frozen=True)
class LayoutTemplate:
    """Ordered list of slots; slot i is filled by window i."""

    name: str
    slots: Tuple[LayoutSlot, ...]
    description: str = ""

    def to_rects(self, screen: Area) -> List[Area]:
        return [slot.to_rect(screen) for slot in self.slots]


class ViolationType(Enum):
    WIDTH = "width"
    HEIGHT = "height"
    BOTH = "both"


@dataclass(frozen=True)
class SizeViolation:
    """A layout slot smaller than the app's discovered minimum size."""

    app: str
    role: str
    target_size: Size
    min_size: Size
    violation_type: ViolationType

    def __str__(self) -> str:
        target = f"{int(self.target_size.width)}x{int(self.target_size.height)}"
        minimum = f"{int(self.min_size.width)}x{int(self.min_size.height)}"
        return f"{self.app} ({self.role}): target {target} < min {minimum}"


@dataclass(frozen=True)
class FeasibilityResult:
    is_feasible: bool
    violations: List[SizeViolation]
    feasible_apps: List[str]

    @property
    def summary(self) -> str:
        if self.is_feasible:
            return f"Layout feasible for all {len(self.feasible_apps)} apps"
        return f"Layout infeasible: {len(self.violations)} constraint violations"
