"""
Geometry Primitives and Window Service Contract

This module provides the rectangle/size types shared by every component and
the abstract interface the engine uses to talk to the operating system's
window service (enumerate windows, set bounds, query displays).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .objects import WindowState


@dataclass(frozen=True)
class Size:
    """Dimensions in screen pixels."""

    width: float = 0
    height: float = 0

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height (0 for a degenerate size)."""
        if self.height <= 0:
            return 0.0
        return self.width / self.height


@dataclass(frozen=True)
class Area:
    """Area with position and dimensions."""

    x: float = 0
    y: float = 0
    width: float = 0
    height: float = 0

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)

    @property
    def is_empty(self) -> bool:
        """True when the rectangle covers no pixels."""
        return self.width <= 0 or self.height <= 0

    def intersection(self, other: "Area") -> Optional["Area"]:
        """Return the overlapping rectangle, or None when the areas are disjoint.

        Rectangles that merely touch along an edge do not intersect.
        """
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.max_x, other.max_x)
        bottom = min(self.max_y, other.max_y)
        if right <= left or bottom <= top:
            return None
        return Area(left, top, right - left, bottom - top)

    def with_size(self, width: float, height: float) -> "Area":
        return Area(self.x, self.y, width, height)

    def as_tuple(self) -> tuple:
        return (self.x, self.y, self.width, self.height)


class WindowService(ABC):
    """Abstract OS window service.

    Implementations live outside the engine (accessibility APIs, compositor
    IPC, test doubles). Every method must be safe to call from any thread.
    """

    @abstractmethod
    def list_windows(self) -> List["WindowState"]:
        """
        Enumerate the current windows.

        Returns:
            Snapshot of every managed window, in back-to-front order
        """
        pass

    @abstractmethod
    def set_window_bounds(self, window_id: str, rect: Area) -> bool:
        """
        Request a new frame for a window.

        The application may refuse or clamp the request; callers that care
        must read the window back with list_windows().

        Returns:
            True if the request was delivered
        """
        pass

    @abstractmethod
    def get_display_bounds(self, index: int) -> Area:
        """Usable bounds of the display at index."""
        pass

    @abstractmethod
    def is_minimized(self, window_id: str) -> bool:
        pass

    def find_window(self, window_id: str) -> Optional["WindowState"]:
        """Look up a single window by id, or None if it no longer exists."""
        for window in self.list_windows():
            if window.window_id == window_id:
                return window
        return None
