"""
Arrangement Base Classes

Provides the Layout interface, screen metadata and the generator that picks
a layout strategy for a window set.
"""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from ..objects import Arrangement, WindowImportance, WindowRole, WindowState
from ..protocol import Area
from .. import topics

_LOG = logging.getLogger(__name__)

ULTRAWIDE_ASPECT = 2.0
LARGE_SCREEN_AREA = 3_000_000  # roughly 4K


@dataclass(frozen=True)
class ScreenInfo:
    """Usable bounds of one display plus derived classification."""

    bounds: Area
    ultrawide_aspect: float = ULTRAWIDE_ASPECT
    large_screen_area: float = LARGE_SCREEN_AREA

    @property
    def is_ultrawide(self) -> bool:
        return self.bounds.size.aspect_ratio > self.ultrawide_aspect

    @property
    def is_large(self) -> bool:
        return self.bounds.area > self.large_screen_area


def role_for_rank(index: int) -> WindowRole:
    """Role by position alone: first primary, second secondary, rest auxiliary."""
    if index == 0:
        return WindowRole.PRIMARY
    if index == 1:
        return WindowRole.SECONDARY
    return WindowRole.AUXILIARY


class Layout(ABC):
    """Abstract base class for arrangement strategies.

    Layouts are pure: they compute target rectangles and never touch
    window state.
    """

    @abstractmethod
    def calculate(
        self, ranked: Sequence[WindowImportance], screen: ScreenInfo
    ) -> List[Arrangement]:
        """
        Calculate target bounds for windows.

        Args:
            ranked: Scored windows, most important first
            screen: Display the windows are arranged on

        Returns:
            One Arrangement per window, in importance order
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Layout name for display."""
        pass


class ArrangementGenerator:
    """
    Chooses between layouts and produces arrangements.

    Tiled is used for up to two windows, or up to four on an ultrawide
    display; cascade otherwise. A strategy name forces a specific layout.
    """

    def __init__(self, layouts: Optional[Sequence[Layout]] = None, bus=None):
        if layouts is None:
            from .layout_tiled import TiledLayout
            from .layout_cascade import CascadeLayout

            layouts = [TiledLayout(), CascadeLayout()]
        self.layouts: Dict[str, Layout] = {layout.name: layout for layout in layouts}
        self.bus = bus

    def choose(self, window_count: int, screen: ScreenInfo) -> Layout:
        if window_count <= 2 or (screen.is_ultrawide and window_count <= 4):
            return self.layouts["tiled"]
        return self.layouts["cascade"]

    def arrange(
        self,
        windows: Sequence[WindowState],
        screen: ScreenInfo,
        scorer,
        strategy: Optional[str] = None,
    ) -> List[Arrangement]:
        """
        Score windows and compute their target rectangles.

        Args:
            windows: Windows to arrange
            screen: Target display
            scorer: ImportanceScorer used to rank the windows
            strategy: Force "tiled" or "cascade" instead of choosing

        Returns:
            Arrangements in importance order (empty for no windows)
        """
        if not windows:
            return []

        if strategy is None:
            layout = self.choose(len(windows), screen)
        elif strategy in self.layouts:
            layout = self.layouts[strategy]
        else:
            _LOG.warning("Unknown strategy %r, choosing automatically", strategy)
            layout = self.choose(len(windows), screen)

        ranked = scorer.rank(windows)
        arrangements = layout.calculate(ranked, screen)
        _LOG.debug("Arranged %d windows with %s", len(arrangements), layout.name)
        if self.bus is not None:
            self.bus.sendMessage(
                topics.ARRANGEMENT_GENERATED,
                strategy=layout.name,
                arrangements=arrangements,
            )
        return arrangements
