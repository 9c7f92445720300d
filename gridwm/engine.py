"""
Spatial Engine

Wires the grid codec, occlusion calculator, constraint discovery, feasibility
validator, importance scorer and arrangement generator around one window
service and one event bus.
"""

from __future__ import annotations
import dataclasses
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from pubsub import pub

from . import topics
from .discovery import CACHE_TTL, ConstraintCache, ConstraintDiscovery, ProbePolicy
from .feasibility import FeasibilityValidator
from .grid import CELL_SIZE, DecodeResult, GridDecoder, GridEncoder, GridEncoding
from .importance import AppCategory, ImportanceScorer
from .layouts import ArrangementGenerator, CascadeLayout, CascadeStyle, ScreenInfo, TiledLayout
from .layouts.layout_base import LARGE_SCREEN_AREA, ULTRAWIDE_ASPECT
from .objects import (
    MIN_CLICKABLE_AREA,
    Arrangement,
    FeasibilityResult,
    LayoutTemplate,
    WindowState,
)
from .occlusion import ConstraintValidationResult, OcclusionCalculator, OcclusionMode
from .protocol import Area

_LOG = logging.getLogger(__name__)


@dataclass
class EngineConfig:
    """Engine configuration."""

    # Grid codec
    cell_size: int = CELL_SIZE
    min_visible_area: float = MIN_CLICKABLE_AREA
    occlusion_mode: OcclusionMode = OcclusionMode.SEQUENTIAL

    # Constraint discovery
    cache_ttl: float = CACHE_TTL
    probe_floor: float = 100
    probe_iterations: int = 8
    probe_tolerance: float = 10
    probe_settle_delay: float = 0.05

    # Arrangement
    ultrawide_aspect: float = ULTRAWIDE_ASPECT
    large_screen_area: float = LARGE_SCREEN_AREA
    cascade_style: CascadeStyle = CascadeStyle.INTELLIGENT
    tile_gap: int = 0

    # Log every bus event
    debug_events: bool = field(default_factory=lambda: bool(os.getenv("GRIDWM_DEBUG")))

    def __post_init__(self):
        """Reject values the algorithms cannot work with."""
        if isinstance(self.occlusion_mode, str):
            self.occlusion_mode = OcclusionMode[self.occlusion_mode.upper()]
        if isinstance(self.cascade_style, str):
            self.cascade_style = CascadeStyle(self.cascade_style.lower())

        if self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.min_visible_area < 0:
            raise ValueError(f"min_visible_area must be >= 0, got {self.min_visible_area}")
        if self.cache_ttl <= 0:
            raise ValueError(f"cache_ttl must be positive, got {self.cache_ttl}")
        if self.probe_floor <= 0:
            raise ValueError(f"probe_floor must be positive, got {self.probe_floor}")
        if self.probe_iterations <= 0:
            raise ValueError(f"probe_iterations must be positive, got {self.probe_iterations}")
        if self.probe_tolerance < 0:
            raise ValueError(f"probe_tolerance must be >= 0, got {self.probe_tolerance}")
        if self.probe_settle_delay < 0:
            raise ValueError(f"probe_settle_delay must be >= 0, got {self.probe_settle_delay}")
        if self.tile_gap < 0:
            raise ValueError(f"tile_gap must be >= 0, got {self.tile_gap}")


class SpatialEngine:
    """
    Spatial reasoning engine for one window service.

    Architecture:
    1. Create event bus (Pypubsub) and the shared constraint cache
    2. Create components, each publishing on the bus
    3. Every operation takes a fresh snapshot of one display
    """

    def __init__(
        self,
        window_service,
        config: Optional[EngineConfig] = None,
        bus=None,
        preferences: Optional[Mapping[str, float]] = None,
        category_overrides: Optional[Mapping[str, AppCategory]] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.config = config or EngineConfig()
        self.window_service = window_service
        self.bus = bus if bus is not None else pub
        self.preferences = dict(preferences or {})
        self.category_overrides = dict(category_overrides or {})
        self.recent_apps: List[str] = []

        # Setup debug event logging if enabled
        if self.config.debug_events:
            self.bus.subscribe(self.debug_event_logger, self.bus.ALL_TOPICS)

        cfg = self.config
        self.encoder = GridEncoder(
            cell_size=cfg.cell_size, min_visible_area=cfg.min_visible_area, bus=self.bus
        )
        self.decoder = GridDecoder(cell_size=cfg.cell_size, bus=self.bus)
        self.occlusion = OcclusionCalculator(
            mode=cfg.occlusion_mode, min_visible_area=cfg.min_visible_area, bus=self.bus
        )

        self.cache = ConstraintCache(ttl=cfg.cache_ttl, clock=clock)
        self.policy = ProbePolicy(
            floor=cfg.probe_floor,
            max_iterations=cfg.probe_iterations,
            tolerance=cfg.probe_tolerance,
            settle_delay=cfg.probe_settle_delay,
            sleep=sleep or time.sleep,
        )
        self.discovery = ConstraintDiscovery(
            window_service, cache=self.cache, policy=self.policy, bus=self.bus
        )
        self.feasibility = FeasibilityValidator(self.discovery, bus=self.bus)

        # Arranging reads the cache only; it never probes windows
        self.generator = ArrangementGenerator(
            layouts=[
                TiledLayout(gap=cfg.tile_gap),
                CascadeLayout(cfg.cascade_style, constraint_lookup=self.cache.get),
            ],
            bus=self.bus,
        )

        self._display_locks: Dict[int, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def debug_event_logger(self, topic=pub.AUTO_TOPIC, **kwargs):
        """Log all events published on the event bus."""
        data_str = ", ".join(f"{k}={v}" for k, v in kwargs.items() if k != "topic")
        _LOG.debug("EVENT: %s | %s", topic.getName(), data_str)

    def screen(self, display: int = 0) -> ScreenInfo:
        return ScreenInfo(
            self.window_service.get_display_bounds(display),
            ultrawide_aspect=self.config.ultrawide_aspect,
            large_screen_area=self.config.large_screen_area,
        )

    def snapshot(self, display: int = 0) -> List[WindowState]:
        """Windows currently on a display, in the service's back-to-front order."""
        return [w for w in self.window_service.list_windows() if w.display_index == display]

    def encode(self, display: int = 0) -> GridEncoding:
        """
        Render one display to the grid.

        Window frames are translated so the display's origin is cell (0, 0).
        """
        screen = self.screen(display).bounds
        windows = [
            dataclasses.replace(
                w,
                frame=Area(
                    w.frame.x - screen.x, w.frame.y - screen.y, w.frame.width, w.frame.height
                ),
            )
            for w in self.snapshot(display)
        ]
        return self.encoder.encode(windows, screen.size)

    def decode(self, text: str, display: int = 0) -> Optional[DecodeResult]:
        """Decode a grid drawn for a display, returning commands in global coordinates."""
        screen = self.screen(display).bounds
        result = self.decoder.decode(text, screen.size)
        if result is None or (screen.x == 0 and screen.y == 0):
            return result
        commands = [
            dataclasses.replace(
                c, custom_position=(c.custom_position[0] + screen.x, c.custom_position[1] + screen.y)
            )
            for c in result.commands
        ]
        return DecodeResult(commands=commands, dropped_symbols=result.dropped_symbols)

    def validate_visibility(self, display: int = 0) -> ConstraintValidationResult:
        return self.occlusion.validate_constraints(self.snapshot(display))

    def check_feasibility(
        self,
        template: LayoutTemplate,
        display: int = 0,
        windows: Optional[Sequence[WindowState]] = None,
    ) -> FeasibilityResult:
        """
        Check a template against the apps on a display.

        Without explicit windows, visible windows fill the slots front to back.
        """
        if windows is None:
            windows = sorted(
                (w for w in self.snapshot(display) if not w.is_minimized),
                key=lambda w: w.layer,
                reverse=True,
            )
        return self.feasibility.validate_layout_feasibility(
            template, windows, self.screen(display).bounds.size
        )

    def note_focus(self, app: str):
        """Record app as the most recently focused one."""
        self.recent_apps = [app] + [a for a in self.recent_apps if a.lower() != app.lower()]

    def arrange(self, display: int = 0, strategy: Optional[str] = None) -> List[Arrangement]:
        """Compute target rectangles for every visible window on a display."""
        screen = self.screen(display)
        windows = [w for w in self.snapshot(display) if not w.is_minimized]
        scorer = ImportanceScorer(
            screen.bounds.size,
            app_preferences=self.preferences,
            category_overrides=self.category_overrides,
            recent_apps=self.recent_apps,
        )
        return self.generator.arrange(windows, screen, scorer, strategy=strategy)

    def _display_lock(self, display: int) -> threading.Lock:
        with self._locks_guard:
            return self._display_locks.setdefault(display, threading.Lock())

    def apply(self, arrangements: Sequence[Arrangement], display: int = 0) -> Dict[str, bool]:
        """
        Send target bounds to the window service.

        Requests for the same display are applied one at a time.

        Returns:
            Mapping of window id to whether the service accepted the bounds
        """
        results: Dict[str, bool] = {}
        with self._display_lock(display):
            for arrangement in arrangements:
                window_id = arrangement.window.window_id
                try:
                    results[window_id] = bool(
                        self.window_service.set_window_bounds(
                            window_id, arrangement.target_bounds
                        )
                    )
                except Exception as exc:
                    _LOG.warning("Failed to move %s: %s", arrangement.window.app, exc)
                    results[window_id] = False
        self.bus.sendMessage(topics.ARRANGEMENT_APPLIED, display_index=display, results=results)
        return results

    def clear_constraints(self) -> int:
        return self.discovery.clear_cache()
