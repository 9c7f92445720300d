"""
App Constraint Discovery

Finds an application's minimum window size empirically: shrink a live window
through the window service, read back what the app actually accepted, and
binary-search the smallest honored size. Results are cached per app name
(case-insensitive) with a time-to-live.

Discovery mutates real window state while it measures and blocks for roughly
probe_iterations * settle_delay per dimension. It always restores the
original bounds when the window is still there.
"""

from __future__ import annotations
import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterator, Optional, Tuple

from . import topics
from .errors import WindowVanishedError
from .objects import DiscoveredConstraint, WindowState
from .protocol import Area, WindowService

_LOG = logging.getLogger(__name__)

CACHE_TTL = 24 * 60 * 60


@dataclass(frozen=True)
class CacheStats:
    count: int
    oldest_age: Optional[float]


class ConstraintCache:
    """
    Thread-safe app name -> DiscoveredConstraint map with expiry.

    Entries are only ever replaced wholesale. locked(app) serializes the
    check-then-discover sequence for one key so two callers never probe the
    same app at once; other keys proceed in parallel.
    """

    def __init__(self, ttl: float = CACHE_TTL, clock: Optional[Callable[[], float]] = None):
        self.ttl = ttl
        self.clock = clock or time.time
        self._entries: Dict[str, DiscoveredConstraint] = {}
        self._lock = threading.Lock()
        self._key_locks: Dict[str, threading.Lock] = {}

    @staticmethod
    def key(app: str) -> str:
        return app.lower()

    def now(self) -> float:
        return self.clock()

    def get(self, app: str) -> Optional[DiscoveredConstraint]:
        """Return the entry for app if it is younger than the TTL."""
        key = self.key(app)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self.now() - entry.discovered_at >= self.ttl:
                del self._entries[key]
                _LOG.debug("Constraint for %s expired", app)
                return None
            return entry

    def put(self, constraint: DiscoveredConstraint):
        with self._lock:
            self._entries[self.key(constraint.app)] = constraint

    def invalidate(self, app: str) -> bool:
        with self._lock:
            return self._entries.pop(self.key(app), None) is not None

    def clear(self) -> int:
        """Drop every entry, returning how many were removed."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            # Locks held by an in-flight discovery stay registered
            self._key_locks = {k: l for k, l in self._key_locks.items() if l.locked()}
        return count

    def stats(self) -> CacheStats:
        with self._lock:
            now = self.now()
            ages = [now - entry.discovered_at for entry in self._entries.values()]
            return CacheStats(len(ages), max(ages) if ages else None)

    @contextmanager
    def locked(self, app: str) -> Iterator[None]:
        """Hold the per-key lock for app."""
        key = self.key(app)
        with self._lock:
            key_lock = self._key_locks.setdefault(key, threading.Lock())
        with key_lock:
            yield

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass
class ProbePolicy:
    """Retry policy for resize probes against a possibly-laggy window.

    The search never exceeds max_iterations probes per dimension, whatever
    the window does.
    """

    floor: float = 100
    max_iterations: int = 8
    tolerance: float = 10
    settle_delay: float = 0.05
    backoff: float = 1.0
    max_delay: float = 0.5
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)

    def delay_for(self, iteration: int) -> float:
        return min(self.settle_delay * (self.backoff ** iteration), self.max_delay)

    def settle(self, iteration: int):
        """Give the OS time to apply the last resize."""
        delay = self.delay_for(iteration)
        if delay > 0:
            self.sleep(delay)

    def honored(self, requested: float, actual: float) -> bool:
        return abs(actual - requested) < self.tolerance


class Dimension(Enum):
    WIDTH = "width"
    HEIGHT = "height"


class ConstraintDiscovery:
    """Discovers and caches per-app minimum window sizes."""

    def __init__(
        self,
        window_service: WindowService,
        cache: Optional[ConstraintCache] = None,
        policy: Optional[ProbePolicy] = None,
        bus=None,
    ):
        self.window_service = window_service
        self.cache = cache if cache is not None else ConstraintCache()
        self.policy = policy or ProbePolicy()
        self.bus = bus

    def get_constraints(self, app: str) -> Optional[DiscoveredConstraint]:
        """
        Get constraints for an app, discovering them if not cached.

        Returns:
            The cached or newly discovered constraint, a partial constraint
            (complete=False, not cached) if the window vanished mid-search,
            or None if the app has no live window
        """
        with self.cache.locked(app):
            cached = self.cache.get(app)
            if cached is not None:
                _LOG.debug("Using cached constraints for %s", cached)
                self._publish(topics.CONSTRAINTS_CACHE_HIT, constraint=cached)
                return cached
            return self._discover(app)

    def clear_cache(self) -> int:
        count = self.cache.clear()
        _LOG.info("Cleared %d cached constraints", count)
        self._publish(topics.CONSTRAINTS_CACHE_CLEARED, count=count)
        return count

    def _find_window(self, app: str) -> Optional[WindowState]:
        key = ConstraintCache.key(app)
        try:
            windows = self.window_service.list_windows()
        except Exception as exc:
            _LOG.warning("Window service failed to list windows: %s", exc)
            return None
        for window in windows:
            if window.app.lower() == key and not window.is_minimized:
                return window
        return None

    def _discover(self, app: str) -> Optional[DiscoveredConstraint]:
        window = self._find_window(app)
        if window is None:
            _LOG.info("Cannot discover constraints: no %s window found", app)
            self._publish(topics.CONSTRAINTS_WINDOW_NOT_FOUND, app=app)
            return None

        original = window.frame
        _LOG.debug(
            "Probing %s from %dx%d", app, original.width, original.height
        )

        min_width, vanished = self._search(window, original, Dimension.WIDTH)
        min_height = original.height
        if not vanished:
            min_height, vanished = self._search(window, original, Dimension.HEIGHT)

        constraint = DiscoveredConstraint(
            app=app,
            min_width=min_width,
            min_height=min_height,
            discovered_at=self.cache.now(),
            complete=not vanished,
        )

        if vanished:
            _LOG.warning("%s window vanished during discovery; keeping %s uncached", app, constraint)
            self._publish(topics.CONSTRAINTS_WINDOW_VANISHED, app=app)
            if self._is_present(window):
                self._restore(window, original)
            return constraint

        self._restore(window, original)
        self.cache.put(constraint)
        _LOG.info("Discovered constraints %s", constraint)
        self._publish(topics.CONSTRAINTS_DISCOVERED, constraint=constraint)
        return constraint

    def _search(
        self, window: WindowState, original: Area, dimension: Dimension
    ) -> Tuple[float, bool]:
        """
        Binary-search the smallest size the app honors along one dimension.

        The other dimension is held at its original value.

        Returns:
            (best bound found, whether the window vanished)
        """
        current = original.width if dimension == Dimension.WIDTH else original.height
        best = current
        low, high = self.policy.floor, current
        if high <= low:
            return best, False

        for iteration in range(self.policy.max_iterations):
            target = (low + high) / 2
            if dimension == Dimension.WIDTH:
                rect = original.with_size(target, original.height)
            else:
                rect = original.with_size(original.width, target)

            try:
                updated = self._probe(window, rect, iteration)
            except WindowVanishedError as exc:
                _LOG.debug("Aborting %s search: %s", dimension.value, exc)
                return best, True

            actual = (
                updated.frame.width if dimension == Dimension.WIDTH else updated.frame.height
            )
            if self.policy.honored(target, actual):
                high = target
                best = actual
            else:
                low = target

        return best, False

    def _is_present(self, window: WindowState) -> bool:
        try:
            return self.window_service.find_window(window.window_id) is not None
        except Exception as exc:
            _LOG.debug("Cannot look up %s window: %s", window.app, exc)
            return False

    def _restore(self, window: WindowState, original: Area):
        """Put the window back where it was, result unchecked."""
        try:
            self.window_service.set_window_bounds(window.window_id, original)
        except Exception as exc:
            _LOG.warning("Failed to restore %s bounds: %s", window.app, exc)

    def _probe(self, window: WindowState, rect: Area, iteration: int) -> WindowState:
        """Request rect, wait for the OS to settle, and read the window back."""
        try:
            self.window_service.set_window_bounds(window.window_id, rect)
            self.policy.settle(iteration)
            updated = self.window_service.find_window(window.window_id)
        except Exception as exc:
            raise WindowVanishedError(window.app, window.window_id) from exc
        if updated is None:
            raise WindowVanishedError(window.app, window.window_id)
        return updated

    def _publish(self, topic: str, **kwargs):
        if self.bus is not None:
            self.bus.sendMessage(topic, **kwargs)
