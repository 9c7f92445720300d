"""
Shared pytest fixtures for gridwm tests.
"""

import dataclasses

import pytest
from gridwm.objects import WindowState
from gridwm.protocol import Area, Size, WindowService


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without a real window service")


class SimulatedWindowService(WindowService):
    """In-memory window service.

    Apps in min_sizes clamp resize requests to their minimum, the way a real
    app refuses to shrink. vanish_after=N removes the window on the
    request after the N-th; fail_on_set makes every request raise.
    fail_lookup_on=N makes the N-th find_window call raise once.
    """

    def __init__(self, windows=(), displays=None, min_sizes=None):
        self.windows = {w.window_id: w for w in windows}
        self.displays = displays or [Area(0, 0, 1920, 1080)]
        self.min_sizes = {app.lower(): size for app, size in (min_sizes or {}).items()}
        self.requests = []
        self.vanish_after = None
        self.fail_on_set = False
        self.fail_lookup_on = None
        self.lookups = 0

    def list_windows(self):
        return list(self.windows.values())

    def set_window_bounds(self, window_id, rect):
        self.requests.append((window_id, rect))
        if self.fail_on_set:
            raise RuntimeError("window service unavailable")
        window = self.windows.get(window_id)
        if window is None:
            return False
        if self.vanish_after is not None and len(self.requests) > self.vanish_after:
            del self.windows[window_id]
            return False
        min_width, min_height = self.min_sizes.get(window.app.lower(), (0, 0))
        frame = Area(rect.x, rect.y, max(rect.width, min_width), max(rect.height, min_height))
        self.windows[window_id] = dataclasses.replace(window, frame=frame)
        return True

    def find_window(self, window_id):
        self.lookups += 1
        if self.lookups == self.fail_lookup_on:
            raise RuntimeError("accessibility lookup timed out")
        return super().find_window(window_id)

    def get_display_bounds(self, index):
        return self.displays[index]

    def is_minimized(self, window_id):
        return self.windows[window_id].is_minimized


class RecordingBus:
    """Stand-in for pubsub.pub that records every message."""

    def __init__(self):
        self.messages = []

    def sendMessage(self, topic, **kwargs):
        self.messages.append((topic, kwargs))

    def topics(self):
        return [topic for topic, _ in self.messages]

    def last(self, topic):
        for name, kwargs in reversed(self.messages):
            if name == topic:
                return kwargs
        return None


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def make_window():
    """Factory fixture for creating window snapshots."""

    def factory(app="Safari", x=0, y=0, width=800, height=600, layer=0, window_id=None, **kwargs):
        return WindowState(
            app=app,
            window_id=window_id or f"{app.lower()}-{layer}",
            frame=Area(x, y, width, height),
            layer=layer,
            **kwargs,
        )

    return factory


@pytest.fixture
def standard_area():
    """Standard 1920x1080 area for layout tests."""
    return Area(0, 0, 1920, 1080)


@pytest.fixture
def standard_screen():
    return Size(1920, 1080)


@pytest.fixture
def small_screen():
    """1000x600 screen, a 20x12 grid."""
    return Size(1000, 600)


@pytest.fixture
def ultrawide_area():
    """Ultrawide 3440x1440 area (aspect 2.39)."""
    return Area(0, 0, 3440, 1440)


@pytest.fixture
def bus():
    return RecordingBus()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service():
    return SimulatedWindowService()
