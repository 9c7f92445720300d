"""
Errors for gridwm.

Nothing in the engine is fatal to the host process: these exceptions are
raised and handled internally to steer degraded paths, never propagated to
callers of the public API.
"""


class GridWMError(Exception):
    """Base class for gridwm errors."""


class WindowVanishedError(GridWMError):
    """The window being probed disappeared or stopped responding."""

    def __init__(self, app: str, window_id: str):
        super().__init__(f"window {window_id} of {app} disappeared")
        self.app = app
        self.window_id = window_id
