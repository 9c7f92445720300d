"""
gridwm - Spatial Reasoning & Layout Constraint Engine

Turns window snapshots into layouts and back.

This package provides:
- A lossy ASCII grid codec for showing layouts to a language model
- Occlusion and clickable-area validation under a z-order
- Empirical per-app minimum size discovery with a TTL cache
- Layout template feasibility checks
- Importance-weighted tiled and cascade arrangements

Example usage:
    from gridwm import SpatialEngine, EngineConfig

    engine = SpatialEngine(my_window_service, EngineConfig(tile_gap=8))
    arrangements = engine.arrange(display=0)
    engine.apply(arrangements, display=0)

Or inspect snapshots offline:
    python -m gridwm encode snapshot.json --screen 1920x1080
"""

__version__ = "0.1.0"

from .protocol import Area, Size, WindowService

from .objects import (
    MIN_CLICKABLE_AREA,
    WindowState,
    Overlap,
    VisibilityResult,
    VisibilityViolation,
    DiscoveredConstraint,
    WindowImportance,
    WindowVisibility,
    WindowRole,
    Arrangement,
    CommandAction,
    WindowPosition,
    WindowSize,
    WindowCommand,
    LayoutSlot,
    LayoutTemplate,
    ViolationType,
    SizeViolation,
    FeasibilityResult,
)

from .errors import GridWMError, WindowVanishedError

from .grid import (
    CELL_SIZE,
    SymbolTable,
    GridEncoder,
    GridDecoder,
    GridEncoding,
    DecodeResult,
)

from .occlusion import OcclusionCalculator, OcclusionMode, ConstraintValidationResult

from .discovery import ConstraintCache, ConstraintDiscovery, ProbePolicy

from .feasibility import FeasibilityValidator

from .importance import AppCategory, ImportanceScorer

from .layouts import (
    Layout,
    ScreenInfo,
    ArrangementGenerator,
    TiledLayout,
    CascadeLayout,
    CascadeStyle,
)

from .analysis import WorkspaceAnalyzer, WorkspaceAnalysis

from .engine import EngineConfig, SpatialEngine

from . import presets
from . import topics

__all__ = [
    # Version
    "__version__",
    # Geometry and window service
    "Area",
    "Size",
    "WindowService",
    # Objects
    "MIN_CLICKABLE_AREA",
    "WindowState",
    "Overlap",
    "VisibilityResult",
    "VisibilityViolation",
    "DiscoveredConstraint",
    "WindowImportance",
    "WindowVisibility",
    "WindowRole",
    "Arrangement",
    "CommandAction",
    "WindowPosition",
    "WindowSize",
    "WindowCommand",
    "LayoutSlot",
    "LayoutTemplate",
    "ViolationType",
    "SizeViolation",
    "FeasibilityResult",
    # Errors
    "GridWMError",
    "WindowVanishedError",
    # Grid codec
    "CELL_SIZE",
    "SymbolTable",
    "GridEncoder",
    "GridDecoder",
    "GridEncoding",
    "DecodeResult",
    # Occlusion
    "OcclusionCalculator",
    "OcclusionMode",
    "ConstraintValidationResult",
    # Constraint discovery
    "ConstraintCache",
    "ConstraintDiscovery",
    "ProbePolicy",
    "FeasibilityValidator",
    # Importance and arrangement
    "AppCategory",
    "ImportanceScorer",
    "Layout",
    "ScreenInfo",
    "ArrangementGenerator",
    "TiledLayout",
    "CascadeLayout",
    "CascadeStyle",
    # Analysis
    "WorkspaceAnalyzer",
    "WorkspaceAnalysis",
    # Engine
    "EngineConfig",
    "SpatialEngine",
    # Templates and event topics
    "presets",
    "topics",
]
