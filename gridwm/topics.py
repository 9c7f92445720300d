"""
Event Topics for gridwm

All pub/sub topics are defined here for easy discovery and documentation.
Topic naming convention: <category>.<action>

Every topic is always published with the same keyword arguments, listed in
its docstring. Pypubsub infers a topic's message signature from the first
publisher or subscriber, so listeners must accept exactly these names.
"""

# Grid codec events
GRID_ENCODED = "grid.encoded"
"""Published after a layout is rendered to a grid. Params: width, height, window_count"""

GRID_DECODED = "grid.decoded"
"""Published after a grid is parsed back into commands. Params: commands"""

GRID_DECODE_FAILED = "grid.decode_failed"
"""Published when no bordered grid block is found in the text. Params: length"""

GRID_SYMBOLS_DROPPED = "grid.symbols_dropped"
"""Published when apps or symbols cannot be mapped. Params: direction, items"""

# Constraint discovery events
CONSTRAINTS_CACHE_HIT = "constraints.cache_hit"
"""Published when a cached constraint is served. Params: constraint"""

CONSTRAINTS_DISCOVERED = "constraints.discovered"
"""Published when a probe sequence finishes. Params: constraint"""

CONSTRAINTS_WINDOW_NOT_FOUND = "constraints.window_not_found"
"""Published when discovery has no live window to probe. Params: app"""

CONSTRAINTS_WINDOW_VANISHED = "constraints.window_vanished"
"""Published when the probed window disappears mid-search. Params: app"""

CONSTRAINTS_CACHE_CLEARED = "constraints.cache_cleared"
"""Published when the constraint cache is emptied. Params: count"""

# Validation events
LAYOUT_FEASIBILITY_CHECKED = "layout.feasibility_checked"
"""Published after a layout template is checked. Params: template, result"""

VISIBILITY_VIOLATIONS = "visibility.violations"
"""Published when windows fall below the clickable minimum. Params: violations"""

# Arrangement events
ARRANGEMENT_GENERATED = "arrangement.generated"
"""Published when target rectangles are computed. Params: strategy, arrangements"""

ARRANGEMENT_APPLIED = "arrangement.applied"
"""Published after bounds are sent to the window service. Params: display_index, results"""
