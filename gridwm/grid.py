"""
ASCII Grid Codec

Serializes a window layout into a bordered ASCII diagram a language model can
reason over, and parses such a diagram back into move commands.

Each cell covers CELL_SIZE x CELL_SIZE screen pixels and holds '.' (empty),
an app symbol, or 'X' where two different apps overlap. The conversion is
lossy: positions only survive to the nearest cell, 'X' does not record which
apps overlap, and apps without a symbol cannot be recovered.

Example for a 1000x600 screen with Arc at (0,0,500,600) and Safari at
(400,0,600,600):

    +--------------------+
    |11111111XX2222222222|
    ...
    +--------------------+
"""

from __future__ import annotations
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from . import topics
from .objects import (
    MIN_CLICKABLE_AREA,
    CommandAction,
    WindowCommand,
    WindowPosition,
    WindowSize,
    WindowState,
)
from .protocol import Area, Size

_LOG = logging.getLogger(__name__)

CELL_SIZE = 50
EMPTY = "."
OVERLAP = "X"
UNKNOWN = "?"
MAX_APPS_SUPPORTED = 35  # 0-9, A-Z minus the overlap marker

# Fixed app -> symbol table. 'X' doubles as the overlap marker, so the app
# holding it can be painted but never decoded.
APP_SYMBOLS: Dict[str, str] = {
    "Arc": "1",
    "Safari": "2",
    "Terminal": "3",
    "Finder": "4",
    "Messages": "5",
    "Cursor": "6",
    "Xcode": "7",
    "Chrome": "8",
    "Slack": "9",
    "Claude": "0",
    "Mail": "A",
    "Calendar": "B",
    "Notes": "C",
    "Notion": "D",
    "Spotify": "E",
    "Discord": "F",
    "Telegram": "G",
    "WhatsApp": "H",
    "Figma": "I",
    "Photoshop": "J",
    "Illustrator": "K",
    "VS Code": "L",
    "IntelliJ": "M",
    "PyCharm": "N",
    "Atom": "O",
    "Sublime": "P",
    "TextEdit": "Q",
    "Preview": "R",
    "System Preferences": "S",
    "Activity Monitor": "T",
    "Console": "U",
    "Disk Utility": "V",
    "Keychain Access": "W",
    "Font Book": "X",
    "Migration Assistant": "Y",
    "Boot Camp": "Z",
}

# Bordered block: +---+ line, one or more |...| lines, +---+ line
GRID_PATTERN = re.compile(r"\+-+\+\n((?:\|.*\|\n)+)\+-+\+")


class SymbolTable:
    """Bidirectional app name <-> grid symbol map, built once."""

    def __init__(self, mapping: Optional[Mapping[str, str]] = None):
        mapping = APP_SYMBOLS if mapping is None else mapping
        self._by_app: Dict[str, str] = {}
        self._by_symbol: Dict[str, str] = {}
        for app, symbol in mapping.items():
            if len(symbol) != 1:
                raise ValueError(f"symbol for {app!r} must be one character")
            self._by_app[app] = symbol
            # First entry wins when two apps share a symbol
            self._by_symbol.setdefault(symbol, app)
        decodable = set(self._by_symbol) - {EMPTY, OVERLAP, UNKNOWN}
        if len(decodable) > MAX_APPS_SUPPORTED:
            raise ValueError(
                f"{len(decodable)} distinct symbols, at most {MAX_APPS_SUPPORTED} fit on a grid"
            )

    def symbol_for(self, app: str) -> str:
        """Exact-match lookup; unknown apps map to '?'."""
        return self._by_app.get(app, UNKNOWN)

    def app_for(self, symbol: str) -> Optional[str]:
        """Reverse lookup; the overlap and unknown markers never resolve."""
        if symbol in (EMPTY, OVERLAP, UNKNOWN):
            return None
        return self._by_symbol.get(symbol)

    def __contains__(self, app: str) -> bool:
        return app in self._by_app

    def __len__(self) -> int:
        return len(self._by_app)


@dataclass(frozen=True)
class CellValidation:
    """Visibility of one window as seen on the grid."""

    app: str
    window_id: str
    symbol: str
    visible_cells: int
    visible_pixels: int
    meets_minimum: bool
    has_overlap: bool  # any 'X' anywhere on the grid, not just this window
    overlapped_cells: int  # cells of this window's own rectangle marked 'X'


@dataclass
class GridEncoding:
    """Result of rendering a layout to the grid."""

    grid_text: str
    legend: str
    validations: Dict[str, CellValidation]
    dimensions: Tuple[int, int]
    cells: List[List[str]] = field(default_factory=list)
    unmapped_apps: List[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Grid followed by its legend, as sent to the language model."""
        return self.grid_text + "\n" + self.legend


@dataclass
class DecodeResult:
    """Commands recovered from a grid, plus what had to be discarded."""

    commands: List[WindowCommand]
    dropped_symbols: List[str] = field(default_factory=list)

    @property
    def dropped(self) -> int:
        return len(self.dropped_symbols)


def grid_dimensions(screen: Size, cell_size: int = CELL_SIZE) -> Tuple[int, int]:
    """Grid width/height in cells, derived only from the screen size."""
    return int(screen.width // cell_size), int(screen.height // cell_size)


def format_grid(cells: Sequence[Sequence[str]], width: int) -> str:
    """Frame rows of cells with a +/-/| border."""
    border = "+" + "-" * width + "+\n"
    lines = [border]
    for row in cells:
        lines.append("|" + "".join(row) + "|\n")
    lines.append(border)
    return "".join(lines)


class GridEncoder:
    """Paints windows onto a character grid, back to front."""

    def __init__(
        self,
        symbols: Optional[SymbolTable] = None,
        cell_size: int = CELL_SIZE,
        min_visible_area: float = MIN_CLICKABLE_AREA,
        bus=None,
    ):
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.cell_size = cell_size
        self.min_visible_area = min_visible_area
        self.bus = bus

    def cell_span(self, frame: Area, dims: Tuple[int, int]) -> Tuple[int, int, int, int]:
        """Half-open cell range (start_x, start_y, end_x, end_y) covered by frame."""
        grid_w, grid_h = dims
        start_x = min(grid_w, max(0, math.floor(frame.x / self.cell_size)))
        start_y = min(grid_h, max(0, math.floor(frame.y / self.cell_size)))
        end_x = min(grid_w, max(0, math.floor(frame.max_x / self.cell_size)))
        end_y = min(grid_h, max(0, math.floor(frame.max_y / self.cell_size)))
        return start_x, start_y, end_x, end_y

    def encode(self, windows: Sequence[WindowState], screen: Size) -> GridEncoding:
        """
        Render windows onto the grid.

        Args:
            windows: Windows to paint; ordered back to front by layer (stable
                for equal layers, so list order breaks ties)
            screen: Screen size in pixels

        Returns:
            GridEncoding with bordered grid text, legend and per-window
            validation keyed by window id
        """
        dims = grid_dimensions(screen, self.cell_size)
        grid_w, grid_h = dims
        cells = [[EMPTY] * grid_w for _ in range(grid_h)]

        ordered = sorted(windows, key=lambda w: w.layer)
        spans: Dict[str, Tuple[int, int, int, int]] = {}
        unmapped: List[str] = []

        for window in ordered:
            symbol = self.symbols.symbol_for(window.app)
            if symbol == UNKNOWN and window.app not in unmapped:
                unmapped.append(window.app)
            span = self.cell_span(window.frame, dims)
            spans[window.window_id] = span
            start_x, start_y, end_x, end_y = span
            for y in range(start_y, end_y):
                row = cells[y]
                for x in range(start_x, end_x):
                    if row[x] == EMPTY:
                        row[x] = symbol
                    elif row[x] != symbol:
                        row[x] = OVERLAP

        has_overlap = any(OVERLAP in row for row in cells)
        validations: Dict[str, CellValidation] = {}
        cell_pixels = self.cell_size * self.cell_size

        for window in windows:
            symbol = self.symbols.symbol_for(window.app)
            start_x, start_y, end_x, end_y = spans[window.window_id]
            visible = 0
            overlapped = 0
            for y in range(start_y, end_y):
                for x in range(start_x, end_x):
                    if cells[y][x] == symbol:
                        visible += 1
                    elif cells[y][x] == OVERLAP:
                        overlapped += 1
            visible_pixels = visible * cell_pixels
            validations[window.window_id] = CellValidation(
                app=window.app,
                window_id=window.window_id,
                symbol=symbol,
                visible_cells=visible,
                visible_pixels=visible_pixels,
                meets_minimum=visible_pixels >= self.min_visible_area,
                has_overlap=has_overlap,
                overlapped_cells=overlapped,
            )

        if unmapped:
            _LOG.info("No grid symbol for %s; they will not survive decoding", unmapped)
            self._publish(topics.GRID_SYMBOLS_DROPPED, direction="encode", items=unmapped)

        encoding = GridEncoding(
            grid_text=format_grid(cells, grid_w),
            legend=self.legend(windows),
            validations=validations,
            dimensions=dims,
            cells=cells,
            unmapped_apps=unmapped,
        )
        _LOG.debug("Encoded %d windows onto %dx%d grid", len(windows), grid_w, grid_h)
        self._publish(
            topics.GRID_ENCODED, width=grid_w, height=grid_h, window_count=len(windows)
        )
        return encoding

    def legend(self, windows: Sequence[WindowState]) -> str:
        """One 'symbol = app' line per window, in input order."""
        lines = ["LEGEND:"]
        for window in windows:
            lines.append(f"{self.symbols.symbol_for(window.app)} = {window.app}")
        return "\n".join(lines) + "\n"

    def _publish(self, topic: str, **kwargs):
        if self.bus is not None:
            self.bus.sendMessage(topic, **kwargs)


class GridDecoder:
    """Parses a bordered grid out of free text into move commands."""

    def __init__(
        self,
        symbols: Optional[SymbolTable] = None,
        cell_size: int = CELL_SIZE,
        bus=None,
    ):
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.cell_size = cell_size
        self.bus = bus

    @staticmethod
    def extract_grid(text: str) -> Optional[List[str]]:
        """Return the interior rows of the first bordered block, or None."""
        normalized = text.replace("\r\n", "\n")
        match = GRID_PATTERN.search(normalized)
        if match is None:
            return None
        return [line.replace("|", "") for line in match.group(1).split("\n") if line]

    def decode(self, text: str, screen: Size) -> Optional[DecodeResult]:
        """
        Decode a grid embedded in text.

        Args:
            text: Free text containing a +---+ / |...| / +---+ block
            screen: Screen size the grid was drawn for

        Returns:
            DecodeResult with one precise move command per recognised symbol,
            or None if no grid block is present
        """
        rows = self.extract_grid(text)
        if rows is None:
            _LOG.warning("No ASCII grid found in %d characters of text", len(text))
            self._publish(topics.GRID_DECODE_FAILED, length=len(text))
            return None

        expected = grid_dimensions(screen, self.cell_size)
        actual = (max((len(r) for r in rows), default=0), len(rows))
        if actual != expected:
            _LOG.debug("Grid is %dx%d, screen implies %dx%d", *actual, *expected)

        # symbol -> (min_col, max_col, min_row, max_row)
        boxes: Dict[str, List[int]] = {}
        for y, line in enumerate(rows):
            for x, char in enumerate(line):
                if char in (EMPTY, OVERLAP) or char.isspace():
                    continue
                box = boxes.get(char)
                if box is None:
                    boxes[char] = [x, x, y, y]
                else:
                    box[0] = min(box[0], x)
                    box[1] = max(box[1], x)
                    box[2] = min(box[2], y)
                    box[3] = max(box[3], y)

        commands: List[WindowCommand] = []
        dropped: List[str] = []
        for symbol, (min_x, max_x, min_y, max_y) in boxes.items():
            app = self.symbols.app_for(symbol)
            if app is None:
                dropped.append(symbol)
                continue
            commands.append(
                WindowCommand(
                    action=CommandAction.MOVE,
                    target=app,
                    position=WindowPosition.PRECISE,
                    size=WindowSize.PRECISE,
                    custom_position=(min_x * self.cell_size, min_y * self.cell_size),
                    custom_size=(
                        (max_x - min_x + 1) * self.cell_size,
                        (max_y - min_y + 1) * self.cell_size,
                    ),
                )
            )

        if dropped:
            _LOG.info("Dropped %d unmapped grid symbols: %s", len(dropped), dropped)
            self._publish(topics.GRID_SYMBOLS_DROPPED, direction="decode", items=dropped)
        self._publish(topics.GRID_DECODED, commands=commands)
        return DecodeResult(commands=commands, dropped_symbols=dropped)

    def _publish(self, topic: str, **kwargs):
        if self.bus is not None:
            self.bus.sendMessage(topic, **kwargs)
