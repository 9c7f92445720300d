"""
Unit tests for the ASCII grid codec.
"""

import pytest
from gridwm import topics
from gridwm.grid import (
    APP_SYMBOLS,
    GridDecoder,
    GridEncoder,
    SymbolTable,
    format_grid,
    grid_dimensions,
)
from gridwm.objects import CommandAction, WindowPosition, WindowSize
from gridwm.protocol import Area, Size


def interior_rows(grid_text):
    """Strip the border from encoded grid text."""
    return [line[1:-1] for line in grid_text.splitlines()[1:-1]]


@pytest.mark.unit
class TestSymbolTable:
    """Test app <-> symbol lookups."""

    def test_known_apps(self):
        table = SymbolTable()
        assert table.symbol_for("Arc") == "1"
        assert table.symbol_for("Safari") == "2"
        assert table.app_for("2") == "Safari"
        assert table.app_for("A") == "Mail"

    def test_lookup_is_exact_match(self):
        table = SymbolTable()
        assert table.symbol_for("safari") == "?"
        assert table.symbol_for("Unknown App") == "?"

    def test_markers_never_resolve(self):
        table = SymbolTable()
        assert table.app_for(".") is None
        assert table.app_for("X") is None
        assert table.app_for("?") is None

    def test_table_size(self):
        assert len(SymbolTable()) == len(APP_SYMBOLS) == 36

    def test_first_entry_wins_for_shared_symbol(self):
        table = SymbolTable({"First": "1", "Second": "1"})
        assert table.app_for("1") == "First"
        assert table.symbol_for("Second") == "1"

    def test_rejects_multi_character_symbols(self):
        with pytest.raises(ValueError):
            SymbolTable({"App": "12"})

    def test_rejects_more_symbols_than_fit(self):
        mapping = {f"App {i}": chr(ord("a") + i) for i in range(26)}
        mapping.update({f"Tool {i}": str(i) for i in range(10)})
        with pytest.raises(ValueError):
            SymbolTable(mapping)

    def test_empty_table_is_honored(self, make_window, small_screen):
        table = SymbolTable({})
        assert len(table) == 0
        encoding = GridEncoder(symbols=table).encode([make_window("Arc", layer=1)], small_screen)
        assert encoding.unmapped_apps == ["Arc"]
        assert GridDecoder(symbols=table).symbols is table


@pytest.mark.unit
class TestGridEncoder:
    """Test grid rendering."""

    def test_dimensions_from_screen(self):
        assert grid_dimensions(Size(1920, 1080)) == (38, 21)
        assert grid_dimensions(Size(1000, 600)) == (20, 12)

    def test_empty_screen(self, small_screen):
        encoding = GridEncoder().encode([], small_screen)
        rows = interior_rows(encoding.grid_text)
        assert len(rows) == 12
        assert all(row == "." * 20 for row in rows)
        assert encoding.legend == "LEGEND:\n"

    def test_border(self, small_screen):
        encoding = GridEncoder().encode([], small_screen)
        lines = encoding.grid_text.splitlines()
        assert lines[0] == "+" + "-" * 20 + "+"
        assert lines[-1] == lines[0]
        assert all(line.startswith("|") and line.endswith("|") for line in lines[1:-1])

    def test_overlapping_windows(self, make_window, small_screen):
        """Arc and Safari share columns 8-9, which become X."""
        arc = make_window("Arc", 0, 0, 500, 600, layer=1)
        safari = make_window("Safari", 400, 0, 600, 600, layer=2)

        encoding = GridEncoder().encode([arc, safari], small_screen)

        expected = "1" * 8 + "XX" + "2" * 10
        assert interior_rows(encoding.grid_text) == [expected] * 12
        assert encoding.dimensions == (20, 12)

    def test_legend_in_input_order(self, make_window, small_screen):
        arc = make_window("Arc", 0, 0, 500, 600, layer=2)
        safari = make_window("Safari", 500, 0, 500, 600, layer=1)
        encoding = GridEncoder().encode([arc, safari], small_screen)
        assert encoding.legend == "LEGEND:\n1 = Arc\n2 = Safari\n"
        assert encoding.text.endswith(encoding.legend)

    def test_validation_counts_visible_cells(self, make_window, small_screen):
        arc = make_window("Arc", 0, 0, 500, 600, layer=1)
        safari = make_window("Safari", 400, 0, 600, 600, layer=2)

        validations = GridEncoder().encode([arc, safari], small_screen).validations

        assert validations[arc.window_id].visible_cells == 8 * 12
        assert validations[arc.window_id].overlapped_cells == 2 * 12
        assert validations[safari.window_id].visible_cells == 10 * 12
        assert validations[arc.window_id].visible_pixels == 8 * 12 * 2500
        assert validations[arc.window_id].meets_minimum

    def test_has_overlap_is_global(self, make_window, small_screen):
        arc = make_window("Arc", 0, 0, 500, 300, layer=1)
        safari = make_window("Safari", 400, 0, 300, 300, layer=2)
        notes = make_window("Notes", 0, 400, 200, 200, layer=3)

        validations = GridEncoder().encode([arc, safari, notes], small_screen).validations

        # Notes overlaps nothing but still reports the grid-wide flag
        assert validations[notes.window_id].has_overlap
        assert validations[notes.window_id].overlapped_cells == 0

    def test_fully_covered_window_fails_minimum(self, make_window, small_screen):
        back = make_window("Arc", 100, 100, 100, 100, layer=1)
        front = make_window("Safari", 0, 0, 500, 500, layer=2)

        validations = GridEncoder().encode([back, front], small_screen).validations

        assert validations[back.window_id].visible_cells == 0
        assert not validations[back.window_id].meets_minimum

    def test_same_app_overlap_keeps_symbol(self, make_window, small_screen):
        first = make_window("Arc", 0, 0, 300, 300, layer=1, window_id="a")
        second = make_window("Arc", 200, 0, 300, 300, layer=2, window_id="b")

        encoding = GridEncoder().encode([first, second], small_screen)

        assert "X" not in encoding.grid_text
        assert interior_rows(encoding.grid_text)[0][:10] == "1" * 10

    def test_third_window_keeps_overlap_marker(self, make_window, small_screen):
        windows = [
            make_window("Arc", 0, 0, 200, 200, layer=1),
            make_window("Safari", 0, 0, 200, 200, layer=2),
            make_window("Terminal", 0, 0, 200, 200, layer=3),
        ]
        rows = interior_rows(GridEncoder().encode(windows, small_screen).grid_text)
        assert rows[0][:4] == "XXXX"

    def test_paints_back_to_front_by_layer(self, make_window, small_screen):
        """Input order does not matter; layer decides what is painted first."""
        arc = make_window("Arc", 0, 0, 500, 600, layer=1)
        safari = make_window("Safari", 400, 0, 600, 600, layer=2)
        encoder = GridEncoder()
        assert (
            encoder.encode([safari, arc], small_screen).grid_text
            == encoder.encode([arc, safari], small_screen).grid_text
        )

    def test_out_of_range_windows_are_clamped(self, make_window, small_screen):
        window = make_window("Arc", -200, -100, 2000, 2000, layer=1)
        rows = interior_rows(GridEncoder().encode([window], small_screen).grid_text)
        assert rows == ["1" * 20] * 12

    def test_window_off_screen_paints_nothing(self, make_window, small_screen):
        window = make_window("Arc", 2000, 2000, 300, 300, layer=1)
        encoding = GridEncoder().encode([window], small_screen)
        assert encoding.validations[window.window_id].visible_cells == 0
        assert "1" not in encoding.grid_text

    def test_encode_is_deterministic(self, make_window, standard_screen):
        windows = [
            make_window("Cursor", 0, 0, 1200, 1080, layer=1),
            make_window("Chrome", 900, 100, 1000, 900, layer=2),
            make_window("Slack", 1500, 600, 400, 400, layer=3),
        ]
        encoder = GridEncoder()
        assert encoder.encode(windows, standard_screen).text == encoder.encode(windows, standard_screen).text

    def test_unmapped_apps_reported(self, make_window, small_screen, bus):
        window = make_window("Some Tool", 0, 0, 200, 200, layer=1)

        encoding = GridEncoder(bus=bus).encode([window], small_screen)

        assert encoding.unmapped_apps == ["Some Tool"]
        assert "?" in encoding.grid_text
        assert "? = Some Tool" in encoding.legend
        assert bus.last(topics.GRID_SYMBOLS_DROPPED) == {
            "direction": "encode",
            "items": ["Some Tool"],
        }

    def test_publishes_encoded(self, make_window, small_screen, bus):
        GridEncoder(bus=bus).encode([make_window("Arc", layer=1)], small_screen)
        assert bus.last(topics.GRID_ENCODED) == {"width": 20, "height": 12, "window_count": 1}


@pytest.mark.unit
class TestGridDecoder:
    """Test parsing grids back into commands."""

    def test_decodes_block(self):
        text = "+----+\n|1.2.|\n|1.2.|\n|1.2.|\n+----+"

        result = GridDecoder().decode(text, Size(400, 300))

        assert result is not None
        assert [c.target for c in result.commands] == ["Arc", "Safari"]
        arc, safari = result.commands
        assert arc.target_bounds == Area(0, 0, 50, 150)
        assert safari.target_bounds == Area(100, 0, 50, 150)

    def test_commands_are_precise_moves(self):
        text = "+--+\n|11|\n+--+"
        command = GridDecoder().decode(text, Size(100, 50)).commands[0]
        assert command.action == CommandAction.MOVE
        assert command.position == WindowPosition.PRECISE
        assert command.size == WindowSize.PRECISE
        assert command.custom_position == (0, 0)
        assert command.custom_size == (100, 50)

    def test_finds_grid_in_free_text(self):
        text = (
            "Sure! Here is the new layout:\n\n"
            "+------+\n|333...|\n|333.44|\n+------+\n\n"
            "LEGEND:\n3 = Terminal\n4 = Finder\n"
        )
        result = GridDecoder().decode(text, Size(300, 100))
        by_app = {c.target: c.target_bounds for c in result.commands}
        assert by_app == {
            "Terminal": Area(0, 0, 150, 100),
            "Finder": Area(200, 50, 100, 50),
        }

    def test_crlf_line_endings(self):
        text = "+--+\r\n|1.|\r\n+--+\r\n"
        result = GridDecoder().decode(text, Size(100, 50))
        assert result.commands[0].target == "Arc"

    def test_overlap_cells_ignored(self):
        text = "+----+\n|1XX2|\n+----+"
        result = GridDecoder().decode(text, Size(200, 50))
        by_app = {c.target: c.target_bounds for c in result.commands}
        assert by_app == {"Arc": Area(0, 0, 50, 50), "Safari": Area(150, 0, 50, 50)}

    def test_bounding_box_of_scattered_cells(self):
        text = "+---+\n|1..|\n|...|\n|..1|\n+---+"
        result = GridDecoder().decode(text, Size(150, 150))
        assert result.commands[0].target_bounds == Area(0, 0, 150, 150)

    def test_no_grid_returns_none(self, bus):
        assert GridDecoder(bus=bus).decode("Put Safari on the left.", Size(1000, 600)) is None
        assert bus.last(topics.GRID_DECODE_FAILED) == {"length": 23}

    def test_unmapped_symbols_dropped_and_counted(self, bus):
        text = "+---+\n|1?~|\n+---+"

        result = GridDecoder(bus=bus).decode(text, Size(150, 50))

        assert [c.target for c in result.commands] == ["Arc"]
        assert result.dropped == 2
        assert result.dropped_symbols == ["?", "~"]
        assert bus.last(topics.GRID_SYMBOLS_DROPPED) == {
            "direction": "decode",
            "items": ["?", "~"],
        }

    def test_publishes_decoded(self, bus):
        result = GridDecoder(bus=bus).decode("+-+\n|2|\n+-+", Size(50, 50))
        assert bus.last(topics.GRID_DECODED) == {"commands": result.commands}


@pytest.mark.unit
class TestRoundTrip:
    """Encode then decode recovers bounds to the nearest cell."""

    def test_non_overlapping_windows_recovered(self, make_window, standard_screen):
        windows = [
            make_window("Cursor", 0, 0, 960, 1080, layer=1),
            make_window("Safari", 960, 0, 960, 540, layer=2),
            make_window("Terminal", 960, 540, 960, 540, layer=3),
        ]

        encoding = GridEncoder().encode(windows, standard_screen)
        result = GridDecoder().decode(encoding.text, standard_screen)

        recovered = {c.target: c.target_bounds for c in result.commands}
        assert set(recovered) == {"Cursor", "Safari", "Terminal"}
        for window in windows:
            bounds = recovered[window.app]
            assert abs(bounds.x - window.frame.x) < 50
            assert abs(bounds.y - window.frame.y) < 50
            assert abs(bounds.width - window.frame.width) <= 50
            assert abs(bounds.height - window.frame.height) <= 50

    def test_unknown_app_lost(self, make_window, small_screen):
        windows = [
            make_window("Arc", 0, 0, 500, 600, layer=1),
            make_window("Mystery", 500, 0, 500, 600, layer=2),
        ]
        encoding = GridEncoder().encode(windows, small_screen)
        result = GridDecoder().decode(encoding.text, small_screen)
        assert [c.target for c in result.commands] == ["Arc"]
        assert result.dropped == 1

    def test_format_grid_matches_encoder(self):
        assert format_grid([["1", "."]], 2) == "+--+\n|1.|\n+--+\n"
