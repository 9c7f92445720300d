"""
gridwm.cli
----------

Click command-line interface for inspecting layouts offline.

Commands
--------
encode   : Render a window snapshot as an ASCII grid with legend
decode   : Parse a grid out of model output into move commands
analyze  : Symbolic overlap and visibility report for a snapshot
arrange  : Compute tiled or cascade target rectangles for a snapshot
templates: List the named layout templates

A snapshot is a JSON list of window objects:
    {"app": "Safari", "bounds": [x, y, w, h], "layer": 2,
     "display_index": 0, "is_minimized": false, "window_id": "..."}
Without a "layer" on every window the list is read front to back.
"""

from __future__ import annotations

import json
import logging
from typing import IO, List, Optional

import click

from . import __version__
from .analysis import WorkspaceAnalyzer
from .engine import EngineConfig
from .grid import GridDecoder, GridEncoder
from .importance import ImportanceScorer
from .layouts import ArrangementGenerator, CascadeLayout, CascadeStyle, ScreenInfo, TiledLayout
from .objects import WindowState
from .occlusion import OcclusionCalculator, OcclusionMode
from .presets import TEMPLATES
from .protocol import Area, Size

_LOG = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _parse_screen(ctx, param, value: str) -> Size:
    try:
        width, height = value.lower().split("x")
        size = Size(int(width), int(height))
    except ValueError:
        raise click.BadParameter(f"expected WIDTHxHEIGHT, got {value!r}")
    if size.width <= 0 or size.height <= 0:
        raise click.BadParameter("screen dimensions must be positive")
    return size


def _load_snapshot(stream: IO[str]) -> List[WindowState]:
    try:
        data = json.load(stream)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"invalid snapshot JSON: {exc}")
    if not isinstance(data, list):
        raise click.ClickException("snapshot must be a JSON list of windows")
    try:
        return WorkspaceAnalyzer.load_windows(data)
    except (KeyError, TypeError, ValueError) as exc:
        raise click.ClickException(f"invalid window in snapshot: {exc}")


screen_option = click.option(
    "--screen",
    default="1920x1080",
    show_default=True,
    callback=_parse_screen,
    help="Screen size as WIDTHxHEIGHT.",
)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging.")
@click.version_option(__version__)
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """gridwm – spatial reasoning for window layouts."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = EngineConfig()


@cli.command("encode")
@click.argument("snapshot", type=click.File("r"))
@screen_option
@click.pass_context
def cmd_encode(ctx: click.Context, snapshot: IO[str], screen: Size) -> None:
    """Print the grid and legend for SNAPSHOT ('-' for stdin)."""
    config: EngineConfig = ctx.obj["config"]
    windows = _load_snapshot(snapshot)
    encoder = GridEncoder(cell_size=config.cell_size, min_visible_area=config.min_visible_area)
    encoding = encoder.encode(windows, screen)
    click.echo(encoding.grid_text, nl=False)
    click.echo("")
    click.echo(encoding.legend, nl=False)
    if encoding.unmapped_apps:
        click.echo(f"Unmapped apps: {', '.join(encoding.unmapped_apps)}", err=True)


@cli.command("decode")
@click.argument("response", type=click.File("r"))
@screen_option
@click.pass_context
def cmd_decode(ctx: click.Context, response: IO[str], screen: Size) -> None:
    """Print the move commands found in RESPONSE as JSON."""
    config: EngineConfig = ctx.obj["config"]
    decoder = GridDecoder(cell_size=config.cell_size)
    result = decoder.decode(response.read(), screen)
    if result is None:
        raise click.ClickException("No grid found in response.")
    payload = {
        "commands": [c.to_dict() for c in result.commands],
        "dropped_symbols": result.dropped_symbols,
    }
    click.echo(json.dumps(payload, indent=2))


@cli.command("analyze")
@click.argument("snapshot", type=click.File("r"))
@click.option(
    "--mode",
    type=click.Choice([m.name.lower() for m in OcclusionMode], case_sensitive=False),
    default="sequential",
    show_default=True,
    help="How overlapping occluders are combined.",
)
@click.pass_context
def cmd_analyze(ctx: click.Context, snapshot: IO[str], mode: str) -> None:
    """Print the symbolic analysis and suggestions for SNAPSHOT."""
    config: EngineConfig = ctx.obj["config"]
    windows = _load_snapshot(snapshot)
    analyzer = WorkspaceAnalyzer(
        OcclusionCalculator(OcclusionMode[mode.upper()], config.min_visible_area)
    )
    click.echo(analyzer.symbolic_analysis(windows), nl=False)
    click.echo("")
    for suggestion in analyzer.analyze(windows).suggestions:
        click.echo(suggestion)


@cli.command("arrange")
@click.argument("snapshot", type=click.File("r"))
@screen_option
@click.option(
    "--strategy",
    type=click.Choice(["tiled", "cascade"], case_sensitive=False),
    default=None,
    help="Force a strategy instead of choosing by window count.",
)
@click.option(
    "--style",
    type=click.Choice([s.value for s in CascadeStyle], case_sensitive=False),
    default=CascadeStyle.INTELLIGENT.value,
    show_default=True,
    help="Cascade style.",
)
@click.pass_context
def cmd_arrange(
    ctx: click.Context,
    snapshot: IO[str],
    screen: Size,
    strategy: Optional[str],
    style: str,
) -> None:
    """Print target rectangles for SNAPSHOT as JSON."""
    config: EngineConfig = ctx.obj["config"]
    windows = [w for w in _load_snapshot(snapshot) if not w.is_minimized]
    info = ScreenInfo(
        Area(0, 0, screen.width, screen.height),
        ultrawide_aspect=config.ultrawide_aspect,
        large_screen_area=config.large_screen_area,
    )
    generator = ArrangementGenerator(
        [TiledLayout(gap=config.tile_gap), CascadeLayout(CascadeStyle(style.lower()))]
    )
    arrangements = generator.arrange(
        windows, info, ImportanceScorer(screen), strategy=strategy.lower() if strategy else None
    )
    click.echo(json.dumps([a.to_dict() for a in arrangements], indent=2))


@cli.command("templates")
def cmd_templates() -> None:
    """List the named layout templates."""
    for template in TEMPLATES.values():
        click.echo(f"{template.name:<20} {len(template.slots)}  {template.description}")


def main() -> None:
    """Console-script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
