"""Command-line interface for TerraMap."""

from pathlib import Path
from dataclasses import replace
from typing import Optional
import logging
import sys

import structlog
import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TaskProgressColumn
from rich.table import Table

from . import __version__
from .config import (
    MapConfig,
    ConfigurationError,
    FalloffMethod,
    PRESET_DESCRIPTIONS,
    get_preset,
    list_presets,
)
from .generator import MapPipeline, MapProgress
from .render import save_png
from .terrain import BiomeTable, load_biomes

app = typer.Typer(
    name="terramap",
    help="Generate seeded procedural island maps.",
    no_args_is_help=True,
)
console = Console()


def configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        # Resolve stderr per logger so redirected streams are honored
        logger_factory=lambda *args: structlog.PrintLogger(sys.stderr),
        cache_logger_on_first_use=False,
    )


def version_callback(value: bool):
    if value:
        console.print(f"TerraMap version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
):
    """TerraMap: procedural terrain maps from seeded noise."""
    configure_logging(verbose)


def _parse_seed(value: Optional[str]):
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def _build_config(
    config_file: Optional[Path],
    preset_name: Optional[str],
    biomes_file: Optional[Path],
    **overrides,
) -> MapConfig:
    if config_file is not None:
        config = MapConfig.load(config_file)
    elif preset_name is not None:
        config = get_preset(preset_name)
        if config is None:
            raise ConfigurationError(
                f"Unknown preset: {preset_name} (available: {', '.join(list_presets())})"
            )
    else:
        config = MapConfig()

    falloff_changes = {
        key: overrides.pop(key)
        for key in ("enabled", "method", "distance")
        if overrides.get(key) is not None
    }
    if falloff_changes:
        overrides["falloff"] = replace(config.falloff, **falloff_changes)
    if biomes_file is not None:
        overrides["biomes"] = tuple(load_biomes(biomes_file))

    changes = {key: value for key, value in overrides.items() if value is not None}
    return config.with_overrides(**changes)


@app.command()
def generate(
    output: Path = typer.Argument(..., help="Output PNG path"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Map configuration JSON"),
    preset_name: Optional[str] = typer.Option(None, "--preset", "-p", help="Preset name"),
    size: Optional[int] = typer.Option(None, "--size", "-s", help="Map side length in cells"),
    zoom: Optional[float] = typer.Option(None, "--zoom", "-z", help="Noise frequency multiplier"),
    elevation_seed: Optional[str] = typer.Option(None, "--elevation-seed", help="Elevation seed"),
    moisture_seed: Optional[str] = typer.Option(None, "--moisture-seed", help="Moisture seed"),
    height_curve: Optional[float] = typer.Option(None, "--height-curve", help="Elevation exponent"),
    falloff: Optional[bool] = typer.Option(None, "--falloff/--no-falloff", help="Island falloff mask"),
    falloff_method: Optional[FalloffMethod] = typer.Option(None, "--falloff-method", help="Falloff distance metric"),
    falloff_distance: Optional[float] = typer.Option(None, "--falloff-distance", help="Distance where falloff begins"),
    shadows: Optional[bool] = typer.Option(None, "--shadows/--no-shadows", help="Elevation shading"),
    shadow_intensity: Optional[float] = typer.Option(None, "--shadow-intensity", help="Shadow darkening"),
    show: Optional[str] = typer.Option(None, "--show", help="Debug view: elevation or moisture"),
    biomes_file: Optional[Path] = typer.Option(None, "--biomes", "-b", help="Biome table JSON"),
    scale: int = typer.Option(1, "--scale", min=1, help="Upscale factor for the PNG"),
    strict: bool = typer.Option(False, "--strict", help="Fail on biome table issues"),
    save_config: Optional[Path] = typer.Option(None, "--save-config", help="Write the effective configuration"),
):
    """Generate a map and write it as a PNG.

    Example:
        terramap generate island.png --size 256 --elevation-seed hello
    """
    if show not in (None, "elevation", "moisture"):
        console.print(f"[red]Error:[/red] --show must be 'elevation' or 'moisture', got {show!r}")
        raise typer.Exit(1)

    try:
        config = _build_config(
            config_file,
            preset_name,
            biomes_file,
            size=size,
            zoom=zoom,
            elevation_seed=_parse_seed(elevation_seed),
            moisture_seed=_parse_seed(moisture_seed),
            height_curve=height_curve,
            enabled=falloff,
            method=falloff_method,
            distance=falloff_distance,
            show_shadows=shadows,
            shadow_intensity=shadow_intensity,
            show_elevation=True if show == "elevation" else None,
            show_moisture=True if show == "moisture" else None,
        )
        pipeline = MapPipeline(config, strict=strict)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[bold]Generating {config.size}x{config.size} map[/bold]")
    console.print(f"  Seeds: elevation={config.elevation_seed!r} moisture={config.moisture_seed!r}")
    console.print(f"  Mode: {config.display_mode.value}")
    for issue in pipeline.issues:
        console.print(f"  [yellow]Warning:[/yellow] {issue}")
    console.print()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        current_task = None
        current_phase = None

        def progress_callback(p: MapProgress):
            nonlocal current_task, current_phase
            if current_task is None or current_phase != p.phase:
                if current_task is not None:
                    progress.update(current_task, completed=progress.tasks[current_task].total)
                current_phase = p.phase
                current_task = progress.add_task(f"[cyan]{p.phase}[/cyan]: {p.message}", total=p.total)
            progress.update(current_task, completed=p.current, description=f"[cyan]{p.phase}[/cyan]: {p.message}")

        buffer = pipeline.run(progress_callback)

    path = save_png(buffer, config.size, output, scale=scale)
    if save_config is not None:
        config.save(save_config)
        console.print(f"Configuration saved to: {save_config}")

    console.print()
    console.print(f"[green]Success![/green] Map saved to: {path}")


@app.command("list-presets")
def list_presets_cmd():
    """List available presets."""
    table = Table(title="Available Presets")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Size", justify="right")
    table.add_column("Falloff")

    for name in list_presets():
        config = get_preset(name)
        falloff = config.falloff.method.value if config.falloff.enabled else "off"
        table.add_row(name, PRESET_DESCRIPTIONS.get(name, ""), str(config.size), falloff)

    console.print(table)


@app.command()
def biomes(
    biomes_file: Optional[Path] = typer.Option(None, "--biomes", "-b", help="Biome table JSON"),
):
    """Show the biome table in classification order."""
    try:
        table_data = BiomeTable(load_biomes(biomes_file))
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Biomes")
    table.add_column("Label", style="cyan")
    table.add_column("Max height", justify="right")
    table.add_column("Moisture", justify="right")
    table.add_column("Shadows")
    table.add_column("Color")

    for biome in table_data.compile():
        hex_color = biome.color.to_hex()
        table.add_row(
            biome.label,
            f"{biome.max_height:.2f}",
            f"{biome.moisture:.2f}",
            "yes" if biome.shadows else "no",
            f"[{hex_color[:7]}]██[/] {hex_color}",
        )
    console.print(table)

    issues = table_data.find_issues()
    for issue in issues:
        console.print(f"[yellow]Warning:[/yellow] {issue}")
    if issues:
        raise typer.Exit(1)


@app.command()
def info(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Map configuration JSON"),
    preset_name: Optional[str] = typer.Option(None, "--preset", "-p", help="Preset name"),
    size: Optional[int] = typer.Option(None, "--size", "-s", help="Map side length in cells"),
    elevation_seed: Optional[str] = typer.Option(None, "--elevation-seed", help="Elevation seed"),
    moisture_seed: Optional[str] = typer.Option(None, "--moisture-seed", help="Moisture seed"),
):
    """Generate a map and print field statistics without writing an image.

    Example:
        terramap info --preset archipelago --elevation-seed 42
    """
    try:
        config = _build_config(
            config_file,
            preset_name,
            None,
            size=size,
            elevation_seed=_parse_seed(elevation_seed),
            moisture_seed=_parse_seed(moisture_seed),
        )
        pipeline = MapPipeline(config)
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    generated = pipeline.generate_map()

    console.print("[bold]Map Information[/bold]")
    console.print()
    console.print(f"[cyan]Grid:[/cyan] {config.size} x {config.size} ({config.cell_count} cells)")
    console.print(f"[cyan]Seeds:[/cyan] elevation={config.elevation_seed!r} moisture={config.moisture_seed!r}")
    console.print()
    for name, values in (("Elevation", generated.elevation), ("Moisture", generated.moisture)):
        console.print(
            f"[cyan]{name}:[/cyan] min={values.min():.3f} "
            f"mean={values.mean():.3f} max={values.max():.3f}"
        )
    console.print()

    table = Table(title="Biome Coverage")
    table.add_column("Biome", style="cyan")
    table.add_column("Cells", justify="right")
    table.add_column("Share", justify="right")
    counts = pipeline.biome_counts()
    for label, count in sorted(counts.items(), key=lambda item: -item[1]):
        table.add_row(label, str(count), f"{100.0 * count / config.cell_count:.1f}%")
    console.print(table)


if __name__ == "__main__":
    app()
