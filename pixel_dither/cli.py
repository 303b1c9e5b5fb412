"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from pixel_dither.color_utils import mean_delta_e, palette_to_hex
from pixel_dither.config import DitherConfig
from pixel_dither.dithering import compose, dither_indices, nearest_index_map
from pixel_dither.image_io import (
    format_bytes,
    load_image,
    save_comparison,
    save_output,
)
from pixel_dither.kernels import get_kernel
from pixel_dither.palette import build_palette, parse_palette
from pixel_dither.presets import PRESETS, UnknownPreset, get_preset, list_presets

app = typer.Typer(
    name="pixel-dither",
    help="Reduce images to a small palette with error-diffusion dithering.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()
logger = logging.getLogger("pixel_dither")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _resolve_colors(
    palette: str | None, preset: str | None,
) -> list[tuple[int, int, int]] | None:
    """Explicit ``--palette`` wins over ``--preset``; neither means derive."""
    preset_colors = get_preset(preset) if preset else None
    if palette:
        return parse_palette(palette)
    return preset_colors


def _check_kernel(name: str) -> None:
    if name != "none":
        get_kernel(name)


def _os_error_message(exc: OSError, input_path: Path) -> str:
    """Name the file and the operation that failed."""
    failed = Path(exc.filename) if exc.filename else input_path
    verb = "read" if failed == input_path else "write"
    return f"Could not {verb} file: {failed} ({exc.strerror or exc})"


def _print_available_presets() -> None:
    console.print("Available presets:")
    for name in list_presets():
        console.print(f"  {name}")


def _process(
    input_path: Path,
    output_path: Path,
    cfg: DitherConfig,
    explicit: list[tuple[int, int, int]] | None,
    comparison_path: Path | None = None,
) -> None:
    """Load, quantise, dither and save a single image."""
    t0 = time.perf_counter()
    console.print(f"Dithering: {input_path}")
    console.print(f"Input size: {format_bytes(input_path.stat().st_size)}")

    source = load_image(input_path, cfg.scale)
    h, w = source.shape[:2]
    logger.info("Image: %dx%d", w, h)

    palette = build_palette(source, cfg.colors, explicit)
    logger.info(
        "Palette: %s (%d colours)",
        "explicit" if explicit else "median cut", len(palette),
    )

    if cfg.kernel == "none":
        indices = nearest_index_map(source, palette)
    else:
        kernel = get_kernel(cfg.kernel)
        logger.info("Diffusing with %s (serpentine=%s) ...", kernel.name, cfg.serpentine)
        indices = dither_indices(source, palette, kernel=kernel, serpentine=cfg.serpentine)

    result = compose(source, palette, indices)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    size = save_output(result, indices, palette, output_path)
    console.print(f"Output size: {format_bytes(size)}")

    if comparison_path is not None:
        save_comparison(source, result, palette, comparison_path, cfg.compare_upscale)
        logger.info("Comparison sheet: %s", comparison_path)

    err = mean_delta_e(source, result)
    elapsed = time.perf_counter() - t0
    console.print(f"Palette: {','.join(palette_to_hex(palette))}")
    console.print(
        f"[green]✓[/green] Dithered: {output_path}  "
        f"[dim]{w}x{h}  ΔE={err:.1f}  time={elapsed:.1f}s[/dim]"
    )


# Defaults come from DitherConfig - single source of truth
_DEFAULTS = DitherConfig()


# -- dither command ----------------------------------------------------

@app.command()
def dither(
    input_path: Path = typer.Argument(..., help="Image to dither"),
    output: Path | None = typer.Option(
        None, "--output", "-o",
        help="Output file (.gif writes a single-frame animated GIF); "
             f"default: <stem>{_DEFAULTS.output_suffix}.{_DEFAULTS.output_format} "
             "beside the input",
    ),
    palette: str | None = typer.Option(
        None, "--palette",
        help="Comma-separated hex colours, e.g. '#000000,#ffffff'",
    ),
    preset: str | None = typer.Option(
        None, "--preset", "-p", help="Name of a preset palette",
    ),
    colors: int = typer.Option(
        _DEFAULTS.colors, "--colors", "-c",
        help="Palette size derived from the image when no palette is given",
    ),
    scale: int | None = typer.Option(
        _DEFAULTS.scale, "--scale", "-s",
        help="Scale so the longest side is this many pixels",
    ),
    serpentine: bool = typer.Option(
        _DEFAULTS.serpentine, "--serpentine/--no-serpentine",
        help="Alternate scan direction per row",
    ),
    kernel: str = typer.Option(
        _DEFAULTS.kernel, "--kernel", "-k",
        help="Diffusion kernel, or 'none' for nearest colour only",
    ),
    compare: Path | None = typer.Option(
        None, "--compare", help="Also write a Source | Dithered | Palette sheet",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither a single image."""
    _setup_logging(verbose)

    cfg = DitherConfig(
        colors=colors,
        scale=scale,
        serpentine=serpentine,
        kernel=kernel,
    )
    output_path = output or cfg.default_output(input_path)

    try:
        explicit = _resolve_colors(palette, preset)
        _check_kernel(kernel)
        _process(input_path, output_path, cfg, explicit, compare)
    except UnknownPreset as exc:
        console.print(f"[red]Unknown preset: {exc.name}[/red]")
        _print_available_presets()
        raise typer.Exit(1) from exc
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc
    except OSError as exc:
        console.print(f"[red]{_os_error_message(exc, input_path)}[/red]")
        raise typer.Exit(1) from exc


# -- presets command ---------------------------------------------------

@app.command()
def presets(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show the colours of each preset",
    ),
) -> None:
    """List available preset palettes."""
    if not verbose:
        _print_available_presets()
        return

    table = Table(title="Available presets")
    table.add_column("Name", style="cyan")
    table.add_column("Colours")
    for name in list_presets():
        swatches = " ".join(f"[on {h.lower()}]  [/]" for h in PRESETS[name])
        table.add_row(name, f"{swatches}\n{', '.join(PRESETS[name])}")
    console.print(table)


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    palette: str | None = typer.Option(None, "--palette"),
    preset: str | None = typer.Option(None, "--preset", "-p"),
    colors: int = typer.Option(_DEFAULTS.colors, "--colors", "-c"),
    scale: int | None = typer.Option(_DEFAULTS.scale, "--scale", "-s"),
    serpentine: bool = typer.Option(_DEFAULTS.serpentine, "--serpentine/--no-serpentine"),
    kernel: str = typer.Option(_DEFAULTS.kernel, "--kernel", "-k"),
    output_format: str = typer.Option(
        _DEFAULTS.output_format, "--format", "-f", help="'png', 'gif', ...",
    ),
    compare: bool = typer.Option(
        _DEFAULTS.save_comparison, "--compare/--no-compare",
        help="Write a comparison sheet per image",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Dither every image in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)

    cfg = DitherConfig(
        colors=colors,
        scale=scale,
        serpentine=serpentine,
        kernel=kernel,
        output_format=output_format.lstrip("."),
        save_comparison=compare,
        input_dir=input_dir,
        output_dir=output_dir,
    )

    try:
        explicit = _resolve_colors(palette, preset)
        _check_kernel(kernel)
    except UnknownPreset as exc:
        console.print(f"[red]Unknown preset: {exc.name}[/red]")
        _print_available_presets()
        raise typer.Exit(1) from exc
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    images = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    output_dir.mkdir(parents=True, exist_ok=True)

    console.print(Panel.fit(
        f"[bold]PIXEL DITHER[/bold]\n"
        f"Palette: {'explicit' if palette else preset or f'{cfg.colors} colours'}"
        f"  |  Kernel: {cfg.kernel}\n"
        f"Serpentine: {cfg.serpentine}  |  Images: {len(images)}",
        border_style="cyan",
    ))

    failed = 0
    for idx, img_path in enumerate(images, 1):
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        out_path = output_dir / f"{img_path.stem}{cfg.output_suffix}.{cfg.output_format}"
        comp_path = (
            output_dir / f"{img_path.stem}_comparison.png"
            if cfg.save_comparison else None
        )
        try:
            _process(img_path, out_path, cfg, explicit, comp_path)
        except ValueError as exc:
            failed += 1
            logger.error("Skipping %s: %s", img_path.name, exc)
        except OSError as exc:
            failed += 1
            logger.error("Skipping %s: %s", img_path.name, _os_error_message(exc, img_path))

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]"
        + (f"  [red]({failed} failed)[/red]" if failed else ""),
        border_style="green",
    ))
    if failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
