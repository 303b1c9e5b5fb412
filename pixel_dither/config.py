"""Centralised configuration via a frozen dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class DitherConfig:
    """All tuneable parameters for a dithering run.

    Attributes:
        colors:          Palette size derived from the image when no explicit
                         palette or preset is given.
        scale:           Longest side of the scaled image (None = keep size).
        serpentine:      Alternate scan direction on every row.
        kernel:          Diffusion kernel name (see kernels.KERNELS) or "none".
        output_suffix:   Appended to the input stem for the default output.
        output_format:   Extension of the default output file.
        save_comparison: Also write a Source | Dithered | Palette sheet.
        compare_upscale: Nearest-neighbour upscale for the comparison sheet.
        input_dir:       Folder scanned by the batch command.
        output_dir:      Folder the batch command writes to.
    """

    # Palette
    colors: int = 8

    # Scaling
    scale: int | None = None

    # Dithering
    serpentine: bool = False
    kernel: str = "floyd_steinberg"

    # Output
    output_suffix: str = "-dither"
    output_format: str = "png"
    save_comparison: bool = False
    compare_upscale: int = 4

    # Paths
    input_dir: Path = field(default_factory=lambda: Path("images"))
    output_dir: Path = field(default_factory=lambda: Path("output"))

    SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
        {".jpg", ".jpeg", ".png", ".bmp", ".gif", ".tiff", ".tif", ".webp", ".jfif"}
    )

    def default_output(self, input_path: Path) -> Path:
        """``photo.jpg`` -> ``photo-dither.png`` beside the input."""
        return input_path.with_name(
            f"{input_path.stem}{self.output_suffix}.{self.output_format}"
        )
