"""
Pixel Dither
============

Reduce any image to a small colour palette with error-diffusion
dithering and write it back out as a static image or a single-frame
animated GIF.

- **Palette builder**: explicit colours, named presets, or median cut
- **Ditherer**: Floyd-Steinberg and friends, optional serpentine scan
"""

__version__ = "1.0.0"

from pixel_dither.config import DitherConfig
from pixel_dither.dithering import dither, dither_indices, remap_nearest
from pixel_dither.errors import (
    DimensionMismatch,
    DitherError,
    EmptyPalette,
    InvalidColorCount,
    InvalidPaletteEntry,
)
from pixel_dither.image_io import (
    compute_target_size,
    format_bytes,
    load_image,
    save_gif,
    save_image,
    save_output,
)
from pixel_dither.kernels import FLOYD_STEINBERG, KERNELS, DiffusionKernel, get_kernel
from pixel_dither.palette import build_palette, parse_palette
from pixel_dither.presets import PRESETS, UnknownPreset, get_preset

__all__ = [
    "FLOYD_STEINBERG",
    "KERNELS",
    "PRESETS",
    "DiffusionKernel",
    "DimensionMismatch",
    "DitherConfig",
    "DitherError",
    "EmptyPalette",
    "InvalidColorCount",
    "InvalidPaletteEntry",
    "UnknownPreset",
    "build_palette",
    "compute_target_size",
    "dither",
    "dither_indices",
    "format_bytes",
    "get_kernel",
    "get_preset",
    "load_image",
    "parse_palette",
    "remap_nearest",
    "save_gif",
    "save_image",
    "save_output",
]
