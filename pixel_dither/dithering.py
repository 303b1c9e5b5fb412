"""Palette-constrained error-diffusion dithering.

Every pixel is replaced by its nearest palette entry and the
quantisation error is pushed onto the pixels that have not been visited
yet, weighted by a :class:`~pixel_dither.kernels.DiffusionKernel`.  The
average colour over a region is preserved even though each output pixel
is an exact palette colour.

With *serpentine* scanning, odd rows are walked right-to-left and the
kernel is mirrored horizontally, which changes the exact output and
removes the diagonal "worm" artefacts of a plain raster scan.

The scan is inherently sequential (each pixel depends on its already
processed neighbours), so a single image is never split across workers.
"""

from __future__ import annotations

import logging
import time

import numpy as np
from numba import njit

from pixel_dither.color_utils import as_rgba, nearest_indices
from pixel_dither.errors import EmptyPalette
from pixel_dither.kernels import FLOYD_STEINBERG, DiffusionKernel
from pixel_dither.palette import validate_palette

logger = logging.getLogger(__name__)


def _check_palette(palette: np.ndarray) -> np.ndarray:
    """Reject empty or malformed palettes; return a (K, 4) uint8 copy.

    Channels must be integers in 0-255 so that every output pixel is
    exactly one of the supplied entries.
    """
    if len(palette) == 0:
        msg = "Cannot dither against an empty palette"
        raise EmptyPalette(msg)
    return validate_palette(palette)


@njit(cache=True)
def _diffuse(
    source: np.ndarray,     # (H, W, 3) float64
    palette: np.ndarray,    # (K, 3) float64
    tap_dx: np.ndarray,     # (T,) int64
    tap_dy: np.ndarray,     # (T,) int64
    tap_wt: np.ndarray,     # (T,) float64
    serpentine: bool,
) -> np.ndarray:
    h = source.shape[0]
    w = source.shape[1]
    k_count = palette.shape[0]
    t_count = tap_wt.shape[0]

    error = np.zeros((h, w, 3), dtype=np.float64)
    indices = np.empty((h, w), dtype=np.int64)

    for y in range(h):
        step = 1
        x = 0
        if serpentine and y % 2 == 1:
            step = -1
            x = w - 1

        for _ in range(w):
            r = min(max(source[y, x, 0] + error[y, x, 0], 0.0), 255.0)
            g = min(max(source[y, x, 1] + error[y, x, 1], 0.0), 255.0)
            b = min(max(source[y, x, 2] + error[y, x, 2], 0.0), 255.0)

            # strict < keeps the lowest index among equal distances
            best = 0
            best_d = np.inf
            for k in range(k_count):
                dr = palette[k, 0] - r
                dg = palette[k, 1] - g
                db = palette[k, 2] - b
                d = dr * dr + dg * dg + db * db
                if d < best_d:
                    best_d = d
                    best = k
            indices[y, x] = best

            er = r - palette[best, 0]
            eg = g - palette[best, 1]
            eb = b - palette[best, 2]
            if er != 0.0 or eg != 0.0 or eb != 0.0:
                for t in range(t_count):
                    nx = x + tap_dx[t] * step
                    ny = y + tap_dy[t]
                    if 0 <= nx < w and ny < h:
                        error[ny, nx, 0] += er * tap_wt[t]
                        error[ny, nx, 1] += eg * tap_wt[t]
                        error[ny, nx, 2] += eb * tap_wt[t]

            x += step

    return indices


def compose(source: np.ndarray, palette: np.ndarray, indices: np.ndarray) -> np.ndarray:
    """Build the RGBA output: palette RGB, source alpha."""
    out = np.empty_like(source)
    out[..., :3] = palette[indices, :3]
    out[..., 3] = source[..., 3]
    return out


def dither_indices(
    image: np.ndarray,
    palette: np.ndarray,
    kernel: DiffusionKernel = FLOYD_STEINBERG,
    serpentine: bool = False,
) -> np.ndarray:
    """Run error diffusion and return the chosen palette index per pixel.

    Working colours and errors stay in float64 throughout; the working
    colour is clamped to [0, 255] once, right before the palette search.
    Ties between equally distant entries go to the lowest index.  Taps
    that land outside the image are dropped.

    Args:
        image:      (H, W, 3|4) uint8 source (not modified).
        palette:    (K, 3|4) uint8 palette.
        kernel:     Diffusion weights.
        serpentine: Alternate the scan direction on every row.

    Returns:
        (H, W) int64 palette indices.

    Raises:
        EmptyPalette: *palette* has no entries.
        InvalidPaletteEntry: an entry is not an integer colour in 0-255.
        DimensionMismatch: *image* has zero size or a bad shape.
    """
    pal = _check_palette(palette)
    src = as_rgba(image)
    h, w = src.shape[:2]

    pal_rgb = np.ascontiguousarray(pal[:, :3], dtype=np.float64)
    source = np.ascontiguousarray(src[..., :3], dtype=np.float64)
    tap_dx = np.array([t[0] for t in kernel.taps], dtype=np.int64)
    tap_dy = np.array([t[1] for t in kernel.taps], dtype=np.int64)
    tap_wt = np.array([t[2] for t in kernel.taps], dtype=np.float64)

    t0 = time.perf_counter()
    indices = _diffuse(source, pal_rgb, tap_dx, tap_dy, tap_wt, bool(serpentine))

    logger.debug(
        "Dithered %dx%d against %d colours (%s, serpentine=%s) in %.2f s",
        w, h, len(pal), kernel.name, serpentine, time.perf_counter() - t0,
    )
    return indices


def dither(
    image: np.ndarray,
    palette: np.ndarray,
    kernel: DiffusionKernel = FLOYD_STEINBERG,
    serpentine: bool = False,
) -> np.ndarray:
    """Dither *image* against *palette*.

    Returns:
        (H, W, 4) uint8 image whose RGB values are all palette entries and
        whose alpha channel is copied from the source.
    """
    src = as_rgba(image)
    pal = _check_palette(palette)
    indices = dither_indices(src, pal, kernel=kernel, serpentine=serpentine)
    return compose(src, pal, indices)


def nearest_index_map(image: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """(H, W) index of the nearest palette entry, no error diffusion."""
    pal = _check_palette(palette)
    src = as_rgba(image)
    h, w = src.shape[:2]
    return nearest_indices(src.reshape(-1, 4), pal).reshape(h, w)


def remap_nearest(image: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Map every pixel to its nearest palette colour without dithering."""
    src = as_rgba(image)
    pal = _check_palette(palette)
    return compose(src, pal, nearest_index_map(src, pal))
