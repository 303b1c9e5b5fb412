"""Hex colour parsing, nearest-colour lookup and quality metrics."""

from __future__ import annotations

import re

import numpy as np
from scipy.spatial.distance import cdist
from skimage.color import deltaE_cie76, rgb2lab

from pixel_dither.errors import DimensionMismatch, InvalidPaletteEntry

_HEX_RE = re.compile(r"^#?([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)


def parse_hex(hex_str: str) -> tuple[int, int, int]:
    """Parse ``'#RRGGBB'`` (or ``'#RGB'``, ``#`` optional) to an RGB tuple."""
    match = _HEX_RE.match(hex_str.strip())
    if match is None:
        msg = f"Malformed hex colour '{hex_str}'"
        raise InvalidPaletteEntry(msg)
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return tuple(int(digits[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]


def to_hex(rgb) -> str:
    """Format the first three channels of *rgb* as ``'#rrggbb'``."""
    return "#" + "".join(f"{int(c):02x}" for c in rgb[:3])


def palette_to_hex(palette: np.ndarray) -> list[str]:
    return [to_hex(c) for c in palette]


def rgb_to_lab(rgb: np.ndarray) -> np.ndarray:
    """Convert flat (N, 3) uint8 RGB → (N, 3) float64 CIELAB."""
    return rgb2lab(rgb.astype(np.float64).reshape(1, -1, 3) / 255.0).reshape(-1, 3)


def nearest_indices(
    colors: np.ndarray,
    palette: np.ndarray,
    chunk_size: int = 4096,
) -> np.ndarray:
    """Index of the nearest palette entry for every colour (RGB only).

    Squared Euclidean distance; among equally distant entries the lowest
    index wins (``argmin`` returns the first minimum).

    Args:
        colors:  (N, 3+) colours, any numeric dtype.
        palette: (K, 3+) palette entries.
        chunk_size: Rows computed per batch (controls peak RAM).

    Returns:
        (N,) int64 palette indices.
    """
    c = np.asarray(colors, dtype=np.float64)[:, :3]
    p = np.asarray(palette, dtype=np.float64)[:, :3]

    n = len(c)
    out = np.empty(n, dtype=np.int64)
    for i in range(0, n, chunk_size):
        j = min(i + chunk_size, n)
        out[i:j] = np.argmin(cdist(c[i:j], p, "sqeuclidean"), axis=1)
    return out


def mean_delta_e(source: np.ndarray, result: np.ndarray) -> float:
    """Mean CIE76 ΔE between two (H, W, 3+) uint8 images."""
    a = rgb_to_lab(source[..., :3].reshape(-1, 3))
    b = rgb_to_lab(result[..., :3].reshape(-1, 3))
    return float(np.mean(deltaE_cie76(a, b)))


def as_rgba(image: np.ndarray) -> np.ndarray:
    """Validate an image buffer and return it as (H, W, 4) uint8.

    (H, W, 3) input is treated as fully opaque. The input is never
    modified; a new array is returned when conversion is needed.

    Raises:
        DimensionMismatch: wrong rank/channel count or zero width/height.
    """
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] not in (3, 4):
        msg = f"Expected an (H, W, 3|4) image buffer, got shape {arr.shape}"
        raise DimensionMismatch(msg)
    h, w = arr.shape[:2]
    if h == 0 or w == 0:
        msg = f"Image has zero size ({w}x{h})"
        raise DimensionMismatch(msg)
    if arr.shape[2] == 3:
        alpha = np.full((h, w, 1), 255, dtype=np.uint8)
        return np.concatenate([arr.astype(np.uint8), alpha], axis=2)
    return arr.astype(np.uint8, copy=False)
