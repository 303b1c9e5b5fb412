"""Palette building: explicit colour lists or median-cut over the image."""

from __future__ import annotations

import logging
import numbers
from collections.abc import Sequence

import numpy as np

from pixel_dither.color_utils import as_rgba, parse_hex
from pixel_dither.errors import InvalidColorCount, InvalidPaletteEntry

logger = logging.getLogger(__name__)


def build_palette(
    image: np.ndarray | None,
    target_count: int,
    explicit_colors: Sequence[Sequence[int]] | None = None,
) -> np.ndarray:
    """Produce the palette an image will be dithered against.

    An explicit, non-empty colour list is used as-is (after validation).
    Otherwise up to *target_count* colours are derived from the image by
    median cut.  The result is fully determined by the inputs.

    Args:
        image: (H, W, 3|4) uint8 source. Only read when deriving colours.
        target_count: Maximum number of colours to derive (>= 1).
        explicit_colors: RGB or RGBA entries with channels in 0-255.

    Returns:
        (K, 4) uint8 RGBA palette.

    Raises:
        InvalidColorCount: *target_count* is not an integer >= 1.
        InvalidPaletteEntry: an explicit entry is malformed.
    """
    if (
        isinstance(target_count, bool)
        or not isinstance(target_count, numbers.Integral)
        or target_count < 1
    ):
        msg = f"Colour count must be an integer >= 1, got {target_count!r}"
        raise InvalidColorCount(msg)

    if explicit_colors is not None and len(explicit_colors) > 0:
        palette = validate_palette(explicit_colors)
        logger.debug("Using explicit palette (%d colours)", len(palette))
        return palette

    if image is None:
        msg = "An image is required to derive a palette"
        raise ValueError(msg)
    return median_cut(as_rgba(image), int(target_count))


def validate_palette(colors: Sequence[Sequence[int]]) -> np.ndarray:
    """Check explicit entries and pack them into a (K, 4) uint8 array.

    Three-channel entries get alpha 255.
    """
    rows = []
    for i, entry in enumerate(colors):
        if isinstance(entry, (str, bytes)) or not isinstance(entry, (Sequence, np.ndarray)):
            msg = f"Palette entry {i} is not a colour tuple: {entry!r}"
            raise InvalidPaletteEntry(msg)
        if len(entry) not in (3, 4):
            msg = f"Palette entry {i} must have 3 or 4 channels, got {len(entry)}"
            raise InvalidPaletteEntry(msg)
        for c in entry:
            if (
                isinstance(c, bool)
                or not isinstance(c, numbers.Integral)
                or not 0 <= c <= 255
            ):
                msg = f"Palette entry {i} has invalid channel value {c!r}"
                raise InvalidPaletteEntry(msg)
        rgba = [int(c) for c in entry]
        if len(rgba) == 3:
            rgba.append(255)
        rows.append(rgba)
    return np.array(rows, dtype=np.uint8).reshape(-1, 4)


def parse_palette(text: str) -> list[tuple[int, int, int]]:
    """Parse a comma-separated hex list such as ``'#000,#ff7f11,262626'``."""
    parts = [p.strip() for p in text.split(",") if p.strip()]
    return [parse_hex(p) for p in parts]


# -- Median cut --------------------------------------------------------


def median_cut(image: np.ndarray, target_count: int) -> np.ndarray:
    """Derive up to *target_count* colours by median cut over the RGB cube.

    The box with the widest single-channel range is split at its
    pixel-weighted median until *target_count* boxes exist or no box
    holds more than one distinct colour.  Ties pick the earliest box and
    the lowest channel.  Each box contributes its pixel-weighted mean,
    rounded half-to-even.

    Args:
        image: (H, W, 4) uint8.
        target_count: Upper bound on the palette size.

    Returns:
        (K, 4) uint8 palette, K <= target_count, alpha 255.
    """
    colors, counts = np.unique(
        image[..., :3].reshape(-1, 3), axis=0, return_counts=True,
    )
    colors = colors.astype(np.int64)
    counts = counts.astype(np.int64)

    boxes: list[np.ndarray] = [np.arange(len(colors))]

    while len(boxes) < target_count:
        best = None
        best_range = 0
        best_channel = 0
        for i, idx in enumerate(boxes):
            if len(idx) < 2:
                continue
            members = colors[idx]
            ranges = members.max(axis=0) - members.min(axis=0)
            ch = int(np.argmax(ranges))
            if ranges[ch] > best_range:
                best, best_range, best_channel = i, int(ranges[ch]), ch

        if best is None:
            break

        idx = boxes[best]
        idx = idx[np.argsort(colors[idx, best_channel], kind="stable")]
        cum = np.cumsum(counts[idx])
        split = int(np.searchsorted(cum, cum[-1] / 2, side="left")) + 1
        split = min(max(split, 1), len(idx) - 1)

        boxes[best] = idx[:split]
        boxes.append(idx[split:])

    means = np.empty((len(boxes), 3), dtype=np.float64)
    for i, idx in enumerate(boxes):
        w = counts[idx]
        means[i] = (colors[idx] * w[:, np.newaxis]).sum(axis=0) / w.sum()
    rgb = np.clip(np.rint(means), 0, 255).astype(np.uint8)

    # Rounding can collapse neighbouring boxes onto the same colour
    _, first = np.unique(rgb, axis=0, return_index=True)
    rgb = rgb[np.sort(first)]

    logger.debug(
        "Median cut: %d distinct colours -> %d palette entries",
        len(colors), len(rgb),
    )
    alpha = np.full((len(rgb), 1), 255, dtype=np.uint8)
    return np.concatenate([rgb, alpha], axis=1)
