"""Image loading, saving, size reporting and comparison sheets."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

# Formats Pillow cannot write with an alpha channel
_OPAQUE_SUFFIXES = frozenset({".jpg", ".jpeg", ".jfif", ".bmp"})

_BYTE_UNITS = ["Bytes", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB"]


def compute_target_size(
    original_width: int,
    original_height: int,
    max_side: int,
) -> tuple[int, int]:
    """Compute scaled (w, h) preserving aspect ratio.

    The longest side becomes *max_side* (this can enlarge a small image);
    the other is scaled proportionally (rounded, minimum 1).
    """
    if original_width >= original_height:
        w = max_side
        h = max(1, round(original_height * max_side / original_width))
    else:
        h = max_side
        w = max(1, round(original_width * max_side / original_height))
    return w, h


def load_image(path: str | Path, scale: int | None = None) -> np.ndarray:
    """Load an image as RGBA, optionally scaled so its longest side is *scale*.

    Returns:
        (H, W, 4) uint8 array.
    """
    with Image.open(path) as src:
        img = src.convert("RGBA")
    if scale:
        w, h = compute_target_size(img.width, img.height, scale)
        if (w, h) != img.size:
            logger.debug("Scaling %dx%d -> %dx%d", img.width, img.height, w, h)
            img = img.resize((w, h), Image.LANCZOS)
    return np.array(img, dtype=np.uint8)


def save_image(image: np.ndarray, path: str | Path) -> None:
    """Write a static image; the format follows the file suffix."""
    path = Path(path)
    img = Image.fromarray(image.astype(np.uint8))
    if path.suffix.lower() in _OPAQUE_SUFFIXES:
        img = img.convert("RGB")
    img.save(path)


def save_gif(
    indices: np.ndarray,
    palette: np.ndarray,
    alpha: np.ndarray,
    path: str | Path,
    duration: int = 100,
) -> None:
    """Write a single-frame animated GIF using *palette* as the colour table.

    Pixels are stored as palette indices, so colours survive exactly.
    Pixels with alpha < 128 become transparent when the table has a free
    slot for the transparent index.

    Args:
        indices:  (H, W) palette indices.
        palette:  (K, 3|4) uint8, K <= 256.
        alpha:    (H, W) uint8 alpha channel of the source.
        path:     Destination file.
        duration: Frame duration in milliseconds.
    """
    k = len(palette)
    if k > 256:
        msg = f"GIF colour table holds at most 256 colours, palette has {k}"
        raise ValueError(msg)

    frame = indices.astype(np.uint8)
    table = palette[:, :3].astype(np.uint8).reshape(-1).tolist()
    extra: dict[str, int] = {}

    transparent = alpha < 128
    if transparent.any():
        if k < 256:
            frame = np.where(transparent, k, frame).astype(np.uint8)
            table += [0, 0, 0]
            extra["transparency"] = k
        else:
            logger.warning("No free palette slot for transparency; alpha dropped")

    h, w = frame.shape
    img = Image.frombytes("P", (w, h), frame.tobytes())
    img.putpalette(table)
    img.save(
        path,
        save_all=True,
        append_images=[],
        duration=duration,
        loop=0,
        optimize=False,
        **extra,
    )


def save_output(
    image: np.ndarray,
    indices: np.ndarray,
    palette: np.ndarray,
    path: str | Path,
) -> int:
    """Write the result (GIF when the suffix is ``.gif``) and return its size."""
    path = Path(path)
    if path.suffix.lower() == ".gif":
        save_gif(indices, palette, image[..., 3], path)
    else:
        save_image(image, path)
    return path.stat().st_size


def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Human readable size: ``1536 -> '1.5 KB'`` (base 1024)."""
    if num_bytes == 0:
        return "0 Bytes"
    dm = max(decimals, 0)
    i = 0
    while i < len(_BYTE_UNITS) - 1 and num_bytes >= 1024 ** (i + 1):
        i += 1
    value = round(num_bytes / 1024**i, dm)
    return f"{value:g} {_BYTE_UNITS[i]}"


def _palette_swatch(palette: np.ndarray) -> np.ndarray:
    """Lay palette entries out on a near-square grid, row-major."""
    k = len(palette)
    cols = math.ceil(math.sqrt(k))
    rows = math.ceil(k / cols)
    grid = np.zeros((rows * cols, 3), dtype=np.uint8)
    grid[:k] = palette[:, :3]
    return grid.reshape(rows, cols, 3)


def save_comparison(
    source: np.ndarray,
    dithered: np.ndarray,
    palette: np.ndarray,
    output_path: str | Path,
    pixel_upscale: int = 1,
) -> None:
    """Create a 3-panel sheet: Source | Dithered | Palette.

    Source and result are nearest-neighbour upscaled by *pixel_upscale*
    so individual dither dots stay visible.
    """
    h, w = source.shape[:2]
    panel_w = w * pixel_upscale
    panel_h = h * pixel_upscale
    label_height = 36

    source_img = Image.fromarray(source[..., :3].astype(np.uint8)).resize(
        (panel_w, panel_h), Image.NEAREST,
    )
    dithered_img = Image.fromarray(dithered[..., :3].astype(np.uint8)).resize(
        (panel_w, panel_h), Image.NEAREST,
    )
    swatch = _palette_swatch(palette)
    palette_img = Image.fromarray(swatch).resize((panel_w, panel_h), Image.NEAREST)

    panels = [source_img, dithered_img, palette_img]
    labels = ["Source", f"Dithered {w}x{h}", f"Palette ({len(palette)})"]

    gap = 8
    total_w = len(panels) * panel_w + (len(panels) - 1) * gap
    total_h = panel_h + label_height

    canvas = Image.new("RGB", (total_w, total_h), (30, 30, 30))
    draw = ImageDraw.Draw(canvas)

    try:
        font = ImageFont.truetype(
            "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf", 18,
        )
    except OSError:
        font = ImageFont.load_default()

    for i, (panel, label) in enumerate(zip(panels, labels, strict=True)):
        x = i * (panel_w + gap)
        canvas.paste(panel, (x, label_height))

        bbox = draw.textbbox((0, 0), label, font=font)
        text_w = bbox[2] - bbox[0]
        tx = x + (panel_w - text_w) // 2
        draw.text((tx, 6), label, fill=(220, 220, 220), font=font)

    canvas.save(output_path)
