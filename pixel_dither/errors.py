"""Error kinds raised by the palette builder and the ditherer."""

from __future__ import annotations


class DitherError(ValueError):
    """Base class for invalid input to the quantization core."""


class InvalidColorCount(DitherError):
    """Requested palette size is smaller than one."""


class InvalidPaletteEntry(DitherError):
    """An explicit palette colour is malformed or out of the 0-255 range."""


class EmptyPalette(DitherError):
    """Dithering was requested against a palette with no entries."""


class DimensionMismatch(DitherError):
    """Image buffer has zero width/height or an unsupported shape."""
