#!/usr/bin/env python3
"""
main.py — Quick-start entry point.

    python main.py dither photo.jpg --preset gameboy -o photo.gif

Or use the full CLI:

    python -m pixel_dither.cli --help
    python -m pixel_dither.cli presets -v
"""

from pixel_dither.cli import app

if __name__ == "__main__":
    app()
