"""Named preset palettes.

Each preset is an ordered list of hex colours.  Order is preserved in the
built palette, so it also fixes tie-breaking and GIF colour-table order.
"""

from __future__ import annotations

from pixel_dither.color_utils import parse_hex

PRESETS: dict[str, list[str]] = {
    "bw": ["#000000", "#FFFFFF"],
    "gray4": ["#000000", "#555555", "#AAAAAA", "#FFFFFF"],
    "gameboy": ["#0F380F", "#306230", "#8BAC0F", "#9BBC0F"],
    "cga": ["#000000", "#55FFFF", "#FF55FF", "#FFFFFF"],
    "cga_warm": ["#000000", "#55FF55", "#FF5555", "#FFFF55"],
    "epaper3": ["#000000", "#FFFFFF", "#FF0000"],
    "epaper7": [
        "#000000", "#FFFFFF", "#00FF00", "#0000FF",
        "#FF0000", "#FFFF00", "#FF8000",
    ],
    "pico8": [
        "#000000", "#1D2B53", "#7E2553", "#008751",
        "#AB5236", "#5F574F", "#C2C3C7", "#FFF1E8",
        "#FF004D", "#FFA300", "#FFEC27", "#00E436",
        "#29ADFF", "#83769C", "#FF77A8", "#FFCCAA",
    ],
    "c64": [
        "#000000", "#FFFFFF", "#880000", "#AAFFEE",
        "#CC44CC", "#00CC55", "#0000AA", "#EEEE77",
        "#DD8855", "#664400", "#FF7777", "#333333",
        "#777777", "#AAFF66", "#0088FF", "#BBBBBB",
    ],
    "ember": ["#FF7F11", "#ACBFA4", "#E2E8CE", "#262626"],
    "lagoon": ["#09637E", "#088395", "#7AB2B2", "#EBF4F6"],
    "furnace": ["#280905", "#740A03", "#C3110C", "#E6501B"],
}


class UnknownPreset(KeyError):
    """Requested preset name is not in :data:`PRESETS`."""

    def __init__(self, name: str) -> None:
        self.name = name
        available = ", ".join(list_presets())
        super().__init__(f"Unknown preset '{name}'. Available: {available}")

    def __str__(self) -> str:
        return str(self.args[0])


def list_presets() -> list[str]:
    return sorted(PRESETS)


def get_preset(name: str) -> list[tuple[int, int, int]]:
    """Return the RGB colours of preset *name*."""
    hex_list = PRESETS.get(name.strip().lower())
    if hex_list is None:
        raise UnknownPreset(name)
    return [parse_hex(h) for h in hex_list]
