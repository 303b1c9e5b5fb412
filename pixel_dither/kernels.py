"""Error-diffusion kernels.

Each kernel is a list of taps ``(dx, dy, weight)`` written for a
left-to-right scan.  When the ditherer walks a row right-to-left it
negates ``dx`` so the error still flows ahead of the scan.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class DiffusionKernel:
    """A fixed weight table for distributing quantisation error.

    Attributes:
        name: Registry key.
        taps: ``(dx, dy, weight)`` triples. Every tap must point at a pixel
            that is not yet processed: ``dy > 0``, or ``dy == 0`` and ``dx > 0``.
            Weights must sum to 1.0.
    """

    name: str
    taps: tuple[tuple[int, int, float], ...]

    def __post_init__(self) -> None:
        if not self.taps:
            msg = f"Kernel '{self.name}' has no taps"
            raise ValueError(msg)
        for dx, dy, _ in self.taps:
            if dy < 0 or (dy == 0 and dx <= 0):
                msg = f"Kernel '{self.name}' tap ({dx}, {dy}) points backwards"
                raise ValueError(msg)
        total = math.fsum(w for _, _, w in self.taps)
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            msg = f"Kernel '{self.name}' weights sum to {total}, expected 1.0"
            raise ValueError(msg)


def _kernel(name: str, divisor: int, taps: list[tuple[int, int, int]]) -> DiffusionKernel:
    return DiffusionKernel(name, tuple((dx, dy, w / divisor) for dx, dy, w in taps))


FLOYD_STEINBERG = _kernel("floyd_steinberg", 16, [
    (1, 0, 7),
    (-1, 1, 3), (0, 1, 5), (1, 1, 1),
])

KERNELS: dict[str, DiffusionKernel] = {
    k.name: k
    for k in (
        FLOYD_STEINBERG,
        _kernel("false_floyd_steinberg", 8, [
            (1, 0, 3),
            (0, 1, 3), (1, 1, 2),
        ]),
        _kernel("jarvis", 48, [
            (1, 0, 7), (2, 0, 5),
            (-2, 1, 3), (-1, 1, 5), (0, 1, 7), (1, 1, 5), (2, 1, 3),
            (-2, 2, 1), (-1, 2, 3), (0, 2, 5), (1, 2, 3), (2, 2, 1),
        ]),
        _kernel("stucki", 42, [
            (1, 0, 8), (2, 0, 4),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
            (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
        ]),
        _kernel("burkes", 32, [
            (1, 0, 8), (2, 0, 4),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
        ]),
        _kernel("sierra", 32, [
            (1, 0, 5), (2, 0, 3),
            (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
            (-1, 2, 2), (0, 2, 3), (1, 2, 2),
        ]),
        _kernel("two_sierra", 16, [
            (1, 0, 4), (2, 0, 3),
            (-2, 1, 1), (-1, 1, 2), (0, 1, 3), (1, 1, 2), (2, 1, 1),
        ]),
        _kernel("sierra_lite", 4, [
            (1, 0, 2),
            (-1, 1, 1), (0, 1, 1),
        ]),
    )
}


def get_kernel(name: str) -> DiffusionKernel:
    """Look up a kernel by name (case-insensitive, ``-`` or ``_``)."""
    key = name.strip().lower().replace("-", "_")
    kernel = KERNELS.get(key)
    if kernel is None:
        available = ", ".join(sorted(KERNELS))
        msg = f"Unknown kernel '{name}'. Available: {available}"
        raise ValueError(msg)
    return kernel
