"""Iteration-count to RGBA color mapping."""

from __future__ import annotations

from functools import lru_cache

import numpy as np

from .errors import ConfigurationError

INSIDE_COLOR = (0, 0, 0, 255)

Color = tuple[int, int, int, int]


class Palette:
    """Immutable table of ``max_iterations + 1`` RGBA colors.

    Entry ``max_iterations`` is the saturation color used for points that
    never escaped.
    """

    __slots__ = ("max_iterations", "_colors", "_lookup")

    def __init__(self, colors: np.ndarray) -> None:
        colors = np.array(colors, dtype=np.uint8, copy=True)
        if colors.ndim != 2 or colors.shape[1] != 4 or colors.shape[0] < 1:
            raise ConfigurationError(f"palette must be an (N + 1, 4) table, got shape {colors.shape}")
        colors.setflags(write=False)
        self.max_iterations = colors.shape[0] - 1
        self._colors = colors
        self._lookup: tuple[Color, ...] = tuple(
            (int(r), int(g), int(b), int(a)) for r, g, b, a in colors
        )

    @property
    def colors(self) -> np.ndarray:
        """Read-only ``(N + 1, 4)`` uint8 array backing the palette."""
        return self._colors

    def __len__(self) -> int:
        return len(self._lookup)

    def __getitem__(self, iterations: int) -> Color:
        if not 0 <= iterations <= self.max_iterations:
            raise IndexError(f"iteration count {iterations} outside palette range [0, {self.max_iterations}]")
        return self._lookup[iterations]

    def __repr__(self) -> str:
        return f"Palette(max_iterations={self.max_iterations})"


@lru_cache(maxsize=8)
def build_palette(max_iterations: int) -> Palette:
    """Build the three-ramp palette for ``max_iterations``.

    The range is split into equal thirds: red ramps up, then green, then
    blue, each on top of the channels already saturated by the previous
    thirds. The last entry is overridden with ``INSIDE_COLOR``.
    """

    if max_iterations < 1:
        raise ConfigurationError(f"max_iterations must be positive, got {max_iterations}")

    idx = np.arange(max_iterations + 1, dtype=np.float64)
    third = max_iterations / 3.0
    segment = np.minimum(np.floor(idx / third), 2.0)
    ramp = np.clip(np.rint((idx - segment * third) * 255.0 / max(third - 1.0, 1.0)), 0, 255)

    colors = np.zeros((max_iterations + 1, 4), dtype=np.uint8)
    colors[:, 0] = np.where(segment == 0, ramp, 255)
    colors[:, 1] = np.where(segment == 0, 0, np.where(segment == 1, ramp, 255))
    colors[:, 2] = np.where(segment == 2, ramp, 0)
    colors[:, 3] = 255
    colors[max_iterations] = INSIDE_COLOR
    return Palette(colors)
