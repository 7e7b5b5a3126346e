"""Viewport state and the pixel to complex-plane mapping."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CENTER = (-0.5, 0.0)
DEFAULT_EXTENT = 3.0
ZOOM_FACTOR = 4.0


@dataclass(frozen=True)
class Viewport:
    """Visible region of the complex plane.

    ``extent`` is the span in plane units covered by each image axis.
    """

    center_x: float
    center_y: float
    extent: float

    def __post_init__(self) -> None:
        for name in ("center_x", "center_y", "extent"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"viewport {name} must be finite, got {value!r}")
        if self.extent <= 0:
            raise ConfigurationError(f"viewport extent must be positive, got {self.extent!r}")


DEFAULT_VIEWPORT = Viewport(center_x=DEFAULT_CENTER[0], center_y=DEFAULT_CENTER[1], extent=DEFAULT_EXTENT)


@dataclass(frozen=True)
class SamplingGrid:
    """Per-frame sampling of the viewport, shared read-only by all producers."""

    x_min: float
    y_min: float
    x_step: float
    y_step: float
    width: int
    height: int

    def pixel_to_plane(self, px: int, py: int) -> complex:
        return complex(self.x_min + px * self.x_step, self.y_min + py * self.y_step)


def translate(x: float, in_min: float, in_max: float, out_min: float, out_max: float) -> float:
    """Linearly map ``x`` from ``[in_min, in_max]`` onto ``[out_min, out_max]``."""

    return (x - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def sampling_grid(viewport: Viewport, width: int, height: int) -> SamplingGrid:
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"image dimensions must be positive, got {width}x{height}")

    half = viewport.extent / 2.0
    # A single extent is shared by both axes, so non-square images stretch.
    return SamplingGrid(
        x_min=viewport.center_x - half,
        y_min=viewport.center_y - half,
        x_step=viewport.extent / width,
        y_step=viewport.extent / height,
        width=width,
        height=height,
    )


def pixel_to_plane(px: int, py: int, viewport: Viewport, width: int, height: int) -> complex:
    return sampling_grid(viewport, width, height).pixel_to_plane(px, py)


def recenter(
    click_x: float,
    click_y: float,
    width: int,
    height: int,
    viewport: Viewport,
    zoom_factor: float = ZOOM_FACTOR,
) -> Viewport:
    """Move the center to a clicked point and zoom in by ``zoom_factor``.

    ``click_x`` and ``click_y`` are pixel offsets from the image center.
    """

    if zoom_factor <= 0:
        raise ConfigurationError(f"zoom factor must be positive, got {zoom_factor!r}")
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"image dimensions must be positive, got {width}x{height}")

    extent = viewport.extent / zoom_factor
    dx = translate(click_x, 0, width, 0, extent) * zoom_factor
    dy = translate(click_y, 0, height, 0, extent) * zoom_factor
    logger.debug("Click offset (%f, %f) mapped to plane delta (%f, %f)", click_x, click_y, dx, dy)
    return replace(viewport, center_x=viewport.center_x + dx, center_y=viewport.center_y + dy, extent=extent)


def reset_viewport() -> Viewport:
    return DEFAULT_VIEWPORT
