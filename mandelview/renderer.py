"""Frame orchestration: one full render per viewport change."""

from __future__ import annotations

import enum
import logging
import os
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from .aggregator import FrameAggregator, Framebuffer
from .errors import ConfigurationError, RenderBusyError
from .palette import Palette, build_palette
from .producers import RowProducerPool
from .viewport import ZOOM_FACTOR, Viewport, recenter, reset_viewport, sampling_grid

logger = logging.getLogger(__name__)

IMAGE_WIDTH = 1280
IMAGE_HEIGHT = 1280
MAX_ITERATIONS = 256 * 3


def _default_workers() -> int:
    return os.cpu_count() or 4


@dataclass(frozen=True)
class RenderSettings:
    """Parameters that stay fixed across frames."""

    width: int = IMAGE_WIDTH
    height: int = IMAGE_HEIGHT
    max_iterations: int = MAX_ITERATIONS
    zoom_factor: float = ZOOM_FACTOR
    workers: int = field(default_factory=_default_workers)
    aggregator_shards: int = 1
    channel_capacity: int = 1024

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"image dimensions must be positive, got {self.width}x{self.height}")
        if self.max_iterations <= 0:
            raise ConfigurationError(f"max_iterations must be positive, got {self.max_iterations}")
        if self.zoom_factor <= 0:
            raise ConfigurationError(f"zoom_factor must be positive, got {self.zoom_factor}")
        if self.workers <= 0:
            raise ConfigurationError(f"workers must be positive, got {self.workers}")
        if self.aggregator_shards <= 0:
            raise ConfigurationError(f"aggregator_shards must be positive, got {self.aggregator_shards}")
        if self.channel_capacity <= 0:
            raise ConfigurationError(f"channel_capacity must be positive, got {self.channel_capacity}")


@dataclass(frozen=True)
class RenderResult:
    """Outcome of one orchestrated frame."""

    viewport: Viewport
    framebuffer: Framebuffer
    outcome: Any
    elapsed: float


class FrameState(enum.Enum):
    IDLE = "idle"
    RENDERING = "rendering"
    COMPLETE = "complete"


class ClickAction(enum.Enum):
    ZOOM_IN = "zoom-in"
    RESET = "reset"


def _validate_viewport(viewport: Viewport) -> None:
    if not viewport.extent > 0:
        raise ConfigurationError(f"viewport extent must be positive, got {viewport.extent!r}")


def render_frame(
    viewport: Viewport,
    settings: Optional[RenderSettings] = None,
    *,
    palette: Optional[Palette] = None,
    cancel: Optional[threading.Event] = None,
) -> Framebuffer:
    """Render a complete frame for ``viewport`` and return the frozen framebuffer."""

    settings = settings if settings is not None else RenderSettings()
    settings.validate()
    _validate_viewport(viewport)
    if palette is None:
        palette = build_palette(settings.max_iterations)
    elif palette.max_iterations != settings.max_iterations:
        raise ConfigurationError(
            f"palette built for {palette.max_iterations} iterations, settings ask for {settings.max_iterations}"
        )

    grid = sampling_grid(viewport, settings.width, settings.height)
    producers = RowProducerPool(settings.workers)
    aggregator = FrameAggregator(
        settings.width,
        settings.height,
        shards=settings.aggregator_shards,
        capacity=settings.channel_capacity,
    )

    logger.info(
        "Rendering %dx%d frame at center (%f, %f), extent %g",
        settings.width,
        settings.height,
        viewport.center_x,
        viewport.center_y,
        viewport.extent,
    )
    aggregator.start()
    try:
        produced = producers.run(range(settings.height), grid, palette, aggregator.sender(), cancel=cancel)
    except BaseException:
        aggregator.abort()
        raise
    aggregator.close()
    framebuffer = aggregator.join()
    logger.debug("Producers sent %d pixel results", produced)
    return framebuffer


class RenderOrchestrator:
    """Owns the viewport and drives one frame per request.

    Requests are expected to be serialized by the caller; a request that
    arrives while a frame is in flight raises :class:`RenderBusyError`.
    """

    def __init__(
        self,
        settings: Optional[RenderSettings] = None,
        persist: Optional[Callable[[Framebuffer], Any]] = None,
        viewport: Optional[Viewport] = None,
    ) -> None:
        self.settings = settings if settings is not None else RenderSettings()
        self.settings.validate()
        self.palette = build_palette(self.settings.max_iterations)
        self.viewport = viewport if viewport is not None else reset_viewport()
        self.state = FrameState.IDLE
        self._persist = persist
        self._lock = threading.Lock()
        self._cancel: Optional[threading.Event] = None

    def render(self) -> RenderResult:
        """Re-render the current viewport."""
        return self._render(self.viewport)

    def reset(self) -> RenderResult:
        return self._render(reset_viewport())

    def zoom_at(self, px: float, py: float) -> RenderResult:
        """Zoom in around the absolute pixel position ``(px, py)``."""

        offset_x = px - self.settings.width / 2
        offset_y = py - self.settings.height / 2
        viewport = recenter(
            offset_x,
            offset_y,
            self.settings.width,
            self.settings.height,
            self.viewport,
            self.settings.zoom_factor,
        )
        return self._render(viewport)

    def handle_click(self, x: float, y: float, action: ClickAction) -> RenderResult:
        if action is ClickAction.ZOOM_IN:
            return self.zoom_at(x, y)
        if action is ClickAction.RESET:
            return self.reset()
        raise ValueError(f"unknown click action: {action!r}")

    def cancel(self) -> bool:
        """Cancel the frame in flight, if any. Returns whether one was running."""
        cancel = self._cancel
        if cancel is None:
            return False
        cancel.set()
        return True

    def _render(self, viewport: Viewport) -> RenderResult:
        if not self._lock.acquire(blocking=False):
            raise RenderBusyError("a frame is already being rendered")
        try:
            self.state = FrameState.RENDERING
            self._cancel = threading.Event()
            start = time.perf_counter()
            try:
                framebuffer = render_frame(viewport, self.settings, palette=self.palette, cancel=self._cancel)
            finally:
                self._cancel = None
            elapsed = time.perf_counter() - start
            self.viewport = viewport
            self.state = FrameState.COMPLETE
            logger.info("Frame done in %.2fs", elapsed)

            outcome = self._persist(framebuffer) if self._persist is not None else None
            return RenderResult(viewport=viewport, framebuffer=framebuffer, outcome=outcome, elapsed=elapsed)
        finally:
            self.state = FrameState.IDLE
            self._lock.release()
