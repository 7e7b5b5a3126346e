"""Public API for the parallel Mandelbrot render engine."""

from .aggregator import FrameAggregator, Framebuffer, PixelResult, ResultChannel, ResultSender
from .errors import (
    AggregationError,
    ChannelClosedError,
    ConfigurationError,
    PersistenceError,
    ProducerError,
    RenderBusyError,
    RenderCancelled,
    RenderError,
)
from .escape import escape_time
from .palette import Palette, build_palette
from .producers import RowProducerPool, render_row
from .renderer import (
    ClickAction,
    FrameState,
    RenderOrchestrator,
    RenderResult,
    RenderSettings,
    render_frame,
)
from .viewport import (
    DEFAULT_VIEWPORT,
    SamplingGrid,
    Viewport,
    pixel_to_plane,
    recenter,
    reset_viewport,
    sampling_grid,
    translate,
)

__all__ = [
    "AggregationError",
    "ChannelClosedError",
    "ClickAction",
    "ConfigurationError",
    "DEFAULT_VIEWPORT",
    "FrameAggregator",
    "FrameState",
    "Framebuffer",
    "Palette",
    "PersistenceError",
    "PixelResult",
    "ProducerError",
    "RenderBusyError",
    "RenderCancelled",
    "RenderError",
    "RenderOrchestrator",
    "RenderResult",
    "RenderSettings",
    "ResultChannel",
    "ResultSender",
    "RowProducerPool",
    "SamplingGrid",
    "Viewport",
    "build_palette",
    "escape_time",
    "pixel_to_plane",
    "recenter",
    "render_frame",
    "render_row",
    "reset_viewport",
    "sampling_grid",
    "translate",
]
