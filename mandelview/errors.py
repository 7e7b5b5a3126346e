"""Exceptions raised by the render engine."""

from __future__ import annotations


class RenderError(Exception):
    """Base class for every failure of a render request."""


class ConfigurationError(RenderError, ValueError):
    """The request was rejected before any work was spawned."""


class ProducerError(RenderError):
    """A row producer raised while computing its pixels."""


class RenderCancelled(RenderError):
    """The frame was cancelled before all rows were produced."""


class AggregationError(RenderError):
    """The framebuffer did not receive every pixel exactly once."""


class ChannelClosedError(RenderError, RuntimeError):
    """A result channel was used after it had been closed."""


class PersistenceError(RenderError):
    """The finished frame could not be stored or read back."""


class RenderBusyError(RenderError):
    """A new frame was requested while another one was still in flight."""
