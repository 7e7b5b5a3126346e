"""Matplotlib window showing the stored frame and turning clicks into zoom requests."""

from __future__ import annotations

import logging
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.backend_bases import MouseButton

from .errors import RenderError
from .persistence import PngFrameStore
from .renderer import ClickAction, RenderOrchestrator

logger = logging.getLogger(__name__)

BUTTON_ACTIONS = {
    MouseButton.LEFT: ClickAction.ZOOM_IN,
    MouseButton.RIGHT: ClickAction.RESET,
}


def decode_click(event, axes=None, size=None) -> Optional[tuple[int, int, ClickAction]]:
    """Turn a mouse event into ``(x, y, action)``, or ``None`` if it is not a click we handle.

    ``size`` is the ``(width, height)`` of the displayed frame; when given,
    edge clicks are clamped to the last pixel.
    """

    if event.inaxes is None or (axes is not None and event.inaxes is not axes):
        return None
    if event.xdata is None or event.ydata is None:
        return None
    action = BUTTON_ACTIONS.get(event.button)
    if action is None:
        return None
    # imshow puts pixel centers on integer data coordinates.
    x = int(round(event.xdata))
    y = int(round(event.ydata))
    if size is not None:
        width, height = size
        x = min(max(x, 0), width - 1)
        y = min(max(y, 0), height - 1)
    return x, y, action


class FrameViewer:
    """Displays the persisted frame and re-renders on click."""

    def __init__(self, orchestrator: RenderOrchestrator, store: PngFrameStore, *, figure=None) -> None:
        self.orchestrator = orchestrator
        self.store = store
        if figure is None:
            settings = orchestrator.settings
            figure = plt.figure(figsize=(settings.width / 100, settings.height / 100), dpi=100)
        self.figure = figure
        self.axes = figure.add_axes([0, 0, 1, 1])
        self.axes.set_axis_off()
        self._image = None
        self._connection = figure.canvas.mpl_connect("button_release_event", self.on_click)

    def display(self) -> None:
        logger.info("Loading image")
        pixels = self.store.load()
        if self._image is None:
            self._image = self.axes.imshow(pixels, origin="upper", interpolation="nearest")
        else:
            self._image.set_data(pixels)
        self.figure.canvas.draw_idle()
        logger.info("Image loaded")

    def on_click(self, event) -> None:
        settings = self.orchestrator.settings
        decoded = decode_click(event, self.axes, (settings.width, settings.height))
        if decoded is None:
            return
        x, y, action = decoded
        try:
            self.orchestrator.handle_click(x, y, action)
        except RenderError as exc:
            logger.error("Render request failed: %s", exc)
            return
        self.display()

    def close(self) -> None:
        self.figure.canvas.mpl_disconnect(self._connection)
        plt.close(self.figure)

    def show(self) -> None:
        plt.show()
