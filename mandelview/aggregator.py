"""Single-writer assembly of pixel results into a framebuffer.

Producers never touch the framebuffer. They hold a :class:`ResultSender`
that routes each :class:`PixelResult` to the channel of the shard owning
its row. Each shard runs one consumer thread and is the only writer for
rows ``y % shards == index``.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import PIL.Image

from .errors import AggregationError, ChannelClosedError, ConfigurationError

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass(frozen=True)
class PixelResult:
    """Color computed for one pixel of the current frame."""

    x: int
    y: int
    color: tuple[int, int, int, int]


class ResultChannel:
    """Bounded FIFO of pixel results that can be closed exactly once."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ConfigurationError(f"channel capacity must be positive, got {capacity}")
        self._queue: queue.Queue = queue.Queue(maxsize=capacity)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, result: PixelResult) -> None:
        # Blocks while the queue is full; the consumer drains without the lock.
        with self._lock:
            if self._closed:
                raise ChannelClosedError(f"send of pixel ({result.x}, {result.y}) after channel close")
            self._queue.put(result)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                raise ChannelClosedError("channel closed twice")
            self._closed = True
            self._queue.put(_CLOSED)

    def receive(self):
        """Block for the next result, or the close marker once closed and drained."""
        return self._queue.get()


class ResultSender:
    """Send-only handle given to producers."""

    __slots__ = ("_channels",)

    def __init__(self, channels: Sequence[ResultChannel]) -> None:
        self._channels = tuple(channels)

    def send(self, result: PixelResult) -> None:
        self._channels[result.y % len(self._channels)].send(result)


class Framebuffer:
    """W x H grid of RGBA pixels.

    Only the aggregator writes to it. Once the frame is complete it is
    frozen and the pixel array becomes read-only.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"framebuffer dimensions must be positive, got {width}x{height}")
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)
        self._frozen = False

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def pixels(self) -> np.ndarray:
        """Read-only view of the ``(height, width, 4)`` uint8 array."""
        view = self._pixels.view()
        view.setflags(write=False)
        return view

    def _freeze(self) -> None:
        self._pixels.setflags(write=False)
        self._frozen = True

    def tobytes(self) -> bytes:
        return self._pixels.tobytes()

    def to_image(self) -> PIL.Image.Image:
        return PIL.Image.fromarray(self._pixels.copy())

    def __repr__(self) -> str:
        return f"Framebuffer({self.width}x{self.height}, frozen={self._frozen})"


class _Shard:
    """Consumer thread owning the rows ``y % count == index``."""

    def __init__(self, index: int, count: int, pixels: np.ndarray, written: np.ndarray, capacity: int) -> None:
        self.index = index
        self.count = count
        self.channel = ResultChannel(capacity)
        self.processed = 0
        self.error: Optional[BaseException] = None
        self._pixels = pixels
        self._written = written
        self._thread = threading.Thread(target=self._consume, name=f"frame-aggregator-{index}", daemon=True)

    @property
    def thread(self) -> threading.Thread:
        return self._thread

    def _consume(self) -> None:
        running = True
        while running:
            item = self.channel.receive()
            if item is _CLOSED:
                running = False
                continue
            if self.error is not None:
                # Keep draining so producers blocked on a full channel can finish.
                continue
            try:
                self._apply(item)
            except Exception as exc:
                self.error = exc
        logger.debug("Aggregator shard #%d processed %d messages", self.index, self.processed)

    def _apply(self, result: PixelResult) -> None:
        x, y = result.x, result.y
        height, width = self._written.shape
        if not (0 <= x < width and 0 <= y < height):
            raise AggregationError(f"pixel ({x}, {y}) outside {width}x{height} frame")
        if y % self.count != self.index:
            raise AggregationError(f"row {y} does not belong to aggregator shard #{self.index}")
        if self._written[y, x]:
            raise AggregationError(f"pixel ({x}, {y}) written twice")
        self._pixels[y, x] = result.color
        self._written[y, x] = True
        self.processed += 1


class FrameAggregator:
    """Owns the framebuffer of one frame and drains the producers' results."""

    def __init__(self, width: int, height: int, *, shards: int = 1, capacity: int = 1024) -> None:
        if shards < 1:
            raise ConfigurationError(f"aggregator shards must be positive, got {shards}")
        self._framebuffer = Framebuffer(width, height)
        self._written = np.zeros((height, width), dtype=bool)
        self._shards = [
            _Shard(i, shards, self._framebuffer._pixels, self._written, capacity) for i in range(shards)
        ]
        self._started = False
        self._closed = False

    @property
    def alive(self) -> int:
        """Number of consumer threads still running."""
        return sum(1 for shard in self._shards if shard.thread.is_alive())

    def start(self) -> None:
        if self._started:
            raise RuntimeError("aggregator already started")
        self._started = True
        for shard in self._shards:
            shard.thread.start()

    def sender(self) -> ResultSender:
        return ResultSender([shard.channel for shard in self._shards])

    def close(self) -> None:
        """Signal that no more results will be sent."""
        if self._closed:
            raise ChannelClosedError("aggregator closed twice")
        self._closed = True
        for shard in self._shards:
            shard.channel.close()

    def _wait(self, timeout: Optional[float]) -> None:
        if not self._started:
            return
        for shard in self._shards:
            shard.thread.join(timeout)
            if shard.thread.is_alive():
                raise AggregationError(f"aggregator shard #{shard.index} did not exit within {timeout}s")

    def join(self, timeout: Optional[float] = None) -> Framebuffer:
        """Wait for every shard to drain and return the frozen framebuffer."""

        if not self._closed:
            raise AggregationError("join() called before close()")
        self._wait(timeout)

        for shard in self._shards:
            if shard.error is not None:
                raise shard.error

        missing = int(self._written.size - np.count_nonzero(self._written))
        if missing:
            raise AggregationError(f"{missing} pixels were never written")

        self._framebuffer._freeze()
        return self._framebuffer

    def abort(self, timeout: Optional[float] = None) -> None:
        """Close (if needed) and stop the consumers, discarding the frame."""

        if not self._closed:
            self.close()
        self._wait(timeout)
