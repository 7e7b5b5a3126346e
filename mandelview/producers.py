"""Row producers: compute pixel colors in parallel and hand them to the aggregator."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Iterable, Optional

from .aggregator import PixelResult, ResultSender
from .errors import ConfigurationError, ProducerError, RenderCancelled
from .escape import escape_time
from .palette import Palette
from .viewport import SamplingGrid

logger = logging.getLogger(__name__)


class _Aborted(Exception):
    pass


def render_row(
    y: int,
    grid: SamplingGrid,
    palette: Palette,
    sender: ResultSender,
    *,
    abort: Optional[threading.Event] = None,
    cancel: Optional[threading.Event] = None,
) -> int:
    """Compute row ``y`` left to right and send every pixel. Returns the pixel count."""

    max_iterations = palette.max_iterations
    for x in range(grid.width):
        if cancel is not None and cancel.is_set():
            raise RenderCancelled(f"frame cancelled at row {y}")
        if abort is not None and abort.is_set():
            raise _Aborted()
        iterations = escape_time(grid.pixel_to_plane(x, y), max_iterations)
        sender.send(PixelResult(x, y, palette[iterations]))
    return grid.width


class RowProducerPool:
    """Bounded pool of worker threads; each row is submitted as one task."""

    def __init__(self, workers: int) -> None:
        if workers < 1:
            raise ConfigurationError(f"producer workers must be positive, got {workers}")
        self.workers = workers

    def run(
        self,
        rows: Iterable[int],
        grid: SamplingGrid,
        palette: Palette,
        sender: ResultSender,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> int:
        """Produce every row and return the number of pixels sent.

        The first failing row stops the others and is raised; a cancelled
        frame raises :class:`RenderCancelled`.
        """

        abort = threading.Event()
        produced = 0
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="row-producer") as pool:
            futures = {
                pool.submit(render_row, y, grid, palette, sender, abort=abort, cancel=cancel): y for y in rows
            }
            logger.debug("Submitted %d rows to %d producer threads", len(futures), self.workers)
            done, pending = wait(futures, return_when=FIRST_EXCEPTION)

            failed = next((f for f in done if f.exception() is not None), None)
            if failed is not None:
                abort.set()
                for future in pending:
                    future.cancel()
                pool.shutdown(wait=True)
                exc = failed.exception()
                if isinstance(exc, RenderCancelled):
                    raise exc
                raise ProducerError(f"row {futures[failed]} failed: {exc!r}") from exc

            for future in done:
                produced += future.result()
        return produced
