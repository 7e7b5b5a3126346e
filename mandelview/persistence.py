"""PNG storage of finished frames."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Optional, Union

import imageio.v3 as iio
import numpy as np

from .aggregator import Framebuffer
from .errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_FRAME_PATH = Path(tempfile.gettempdir()) / "mandelview.png"


class PngFrameStore:
    """Writes finished frames to a single PNG file and reads them back."""

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self.path = Path(path).expanduser() if path is not None else DEFAULT_FRAME_PATH

    def persist(self, framebuffer: Framebuffer) -> Path:
        if not framebuffer.frozen:
            raise PersistenceError("refusing to store a framebuffer that is still being written")

        logger.info("Saving image to %s", self.path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            framebuffer.to_image().save(str(self.path), format="PNG")
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"could not write {self.path}: {exc}") from exc
        logger.info("Image saved")
        return self.path

    def load(self) -> np.ndarray:
        """Read the stored frame as an ``(height, width, 4)`` uint8 array."""

        try:
            pixels = iio.imread(self.path)
        except (OSError, ValueError) as exc:
            raise PersistenceError(f"could not read {self.path}: {exc}") from exc
        return np.asarray(pixels, dtype=np.uint8)

