"""Thread-safe store of rendered frames awaiting encoding."""

import logging
import threading
from typing import List, Optional

import numpy as np

__all__ = ['FrameCaptureStore']

logger = logging.getLogger(__name__)


class FrameCaptureStore:
    """Ordered list of rendered rasters, one per animation tick.

    The store grows by one copy per tick and is emptied whenever a new
    animation is loaded. With ``max_frames`` set, the oldest entries are
    dropped once the limit is reached.

    **Thread Safety:**

    Appends come from the pipeline thread while encode requests read from
    the caller's thread; both go through an internal lock, and
    ``snapshot()`` hands out a list the store will not mutate.
    """

    def __init__(self, max_frames: Optional[int] = None):
        self.max_frames = max_frames
        self._frames: List[np.ndarray] = []
        self._lock = threading.Lock()

    def append(self, raster: np.ndarray) -> None:
        """Store a copy of ``raster``."""
        with self._lock:
            self._frames.append(raster.copy())
            if self.max_frames is not None and len(self._frames) > self.max_frames:
                self._frames.pop(0)

    def clear(self) -> None:
        with self._lock:
            dropped = len(self._frames)
            self._frames.clear()
        if dropped:
            logger.debug("Cleared %d captured frames", dropped)

    def snapshot(self) -> List[np.ndarray]:
        """Current frames in capture order."""
        with self._lock:
            return list(self._frames)

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)
