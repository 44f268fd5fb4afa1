"""
Latest-frame buffer shared between a frame delivery thread and a capture
request. Holds at most one frame; every put overwrites the previous one.
"""

import threading
from typing import Optional

import numpy as np


class LatestFrameBuffer:
    """Single-slot overwrite buffer with an explicit "no frame yet" state."""

    def __init__(self):
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self.frames_received = 0

    def put(self, frame: np.ndarray):
        with self._lock:
            self._frame = frame
            self.frames_received += 1

    def get(self) -> Optional[np.ndarray]:
        """Return a copy of the latest frame, or None if nothing arrived yet."""
        with self._lock:
            if self._frame is None:
                return None
            return self._frame.copy()

    @property
    def has_frame(self) -> bool:
        with self._lock:
            return self._frame is not None

    def clear(self):
        with self._lock:
            self._frame = None
