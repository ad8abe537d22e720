"""
Sliding sample window.

Samples are appended in time order.  The owner drains the buffer back to
its most recent tail after every processing cycle, which is the only thing
keeping it bounded.
"""

from __future__ import annotations

from typing import List

import numpy as np


class SampleBuffer:
    """
    Ordered ``(timestamp, value)`` store with a nominal capacity.

    Parameters
    ----------
    capacity:
        Length at which :meth:`is_full` turns true.  Appending past it is
        allowed; bounding the buffer is the caller's job.
    """

    def __init__(self, capacity: int) -> None:
        self.capacity = capacity
        self._timestamps: List[float] = []
        self._values: List[float] = []

    def __len__(self) -> int:
        return len(self._values)

    def append(self, timestamp: float, value: float) -> None:
        self._timestamps.append(float(timestamp))
        self._values.append(float(value))

    def is_full(self) -> bool:
        return len(self._values) >= self.capacity

    def drain_keeping_tail(self, n: int) -> None:
        """Replace the contents with the last *n* samples (all of them if fewer)."""
        if n <= 0:
            self.clear()
            return
        self._timestamps = self._timestamps[-n:]
        self._values = self._values[-n:]

    def clear(self) -> None:
        self._timestamps = []
        self._values = []

    def values(self) -> np.ndarray:
        """Snapshot of the sample values (float64 copy)."""
        return np.array(self._values, dtype=np.float64)

    def timestamps(self) -> np.ndarray:
        """Snapshot of the sample timestamps in seconds (float64 copy)."""
        return np.array(self._timestamps, dtype=np.float64)

    @property
    def fill_ratio(self) -> float:
        """How full the buffer is (0 – 1)."""
        return min(1.0, len(self._values) / self.capacity)
