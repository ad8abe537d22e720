"""Effective sample-rate measurement from sample timestamps."""

from __future__ import annotations

from typing import Optional


class FrameRateMeter:
    """
    Counts samples over roughly one-second windows.

    The first tick only sets the reference time.  Once at least
    ``interval`` seconds have elapsed the rate becomes the rounded count
    divided by the elapsed time and a new window starts.  The rate is 0
    until the first window completes.
    """

    def __init__(self, interval: float = 1.0) -> None:
        self.interval = interval
        self._rate: float = 0.0
        self._count: int = 0
        self._window_start: Optional[float] = None

    def tick(self, timestamp: float) -> float:
        if self._window_start is None:
            self._window_start = timestamp
            return self._rate

        self._count += 1
        elapsed = timestamp - self._window_start
        if elapsed >= self.interval:
            self._rate = float(round(self._count / elapsed))
            self._count = 0
            self._window_start = timestamp
        return self._rate

    @property
    def rate(self) -> float:
        return self._rate

    def reset(self) -> None:
        self._rate = 0.0
        self._count = 0
        self._window_start = None
