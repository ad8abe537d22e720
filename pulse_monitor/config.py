"""
Pipeline configuration.

All values are fixed when the pipeline is constructed; nothing here is
re-tunable while a measurement is running.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PipelineConfig:
    """
    Parameters
    ----------
    min_hz, max_hz:
        Heart-rate band in Hz (default 0.7 – 3.5 Hz = 42 – 210 BPM).  Passed
        to the band-limiting filter, which does not derive its coefficients
        from them.
    buffer_size:
        Number of samples analysed per processing cycle.
    fps:
        Target capture frame rate.  The estimator uses the *measured* rate.
    smoothing_window:
        Moving-average window (samples).
    roi_width, roi_height:
        Size of the centred region sampled by the producer.
    signal_scale, signal_smoothing:
        Display settings for a waveform viewer; unused by the core.
    """

    min_hz: float = 0.7
    max_hz: float = 3.5
    buffer_size: int = 256
    fps: float = 30.0
    smoothing_window: int = 5
    roi_width: int = 150
    roi_height: int = 150
    signal_scale: float = 50.0
    signal_smoothing: float = 0.7

    def __post_init__(self) -> None:
        self.validate()

    @property
    def retain_size(self) -> int:
        """Samples kept after each processing cycle (half a window)."""
        return self.buffer_size // 2

    def validate(self) -> None:
        if self.buffer_size < 2:
            raise ValueError(f"buffer_size must be >= 2, got {self.buffer_size}")
        if self.smoothing_window < 1:
            raise ValueError(
                f"smoothing_window must be >= 1, got {self.smoothing_window}"
            )
        if not math.isfinite(self.fps) or self.fps <= 0:
            raise ValueError(f"fps must be positive, got {self.fps}")
        if self.roi_width < 1 or self.roi_height < 1:
            raise ValueError(
                f"ROI must be at least 1x1, got {self.roi_width}x{self.roi_height}"
            )
        if not (0 < self.min_hz < self.max_hz):
            raise ValueError(
                f"Invalid band: min_hz={self.min_hz} max_hz={self.max_hz}"
            )
