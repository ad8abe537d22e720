"""
Pipeline controller.

Drives the per-sample cycle::

    push_sample -> buffer full? -> moving average -> band limit
                -> autocorrelation estimate -> publish -> drain to half

The controller is a two-state machine (IDLE / RUNNING).  It owns the sample
window, the effective sample-rate meter and the last published reading;
the filters and the estimator only ever see snapshots.  Its step function
is meant to be called once per producer sample by whatever loop hosts it.
"""

from __future__ import annotations

import enum
import logging
import math
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from pulse_monitor.config import PipelineConfig
from pulse_monitor.estimator import estimate_with_confidence
from pulse_monitor.filters import bandpass_filter, moving_average
from pulse_monitor.rate_meter import FrameRateMeter
from pulse_monitor.sample_buffer import SampleBuffer

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class PulseReading:
    """
    Result of one processing cycle.

    ``heart_rate_bpm`` is ``0.0`` when the rate could not be estimated.
    ``waveform`` has one value per sample of the window that triggered
    the cycle.
    """

    heart_rate_bpm: float
    waveform: np.ndarray
    sample_rate: float
    timestamp: float
    confidence: float = 0.0

    @property
    def is_valid(self) -> bool:
        return self.heart_rate_bpm > 0.0


Consumer = Callable[[PulseReading], None]


class PulsePipeline:
    """
    Rolling rPPG heart-rate pipeline.

    Parameters
    ----------
    config:
        Pipeline settings.  Defaults to :class:`PipelineConfig` defaults
        (256-sample window, 0.7 – 3.5 Hz band).
    """

    def __init__(self, config: PipelineConfig | None = None) -> None:
        self.config = config if config is not None else PipelineConfig()

        self._buffer = SampleBuffer(self.config.buffer_size)
        self._rate_meter = FrameRateMeter()
        self._consumers: List[Consumer] = []
        self._lock = threading.Lock()

        self._state = PipelineState.IDLE
        self._last_reading: Optional[PulseReading] = None
        self._cycles: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Enter RUNNING with an empty window and zeroed rate."""
        with self._lock:
            if self._state is PipelineState.RUNNING:
                logger.debug("start() ignored – pipeline already running.")
                return
            self._reset_locked()
            self._state = PipelineState.RUNNING
        logger.info(
            "Pipeline started – buffer=%d band=%.2f–%.2f Hz",
            self.config.buffer_size, self.config.min_hz, self.config.max_hz,
        )

    def stop(self) -> None:
        """Return to IDLE, discarding all buffered samples."""
        with self._lock:
            if self._state is PipelineState.IDLE:
                return
            cycles = self._cycles
            self._reset_locked()
            self._state = PipelineState.IDLE
        logger.info("Pipeline stopped after %d cycle(s).", cycles)

    # Context-manager support
    def __enter__(self) -> "PulsePipeline":
        self.start()
        return self

    def __exit__(self, *_) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Consumers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Consumer) -> None:
        """Register *callback* to receive every :class:`PulseReading`."""
        self._consumers.append(callback)

    def unsubscribe(self, callback: Consumer) -> None:
        try:
            self._consumers.remove(callback)
        except ValueError:
            logger.debug("unsubscribe(): %r was not subscribed.", callback)

    # ------------------------------------------------------------------
    # Step
    # ------------------------------------------------------------------

    def push_sample(self, timestamp: float, value: float) -> Optional[PulseReading]:
        """
        Feed one producer sample.

        Returns the published :class:`PulseReading` when this sample
        completed a window, otherwise *None*.  Samples pushed while idle are
        ignored.
        """
        with self._lock:
            if self._state is not PipelineState.RUNNING:
                return None
            if not math.isfinite(value):
                logger.warning("Dropping non-finite sample %r at t=%.3f", value, timestamp)
                return None

            self._rate_meter.tick(timestamp)
            self._buffer.append(timestamp, value)
            if not self._buffer.is_full():
                return None

            reading = self._process_locked(timestamp)
            self._buffer.drain_keeping_tail(self.config.retain_size)

        for callback in list(self._consumers):
            callback(reading)
        return reading

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is PipelineState.RUNNING

    @property
    def sample_rate(self) -> float:
        """Measured frames/second (0 until the first second has elapsed)."""
        return self._rate_meter.rate

    @property
    def heart_rate(self) -> float:
        return self._last_reading.heart_rate_bpm if self._last_reading else 0.0

    @property
    def waveform(self) -> np.ndarray:
        if self._last_reading is None:
            return np.array([], dtype=np.float64)
        return self._last_reading.waveform

    @property
    def last_reading(self) -> Optional[PulseReading]:
        return self._last_reading

    @property
    def buffered(self) -> int:
        return len(self._buffer)

    @property
    def buffer_fill_ratio(self) -> float:
        """How full the sample window is (0 – 1)."""
        return self._buffer.fill_ratio

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _reset_locked(self) -> None:
        self._buffer.clear()
        self._rate_meter.reset()
        self._last_reading = None
        self._cycles = 0

    def _process_locked(self, timestamp: float) -> PulseReading:
        cfg = self.config
        fps = self._rate_meter.rate

        smoothed = moving_average(self._buffer.values(), cfg.smoothing_window)
        waveform = bandpass_filter(smoothed, cfg.min_hz, cfg.max_hz, fps)
        bpm, confidence = estimate_with_confidence(waveform, fps)

        self._cycles += 1
        if bpm > 0:
            logger.debug(
                "Cycle %d: %.1f BPM (conf=%.2f, fps=%.0f, n=%d)",
                self._cycles, bpm, confidence, fps, len(waveform),
            )
        else:
            logger.debug(
                "Cycle %d: rate indeterminate (fps=%.0f, n=%d)",
                self._cycles, fps, len(waveform),
            )

        reading = PulseReading(
            heart_rate_bpm=bpm,
            waveform=waveform,
            sample_rate=fps,
            timestamp=timestamp,
            confidence=confidence,
        )
        self._last_reading = reading
        return reading
