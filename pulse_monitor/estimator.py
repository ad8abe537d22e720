"""
Autocorrelation heart-rate estimator.

The filtered waveform is correlated with itself for lags up to two seconds.
The strongest positive correlation at a lag of at least half a second is
taken as the pulse period:

    bpm = 60 / (peak_lag / fps)

The half-second floor excludes periods shorter than 0.5 s, which caps the
detectable rate near 120 BPM.  A rate of ``0.0`` means "could not
estimate" (too little data, no positive peak, or no usable frame rate)
and must never be read as a physiological value.
"""

from __future__ import annotations

import math
from typing import Sequence, Tuple, Union

import numpy as np

ArrayLike = Union[Sequence[float], np.ndarray]

MAX_PERIOD_S = 2.0
MIN_PERIOD_S = 0.5


def autocorrelation(signal: ArrayLike, max_lag: int) -> np.ndarray:
    """
    Unnormalised autocorrelation ``ac[lag] = sum(x[i] * x[i + lag])`` for
    ``lag`` in ``[0, max_lag)``.  *max_lag* is clipped to the signal length.
    """
    x = np.asarray(signal, dtype=np.float64)
    n = len(x)
    max_lag = min(n, max_lag)
    if max_lag <= 0:
        return np.array([], dtype=np.float64)
    full = np.correlate(x, x, mode="full")
    return full[n - 1:n - 1 + max_lag]


def _lag_bounds(n: int, fps: float) -> Tuple[int, int]:
    max_lag = min(n, int(math.floor(fps * MAX_PERIOD_S)))
    min_lag = int(math.floor(fps * MIN_PERIOD_S))
    return min_lag, max_lag


def find_peak_lag(signal: ArrayLike, fps: float) -> Tuple[int, float]:
    """
    Return ``(peak_lag, peak_value)`` of the autocorrelation search.

    The first lag (in ascending order) holding the largest strictly
    positive value wins.  ``(0, 0.0)`` when no lag qualifies.
    """
    x = np.asarray(signal, dtype=np.float64)
    if len(x) < 2 or not math.isfinite(fps) or fps <= 0:
        return 0, 0.0

    min_lag, max_lag = _lag_bounds(len(x), fps)
    if min_lag >= max_lag:
        return 0, 0.0

    ac = autocorrelation(x, max_lag)
    window = ac[min_lag:max_lag]
    k = int(np.argmax(window))   # argmax keeps the first of equal maxima
    peak_value = float(window[k])
    if not peak_value > 0.0:
        return 0, 0.0
    return min_lag + k, peak_value


def estimate_heart_rate(signal: ArrayLike, fps: float) -> float:
    """Heart rate in BPM from the filtered *signal*, or ``0.0`` if indeterminate."""
    bpm, _ = estimate_with_confidence(signal, fps)
    return bpm


def estimate_with_confidence(signal: ArrayLike, fps: float) -> Tuple[float, float]:
    """
    Return ``(bpm, confidence)``.

    The confidence score is the autocorrelation at the peak lag divided by
    the zero-lag energy (0 – 1).  It is informational and never changes the
    BPM.  Returns ``(0.0, 0.0)`` when the rate is indeterminate.
    """
    x = np.asarray(signal, dtype=np.float64)
    peak_lag, peak_value = find_peak_lag(x, fps)
    if peak_lag <= 0:
        return 0.0, 0.0

    period = peak_lag / fps   # seconds
    bpm = 60.0 / period

    energy = float(np.dot(x, x))
    confidence = min(1.0, peak_value / energy) if energy > 0 else 0.0
    return bpm, confidence
