"""
Time-domain filters for the PPG waveform.

Two stages run in sequence over each analysis window:

1. :func:`moving_average` — boundary-safe symmetric smoother.  The window
   shrinks near the edges; there is no padding or wraparound.
2. :func:`band_limit` — a cascade of two fixed single-pole stages: an
   exponential-baseline high-pass (alpha 0.95) that removes DC and slow
   drift, followed by an exponential low-pass (alpha 0.8) that removes
   frame-to-frame noise.

The band-limiting cascade only *approximates* a bandpass response.  Its
coefficients are fixed and it ignores the requested cutoffs; those are
accepted so callers can pass the configured heart-rate band through.

Both stages are causal IIR recursions and are evaluated with
:func:`scipy.signal.lfilter`, whose ``zi``/``zf`` carry the state that
:class:`BandLimitState` makes explicit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from scipy.signal import lfilter

logger = logging.getLogger(__name__)

ALPHA_HIGH = 0.95
ALPHA_LOW = 0.8

ArrayLike = Union[Sequence[float], np.ndarray]


def moving_average(signal: ArrayLike, window: int) -> np.ndarray:
    """
    Centred moving average with edge truncation.

    ``out[i]`` is the mean of ``signal[max(0, i - window // 2) :
    min(N - 1, i + window // 2) + 1]``, so an even *window* averages
    ``window + 1`` samples in the interior.
    """
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    x = np.asarray(signal, dtype=np.float64)
    n = len(x)
    if n == 0:
        return np.array([], dtype=np.float64)

    half = window // 2
    idx = np.arange(n)
    lo = np.maximum(0, idx - half)
    hi = np.minimum(n - 1, idx + half)

    csum = np.concatenate(([0.0], np.cumsum(x)))
    return (csum[hi + 1] - csum[lo]) / (hi - lo + 1)


@dataclass(frozen=True)
class BandLimitState:
    """
    Loop-carried state of the band-limiting cascade.

    ``None`` means the stage has not seen a sample yet and seeds itself
    from the first one it receives.
    """

    high_baseline: Optional[float] = None
    low_prev: Optional[float] = None


def _high_pass(x: np.ndarray, baseline: float) -> Tuple[np.ndarray, float]:
    # baseline[n+1] = a * baseline[n] + (1 - a) * x[n];  out[n] = x[n] - baseline[n]
    b = [0.0, 1.0 - ALPHA_HIGH]
    a = [1.0, -ALPHA_HIGH]
    baselines, zf = lfilter(b, a, x, zi=np.array([baseline]))
    return x - baselines, float(zf[0])


def _low_pass(h: np.ndarray, prev: float) -> Tuple[np.ndarray, float]:
    # out[n] = a * out[n-1] + (1 - a) * h[n]
    b = [1.0 - ALPHA_LOW]
    a = [1.0, -ALPHA_LOW]
    out, _ = lfilter(b, a, h, zi=np.array([ALPHA_LOW * prev]))
    return out, float(out[-1])


def band_limit(
    state: BandLimitState, samples: ArrayLike
) -> Tuple[BandLimitState, np.ndarray]:
    """
    Run the high-pass / low-pass cascade over *samples*.

    Returns the updated state and the filtered samples (same length).  The
    function is pure: feeding a sequence in chunks while threading the
    returned state gives the same output as feeding it in one go.
    """
    x = np.asarray(samples, dtype=np.float64)
    if len(x) == 0:
        return state, np.array([], dtype=np.float64)

    baseline = state.high_baseline if state.high_baseline is not None else float(x[0])
    high, baseline = _high_pass(x, baseline)

    prev = state.low_prev if state.low_prev is not None else float(high[0])
    low, prev = _low_pass(high, prev)

    return BandLimitState(high_baseline=baseline, low_prev=prev), low


def bandpass_filter(
    signal: ArrayLike,
    min_hz: float,
    max_hz: float,
    sample_rate: float,
) -> np.ndarray:
    """
    Band-limit *signal* starting from a fresh filter state.

    *min_hz*, *max_hz* and *sample_rate* do not alter the fixed pole
    coefficients; they are only reported (normalised to Nyquist) at debug
    level.
    """
    if sample_rate > 0:
        nyq = sample_rate / 2.0
        logger.debug(
            "Band-limit %.2f–%.2f Hz (normalised %.3f–%.3f), fixed alphas %.2f/%.2f",
            min_hz, max_hz, min_hz / nyq, max_hz / nyq, ALPHA_HIGH, ALPHA_LOW,
        )
    _, out = band_limit(BandLimitState(), signal)
    return out
