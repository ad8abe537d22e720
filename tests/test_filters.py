"""
Unit tests for the smoothing and band-limiting filters.
Run with:  pytest tests/test_filters.py
"""

from __future__ import annotations

import numpy as np
import pytest

from pulse_monitor.filters import (
    ALPHA_HIGH,
    ALPHA_LOW,
    BandLimitState,
    band_limit,
    bandpass_filter,
    moving_average,
)


def _reference_band_limit(signal):
    """Straight per-sample loop of the high-pass / low-pass cascade."""
    high = []
    prev = signal[0]
    for s in signal:
        high.append(s - prev)
        prev = ALPHA_HIGH * prev + (1 - ALPHA_HIGH) * s
    low = []
    prev = high[0]
    for h in high:
        out = ALPHA_LOW * prev + (1 - ALPHA_LOW) * h
        low.append(out)
        prev = out
    return np.array(low)


# ---------------------------------------------------------------------------
# Moving average
# ---------------------------------------------------------------------------

class TestMovingAverage:

    def test_edges_shrink_window(self):
        out = moving_average([1, 2, 3, 4, 5], 5)
        np.testing.assert_allclose(out, [2.0, 2.5, 3.0, 3.5, 4.0])

    def test_window_three(self):
        out = moving_average([1, 2, 3, 4, 5], 3)
        np.testing.assert_allclose(out, [1.5, 2.0, 3.0, 4.0, 4.5])

    def test_window_one_is_identity(self):
        data = [3.0, -1.0, 7.5]
        np.testing.assert_allclose(moving_average(data, 1), data)

    @pytest.mark.parametrize("window", [1, 2, 3, 4, 5, 8, 11])
    def test_length_preserved(self, window):
        rng = np.random.default_rng(0)
        data = rng.normal(size=37)
        assert len(moving_average(data, window)) == 37

    @pytest.mark.parametrize("window", [3, 4, 5, 6])
    def test_interior_mean_covers_inclusive_range(self, window):
        rng = np.random.default_rng(1)
        data = rng.normal(size=50)
        out = moving_average(data, window)
        half = window // 2
        for i in range(half, len(data) - half):
            segment = data[i - half:i + half + 1]
            assert len(segment) == 2 * half + 1
            assert out[i] == pytest.approx(segment.mean())

    def test_empty_input(self):
        assert len(moving_average([], 5)) == 0

    def test_window_longer_than_signal(self):
        out = moving_average([2.0, 4.0], 9)
        np.testing.assert_allclose(out, [3.0, 3.0])

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            moving_average([1.0, 2.0], 0)


# ---------------------------------------------------------------------------
# Band-limiting cascade
# ---------------------------------------------------------------------------

class TestBandLimit:

    def test_matches_per_sample_recursion(self):
        rng = np.random.default_rng(2)
        data = 100 + rng.normal(scale=3.0, size=200)
        out = bandpass_filter(data, 0.7, 3.5, 30.0)
        np.testing.assert_allclose(out, _reference_band_limit(data), atol=1e-9)

    def test_same_length(self):
        data = np.linspace(0, 1, 64)
        assert len(bandpass_filter(data, 0.7, 3.5, 30.0)) == 64

    def test_first_output_is_zero(self):
        out = bandpass_filter([120.0, 121.0, 119.0], 0.7, 3.5, 30.0)
        assert out[0] == 0.0

    def test_deterministic(self):
        rng = np.random.default_rng(3)
        data = rng.normal(size=128)
        a = bandpass_filter(data, 0.7, 3.5, 30.0)
        b = bandpass_filter(data, 0.7, 3.5, 30.0)
        assert np.array_equal(a, b)

    def test_causal(self):
        rng = np.random.default_rng(4)
        data = rng.normal(size=100)
        altered = data.copy()
        altered[60:] = rng.normal(size=40) * 50
        a = bandpass_filter(data, 0.7, 3.5, 30.0)
        b = bandpass_filter(altered, 0.7, 3.5, 30.0)
        assert np.array_equal(a[:60], b[:60])
        assert not np.array_equal(a[60:], b[60:])

    def test_cutoffs_do_not_change_output(self):
        rng = np.random.default_rng(5)
        data = rng.normal(size=90)
        a = bandpass_filter(data, 0.7, 3.5, 30.0)
        b = bandpass_filter(data, 0.1, 10.0, 60.0)
        np.testing.assert_array_equal(a, b)

    def test_constant_input_gives_zero(self):
        out = bandpass_filter(np.full(50, 100.0), 0.7, 3.5, 30.0)
        assert np.all(out == 0.0)

    def test_state_threads_across_chunks(self):
        rng = np.random.default_rng(6)
        data = 80 + rng.normal(size=150)
        _, whole = band_limit(BandLimitState(), data)

        state, first = band_limit(BandLimitState(), data[:70])
        state, second = band_limit(state, data[70:])
        np.testing.assert_allclose(np.concatenate([first, second]), whole, atol=1e-9)

    def test_state_seeded_from_first_sample(self):
        state, _ = band_limit(BandLimitState(), [50.0])
        assert state.high_baseline == pytest.approx(50.0)
        assert state.low_prev == pytest.approx(0.0)

    def test_empty_input_keeps_state(self):
        start = BandLimitState(high_baseline=1.0, low_prev=2.0)
        state, out = band_limit(start, [])
        assert state == start
        assert len(out) == 0
