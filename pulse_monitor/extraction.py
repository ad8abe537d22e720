"""
Producer side: frame -> scalar PPG sample.

Green is most sensitive to haemoglobin absorption changes, so each frame
contributes the mean green-channel intensity over a fixed, centred region
of interest.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

Roi = Tuple[int, int, int, int]   # x, y, w, h


def centered_roi(
    frame_shape: Tuple[int, ...], roi_width: int, roi_height: int
) -> Roi:
    """
    Return ``(x, y, w, h)`` of a ``roi_width x roi_height`` box centred in a
    frame of *frame_shape* (H, W[, C]).  The box is clipped to the frame.
    """
    frame_h, frame_w = frame_shape[0], frame_shape[1]
    w = min(roi_width, frame_w)
    h = min(roi_height, frame_h)
    x = (frame_w - w) // 2
    y = (frame_h - h) // 2
    return x, y, w, h


def green_intensity(frame: np.ndarray, roi: Optional[Roi] = None) -> float:
    """
    Mean green intensity of *frame*, optionally restricted to *roi*.

    Parameters
    ----------
    frame:
        BGR image array (H × W × 3, uint8).
    roi:
        ``(x, y, w, h)`` region; the whole frame when *None*.
    """
    if frame.ndim != 3 or frame.shape[2] < 3:
        raise ValueError(f"Expected an H×W×3 BGR frame, got shape {frame.shape}")

    if roi is not None:
        x, y, w, h = roi
        frame = frame[y:y + h, x:x + w]
    if frame.size == 0:
        raise ValueError(f"Region of interest {roi} is empty")

    return float(np.mean(frame[:, :, 1]))  # channel 1 = Green in BGR
