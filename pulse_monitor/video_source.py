"""
Frame source backed by OpenCV ``VideoCapture``.

Accepts either a camera index (live capture, timestamps from
``time.monotonic``) or a video file path (timestamps from the container's
presentation time, so a recording replays at its native rate).
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Generator, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)

Source = Union[int, str, Path]


class VideoSource:
    """
    Thin wrapper around ``cv2.VideoCapture``.

    Parameters
    ----------
    source:
        Camera index or path to a video file.
    fps:
        Requested capture rate for live cameras.  Ignored for files.
    resolution:
        Optional (width, height) requested from a live camera.
    """

    def __init__(
        self,
        source: Source = 0,
        fps: float = 30.0,
        resolution: Tuple[int, int] | None = None,
    ) -> None:
        self.source = source
        self.fps = fps
        self.resolution = resolution
        self.is_file = not isinstance(source, int)

        self._cap: "cv2.VideoCapture | None" = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Open the device or file."""
        cap = cv2.VideoCapture(str(self.source) if self.is_file else self.source)
        if not cap.isOpened():
            cap.release()
            raise RuntimeError(f"Cannot open video source {self.source!r}")

        if not self.is_file:
            if self.resolution is not None:
                w, h = self.resolution
                cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
                cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            cap.set(cv2.CAP_PROP_FPS, self.fps)

        self._cap = cap
        logger.info(
            "Video source opened – %s %r",
            "file" if self.is_file else "camera",
            self.source,
        )

    def close(self) -> None:
        """Release the device or file."""
        if self._cap is None:
            return
        self._cap.release()
        self._cap = None
        logger.info("Video source closed.")

    # Context-manager support
    def __enter__(self) -> "VideoSource":
        self.open()
        return self

    def __exit__(self, *_) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Frame acquisition
    # ------------------------------------------------------------------

    def read_frame(self) -> Tuple[float, np.ndarray] | None:
        """
        Capture a single frame.

        Returns
        -------
        tuple
            ``(timestamp_seconds, frame)`` with a BGR frame (H × W × 3,
            uint8), or *None* when no frame could be read.
        """
        if self._cap is None:
            raise RuntimeError("Video source is not open.  Call open() first.")

        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        if self.is_file:
            timestamp = self._cap.get(cv2.CAP_PROP_POS_MSEC) / 1000.0
        else:
            timestamp = time.monotonic()
        return timestamp, frame

    def frames(self) -> Generator[Tuple[float, np.ndarray], None, None]:
        """
        Yield ``(timestamp, frame)`` until the source is exhausted or closed.

        A file ends at its first failed read.  A live camera is given ten
        consecutive failed reads before giving up.

        Usage::

            with VideoSource(0) as src:
                for ts, frame in src.frames():
                    process(ts, frame)
        """
        _null_streak = 0
        while self._cap is not None:
            item = self.read_frame()
            if item is None:
                if self.is_file:
                    logger.info("End of video file reached.")
                    break
                _null_streak += 1
                logger.warning("VideoCapture.read() returned no frame.")
                if _null_streak >= 10:
                    logger.error(
                        "Camera returned 10 consecutive empty frames – aborting."
                    )
                    break
                continue
            _null_streak = 0
            yield item
