#!/usr/bin/env python3
"""
Pulse Monitor – main entry point.

Usage
-----
    python main.py [OPTIONS]

Options
-------
    --source SRC           Camera index or video file path (default: 0)
    --fps FLOAT            Target capture frame rate (default: 30)
    --buffer-size INT      Samples per analysis window (default: 256)
    --min-hz / --max-hz    Heart-rate band in Hz (default: 0.7 / 3.5)
    --roi WxH              Centred region of interest (default: 150x150)
    --smoothing-window INT Moving-average window (default: 5)
    --max-frames INT       Stop after this many frames (default: no limit)
    --verbose              Log every processing cycle

Keep the region of interest over skin (forehead or cheek) and stay still.
Press Ctrl-C to stop.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pulse_monitor.config import PipelineConfig
from pulse_monitor.extraction import centered_roi, green_intensity
from pulse_monitor.pipeline import PulsePipeline, PulseReading
from pulse_monitor.video_source import VideoSource

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s – %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("pulse_monitor")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Webcam heart-rate monitor (rPPG, autocorrelation)",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--source", default="0",
                        help="Camera index or path to a video file")
    parser.add_argument("--fps", type=float, default=30.0,
                        help="Target capture frame rate")
    parser.add_argument("--buffer-size", type=int, default=256,
                        help="Samples per analysis window")
    parser.add_argument("--min-hz", type=float, default=0.7,
                        help="Lower edge of the heart-rate band (Hz)")
    parser.add_argument("--max-hz", type=float, default=3.5,
                        help="Upper edge of the heart-rate band (Hz)")
    parser.add_argument("--roi", default="150x150",
                        help="Region of interest size, e.g. 150x150")
    parser.add_argument("--smoothing-window", type=int, default=5,
                        help="Moving-average window in samples")
    parser.add_argument("--max-frames", type=int, default=None,
                        help="Stop after this many frames")
    parser.add_argument("--verbose", action="store_true",
                        help="Log every processing cycle")
    return parser.parse_args(argv)


def _parse_source(value: str) -> int | Path:
    return int(value) if value.isdigit() else Path(value)


def _print_reading(reading: PulseReading) -> None:
    ts = time.strftime("%H:%M:%S")
    if reading.is_valid:
        print(f"[{ts}] BPM={reading.heart_rate_bpm:.0f}  "
              f"conf={reading.confidence:.2f}  fps={reading.sample_rate:.0f}")
    else:
        print(f"[{ts}] Signal indeterminate  fps={reading.sample_rate:.0f}")


# ---------------------------------------------------------------------------
# Main loop
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace, source: VideoSource | None = None) -> int:
    if args.verbose:
        logging.getLogger("pulse_monitor").setLevel(logging.DEBUG)

    try:
        roi_w, roi_h = (int(v) for v in args.roi.lower().split("x"))
    except ValueError:
        logger.error("Invalid --roi format.  Use WxH, e.g. 150x150.")
        return 1

    try:
        config = PipelineConfig(
            min_hz=args.min_hz,
            max_hz=args.max_hz,
            buffer_size=args.buffer_size,
            fps=args.fps,
            smoothing_window=args.smoothing_window,
            roi_width=roi_w,
            roi_height=roi_h,
        )
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    if source is None:
        source = VideoSource(_parse_source(args.source), fps=config.fps)
    pipeline = PulsePipeline(config)
    pipeline.subscribe(_print_reading)

    logger.info("Starting pulse monitor.  Press Ctrl-C to quit.")

    frame_idx = 0
    last_bpm = 0.0
    roi = None
    last_fps_log = 0.0
    try:
        with source, pipeline:
            for timestamp, frame in source.frames():
                if roi is None:
                    roi = centered_roi(frame.shape, config.roi_width, config.roi_height)
                    logger.info("Sampling ROI x=%d y=%d w=%d h=%d", *roi)

                reading = pipeline.push_sample(timestamp, green_intensity(frame, roi))
                if reading is not None:
                    last_bpm = reading.heart_rate_bpm

                if timestamp - last_fps_log >= 1.0:
                    logger.debug("Effective frame rate: %.0f fps", pipeline.sample_rate)
                    last_fps_log = timestamp

                frame_idx += 1
                if args.max_frames is not None and frame_idx >= args.max_frames:
                    break
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted.")

    logger.info("Processed %d frame(s); last rate %.0f BPM.",
                frame_idx, last_bpm)
    return 0


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    return run(parse_args(argv))


if __name__ == "__main__":
    sys.exit(main())
