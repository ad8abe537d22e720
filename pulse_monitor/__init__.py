"""
Pulse Monitor — rPPG heart-rate estimation from a fixed skin region.
The mean green-channel intensity of the region is filtered and its
dominant period is found by autocorrelation to give BPM.
"""

from pulse_monitor.config import PipelineConfig
from pulse_monitor.pipeline import PipelineState, PulsePipeline, PulseReading

__version__ = "0.1.0"
__author__ = "pulse_monitor"

__all__ = ["PipelineConfig", "PipelineState", "PulsePipeline", "PulseReading"]
