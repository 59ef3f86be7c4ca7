"""Segment download pipelines and the per-segment fingerprint processor."""

from .concurrent_pipeline import ConcurrentSegmentPipeline
from .segment_pipeline import SegmentPipeline
from .segment_processor import SegmentProcessor

__all__ = ["ConcurrentSegmentPipeline", "SegmentPipeline", "SegmentProcessor"]
