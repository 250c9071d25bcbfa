"""Frame sources and batching."""

from video_quality.data.batching import BatchAccumulator
from video_quality.data.source import (
    ArrayFrameSource,
    FrameSource,
    VideoFileSource,
    open_source,
)

__all__ = [
    "ArrayFrameSource",
    "BatchAccumulator",
    "FrameSource",
    "VideoFileSource",
    "open_source",
]
