"""Exception hierarchy for video quality evaluation.

Every error below is fatal to the evaluation of the current video.  None of
them is ever converted into an empty or zero distribution.
"""

from __future__ import annotations


class VideoQualityError(Exception):
    """Base class for all evaluation failures."""


class SourceError(VideoQualityError):
    """The video could not be opened or decoding failed mid-stream."""


class TransformError(VideoQualityError):
    """Preprocessing of a single frame failed.

    Frames are never skipped silently, so this aborts the whole video.
    """

    def __init__(self, message: str, frame_index: int | None = None) -> None:
        super().__init__(message)
        self.frame_index = frame_index


class OracleError(VideoQualityError):
    """The classifier failed on a batch.

    ``transient`` marks failures worth retrying (timeouts, out-of-memory).
    """

    def __init__(self, message: str, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


class DegenerateInputError(VideoQualityError):
    """No frames were classified, so no distribution exists."""


class EvaluationCancelled(VideoQualityError):
    """The evaluation was cancelled between batches."""
