"""Lazy, single-pass frame sources.

A source is opened once per evaluation, iterated once, and closed when the
evaluation ends.  Iterating it a second time is an error: reopen the video
to get a fresh source instead.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import TracebackType

import cv2
import numpy as np
from loguru import logger

from video_quality.errors import SourceError
from video_quality.types import Frame


class FrameSource(ABC):
    """Base class for frame sources.

    Subclasses implement ``_read`` (raw decoded frames, in order) and
    ``_raw_frame_count`` (decoder estimate of the frame total, or ``None``).
    Sampling with ``stride`` / ``max_frames`` is applied here so every source
    behaves the same way.

    Args:
        stride: Keep every Nth decoded frame.
        max_frames: Stop after this many kept frames (``None`` = all).
    """

    def __init__(self, stride: int = 1, max_frames: int | None = None) -> None:
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")
        if max_frames is not None and max_frames < 1:
            raise ValueError(f"max_frames must be >= 1 or None, got {max_frames}")
        self.stride = stride
        self.max_frames = max_frames
        self._consumed = False

    @abstractmethod
    def _read(self) -> Iterator[np.ndarray]:  # type: ignore[type-arg]
        """Yield raw decoded frames in temporal order."""

    def _raw_frame_count(self) -> int | None:
        return None

    @property
    def estimated_frame_count(self) -> int | None:
        """Expected number of frames this source will yield.

        Only a hint for progress reporting; never relied upon for correctness.
        """
        raw = self._raw_frame_count()
        if raw is None:
            return None
        count = math.ceil(raw / self.stride)
        if self.max_frames is not None:
            count = min(count, self.max_frames)
        return count

    def __iter__(self) -> Iterator[Frame]:
        if self._consumed:
            raise SourceError(
                f"{type(self).__name__} was already iterated; reopen the video"
            )
        self._consumed = True
        return self._frames()

    def _frames(self) -> Iterator[Frame]:
        raw_frames = self._read()
        position = 0
        kept = 0
        while True:
            try:
                data = next(raw_frames)
            except StopIteration:
                break
            except SourceError:
                raise
            except Exception as e:
                raise SourceError(
                    f"decoding failed after {position} frames: {e}"
                ) from e
            if data is None:
                raise SourceError(f"decoder returned no data for frame {position}")
            if position % self.stride == 0:
                yield Frame(index=position, data=data)
                kept += 1
                if self.max_frames is not None and kept >= self.max_frames:
                    return
            position += 1

    def close(self) -> None:
        """Release the underlying decoder. Safe to call more than once."""

    def __enter__(self) -> FrameSource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class VideoFileSource(FrameSource):
    """Decode a video file with OpenCV.

    The capture is opened in ``__init__`` so an unreadable file fails
    immediately with :class:`SourceError`.
    """

    def __init__(
        self,
        path: str | Path,
        stride: int = 1,
        max_frames: int | None = None,
    ) -> None:
        super().__init__(stride=stride, max_frames=max_frames)
        self.path = Path(path)
        cap = cv2.VideoCapture(str(self.path))
        if not cap.isOpened():
            cap.release()
            raise SourceError(f"Could not open video file: {self.path}")
        self._cap: cv2.VideoCapture | None = cap

        self.fps = float(cap.get(cv2.CAP_PROP_FPS) or 0.0)
        self.frame_total = int(cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
        self.frames_read = 0
        self.duration_s = self.frame_total / self.fps if self.fps > 0 else 0.0
        logger.info(
            f"Opened {self.path.name}: {self.frame_total} frames, "
            f"{self.fps:.2f} fps, {self.duration_s:.2f}s"
        )

    def _raw_frame_count(self) -> int | None:
        if self.fps <= 0 or self.duration_s <= 0:
            return None
        return int(round(self.fps * self.duration_s))

    def _read(self) -> Iterator[np.ndarray]:  # type: ignore[type-arg]
        while True:
            if self._cap is None:
                raise SourceError(f"{self.path} was closed while decoding")
            ret, frame = self._cap.read()
            if not ret:
                self._check_truncated()
                return
            self.frames_read += 1
            yield frame

    def _check_truncated(self) -> None:
        # Container frame counts are approximate, allow ~1% slack.
        tolerance = max(1, self.frame_total // 100)
        if self.frame_total > 0 and self.frame_total - self.frames_read > tolerance:
            logger.warning(
                f"{self.path.name}: stream ended after {self.frames_read} of "
                f"{self.frame_total} frames; the file may be truncated"
            )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.debug(f"Released capture for {self.path.name}")


class ArrayFrameSource(FrameSource):
    """Frames from an in-memory sequence or any iterable stream of arrays.

    Args:
        frames: Iterable of BGR arrays of shape (H, W, C).
        stride: Keep every Nth frame.
        max_frames: Stop after this many kept frames.
    """

    def __init__(
        self,
        frames: Iterable[np.ndarray],  # type: ignore[type-arg]
        stride: int = 1,
        max_frames: int | None = None,
    ) -> None:
        super().__init__(stride=stride, max_frames=max_frames)
        self._source = frames
        self.closed = False

    def _raw_frame_count(self) -> int | None:
        try:
            return len(self._source)  # type: ignore[arg-type]
        except TypeError:
            return None

    def _read(self) -> Iterator[np.ndarray]:  # type: ignore[type-arg]
        for frame in self._source:
            if self.closed:
                raise SourceError("stream was closed while decoding")
            yield frame

    def close(self) -> None:
        self.closed = True


def open_source(
    video: str | Path | FrameSource,
    stride: int = 1,
    max_frames: int | None = None,
) -> FrameSource:
    """Return a FrameSource for a path, or configure an existing source.

    ``stride`` and ``max_frames`` are applied to a passed-in source whose own
    setting is still the default.  A source that already has a different
    non-default setting is rejected rather than silently overridden.

    Raises:
        ValueError: ``video`` is a source whose sampling conflicts with
            ``stride`` / ``max_frames``.
        SourceError: ``video`` is a path that could not be opened.
    """
    if not isinstance(video, FrameSource):
        return VideoFileSource(video, stride=stride, max_frames=max_frames)

    if stride != 1 and video.stride != stride:
        if video.stride != 1:
            raise ValueError(
                f"{type(video).__name__} has stride={video.stride}, "
                f"conflicting with stride={stride}"
            )
        video.stride = stride
    if max_frames is not None and video.max_frames != max_frames:
        if video.max_frames is not None:
            raise ValueError(
                f"{type(video).__name__} has max_frames={video.max_frames}, "
                f"conflicting with max_frames={max_frames}"
            )
        video.max_frames = max_frames
    return video
