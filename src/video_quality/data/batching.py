"""Fixed-capacity batching of a frame stream."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from video_quality.types import Batch, Frame


class BatchAccumulator:
    """Group frames into batches of ``capacity``.

    Every emitted :class:`Batch` gets its own frame tuple, so the tail batch
    of a video never exposes frames left over from the previous batch.
    For ``N`` frames this emits ``ceil(N / capacity)`` batches, all full
    except possibly the last.

    Args:
        capacity: Maximum number of frames per batch.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._pending: list[Frame] = []
        self._emitted = 0
        self._finished = False

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def emitted_count(self) -> int:
        return self._emitted

    def push(self, frame: Frame) -> Batch | None:
        """Add a frame; return the batch it completes, if any."""
        if self._finished:
            raise RuntimeError("push() called after finish()")
        self._pending.append(frame)
        if len(self._pending) == self.capacity:
            return self._emit()
        return None

    def finish(self) -> Batch | None:
        """Flush the partial tail batch. Returns ``None`` when nothing is pending."""
        if self._finished:
            raise RuntimeError("finish() called twice")
        self._finished = True
        if not self._pending:
            return None
        return self._emit()

    def _emit(self) -> Batch:
        batch = Batch(
            index=self._emitted,
            capacity=self.capacity,
            frames=tuple(self._pending),
        )
        self._pending = []
        self._emitted += 1
        return batch

    def batches(self, frames: Iterable[Frame]) -> Iterator[Batch]:
        """Drive the accumulator over a whole frame stream."""
        for frame in frames:
            batch = self.push(frame)
            if batch is not None:
                yield batch
        tail = self.finish()
        if tail is not None:
            yield tail
