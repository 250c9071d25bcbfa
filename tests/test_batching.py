"""Tests for BatchAccumulator."""

from __future__ import annotations

import math
from collections.abc import Callable

import pytest

from video_quality.data.batching import BatchAccumulator
from video_quality.types import Frame


class TestBatchCounts:
    @pytest.mark.parametrize("capacity", [1, 2, 3, 4, 7, 16])
    @pytest.mark.parametrize("n", [0, 1, 3, 4, 9, 10, 16, 17])
    def test_ceil_batches_and_total(
        self, make_frames: Callable[[int], list[Frame]], n: int, capacity: int
    ) -> None:
        batches = list(BatchAccumulator(capacity).batches(make_frames(n)))
        assert len(batches) == math.ceil(n / capacity)
        assert sum(b.valid_count for b in batches) == n
        assert all(b.valid_count == capacity for b in batches[:-1])
        if n:
            expected_tail = n % capacity or capacity
            assert batches[-1].valid_count == expected_tail

    def test_sizes_ten_by_four(self, make_frames: Callable[[int], list[Frame]]) -> None:
        batches = list(BatchAccumulator(4).batches(make_frames(10)))
        assert [b.valid_count for b in batches] == [4, 4, 2]
        assert [b.index for b in batches] == [0, 1, 2]


class TestPartialTail:
    def test_tail_exposes_only_its_own_frames(
        self, make_frames: Callable[[int], list[Frame]]
    ) -> None:
        batches = list(BatchAccumulator(4).batches(make_frames(9)))
        tail = batches[-1]
        assert tail.valid_count == 1
        assert tail.capacity == 4
        assert [f.index for f in tail.frames] == [8]

    def test_every_frame_emitted_exactly_once(
        self, make_frames: Callable[[int], list[Frame]]
    ) -> None:
        batches = list(BatchAccumulator(4).batches(make_frames(9)))
        indices = [f.index for b in batches for f in b.frames]
        assert indices == list(range(9))

    def test_emitted_batches_are_independent(
        self, make_frames: Callable[[int], list[Frame]]
    ) -> None:
        acc = BatchAccumulator(2)
        frames = make_frames(3)
        first = acc.push(frames[0]) or acc.push(frames[1])
        assert first is not None
        acc.push(frames[2])
        tail = acc.finish()
        assert tail is not None
        assert [f.index for f in first.frames] == [0, 1]
        assert [f.index for f in tail.frames] == [2]


class TestAccumulatorProtocol:
    def test_push_returns_none_until_full(
        self, make_frames: Callable[[int], list[Frame]]
    ) -> None:
        acc = BatchAccumulator(3)
        frames = make_frames(3)
        assert acc.push(frames[0]) is None
        assert acc.push(frames[1]) is None
        assert acc.pending_count == 2
        batch = acc.push(frames[2])
        assert batch is not None and batch.valid_count == 3
        assert acc.pending_count == 0
        assert acc.emitted_count == 1

    def test_finish_on_empty_emits_nothing(self) -> None:
        assert BatchAccumulator(4).finish() is None

    def test_push_after_finish_raises(
        self, make_frames: Callable[[int], list[Frame]]
    ) -> None:
        acc = BatchAccumulator(4)
        acc.finish()
        with pytest.raises(RuntimeError, match="after finish"):
            acc.push(make_frames(1)[0])

    def test_finish_twice_raises(self) -> None:
        acc = BatchAccumulator(4)
        acc.finish()
        with pytest.raises(RuntimeError, match="twice"):
            acc.finish()

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError, match="capacity"):
            BatchAccumulator(0)
