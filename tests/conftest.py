"""Shared pytest fixtures for video_quality tests."""

from __future__ import annotations

from collections.abc import Callable

import numpy as np
import pytest
import torch

from video_quality.errors import OracleError
from video_quality.inference.base import ClassifierOracle
from video_quality.types import Batch, ClassOutput, Frame


def encode_index(index: int) -> np.ndarray:
    """4x4 BGR frame whose pixels all hold ``index`` (mod 256)."""
    return np.full((4, 4, 3), index % 256, dtype=np.uint8)


def tensor_transform(frame: np.ndarray) -> torch.Tensor:
    """Cheap stand-in for the real preprocessing: HWC uint8 -> CHW float."""
    return torch.from_numpy(np.array(frame)).permute(2, 0, 1).float()


class RecordingOracle(ClassifierOracle):
    """Votes for a fixed class and records every frame index it scores.

    ``choose`` maps a frame index to the winning class; defaults to class 0.
    ``failures`` transient errors are raised before the first success.
    """

    def __init__(
        self,
        num_classes: int = 2,
        choose: Callable[[int], int] | None = None,
        failures: int = 0,
        transient: bool = True,
    ) -> None:
        self.num_classes = num_classes
        self.choose = choose or (lambda index: 0)
        self.failures = failures
        self.transient = transient
        self.calls = 0
        self.batch_sizes: list[int] = []
        self.seen: list[int] = []

    def _classify(self, batch: Batch) -> list[ClassOutput]:
        self.calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise OracleError("simulated timeout", transient=self.transient)
        self.batch_sizes.append(batch.valid_count)
        outputs = []
        for frame in batch.frames:
            self.seen.append(frame.index)
            scores = np.zeros(self.num_classes, dtype=np.float32)
            scores[self.choose(frame.index)] = 1.0
            outputs.append(scores)
        return outputs


@pytest.fixture()
def make_frames() -> Callable[[int], list[Frame]]:
    """Factory for ``n`` preprocessed frames with indices 0..n-1."""

    def _make(n: int) -> list[Frame]:
        return [Frame(index=i, data=tensor_transform(encode_index(i))) for i in range(n)]

    return _make


@pytest.fixture()
def raw_frames() -> Callable[[int], list[np.ndarray]]:
    """Factory for ``n`` raw BGR frames encoding their own index."""

    def _make(n: int) -> list[np.ndarray]:
        return [encode_index(i) for i in range(n)]

    return _make
