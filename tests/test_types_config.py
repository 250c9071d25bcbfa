"""Unit tests for video_quality.types and video_quality.config."""

import numpy as np
import pytest
import torch
from pydantic import ValidationError

from video_quality.config import EvaluationConfig, NormalizationConfig
from video_quality.types import Batch, Frame, make_class_list


class TestEvaluationConfig:
    def test_defaults(self) -> None:
        cfg = EvaluationConfig()
        assert cfg.batch_size == 32
        assert cfg.max_retries == 2
        assert cfg.retry_backoff_s == 0.5
        assert cfg.frame_stride == 1
        assert cfg.max_frames is None
        assert cfg.image_size == 224
        assert cfg.normalization == NormalizationConfig()

    def test_frozen_raises_on_mutation(self) -> None:
        cfg = EvaluationConfig()
        with pytest.raises(ValidationError):
            cfg.batch_size = 64  # type: ignore[misc]

    @pytest.mark.parametrize(
        "field,value",
        [("batch_size", 0), ("max_retries", -1), ("frame_stride", 0), ("max_frames", 0)],
    )
    def test_rejects_out_of_range(self, field: str, value: int) -> None:
        with pytest.raises(ValidationError):
            EvaluationConfig(**{field: value})

    def test_crop_larger_than_resize_rejected(self) -> None:
        with pytest.raises(ValidationError, match="image_size"):
            EvaluationConfig(resize_size=128, image_size=224)

    def test_normalization_std_must_be_positive(self) -> None:
        with pytest.raises(ValidationError, match="std"):
            NormalizationConfig(std=(0.2, 0.0, 0.2))


class TestClassList:
    def test_freezes_names(self) -> None:
        assert make_class_list(["Good", "Underexposed", "Overexposed"]) == (
            "Good",
            "Underexposed",
            "Overexposed",
        )

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValueError, match="empty"):
            make_class_list([])

    def test_duplicates_rejected(self) -> None:
        with pytest.raises(ValueError, match="unique"):
            make_class_list(["Sharp", "Sharp"])


class TestFrameAndBatch:
    def test_raw_frame_is_read_only(self) -> None:
        frame = Frame(index=0, data=np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            frame.data[0, 0, 0] = 1  # type: ignore[index]

    def test_callers_array_stays_writable(self) -> None:
        decoded = np.zeros((2, 2, 3), dtype=np.uint8)
        frame = Frame(index=0, data=decoded)
        assert decoded.flags.writeable
        assert not frame.data.flags.writeable  # type: ignore[union-attr]
        decoded[0, 0, 0] = 7
        assert frame.data[0, 0, 0] == 7  # type: ignore[index]

    def test_valid_count_and_partial(self) -> None:
        frames = tuple(Frame(index=i, data=torch.zeros(3, 2, 2)) for i in range(3))
        batch = Batch(index=0, capacity=4, frames=frames)
        assert batch.valid_count == 3
        assert batch.is_partial

    def test_overfull_batch_rejected(self) -> None:
        frames = tuple(Frame(index=i, data=torch.zeros(3, 2, 2)) for i in range(3))
        with pytest.raises(ValueError, match="capacity"):
            Batch(index=0, capacity=2, frames=frames)

    def test_stack_only_valid_frames(self) -> None:
        frames = tuple(Frame(index=i, data=torch.full((3, 2, 2), float(i))) for i in range(2))
        stacked = Batch(index=0, capacity=8, frames=frames).stack()
        assert stacked.shape == (2, 3, 2, 2)
        assert stacked[1].eq(1.0).all()

    def test_stack_rejects_raw_frames(self) -> None:
        frame = Frame(index=0, data=np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(TypeError, match="not preprocessed"):
            Batch(index=0, capacity=1, frames=(frame,)).stack()
