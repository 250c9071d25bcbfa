"""Tests for LabelTally, LabelAggregator and normalize."""

from __future__ import annotations

import numpy as np
import pytest
import torch
from pydantic import ValidationError

from video_quality.aggregation import (
    Distribution,
    LabelAggregator,
    LabelTally,
    normalize,
    predict_class,
)
from video_quality.errors import DegenerateInputError, OracleError
from video_quality.types import Batch, Frame

CLASSES = ("Good", "Underexposed", "Overexposed")


def _batch(indices: list[int], capacity: int = 4) -> Batch:
    frames = tuple(Frame(index=i, data=torch.zeros(3, 2, 2)) for i in indices)
    return Batch(index=0, capacity=capacity, frames=frames)


def _one_hot(index: int, n: int = 3) -> np.ndarray:
    scores = np.zeros(n, dtype=np.float32)
    scores[index] = 1.0
    return scores


class TestLabelTally:
    def test_starts_empty(self) -> None:
        tally = LabelTally(3)
        assert tally.counts == (0, 0, 0)
        assert tally.total == 0

    def test_increment(self) -> None:
        tally = LabelTally(2)
        tally.increment(1)
        tally.increment(1)
        assert tally[1] == 2
        assert tally.total == 2
        assert tally.as_dict(("Sharp", "Blurry")) == {"Sharp": 0, "Blurry": 2}

    def test_out_of_range(self) -> None:
        with pytest.raises(IndexError):
            LabelTally(2).increment(2)

    def test_requires_a_class(self) -> None:
        with pytest.raises(ValueError, match="num_classes"):
            LabelTally(0)


class TestPredictClass:
    def test_argmax(self) -> None:
        assert predict_class(np.array([0.1, 0.7, 0.2])) == 1

    def test_tie_goes_to_lowest_index(self) -> None:
        assert predict_class(np.array([0.2, 0.4, 0.4])) == 1
        assert predict_class(np.array([0.5, 0.5])) == 0


class TestLabelAggregator:
    def test_counts_only_valid_outputs(self) -> None:
        agg = LabelAggregator(CLASSES)
        agg.update(_batch([0, 1, 2, 3]), [_one_hot(0)] * 4)
        agg.update(_batch([4]), [_one_hot(2)])
        assert agg.tally.counts == (4, 0, 1)
        assert agg.tally.total == 5

    def test_returns_predictions(self) -> None:
        agg = LabelAggregator(CLASSES)
        preds = agg.update(_batch([0, 1]), [_one_hot(1), _one_hot(2)])
        assert preds == [1, 2]

    def test_output_count_mismatch(self) -> None:
        agg = LabelAggregator(CLASSES)
        with pytest.raises(OracleError, match="1 frames but 4 outputs"):
            agg.update(_batch([0]), [_one_hot(0)] * 4)
        assert agg.tally.total == 0

    def test_wrong_score_length(self) -> None:
        agg = LabelAggregator(CLASSES)
        with pytest.raises(OracleError, match="expected 3 scores"):
            agg.update(_batch([0]), [np.zeros(2)])

    def test_nan_scores_rejected_without_partial_count(self) -> None:
        agg = LabelAggregator(CLASSES)
        with pytest.raises(OracleError, match="NaN"):
            agg.update(_batch([0, 1]), [_one_hot(0), np.array([np.nan, 0.0, 0.0])])
        assert agg.tally.total == 0


class TestNormalize:
    def test_percentages(self) -> None:
        tally = LabelTally(3)
        for idx in (0, 0, 0, 1):
            tally.increment(idx)
        dist = normalize(tally, CLASSES)
        assert dist.percentages == {"Good": 75.0, "Underexposed": 25.0, "Overexposed": 0.0}
        assert dist.counts == {"Good": 3, "Underexposed": 1, "Overexposed": 0}
        assert dist.total_frames == 4
        assert dist["Good"] == 75.0
        assert dist.dominant_class == "Good"

    def test_sums_to_hundred_for_thirds(self) -> None:
        tally = LabelTally(3)
        for idx in (0, 1, 2):
            tally.increment(idx)
        dist = normalize(tally, CLASSES)
        assert sum(dist.percentages.values()) == pytest.approx(100.0, abs=1e-6)

    def test_empty_tally_is_degenerate(self) -> None:
        with pytest.raises(DegenerateInputError):
            normalize(LabelTally(3), CLASSES)

    def test_class_count_mismatch(self) -> None:
        with pytest.raises(ValueError, match="class names"):
            normalize(LabelTally(2), CLASSES)

    def test_dominant_class_tie_prefers_earlier(self) -> None:
        tally = LabelTally(2)
        tally.increment(1)
        tally.increment(0)
        assert normalize(tally, ("Sharp", "Blurry")).dominant_class == "Sharp"


class TestDistributionValidation:
    def test_rejects_inconsistent_counts(self) -> None:
        with pytest.raises(ValidationError, match="counts sum"):
            Distribution(
                classes=("Sharp", "Blurry"),
                percentages={"Sharp": 50.0, "Blurry": 50.0},
                counts={"Sharp": 1, "Blurry": 2},
                total_frames=2,
            )

    def test_rejects_zero_frames(self) -> None:
        with pytest.raises(ValidationError, match="at least one frame"):
            Distribution(classes=("Sharp",), percentages={}, counts={}, total_frames=0)
