"""Per-video vote counting over classifier outputs."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from video_quality.errors import OracleError
from video_quality.types import Batch, ClassList, ClassOutput


class LabelTally:
    """Counts of predicted classes for one video.

    ``total`` always equals the number of frames counted so far.
    """

    def __init__(self, num_classes: int) -> None:
        if num_classes < 1:
            raise ValueError(f"num_classes must be >= 1, got {num_classes}")
        self._counts = [0] * num_classes
        self._total = 0

    @property
    def counts(self) -> tuple[int, ...]:
        return tuple(self._counts)

    @property
    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._counts)

    def __getitem__(self, class_index: int) -> int:
        return self._counts[class_index]

    def increment(self, class_index: int) -> None:
        if not 0 <= class_index < len(self._counts):
            raise IndexError(
                f"class index {class_index} out of range [0, {len(self._counts)})"
            )
        self._counts[class_index] += 1
        self._total += 1

    def as_dict(self, classes: ClassList) -> dict[str, int]:
        if len(classes) != len(self._counts):
            raise ValueError(
                f"{len(classes)} class names for a tally of {len(self._counts)} classes"
            )
        return dict(zip(classes, self._counts, strict=True))


def predict_class(scores: ClassOutput) -> int:
    """Argmax over one score vector; exact ties go to the lowest class index."""
    return int(np.argmax(scores))


class LabelAggregator:
    """Turn per-frame scores into votes on a :class:`LabelTally`.

    Each aggregator owns its tally; one aggregator serves one video.
    Only the ``valid_count`` outputs of each batch are ever counted.
    """

    def __init__(self, classes: ClassList) -> None:
        self.classes = classes
        self.tally = LabelTally(len(classes))

    def update(self, batch: Batch, outputs: Sequence[ClassOutput]) -> list[int]:
        """Count the predictions for ``batch``; return the predicted indices."""
        if len(outputs) != batch.valid_count:
            raise OracleError(
                f"batch {batch.index} has {batch.valid_count} frames but "
                f"{len(outputs)} outputs"
            )
        predictions: list[int] = []
        for frame, output in zip(batch.frames, outputs, strict=True):
            scores = np.asarray(output, dtype=np.float64)
            if scores.shape != (len(self.classes),):
                raise OracleError(
                    f"frame {frame.index}: expected {len(self.classes)} scores, "
                    f"got shape {scores.shape}"
                )
            if np.isnan(scores).any():
                raise OracleError(f"frame {frame.index}: scores contain NaN")
            predictions.append(predict_class(scores))
        for class_index in predictions:
            self.tally.increment(class_index)
        return predictions
