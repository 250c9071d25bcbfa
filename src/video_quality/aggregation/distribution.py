"""Normalize a finished tally into percentages."""

from __future__ import annotations

from pydantic import BaseModel, model_validator

from video_quality.aggregation.tally import LabelTally
from video_quality.errors import DegenerateInputError
from video_quality.types import ClassList

SUM_TOLERANCE = 1e-6


class Distribution(BaseModel, frozen=True):
    """Percentage of frames predicted as each class.

    ``percentages`` and ``counts`` are keyed by class name, in class order.
    """

    classes: tuple[str, ...]
    percentages: dict[str, float]
    counts: dict[str, int]
    total_frames: int

    @model_validator(mode="after")
    def _consistent(self) -> "Distribution":
        if self.total_frames <= 0:
            raise ValueError("a distribution needs at least one frame")
        if sum(self.counts.values()) != self.total_frames:
            raise ValueError(
                f"counts sum to {sum(self.counts.values())}, "
                f"total_frames is {self.total_frames}"
            )
        if abs(sum(self.percentages.values()) - 100.0) > SUM_TOLERANCE:
            raise ValueError(
                f"percentages sum to {sum(self.percentages.values())}, expected 100"
            )
        return self

    def __getitem__(self, class_name: str) -> float:
        return self.percentages[class_name]

    @property
    def dominant_class(self) -> str:
        """Most frequent class; ties go to the earlier class."""
        return max(self.classes, key=lambda c: (self.counts[c], -self.classes.index(c)))


def normalize(tally: LabelTally, classes: ClassList) -> Distribution:
    """Convert a tally into a :class:`Distribution`.

    Raises:
        DegenerateInputError: The tally is empty, so there is no data to
            report.  Callers decide whether that is fatal or "no data".
    """
    if len(classes) != len(tally):
        raise ValueError(
            f"{len(classes)} class names for a tally of {len(tally)} classes"
        )
    total = tally.total
    if total == 0:
        raise DegenerateInputError("no frames were classified")
    counts = tally.as_dict(classes)
    return Distribution(
        classes=classes,
        percentages={name: 100.0 * count / total for name, count in counts.items()},
        counts=counts,
        total_frames=total,
    )
