"""Vote counting and normalization of per-frame predictions."""

from video_quality.aggregation.distribution import Distribution, normalize
from video_quality.aggregation.tally import LabelAggregator, LabelTally, predict_class

__all__ = [
    "Distribution",
    "LabelAggregator",
    "LabelTally",
    "normalize",
    "predict_class",
]
