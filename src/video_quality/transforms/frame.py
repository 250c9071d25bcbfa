"""Preprocessing pipeline applied to every decoded frame before batching."""

from __future__ import annotations

from torchvision.transforms import v2

from video_quality.config import EvaluationConfig
from video_quality.transforms.conversion import BGRToPILImage, ToFloat32Tensor


def build_frame_transform(config: EvaluationConfig | None = None) -> v2.Compose:
    """Build the frame transform matching the classifier's val transforms.

    BGR array -> RGB PIL -> Resize -> CenterCrop -> float tensor -> Normalize.
    """
    config = config or EvaluationConfig()
    norm = config.normalization
    return v2.Compose(
        [
            BGRToPILImage(),
            v2.Resize(config.resize_size),
            v2.CenterCrop(config.image_size),
            ToFloat32Tensor(scale=True),
            v2.Normalize(mean=list(norm.mean), std=list(norm.std)),
        ]
    )
