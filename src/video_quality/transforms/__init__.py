"""Torchvision v2 transforms turning raw video frames into model inputs.

Custom ``v2.Transform`` subclasses complement the standard torchvision v2
transforms; :func:`build_frame_transform` composes them into the default
per-frame preprocessing used by the evaluation pipeline.
"""

from video_quality.transforms.conversion import BGRToPILImage, ToFloat32Tensor
from video_quality.transforms.frame import build_frame_transform

__all__ = [
    "BGRToPILImage",
    "ToFloat32Tensor",
    "build_frame_transform",
]
