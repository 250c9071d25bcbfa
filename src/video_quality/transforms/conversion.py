"""Conversion transforms from decoded video frames to model input tensors."""

from __future__ import annotations

from typing import Any

import numpy as np
import torch
from PIL import Image
from torchvision.transforms import v2


class BGRToPILImage(v2.Transform):
    """Convert an OpenCV BGR ``uint8`` array of shape (H, W, 3) to an RGB PIL image.

    Grayscale (H, W) and single-channel (H, W, 1) frames are expanded to RGB
    so every frame reaching the model has three channels.
    """

    def forward(self, *inputs: Any) -> Any:
        frame = inputs[0]
        if not isinstance(frame, np.ndarray):
            raise TypeError(f"BGRToPILImage expects a numpy array, got {type(frame)}")
        if frame.dtype != np.uint8:
            raise TypeError(f"BGRToPILImage expects uint8 pixels, got {frame.dtype}")

        if frame.ndim == 3 and frame.shape[2] == 1:
            frame = frame[:, :, 0]
        if frame.ndim == 2:
            rgb = np.stack([frame] * 3, axis=-1)
        elif frame.ndim == 3 and frame.shape[2] in (3, 4):
            rgb = np.ascontiguousarray(frame[:, :, 2::-1])
        else:
            raise ValueError(f"unsupported frame shape {frame.shape}")
        return Image.fromarray(rgb)


class ToFloat32Tensor(v2.Transform):
    """Convert PIL images to float32 (C, H, W) tensors.

    Args:
        scale: If ``True`` (default), scale pixel values from ``[0, 255]`` to
            ``[0.0, 1.0]`` before normalization.
    """

    def __init__(self, scale: bool = True) -> None:
        super().__init__()
        self._to_image = v2.ToImage()
        self._to_dtype = v2.ToDtype(torch.float32, scale=scale)

    def forward(self, *inputs: Any) -> Any:
        return self._to_dtype(self._to_image(inputs[0]))
