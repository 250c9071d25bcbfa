"""Data types shared by the evaluation stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import numpy as np
import torch

ClassList = tuple[str, ...]
"""Ordered class names; position defines the index space of scores and tallies."""

ClassOutput = np.ndarray  # type: ignore[type-arg]
"""1-D float array of per-class scores for one frame."""


def make_class_list(names: Any) -> ClassList:
    """Validate and freeze a sequence of class names."""
    classes = tuple(str(n) for n in names)
    if not classes:
        raise ValueError("class list must not be empty")
    if len(set(classes)) != len(classes):
        raise ValueError(f"class names must be unique, got {list(classes)}")
    return classes


@dataclass(frozen=True)
class Frame:
    """One decoded frame and its position in the video.

    data: BGR ``uint8`` array of shape (H, W, C) straight from the decoder,
        or a float tensor of shape (C, H, W) once preprocessed.
    """

    index: int
    data: np.ndarray | torch.Tensor  # type: ignore[type-arg]

    def __post_init__(self) -> None:
        # Freeze a view so the caller's array keeps its own flags.
        if isinstance(self.data, np.ndarray) and self.data.flags.writeable:
            view = self.data.view()
            view.flags.writeable = False
            object.__setattr__(self, "data", view)


@dataclass(frozen=True)
class Batch:
    """A group of at most ``capacity`` consecutive frames.

    Each batch owns its own ``frames`` tuple, so only the ``valid_count``
    frames pushed into it are ever visible to consumers.
    """

    index: int
    capacity: int
    frames: tuple[Frame, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {self.capacity}")
        if len(self.frames) > self.capacity:
            raise ValueError(
                f"batch holds {len(self.frames)} frames, capacity is {self.capacity}"
            )

    @property
    def valid_count(self) -> int:
        return len(self.frames)

    @property
    def is_partial(self) -> bool:
        return self.valid_count < self.capacity

    def stack(self) -> torch.Tensor:
        """Stack the valid frames into a (valid_count, C, H, W) tensor."""
        if not self.frames:
            raise ValueError("cannot stack an empty batch")
        tensors = []
        for frame in self.frames:
            if not isinstance(frame.data, torch.Tensor):
                raise TypeError(
                    f"frame {frame.index} is not preprocessed "
                    f"(got {type(frame.data).__name__})"
                )
            tensors.append(frame.data)
        return torch.stack(tensors)
