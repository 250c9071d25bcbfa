"""ResNet backbones with a quality-class head, for :class:`TorchClassifierOracle`."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import torch
import torchvision.models as tv_models

from video_quality.utils.hydra import register


class ResNetQualityClassifier(torch.nn.Module):
    """Torchvision ResNet with ``fc`` replaced by ``Linear(in, num_classes)``.

    The backbone lives under ``self.model`` so its state dict keys match
    checkpoints of the training LightningModule (``model.conv1.weight``...).
    """

    def __init__(
        self,
        builder: Callable[..., torch.nn.Module],
        weights: Any,
        num_classes: int,
        pretrained: bool,
    ) -> None:
        super().__init__()
        if num_classes < 1:
            raise ValueError(f"num_classes must be >= 1, got {num_classes}")
        backbone = builder(weights=weights if pretrained else None)
        backbone.fc = torch.nn.Linear(backbone.fc.in_features, num_classes)  # type: ignore[union-attr,arg-type]
        self.model = backbone
        self.num_classes = num_classes

    def forward(self, images: torch.Tensor) -> torch.Tensor:
        return self.model(images)  # type: ignore[no-any-return]


@register(group="model", name="resnet18")
class ResNet18QualityClassifier(ResNetQualityClassifier):
    """ResNet18, fc = Linear(512, num_classes).

    Pass pretrained=False in tests to skip the ~44MB weight download.
    """

    def __init__(self, num_classes: int = 3, pretrained: bool = False) -> None:
        super().__init__(
            tv_models.resnet18,
            tv_models.ResNet18_Weights.DEFAULT,
            num_classes,
            pretrained,
        )


@register(group="model", name="resnet34")
class ResNet34QualityClassifier(ResNetQualityClassifier):
    """ResNet34, fc = Linear(512, num_classes)."""

    def __init__(self, num_classes: int = 3, pretrained: bool = False) -> None:
        super().__init__(
            tv_models.resnet34,
            tv_models.ResNet34_Weights.DEFAULT,
            num_classes,
            pretrained,
        )


@register(group="model", name="resnet50")
class ResNet50QualityClassifier(ResNetQualityClassifier):
    """ResNet50, fc = Linear(2048, num_classes)."""

    def __init__(self, num_classes: int = 3, pretrained: bool = False) -> None:
        super().__init__(
            tv_models.resnet50,
            tv_models.ResNet50_Weights.DEFAULT,
            num_classes,
            pretrained,
        )
