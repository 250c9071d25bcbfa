"""Classification backbones usable with the torch oracle."""

from video_quality.models.resnet import (
    ResNet18QualityClassifier,
    ResNet34QualityClassifier,
    ResNet50QualityClassifier,
    ResNetQualityClassifier,
)

__all__ = [
    "ResNet18QualityClassifier",
    "ResNet34QualityClassifier",
    "ResNet50QualityClassifier",
    "ResNetQualityClassifier",
]
