"""Classifier oracles consumed by the evaluation pipeline."""

from video_quality.inference.base import ClassifierOracle
from video_quality.inference.onnx_oracle import ONNXClassifierOracle
from video_quality.inference.retry import classify_with_retry
from video_quality.inference.torch_oracle import TorchClassifierOracle

__all__ = [
    "ClassifierOracle",
    "ONNXClassifierOracle",
    "TorchClassifierOracle",
    "classify_with_retry",
]
