"""ONNX Runtime classifier oracle."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import onnxruntime as ort
from loguru import logger

from video_quality.errors import OracleError
from video_quality.inference.base import ClassifierOracle
from video_quality.io.labels import load_labels_mapping
from video_quality.types import Batch, ClassList, ClassOutput
from video_quality.utils.hydra import register


def _softmax(logits: np.ndarray) -> np.ndarray:  # type: ignore[type-arg]
    """Row-wise softmax for 2-D array."""
    exp = np.exp(logits - logits.max(axis=-1, keepdims=True))
    return exp / exp.sum(axis=-1, keepdims=True)


@register(group="oracle", name="onnx", model_path="???", labels_mapping_path="???")
class ONNXClassifierOracle(ClassifierOracle):
    """Classify batches with an exported ONNX model.

    Loads the model together with its ``labels_mapping.json`` sidecar, which
    supplies the class order and the normalization the frame transform must
    use (see :attr:`normalization`).

    Args:
        model_path: Path to the ``.onnx`` file.
        labels_mapping_path: Path to the ``labels_mapping.json`` sidecar.
        softmax: Return probabilities instead of raw logits.
    """

    def __init__(
        self,
        model_path: str | Path,
        labels_mapping_path: str | Path,
        softmax: bool = True,
    ) -> None:
        model_path = Path(model_path)
        self._classes, self.normalization = load_labels_mapping(labels_mapping_path)
        self.softmax = softmax

        self.session = ort.InferenceSession(
            str(model_path),
            providers=ort.get_available_providers(),
        )
        self.input_name = self.session.get_inputs()[0].name
        logger.info(
            f"Loaded ONNX model {model_path.name} with {len(self._classes)} classes"
        )

    @property
    def classes(self) -> ClassList:
        return self._classes

    def _classify(self, batch: Batch) -> list[ClassOutput]:
        inputs = batch.stack().numpy().astype(np.float32, copy=False)
        try:
            logits = self.session.run(None, {self.input_name: inputs})[0]
        except MemoryError as e:
            raise OracleError(f"out of memory on batch {batch.index}", transient=True) from e
        except Exception as e:
            raise OracleError(f"ONNX session failed on batch {batch.index}: {e}") from e

        logits = np.asarray(logits, dtype=np.float32)
        if logits.ndim != 2:
            raise OracleError(
                f"expected (batch, classes) logits, got shape {logits.shape}"
            )
        scores = _softmax(logits) if self.softmax else logits
        return [scores[i] for i in range(scores.shape[0])]
