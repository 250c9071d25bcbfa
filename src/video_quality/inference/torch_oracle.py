"""PyTorch-module classifier oracle."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import torch
from loguru import logger

from video_quality.errors import OracleError
from video_quality.inference.base import ClassifierOracle
from video_quality.types import Batch, ClassList, ClassOutput, make_class_list
from video_quality.utils.hydra import register


def _auto_device() -> str:
    if torch.cuda.is_available():
        return "cuda"
    if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
        return "mps"
    return "cpu"


def load_weights(model: torch.nn.Module, checkpoint_path: str | Path) -> None:
    """Load weights from a plain state dict or a Lightning checkpoint.

    Lightning checkpoints wrap the weights under ``state_dict`` next to
    metric and loss buffers; only the ``model.*`` entries are kept.
    """
    ckpt = torch.load(str(checkpoint_path), map_location="cpu", weights_only=True)
    if "state_dict" in ckpt:
        state = {k: v for k, v in ckpt["state_dict"].items() if k.startswith("model.")}
    else:
        state = ckpt
    model.load_state_dict(state)
    logger.info(f"Loaded {len(state)} tensors from {checkpoint_path}")


@register(group="oracle", name="torch")
class TorchClassifierOracle(ClassifierOracle):
    """Classify batches with any ``torch.nn.Module`` returning (B, num_classes) logits.

    Args:
        model: The network.  Put in eval mode and moved to ``device``.
        classes: Optional class names, in logit order.
        device: ``"cuda"``, ``"mps"`` or ``"cpu"``.  Auto-detected if *None*.
        checkpoint_path: Optional weights to load into ``model``.
        softmax: Return probabilities instead of raw logits.
    """

    def __init__(
        self,
        model: torch.nn.Module,
        classes: Sequence[str] | None = None,
        device: str | None = None,
        checkpoint_path: str | Path | None = None,
        softmax: bool = True,
    ) -> None:
        if checkpoint_path is not None:
            load_weights(model, checkpoint_path)
        self.device = device or _auto_device()
        self.model = model.to(self.device).eval()
        self.softmax = softmax
        self._classes = make_class_list(classes) if classes is not None else None
        logger.info(f"Torch oracle {type(model).__name__} on {self.device}")

    @property
    def classes(self) -> ClassList | None:
        return self._classes

    def _classify(self, batch: Batch) -> list[ClassOutput]:
        images = batch.stack().to(self.device)
        try:
            with torch.inference_mode():
                logits = self.model(images)
        except torch.cuda.OutOfMemoryError as e:
            torch.cuda.empty_cache()
            raise OracleError(f"out of memory on batch {batch.index}", transient=True) from e
        except RuntimeError as e:
            raise OracleError(f"model failed on batch {batch.index}: {e}") from e

        if logits.ndim != 2:
            raise OracleError(
                f"expected (batch, classes) logits, got shape {tuple(logits.shape)}"
            )
        scores = torch.softmax(logits.float(), dim=-1) if self.softmax else logits.float()
        return list(scores.cpu().numpy())
