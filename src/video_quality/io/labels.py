"""Read the ``labels_mapping.json`` sidecar exported next to a classifier."""

from __future__ import annotations

from pathlib import Path

import orjson

from video_quality.config import NormalizationConfig
from video_quality.types import ClassList, make_class_list


def load_labels_mapping(path: str | Path) -> tuple[ClassList, NormalizationConfig]:
    """Return the ordered class list and input normalization of a model.

    The file holds ``idx_to_class`` (string index -> name) and, optionally,
    ``normalization`` with ``mean`` and ``std``.  Indices must be contiguous
    from 0 so that score position ``i`` maps to ``classes[i]``.
    """
    mapping = orjson.loads(Path(path).read_bytes())
    idx_to_class = {int(k): v for k, v in mapping["idx_to_class"].items()}
    if sorted(idx_to_class) != list(range(len(idx_to_class))):
        raise ValueError(
            f"idx_to_class in {path} must use contiguous indices from 0, "
            f"got {sorted(idx_to_class)}"
        )
    classes = make_class_list(idx_to_class[i] for i in range(len(idx_to_class)))

    norm = mapping.get("normalization")
    normalization = (
        NormalizationConfig(mean=tuple(norm["mean"]), std=tuple(norm["std"]))
        if norm
        else NormalizationConfig()
    )
    return classes, normalization
