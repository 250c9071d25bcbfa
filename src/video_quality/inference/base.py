"""Abstract classifier capability consumed by the evaluation pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod

from video_quality.errors import OracleError
from video_quality.types import Batch, ClassList, ClassOutput


class ClassifierOracle(ABC):
    """Base class for batch classifiers.

    Subclasses implement ``_classify``, which receives a batch and returns
    one score vector per valid frame, in frame order.  Implementations must
    be deterministic for fixed weights and must not mutate the batch; the
    pipeline relies on this to retry transient failures.
    """

    @property
    def classes(self) -> ClassList | None:
        """Class names the scores are indexed by, when the model knows them."""
        return None

    def classify(self, batch: Batch) -> list[ClassOutput]:
        """Score every valid frame of ``batch``.

        Raises:
            OracleError: The model failed (any other exception is wrapped
                as non-transient), or returned a number of score vectors
                different from ``batch.valid_count``.
        """
        if batch.valid_count == 0:
            return []
        try:
            outputs = self._classify(batch)
        except OracleError:
            raise
        except Exception as e:
            raise OracleError(
                f"{type(self).__name__} failed on batch {batch.index}: "
                f"{type(e).__name__}: {e}"
            ) from e
        if len(outputs) != batch.valid_count:
            raise OracleError(
                f"{type(self).__name__} returned {len(outputs)} outputs for "
                f"batch {batch.index} with {batch.valid_count} frames"
            )
        return outputs

    @abstractmethod
    def _classify(self, batch: Batch) -> list[ClassOutput]:
        """Run the model on the valid frames of a non-empty batch."""
