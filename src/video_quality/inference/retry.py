"""Bounded retry for transient classifier failures."""

from __future__ import annotations

import time

from loguru import logger

from video_quality.errors import OracleError
from video_quality.inference.base import ClassifierOracle
from video_quality.types import Batch, ClassOutput


def classify_with_retry(
    oracle: ClassifierOracle,
    batch: Batch,
    max_retries: int = 2,
    backoff_s: float = 0.5,
) -> list[ClassOutput]:
    """Classify ``batch``, retrying transient :class:`OracleError` failures.

    Non-transient errors are raised immediately.  After ``max_retries``
    retries the last transient error is raised.  The delay doubles after
    each failed attempt, starting at ``backoff_s``.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    attempt = 0
    while True:
        try:
            return oracle.classify(batch)
        except OracleError as e:
            if not e.transient:
                raise
            if attempt >= max_retries:
                logger.error(
                    f"Batch {batch.index}: all {max_retries + 1} attempts failed. "
                    f"Last error: {e}"
                )
                raise
            delay = backoff_s * (2**attempt)
            attempt += 1
            logger.warning(
                f"Batch {batch.index}: attempt {attempt}/{max_retries + 1} failed: "
                f"{e}. Retrying in {delay:.2f}s..."
            )
            if delay > 0:
                time.sleep(delay)
