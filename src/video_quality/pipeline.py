"""Per-video evaluation pipeline.

``Pipeline.run`` drives one video through decode -> preprocess -> batch ->
classify -> tally -> normalize and returns a :class:`Distribution`.  Any
failure aborts the video; a partial distribution is never returned.

``evaluate_videos`` runs independent pipelines for many videos on a thread
pool and collects one :class:`VideoQualityReport` per video.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from enum import Enum
from pathlib import Path
from typing import Any

import torch
from loguru import logger
from tqdm import tqdm

from video_quality.aggregation import Distribution, LabelAggregator, normalize
from video_quality.config import EvaluationConfig
from video_quality.data import BatchAccumulator, FrameSource, open_source
from video_quality.errors import (
    DegenerateInputError,
    EvaluationCancelled,
    TransformError,
    VideoQualityError,
)
from video_quality.inference import ClassifierOracle, classify_with_retry
from video_quality.schemas import VideoQualityReport
from video_quality.transforms import build_frame_transform
from video_quality.types import ClassList, Frame, make_class_list

FrameTransform = Callable[[Any], torch.Tensor]


class PipelineState(str, Enum):
    IDLE = "idle"
    OPENING = "opening"
    STREAMING = "streaming"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"


_ACTIVE_STATES = frozenset(
    {PipelineState.OPENING, PipelineState.STREAMING, PipelineState.AGGREGATING}
)


def _resolve_classes(
    oracle: ClassifierOracle, classes: Sequence[str] | None
) -> ClassList:
    if classes is None:
        if oracle.classes is None:
            raise ValueError(
                f"{type(oracle).__name__} does not declare its classes; pass classes="
            )
        return oracle.classes
    resolved = make_class_list(classes)
    if oracle.classes is not None and oracle.classes != resolved:
        raise ValueError(
            f"classes {list(resolved)} do not match the oracle's "
            f"{list(oracle.classes)}"
        )
    return resolved


def _video_name(video: str | Path | FrameSource) -> str:
    if isinstance(video, FrameSource):
        path = getattr(video, "path", None)
        return str(path) if path is not None else type(video).__name__
    return str(video)


class Pipeline:
    """Evaluate one video at a time against a classifier.

    A Pipeline owns no state shared with other pipelines: the frame source,
    batch accumulator and tally are created inside :meth:`run`.  The oracle
    may be shared between pipelines as long as it is stateless.

    Args:
        oracle: Batch classifier.
        classes: Ordered class names.  Defaults to ``oracle.classes``.
        config: Batch size, retry budget and frame sampling.
        transform: ``raw BGR frame -> (C, H, W) tensor``.  Defaults to
            :func:`build_frame_transform` for ``config``.
    """

    def __init__(
        self,
        oracle: ClassifierOracle,
        classes: Sequence[str] | None = None,
        config: EvaluationConfig | None = None,
        transform: FrameTransform | None = None,
    ) -> None:
        self.oracle = oracle
        self.config = config or EvaluationConfig()
        self.classes = _resolve_classes(oracle, classes)
        self.transform = transform or build_frame_transform(self.config)
        self._state = PipelineState.IDLE
        self._lock = threading.Lock()
        self._cancel_event = threading.Event()

    @property
    def state(self) -> PipelineState:
        return self._state

    def cancel(self) -> None:
        """Request cancellation of the current run; honoured between batches."""
        self._cancel_event.set()

    def run(self, video: str | Path | FrameSource) -> Distribution:
        """Evaluate ``video`` and return its class distribution.

        Raises:
            SourceError: The video could not be opened or decoded.
            TransformError: A frame failed preprocessing.
            OracleError: Classification failed beyond the retry budget.
            DegenerateInputError: The video yielded no frames.
            EvaluationCancelled: :meth:`cancel` was called mid-run.
        """
        with self._lock:
            if self._state in _ACTIVE_STATES:
                raise RuntimeError("Pipeline is already running")
            self._state = PipelineState.OPENING
        try:
            distribution = self._run(video)
        except BaseException:
            self._state = PipelineState.FAILED
            raise
        finally:
            self._cancel_event.clear()
        self._state = PipelineState.DONE
        return distribution

    def _run(self, video: str | Path | FrameSource) -> Distribution:
        name = _video_name(video)
        start = time.perf_counter()
        aggregator = LabelAggregator(self.classes)

        with open_source(
            video, stride=self.config.frame_stride, max_frames=self.config.max_frames
        ) as source:
            self._state = PipelineState.STREAMING
            estimate = source.estimated_frame_count
            logger.info(
                f"Evaluating {name}: ~{estimate if estimate is not None else '?'} "
                f"frames, batch size {self.config.batch_size}"
            )
            accumulator = BatchAccumulator(self.config.batch_size)
            for batch in accumulator.batches(self._preprocess(source)):
                self._check_cancelled(name)
                outputs = classify_with_retry(
                    self.oracle,
                    batch,
                    max_retries=self.config.max_retries,
                    backoff_s=self.config.retry_backoff_s,
                )
                predictions = aggregator.update(batch, outputs)
                logger.debug(
                    f"{name}: batch {batch.index} ({batch.valid_count}/"
                    f"{batch.capacity} frames) -> {predictions}"
                )
            self._check_cancelled(name)

        self._state = PipelineState.AGGREGATING
        distribution = normalize(aggregator.tally, self.classes)
        summary = ", ".join(
            f"{c}={distribution.percentages[c]:.1f}%" for c in distribution.classes
        )
        logger.info(
            f"{name}: {distribution.total_frames} frames in "
            f"{time.perf_counter() - start:.2f}s ({summary})"
        )
        return distribution

    def _preprocess(self, frames: FrameSource) -> Iterator[Frame]:
        for frame in frames:
            try:
                data = self.transform(frame.data)
            except Exception as e:
                raise TransformError(
                    f"frame {frame.index} failed preprocessing: {e}",
                    frame_index=frame.index,
                ) from e
            if not isinstance(data, torch.Tensor):
                raise TransformError(
                    f"frame {frame.index}: transform returned "
                    f"{type(data).__name__}, expected a tensor",
                    frame_index=frame.index,
                )
            yield Frame(index=frame.index, data=data)

    def _check_cancelled(self, name: str) -> None:
        if self._cancel_event.is_set():
            logger.warning(f"{name}: evaluation cancelled")
            raise EvaluationCancelled(f"evaluation of {name} was cancelled")


def evaluate_video(
    video: str | Path | FrameSource, pipeline: Pipeline
) -> VideoQualityReport:
    """Run ``pipeline`` on one video and wrap the outcome in a report.

    Any exception from the run is captured in the report instead of raised;
    an empty video is reported with status ``no_data``.
    """
    name = _video_name(video)
    start = time.perf_counter()
    common: dict[str, Any] = {"video": name, "classes": pipeline.classes}
    try:
        distribution = pipeline.run(video)
    except DegenerateInputError as e:
        logger.warning(f"{name}: no frames to evaluate")
        return VideoQualityReport(
            status="no_data",
            error=str(e),
            error_type=type(e).__name__,
            elapsed_s=time.perf_counter() - start,
            **common,
        )
    except EvaluationCancelled as e:
        return VideoQualityReport(
            status="cancelled",
            error=str(e),
            error_type=type(e).__name__,
            elapsed_s=time.perf_counter() - start,
            **common,
        )
    except VideoQualityError as e:
        logger.error(f"{name}: {type(e).__name__}: {e}")
        return VideoQualityReport(
            status="failed",
            error=str(e),
            error_type=type(e).__name__,
            elapsed_s=time.perf_counter() - start,
            **common,
        )
    except Exception as e:
        logger.exception(f"{name}: unexpected {type(e).__name__}: {e}")
        return VideoQualityReport(
            status="failed",
            error=str(e),
            error_type=type(e).__name__,
            elapsed_s=time.perf_counter() - start,
            **common,
        )
    return VideoQualityReport(
        status="ok",
        distribution=distribution,
        elapsed_s=time.perf_counter() - start,
        **common,
    )


def evaluate_videos(
    videos: Sequence[str | Path | FrameSource],
    pipeline_factory: Callable[[], Pipeline],
    num_workers: int = 1,
    progress: bool = True,
) -> list[VideoQualityReport]:
    """Evaluate many videos, each with its own Pipeline.

    Reports are returned in the order of ``videos``.  A failure on one video
    is recorded in its report and does not affect the others.
    """
    if num_workers < 1:
        raise ValueError(f"num_workers must be >= 1, got {num_workers}")
    reports: list[VideoQualityReport | None] = [None] * len(videos)

    with ThreadPoolExecutor(max_workers=num_workers) as pool:
        futures = {
            pool.submit(evaluate_video, video, pipeline_factory()): i
            for i, video in enumerate(videos)
        }
        for future in tqdm(
            as_completed(futures),
            total=len(futures),
            desc="Evaluate",
            unit="video",
            disable=not progress,
        ):
            reports[futures[future]] = future.result()

    return [r for r in reports if r is not None]
