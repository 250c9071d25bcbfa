"""Per-video evaluation report schema."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from video_quality.aggregation.distribution import Distribution

ReportStatus = Literal["ok", "no_data", "failed", "cancelled"]


class VideoQualityReport(BaseModel):
    """Outcome of evaluating one video.

    ``distribution`` is set only when ``status == "ok"``; every other status
    carries the error that ended the evaluation.
    """

    video: str
    status: ReportStatus
    classes: tuple[str, ...]
    distribution: Distribution | None = None
    error: str | None = None
    error_type: str | None = None
    elapsed_s: float = 0.0
    created_at: str = Field(default_factory=lambda: datetime.now(tz=UTC).isoformat())

    @model_validator(mode="after")
    def _distribution_only_when_ok(self) -> "VideoQualityReport":
        if (self.status == "ok") != (self.distribution is not None):
            raise ValueError(
                f"status {self.status!r} is inconsistent with "
                f"distribution={'set' if self.distribution else 'None'}"
            )
        return self

    @property
    def total_frames(self) -> int:
        return self.distribution.total_frames if self.distribution else 0
