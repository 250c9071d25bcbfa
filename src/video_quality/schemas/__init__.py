"""Evaluation report schemas."""

from video_quality.schemas.report import ReportStatus, VideoQualityReport

__all__ = [
    "ReportStatus",
    "VideoQualityReport",
]
