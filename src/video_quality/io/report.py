"""Evaluation report writer using orjson."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import orjson

from video_quality.schemas.report import VideoQualityReport


class QualityReportWriter:
    """Write one JSON file per video report, plus an optional summary.

    Output files are named ``{video_stem}.json`` inside ``output_dir``.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write(self, report: VideoQualityReport) -> Path:
        """Write a single report to disk. Returns the output path."""
        stem = Path(report.video).stem
        out_path = self.output_dir / f"{stem}.json"
        data = orjson.dumps(report.model_dump(mode="json"), option=orjson.OPT_INDENT_2)
        out_path.write_bytes(data)
        return out_path

    def write_summary(
        self, reports: Sequence[VideoQualityReport], filename: str = "summary.json"
    ) -> Path:
        """Write all reports into one JSON array."""
        out_path = self.output_dir / filename
        data = orjson.dumps(
            [r.model_dump(mode="json") for r in reports],
            option=orjson.OPT_INDENT_2,
        )
        out_path.write_bytes(data)
        return out_path
