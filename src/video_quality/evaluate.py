"""Evaluation entrypoint for video_quality.

Usage:
    python -m video_quality.evaluate videos=/data/clips        # defaults (ONNX)
    python -m video_quality.evaluate ... evaluation.batch_size=64
    python -m video_quality.evaluate ... oracle=torch model=resnet18
    python -m video_quality.evaluate ... num_workers=4 output_dir=reports
"""

import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import hydra
from loguru import logger
from omegaconf import DictConfig, OmegaConf
from rich.console import Console
from rich.table import Table

# Import oracles and backbones to trigger @register before Hydra parses config
import video_quality.inference  # noqa: F401
import video_quality.models  # noqa: F401
from video_quality.config import EvaluationConfig
from video_quality.data.utils import get_files
from video_quality.inference import ClassifierOracle, ONNXClassifierOracle
from video_quality.io.report import QualityReportWriter
from video_quality.pipeline import Pipeline, evaluate_videos
from video_quality.schemas import VideoQualityReport


def build_oracle(cfg: DictConfig) -> ClassifierOracle:
    """Instantiate the configured oracle, building its backbone first if any."""
    if cfg.get("model"):
        model = hydra.utils.instantiate(cfg.model)
        return hydra.utils.instantiate(cfg.oracle, model=model)  # type: ignore[no-any-return]
    return hydra.utils.instantiate(cfg.oracle)  # type: ignore[no-any-return]


def build_config(cfg: DictConfig, oracle: ClassifierOracle) -> EvaluationConfig:
    """Validate the ``evaluation`` node; ONNX models supply their normalization."""
    values: dict[str, Any] = OmegaConf.to_container(cfg.evaluation, resolve=True)  # type: ignore[assignment]
    if isinstance(oracle, ONNXClassifierOracle):
        values["normalization"] = oracle.normalization
    return EvaluationConfig(**values)


def build_table(reports: Sequence[VideoQualityReport]) -> Table:
    """Render one row per video: status, frame count and class percentages."""
    classes = reports[0].classes if reports else ()
    table = Table(title="Video quality")
    table.add_column("Video", style="cyan")
    table.add_column("Status")
    table.add_column("Frames", justify="right")
    for name in classes:
        table.add_column(name, justify="right")

    status_style = {"ok": "green", "no_data": "yellow"}
    for report in reports:
        if report.distribution is not None:
            cells = [f"{report.distribution[c]:.1f}%" for c in classes]
        else:
            cells = ["-"] * len(classes)
        style = status_style.get(report.status, "red")
        table.add_row(
            Path(report.video).name,
            f"[{style}]{report.status}[/{style}]",
            str(report.total_frames),
            *cells,
        )
    return table


@hydra.main(version_base=None, config_path="conf", config_name="evaluate")
def main(cfg: DictConfig) -> None:
    """Evaluate every video matched by ``cfg.videos``."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))
    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    videos = get_files(Path(cfg.videos))
    if not videos:
        logger.error(f"No videos found under {cfg.videos}")
        sys.exit(1)
    logger.info(f"Found {len(videos)} videos")

    oracle = build_oracle(cfg)
    config = build_config(cfg, oracle)
    classes = list(cfg.classes) if cfg.get("classes") else None

    reports = evaluate_videos(
        videos,
        lambda: Pipeline(oracle, classes=classes, config=config),
        num_workers=int(cfg.get("num_workers", 1)),
    )

    if cfg.get("output_dir"):
        writer = QualityReportWriter(Path(cfg.output_dir))
        for report in reports:
            writer.write(report)
        summary_path = writer.write_summary(reports)
        logger.info(f"Reports written to {summary_path.parent}")

    Console().print(build_table(reports))

    if any(r.status == "failed" for r in reports):
        sys.exit(1)


if __name__ == "__main__":
    main()
