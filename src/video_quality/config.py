"""Pydantic frozen configuration models for video_quality."""

from pydantic import BaseModel, Field, model_validator


class NormalizationConfig(BaseModel, frozen=True):
    """Per-channel normalization applied after ``ToFloat32Tensor``.

    Defaults are the ImageNet statistics used by the exported classifiers.
    """

    mean: tuple[float, float, float] = (0.485, 0.456, 0.406)
    std: tuple[float, float, float] = (0.229, 0.224, 0.225)

    @model_validator(mode="after")
    def _std_positive(self) -> "NormalizationConfig":
        if any(s <= 0 for s in self.std):
            raise ValueError(f"std values must be positive, got {self.std}")
        return self


class EvaluationConfig(BaseModel, frozen=True):
    """Configuration for a single-video evaluation Pipeline.

    All fields are validated at construction time. Frozen, no mutation after creation.
    """

    batch_size: int = Field(default=32, ge=1)
    max_retries: int = Field(default=2, ge=0)
    retry_backoff_s: float = Field(default=0.5, ge=0.0)
    frame_stride: int = Field(default=1, ge=1)
    max_frames: int | None = Field(default=None, ge=1)
    resize_size: int = Field(default=256, ge=1)
    image_size: int = Field(default=224, ge=1)
    normalization: NormalizationConfig = NormalizationConfig()

    @model_validator(mode="after")
    def _crop_fits_resize(self) -> "EvaluationConfig":
        """CenterCrop larger than the resized short side would pad with zeros."""
        if self.image_size > self.resize_size:
            raise ValueError(
                f"image_size ({self.image_size}) must not exceed "
                f"resize_size ({self.resize_size})"
            )
        return self
