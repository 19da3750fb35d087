"""
Pipeline configuration.

One immutable OcrConfig is built per pipeline invocation and handed to every
component. Nothing below this module reads environment variables; only
``OcrConfig.from_env`` does, and only the CLI calls it.
"""

from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# Extra threshold applied by the faint/gray text preset
GRAY_TEXT_THRESHOLD_OFFSET = 22

# Environment variable -> config field
ENV_FIELDS: Dict[str, str] = {
    "OCR_MAX_CHUNK_HEIGHT": "max_chunk_height",
    "OCR_OVERLAP": "overlap",
    "OCR_MIN_LAST_CHUNK": "min_last_chunk",
    "OCR_MAX_CHUNKS": "max_chunks",
    "OCR_MIN_IMAGE_HEIGHT": "min_image_height",
    "OCR_CONCURRENCY": "concurrency",
    "OCR_RESIZE_WIDTH": "resize_width",
    "OCR_RETRIES": "retries",
    "OCR_DELAY_BASE": "retry_base_delay_ms",
    "OCR_THRESHOLD_VALUE": "threshold_value",
    "OCR_CONTRAST_MULTIPLIER": "contrast_multiplier",
    "OCR_BRIGHTNESS_OFFSET": "brightness_offset",
    "OCR_SHARPEN_SIGMA": "sharpen_sigma",
    "OCR_MEDIAN_RADIUS": "median_radius",
    "OCR_MIN_LINE_LENGTH": "min_line_length",
    "OCR_SIMILARITY_THRESHOLD": "similarity_threshold",
    "OCR_LANGUAGE": "language",
    "OCR_ENGINE_MODE": "ocr_engine_mode",
    "OCR_PAGE_SEGMENTATION_MODE": "page_segmentation_mode",
}


class OcrConfig(BaseModel):
    """Settings for chunking, preprocessing, recognition and merging."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Chunk planning
    max_chunk_height: int = Field(default=1024, gt=0, description="Tallest band sent to OCR (px)")
    overlap: int = Field(default=200, ge=0, description="Pixels shared by consecutive bands")
    min_last_chunk: int = Field(default=512, ge=0, description="Smaller tails merge into the previous band")
    max_chunks: int = Field(default=100, gt=0, description="Safety cap on planned bands")
    min_image_height: int = Field(default=100, gt=0, description="Images shorter than this are rejected")
    allow_partial_coverage: bool = Field(
        default=False, description="Continue when max_chunks stops the plan early"
    )

    # Worker pool
    concurrency: int = Field(default=3, gt=0, description="Simultaneous OCR calls")
    retries: int = Field(default=3, gt=0, description="OCR attempts per chunk")
    retry_base_delay_ms: int = Field(default=1000, ge=0, description="Backoff is base * attempt")

    # Preprocessing
    resize_width: int = Field(default=1024, gt=0)
    threshold_value: int = Field(default=128, ge=0, le=255)
    contrast_multiplier: float = Field(default=1.8, gt=0.0)
    brightness_offset: float = Field(default=-0.3, ge=-1.0, le=1.0)
    sharpen_sigma: float = Field(default=2.0, gt=0.0)
    sharpen_amounts: Tuple[float, ...] = Field(default=(1.5, 1.0))
    median_radius: int = Field(default=2, ge=0)

    # Merge
    min_line_length: int = Field(default=6, ge=0)
    similarity_threshold: float = Field(default=0.2, ge=0.0, le=1.0)

    # OCR engine
    language: str = Field(default="kor+eng", min_length=1)
    ocr_engine_mode: int = Field(default=1, ge=0, le=3)
    page_segmentation_mode: int = Field(default=6, ge=0, le=13)

    @field_validator("sharpen_amounts")
    @classmethod
    def validate_sharpen_amounts(cls, v: Tuple[float, ...]) -> Tuple[float, ...]:
        if any(amount < 0 for amount in v):
            raise ValueError("sharpen_amounts must be non-negative")
        return v

    @model_validator(mode="after")
    def validate_chunk_geometry(self) -> "OcrConfig":
        if self.overlap >= self.max_chunk_height:
            raise ValueError("overlap must be smaller than max_chunk_height")
        if self.min_last_chunk > self.max_chunk_height:
            raise ValueError("min_last_chunk cannot exceed max_chunk_height")
        return self

    @classmethod
    def gray_text(cls, **overrides: Any) -> "OcrConfig":
        """Preset for faint/gray review text: a higher binarization threshold."""
        return cls(**overrides).as_gray_text()

    def as_gray_text(self) -> "OcrConfig":
        """This config with the threshold raised for faint/gray text."""
        threshold = min(255, self.threshold_value + GRAY_TEXT_THRESHOLD_OFFSET)
        return self.model_copy(update={"threshold_value": threshold})

    @classmethod
    def from_env(cls, environ: Mapping[str, str], **overrides: Any) -> "OcrConfig":
        """
        Build a config from ``OCR_*`` variables.

        Args:
            environ: Usually ``os.environ``; passed in explicitly
            **overrides: Values that win over the environment

        Returns:
            Validated OcrConfig
        """
        values: Dict[str, Any] = {}
        for env_name, field_name in ENV_FIELDS.items():
            raw = environ.get(env_name)
            if raw is None or raw.strip() == "":
                continue
            values[field_name] = raw.strip()

        amounts = environ.get("OCR_SHARPEN_AMOUNTS")
        if amounts:
            values["sharpen_amounts"] = tuple(
                float(part) for part in amounts.split(",") if part.strip()
            )

        values.update(overrides)
        # Strings from the environment are coerced by pydantic's lax mode
        return cls.model_validate(values)

    def describe(self) -> Dict[str, Any]:
        """Effective settings as a plain dict."""
        return self.model_dump(mode="json")

    def with_overrides(self, **changes: Optional[Any]) -> "OcrConfig":
        """Copy with the given fields replaced, skipping ``None`` values."""
        update = {k: v for k, v in changes.items() if v is not None}
        if not update:
            return self
        return self.model_validate({**self.model_dump(), **update})
