"""
Core data models for ScrollScribe.

Everything here lives for a single pipeline invocation: one screenshot in,
one transcript out.
"""

from typing import List

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, model_validator


class SourceImage(BaseModel):
    """Read-only handle to the decoded screenshot."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    image: Image.Image
    width: int = Field(gt=0)
    height: int = Field(gt=0)

    @model_validator(mode="after")
    def validate_size(self) -> "SourceImage":
        if self.image.size != (self.width, self.height):
            raise ValueError(
                f"Declared size {self.width}x{self.height} does not match image size "
                f"{self.image.size[0]}x{self.image.size[1]}"
            )
        return self

    @classmethod
    def from_pil(cls, image: Image.Image) -> "SourceImage":
        width, height = image.size
        return cls(image=image, width=width, height=height)


class ChunkDescriptor(BaseModel):
    """A horizontal band of the source image: rows [top, top + height)."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    top: int = Field(ge=0)
    height: int = Field(gt=0)

    @property
    def bottom(self) -> int:
        return self.top + self.height


class PreprocessedBuffer(BaseModel):
    """Lossless PNG bytes of one binarized chunk, ready for OCR."""

    index: int = Field(ge=0)
    data: bytes
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class RawChunkResult(BaseModel):
    """OCR engine output for one chunk."""

    index: int = Field(ge=0)
    text: str = ""
    attempts: int = Field(default=1, ge=1)


class TranscriptResult(BaseModel):
    """
    Transcript plus the plan and raw OCR output it was built from.

    ``complete_coverage`` is False only when the caller allowed partial
    coverage and the planner's chunk limit stopped short of the bottom edge.
    """

    text: str
    descriptors: List[ChunkDescriptor] = Field(default_factory=list)
    raw_results: List[RawChunkResult] = Field(default_factory=list)
    complete_coverage: bool = True
    source_width: int = Field(gt=0)
    source_height: int = Field(gt=0)
    elapsed_seconds: float = Field(ge=0.0, default=0.0)

    @property
    def chunk_count(self) -> int:
        return len(self.descriptors)
